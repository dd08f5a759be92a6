"""Unit tests for the async GitHub contents client.

Requests go through ``httpx.MockTransport`` so the real client code builds
URLs, headers and parses payloads.
"""

import pytest
import httpx

from conftest import contents_payload
from relay.config import Config
from relay.github_async import AsyncGitHubClient


@pytest.fixture
def github_config(clean_env):
    return Config(_env_file=None, github_repo="octo/flags", github_branch="main")


class TestAsyncGitHubClientContextManager:
    """Test context manager behavior."""

    @pytest.mark.asyncio
    async def test_context_manager_creates_and_closes_client(self, github_config):
        client = AsyncGitHubClient(github_config)

        async with client:
            assert isinstance(client._client, httpx.AsyncClient)

        assert client._client is None

    @pytest.mark.asyncio
    async def test_fetch_without_context_returns_none(self, github_config):
        client = AsyncGitHubClient(github_config)
        assert await client.fetch_marker("notify-replit") is None


class TestAsyncGitHubClientRequests:
    """Test request building."""

    def test_contents_url(self, github_config):
        client = AsyncGitHubClient(github_config)
        assert client.contents_url("notify-replit") == (
            "https://api.github.com/repos/octo/flags/contents/.handoff/notify-replit"
        )

    def test_contents_url_without_remote_dir(self, clean_env):
        config = Config(_env_file=None, github_repo="octo/flags", github_remote_dir="")
        client = AsyncGitHubClient(config)
        assert client.contents_url("notify-replit").endswith("/contents/notify-replit")

    @pytest.mark.asyncio
    async def test_request_carries_ref_and_accept(self, github_config):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=contents_payload("abc123", "hi"))

        async with AsyncGitHubClient(github_config, transport=httpx.MockTransport(handler)) as client:
            await client.fetch_marker("notify-replit")

        request = seen[0]
        assert request.method == "GET"
        assert request.url.path == "/repos/octo/flags/contents/.handoff/notify-replit"
        assert request.url.params["ref"] == "main"
        assert request.headers["Accept"] == "application/vnd.github.v3+json"
        assert "Authorization" not in request.headers

    @pytest.mark.asyncio
    async def test_token_sent_as_bearer(self, clean_env):
        config = Config(_env_file=None, github_repo="octo/flags", github_token="secret-token")
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(404, json={"message": "Not Found"})

        async with AsyncGitHubClient(config, transport=httpx.MockTransport(handler)) as client:
            await client.fetch_marker("notify-replit")

        assert seen[0].headers["Authorization"] == "Bearer secret-token"


class TestAsyncGitHubClientResponses:
    """Test response handling."""

    @pytest.mark.asyncio
    async def test_success_decodes_and_trims_content(self, github_config):
        def handler(request):
            return httpx.Response(200, json=contents_payload("def456", "  pong\n\n"))

        async with AsyncGitHubClient(github_config, transport=httpx.MockTransport(handler)) as client:
            marker = await client.fetch_marker("notify-replit")

        assert marker.sha == "def456"
        assert marker.content == "pong"

    @pytest.mark.asyncio
    async def test_long_content_with_wrapped_base64(self, github_config):
        text = "message " * 40

        def handler(request):
            return httpx.Response(200, json=contents_payload("abc", text))

        async with AsyncGitHubClient(github_config, transport=httpx.MockTransport(handler)) as client:
            marker = await client.fetch_marker("notify-replit")

        assert marker.content == text.strip()

    @pytest.mark.asyncio
    async def test_missing_content_is_empty(self, github_config):
        def handler(request):
            return httpx.Response(200, json={"sha": "abc123"})

        async with AsyncGitHubClient(github_config, transport=httpx.MockTransport(handler)) as client:
            marker = await client.fetch_marker("notify-replit")

        assert marker.sha == "abc123"
        assert marker.content == ""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403, 404, 500, 502])
    async def test_non_success_returns_none(self, github_config, status):
        def handler(request):
            return httpx.Response(status, json={"message": "nope"})

        async with AsyncGitHubClient(github_config, transport=httpx.MockTransport(handler)) as client:
            assert await client.fetch_marker("notify-replit") is None

    @pytest.mark.asyncio
    async def test_transport_error_returns_none(self, github_config):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with AsyncGitHubClient(github_config, transport=httpx.MockTransport(handler)) as client:
            assert await client.fetch_marker("notify-replit") is None

    @pytest.mark.asyncio
    async def test_invalid_json_returns_none(self, github_config):
        def handler(request):
            return httpx.Response(200, content=b"<html>rate limited</html>")

        async with AsyncGitHubClient(github_config, transport=httpx.MockTransport(handler)) as client:
            assert await client.fetch_marker("notify-replit") is None

    @pytest.mark.asyncio
    async def test_directory_listing_returns_none(self, github_config):
        def handler(request):
            return httpx.Response(200, json=[{"name": "notify-replit", "sha": "abc"}])

        async with AsyncGitHubClient(github_config, transport=httpx.MockTransport(handler)) as client:
            assert await client.fetch_marker("notify-replit") is None

    @pytest.mark.asyncio
    async def test_bad_base64_returns_none(self, github_config):
        def handler(request):
            return httpx.Response(200, json={"sha": "abc", "content": "abc"})

        async with AsyncGitHubClient(github_config, transport=httpx.MockTransport(handler)) as client:
            assert await client.fetch_marker("notify-replit") is None
