"""Async GitHub contents client using httpx.

Reads the remote copy of a flag file through the REST contents endpoint and
returns its blob SHA and decoded text. Every failure mode (transport error,
non-success status, malformed payload) collapses to ``None``: for the poller a
failed fetch simply means "no update this tick".
"""

from __future__ import annotations
import base64
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from relay.config import Config, get_config
from relay.events import RemoteMarker
from relay.utils.logger import log_debug, log_error

GITHUB_ACCEPT = "application/vnd.github.v3+json"


def _decode_content(data: Dict[str, Any]) -> str:
    """Decode the base64 ``content`` field of a contents payload.

    GitHub wraps the base64 at 60 columns; the decoder drops the newlines.
    """
    raw = data.get("content")
    if not raw:
        return ""
    return base64.b64decode(raw).decode("utf-8", errors="replace").strip()


class AsyncGitHubClient:
    """Async GitHub API client with connection pooling."""

    def __init__(self, config: Optional[Config] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize async client with configuration.

        Args:
            config: Relay configuration (defaults to the global config)
            transport: Optional httpx transport, used by tests
        """
        self.config = config or get_config()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        """Context manager entry - creates HTTP client."""
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.github_timeout),
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - closes HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": GITHUB_ACCEPT}
        if self.config.github_token:
            headers["Authorization"] = f"Bearer {self.config.github_token}"
        return headers

    def contents_url(self, name: str) -> str:
        """Build the contents URL for a flag file in the configured repository."""
        base = self.config.github_api_url.rstrip("/")
        parts = [self.config.github_remote_dir, name] if self.config.github_remote_dir else [name]
        path = "/".join(quote(part) for part in parts)
        return f"{base}/repos/{self.config.github_owner_repo()}/contents/{path}"

    async def fetch_marker(self, name: str) -> Optional[RemoteMarker]:
        """Fetch the remote flag ``name``.

        Args:
            name: Flag file name (the signal name)

        Returns:
            RemoteMarker with SHA and trimmed content, or None when the file is
            missing or the request failed
        """
        if not self._client:
            log_error("AsyncGitHubClient not initialized - use 'async with' context")
            return None

        url = self.contents_url(name)
        try:
            resp = await self._client.get(url, headers=self._headers(), params={"ref": self.config.github_branch})
        except httpx.HTTPError as e:
            log_debug("GitHub request failed", signal=name, error=str(e))
            return None

        if not resp.is_success:
            log_debug("GitHub flag not available", signal=name, status_code=resp.status_code)
            return None

        try:
            data = resp.json()
            if not isinstance(data, dict) or not data.get("sha"):
                log_debug("GitHub payload has no sha", signal=name)
                return None
            return RemoteMarker(sha=str(data["sha"]), content=_decode_content(data))
        except ValueError as e:
            # json and base64 errors are both ValueErrors
            log_debug("GitHub payload could not be decoded", signal=name, error=str(e))
            return None
