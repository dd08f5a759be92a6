"""Unit tests for sanitized logging helpers."""

import logging

from relay.utils.logger import configure_logging, log_info, logger, safe_json, sanitize_text


class TestSanitizeText:
    """Test sensitive pattern masking."""

    def test_github_token_masked(self):
        text = "token ghp_" + "a" * 36
        assert sanitize_text(text) == "token <github-token>"

    def test_bearer_header_masked(self):
        assert sanitize_text("Authorization: Bearer abc.def") == "Authorization: Bearer <token>"

    def test_email_masked(self):
        assert sanitize_text("from dev@example.com") == "from <email>"

    def test_query_string_masked(self):
        text = "GET https://api.github.com/repos/o/r/contents/x?ref=main&token=1"
        assert sanitize_text(text) == "GET https://api.github.com/repos/o/r/contents/x?<query>"

    def test_short_sha_kept(self):
        assert sanitize_text("sha: abc1234") == "sha: abc1234"

    def test_empty(self):
        assert sanitize_text("") == ""


class TestSafeJson:
    def test_truncates(self):
        assert safe_json({"k": "x" * 50}, max_length=10).endswith("... [truncated]")

    def test_non_serializable_uses_str(self):
        assert "object" in safe_json({"k": object()})


class TestLogHelpers:
    def test_context_appended(self, caplog):
        caplog.set_level(logging.INFO, logger="agent-relay")
        log_info("Relay event", signal="notify-cascade")

        assert 'Relay event | Context: {"signal": "notify-cascade"}' in caplog.text

    def test_configure_logging_sets_level(self):
        previous = logger.level
        try:
            configure_logging("DEBUG")
            assert logger.level == logging.DEBUG
        finally:
            logger.setLevel(previous)
