"""Tests for logging helpers."""

from wpcloud.client import VaultClient
from wpcloud.session_store import SessionStore
from wpcloud.utils import append_log_line, format_bytes, redact_payload, redact_url, redacted_headers

from conftest import API_BASE


class TestRedaction:
    """Secrets never reach the HTTP trace log."""

    def test_payload_secrets(self):
        """Passwords, tokens and upload URLs are masked, recursively."""
        payload = {"email": "a@b.c", "password": "pw", "nested": [{"token": "t", "key": "k"}], "uploadUrl": "u"}

        assert redact_payload(payload) == {
            "email": "a@b.c",
            "password": "***",
            "nested": [{"token": "***", "key": "k"}],
            "uploadUrl": "***",
        }

    def test_headers(self):
        """Authorization headers are masked."""
        assert redacted_headers({"Authorization": "Bearer x", "Accept": "*/*"}) == {
            "Authorization": "[REDACTED]",
            "Accept": "*/*",
        }

    def test_sas_signature(self):
        """The SAS signature is masked, other query fields kept."""
        redacted = redact_url("https://blob.test/c/a.png?sv=2024&sig=abc123")

        assert "abc123" not in redacted
        assert "sv=2024" in redacted
        assert "sig=***" in redacted

    def test_url_without_query(self):
        """Plain URLs pass through."""
        assert redact_url("https://blob.test/c/a.png") == "https://blob.test/c/a.png"


class TestHttpTrace:
    """The trace log records requests with secrets masked."""

    def test_trace_log(self, tmp_path, backend):
        """Login password never appears in the log file."""
        log_path = tmp_path / "http.log"
        backend.on("POST", "/auth/login", json_body={"token": "tok-secret"})
        client = VaultClient(SessionStore(), base_url=API_BASE, http_log_path=str(log_path), transport=backend.transport)
        try:
            client.request("POST", "/auth/login", json={"email": "a@b.c", "password": "hunter2"})
        finally:
            client.close()

        text = log_path.read_text(encoding="utf-8")
        assert "POST https://vault.test/api/auth/login" in text
        assert "hunter2" not in text
        assert "tok-secret" not in text

    def test_unwritable_log_path(self, tmp_path):
        """A log path that cannot be opened is skipped without raising."""
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")

        append_log_line(str(blocker / "http.log"), "GET /files")
        append_log_line(str(blocker / "http.log"), "GET /files")

        assert blocker.read_text(encoding="utf-8") == ""


def test_format_bytes():
    """Sizes are humanised; unknown sizes show a dash."""
    assert format_bytes(512) == "512.00B"
    assert format_bytes(2048) == "2.00KB"
    assert format_bytes(None) == "-"
