"""Tests for login and registration."""

import httpx
import pytest

from wpcloud.auth import AuthClient
from wpcloud.client import VaultClient
from wpcloud.errors import AuthError, ValidationError
from wpcloud.session_store import SessionStore

from conftest import API_BASE


@pytest.fixture
def auth(backend):
    client = VaultClient(SessionStore(), base_url=API_BASE, transport=backend.transport)
    yield AuthClient(client)
    client.close()


class TestLogin:
    """POST /auth/login."""

    def test_login_returns_session(self, auth, backend):
        """Token and user from the response become the session."""
        backend.on("POST", "/auth/login", json_body={
            "token": "tok-1",
            "user": {"user_id": "u-1", "email": "alice@example.com", "display_name": "Alice"},
        })

        session = auth.login("  alice@example.com ", "pw")

        assert session.token == "tok-1"
        assert session.identity.owner_id == "alice@example.com"
        assert session.identity.display_name == "Alice"
        assert backend.body(backend.requests[0]) == {"email": "alice@example.com", "password": "pw"}

    def test_login_sends_no_bearer(self, auth, backend):
        """The auth endpoints are unauthenticated."""
        backend.on("POST", "/auth/login", json_body={"token": "tok-1", "user": {"email": "a@b.c"}})

        auth.login("a@b.c", "pw")

        assert "authorization" not in backend.requests[0].headers

    def test_login_without_user_uses_email(self, auth, backend):
        """A bare token response still yields an identity."""
        backend.on("POST", "/auth/login", json_body={"token": "tok-1"})

        session = auth.login("alice@example.com", "pw")

        assert session.identity.owner_id == "alice@example.com"

    def test_wrong_password_surfaces_backend_error(self, auth, backend):
        """Backend error text is the message."""
        backend.on("POST", "/auth/login", status=401, json_body={"error": "Invalid credentials"})

        with pytest.raises(AuthError) as exc_info:
            auth.login("alice@example.com", "wrong")

        assert str(exc_info.value) == "Invalid credentials"
        assert exc_info.value.status == 401

    def test_error_without_body_uses_status(self, auth, backend):
        """No parseable body degrades to an HTTP status message."""
        backend.on("POST", "/auth/login", status=500, text="<html>oops</html>")

        with pytest.raises(AuthError, match="HTTP 500"):
            auth.login("alice@example.com", "pw")

    def test_transport_failure_is_auth_error(self, auth, backend):
        """Network failures during login are reported as AuthError."""
        def boom(request):
            raise httpx.ConnectError("connection refused", request=request)

        backend.on("POST", "/auth/login", handler=boom)

        with pytest.raises(AuthError, match="connection refused"):
            auth.login("alice@example.com", "pw")

    def test_missing_token_is_auth_error(self, auth, backend):
        """A success body without a token cannot create a session."""
        backend.on("POST", "/auth/login", json_body={"user": {"email": "alice@example.com"}})

        with pytest.raises(AuthError):
            auth.login("alice@example.com", "pw")

    @pytest.mark.parametrize("email,password", [("", "pw"), ("   ", "pw"), ("a@b.c", ""), ("a@b.c", "  ")])
    def test_blank_credentials_send_nothing(self, auth, backend, email, password):
        """Blank email or password fails before any request."""
        with pytest.raises(ValidationError):
            auth.login(email, password)

        assert backend.requests == []


class TestRegister:
    """POST /auth/register."""

    def test_register_with_name(self, auth, backend):
        """A non-blank display name is sent as ``name``."""
        backend.on("POST", "/auth/register", status=201, json_body={"ok": True})

        ack = auth.register("alice@example.com", "pw", " Alice ")

        assert ack.email == "alice@example.com"
        assert backend.body(backend.requests[0]) == {"email": "alice@example.com", "password": "pw", "name": "Alice"}

    def test_register_without_name(self, auth, backend):
        """Blank names are omitted."""
        backend.on("POST", "/auth/register", text="")

        auth.register("alice@example.com", "pw", "  ")

        assert "name" not in backend.body(backend.requests[0])

    def test_register_conflict(self, auth, backend):
        """Backend rejection surfaces its message."""
        backend.on("POST", "/auth/register", status=409, json_body={"error": "User already exists"})

        with pytest.raises(AuthError, match="User already exists"):
            auth.register("alice@example.com", "pw")
