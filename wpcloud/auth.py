from typing import Any, Dict, Optional, Tuple

from endpoints import AUTH
from .client import VaultClient, parse_json
from .errors import AuthError, NetworkError, ValidationError
from .models import Identity, RegisterAck, Session


def _credentials(email: str, password: str) -> Tuple[str, str]:
    trimmed_email = (email or "").strip()
    trimmed_password = (password or "").strip()
    if not trimmed_email or not trimmed_password:
        raise ValidationError("Email and password are required.")
    return trimmed_email, trimmed_password


class AuthClient:
    """Exchanges credentials with the auth endpoints.

    Never persists anything: the caller hands the returned session to
    ``SessionStore.save``.
    """

    def __init__(self, client: VaultClient) -> None:
        self._client = client

    def login(self, email: str, password: str) -> Session:
        email, password = _credentials(email, password)
        payload = self._post("login", {"email": email, "password": password})
        token = payload.get("token")
        if not token or not isinstance(token, str):
            raise AuthError("Login response did not include a token.")
        identity = Identity.from_user(payload.get("user"))
        if identity is None:
            identity = Identity(owner_id=email, email=email)
        self._client.logger.info("Logged in as %s", identity.owner_id)
        return Session(token=token, identity=identity)

    def register(self, email: str, password: str, display_name: Optional[str] = None) -> RegisterAck:
        email, password = _credentials(email, password)
        body: Dict[str, Any] = {"email": email, "password": password}
        name = (display_name or "").strip()
        if name:
            body["name"] = name
        self._post("register", body)
        self._client.logger.info("Registered %s", email)
        return RegisterAck(email=email)

    def _post(self, route: str, body: Dict[str, Any]) -> Dict[str, Any]:
        endpoint = AUTH[route]
        try:
            resp = self._client.request(endpoint["method"], endpoint["path"], json=body)
        except NetworkError as exc:
            raise AuthError(exc.message, status=exc.status) from exc
        parsed = parse_json(resp, fallback={})
        return parsed.value if isinstance(parsed.value, dict) else {}
