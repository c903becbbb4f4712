from typing import Any, Dict, Optional
import json

import httpx

from endpoints import BASE_URL, STORAGE
from .errors import AuthError, NetworkError, TransferError
from .models import ParseResult
from .session_store import SessionStore
from .utils import append_log_line, get_logger, redact_payload, redact_url, redacted_headers, truncate_text


def parse_json(resp: httpx.Response, fallback: Any = None) -> ParseResult:
    text = resp.text or ""
    if not text.strip():
        return ParseResult.failure(fallback, "empty body")
    try:
        return ParseResult.success(json.loads(text))
    except ValueError:
        return ParseResult.failure(fallback, f"Non-JSON response: {truncate_text(text, 200)}")


def error_message(resp: httpx.Response) -> str:
    parsed = parse_json(resp)
    data = parsed.value
    if isinstance(data, dict):
        msg = data.get("error") or data.get("message")
        if msg:
            return str(msg)
    return f"HTTP {resp.status_code}"


class VaultClient:
    """HTTP boundary shared by every vault component.

    Bearer authentication is opt-in per call and the token is read from the
    session store at request time, so a logout takes effect immediately.
    """

    def __init__(
        self,
        sessions: SessionStore,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
        http_log_path: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.sessions = sessions
        self.timeout = timeout
        self.logger = get_logger('wpcloud')
        self.http_log_path = http_log_path
        self._client = httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=transport)
        # Storage writes go to arbitrary SAS hosts and must not carry the bearer token.
        self._storage = httpx.Client(timeout=self.timeout, transport=transport)

    def _auth_headers(self) -> Dict[str, str]:
        session = self.sessions.require()
        return {"Authorization": f"Bearer {session.token}"}

    def request(self, method: str, path: str, auth: bool = False, **kwargs: Any) -> httpx.Response:
        headers: Dict[str, str] = {}
        if auth:
            headers.update(self._auth_headers())
        headers.update(kwargs.get('headers', {}) or {})
        kwargs['headers'] = headers
        url = f"{self.base_url}{path}"
        self._trace_request(method, url, headers, kwargs.get("json"))
        try:
            resp = self._client.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            self.logger.debug('HTTP %s %s failed: %s', method, url, exc)
            append_log_line(self.http_log_path, f"{method} {url} error={exc!r}")
            raise NetworkError(f"Request failed: {exc}") from exc
        self._trace_response(method, url, resp)
        if not resp.is_success:
            msg = error_message(resp)
            if resp.status_code in (401, 403):
                raise AuthError(msg, status=resp.status_code)
            raise NetworkError(msg, status=resp.status_code)
        return resp

    def put_blob(self, upload_url: str, data: bytes, content_type: Optional[str]) -> httpx.Response:
        headers = dict(STORAGE["put_blob"]["headers"])
        headers["Content-Type"] = content_type or "application/octet-stream"
        safe_url = redact_url(upload_url)
        self._trace_request(STORAGE["put_blob"]["method"], safe_url, headers, None)
        try:
            resp = self._storage.request(STORAGE["put_blob"]["method"], upload_url, content=data, headers=headers)
        except httpx.TransportError as exc:
            append_log_line(self.http_log_path, f"PUT {safe_url} error={exc!r}")
            raise TransferError(None, str(exc)) from exc
        append_log_line(
            self.http_log_path,
            f"PUT {safe_url} status={resp.status_code} response={truncate_text(resp.text or '')}",
        )
        if not resp.is_success:
            raise TransferError(resp.status_code, resp.text or "")
        return resp

    def _trace_request(self, method: str, url: str, headers: Dict[str, str], payload: Any) -> None:
        redacted = redacted_headers(headers)
        self.logger.debug('HTTP %s %s headers=%s', method, url, redacted)
        if payload is not None:
            append_log_line(self.http_log_path, f"{method} {url} headers={redacted} payload={redact_payload(payload)}")
        else:
            append_log_line(self.http_log_path, f"{method} {url} headers={redacted}")

    def _trace_response(self, method: str, url: str, resp: httpx.Response) -> None:
        if not self.http_log_path:
            return
        parsed = parse_json(resp)
        if parsed.ok:
            response_body = json.dumps(redact_payload(parsed.value), ensure_ascii=True)
        else:
            response_body = truncate_text(resp.text or "")
        append_log_line(self.http_log_path, f"{method} {url} status={resp.status_code} response={response_body}")

    def close(self) -> None:
        self._client.close()
        self._storage.close()
