from typing import Any, Optional, Tuple

from endpoints import FILES
from .catalog import is_owned_by
from .client import VaultClient, parse_json
from .errors import PermissionDeniedError
from .models import AnalysisResult, ParseResult
from .session_store import SessionStore


def extract_tags(payload: Any) -> ParseResult:
    """Pull tag names out of ``analysis.tagsResult.values``.

    Returns a failure (with no tags) when the structure is malformed; a
    payload that simply has no tags is a success with an empty tuple.
    """
    if not isinstance(payload, dict):
        return ParseResult.failure((), "response is not an object")
    analysis = payload.get("analysis")
    if analysis is None:
        return ParseResult.success(())
    if not isinstance(analysis, dict):
        return ParseResult.failure((), "analysis is not an object")
    tags_result = analysis.get("tagsResult")
    if tags_result is None:
        return ParseResult.success(())
    values = tags_result.get("values") if isinstance(tags_result, dict) else None
    if values is None and isinstance(tags_result, dict):
        return ParseResult.success(())
    if not isinstance(values, list):
        return ParseResult.failure((), "tagsResult.values is not a list")
    tags: Tuple[str, ...] = tuple(
        str(value["name"]) for value in values if isinstance(value, dict) and value.get("name")
    )
    return ParseResult.success(tags)


class AnalysisClient:
    def __init__(self, client: VaultClient, sessions: SessionStore) -> None:
        self._client = client
        self._sessions = sessions
        self.logger = client.logger

    def check_owned(self, key: Optional[str]) -> str:
        session = self._sessions.require()
        if not is_owned_by(key, session.identity.owner_id):
            raise PermissionDeniedError("Not your file.")
        return key

    def analyze(self, key: str) -> AnalysisResult:
        key = self.check_owned(key)
        endpoint = FILES["analyze"]
        resp = self._client.request(endpoint["method"], endpoint["path"], auth=True, json={"key": key})
        parsed = parse_json(resp, fallback={})
        extracted = extract_tags(parsed.value) if parsed.ok else ParseResult.failure((), parsed.error or "")
        if not extracted.ok:
            self.logger.warning("Analysis for %s unreadable: %s", key, extracted.error)
        return AnalysisResult(key=key, tags=extracted.value, malformed=not extracted.ok)
