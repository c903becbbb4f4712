from typing import Any, Iterable, List

from endpoints import FILES
from .client import VaultClient, parse_json
from .models import FileItem


def is_owned_by(key: Any, owner_id: str) -> bool:
    """True when ``key`` lives under ``<owner_id>/``."""
    if not isinstance(key, str) or not owner_id:
        return False
    return key.startswith(f"{owner_id}/")


def owned_items(rows: Iterable[Any], owner_id: str) -> List[FileItem]:
    return [FileItem.from_row(row) for row in rows if isinstance(row, dict) and is_owned_by(row.get("key"), owner_id)]


class FileCatalog:
    def __init__(self, client: VaultClient) -> None:
        self._client = client
        self.logger = client.logger

    def list(self, owner_id: str) -> List[FileItem]:
        endpoint = FILES["list"]
        resp = self._client.request(endpoint["method"], endpoint["path"], auth=True, params={"userId": owner_id})
        parsed = parse_json(resp, fallback={})
        rows = parsed.value.get("files") if isinstance(parsed.value, dict) else None
        if not parsed.ok or not isinstance(rows, list):
            self.logger.warning("File list response unreadable (%s); showing no files", parsed.error or "no 'files' array")
            return []
        items = owned_items(rows, owner_id)
        dropped = len(rows) - len(items)
        if dropped:
            self.logger.warning("Dropped %d listed file(s) not owned by %s", dropped, owner_id)
        return items
