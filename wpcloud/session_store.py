import json
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import AuthError, StorageError
from .models import Identity, Session
from .utils import get_logger

DEFAULT_SESSION_PATH = ".wpcloud/session.json"


class SessionStore:
    """Single owner of the persisted token and identity.

    With a ``path`` the session lives in a JSON file (one document, so token
    and identity are replaced or removed together); without one it only
    lives for the lifetime of the process.
    """

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = Path(path) if path else None
        self.logger = get_logger("wpcloud.session")
        self._lock = threading.Lock()
        self._memory: Optional[Dict[str, Any]] = None

    def save(self, session: Session) -> None:
        payload = {"token": session.token, "user": session.identity.to_user()}
        with self._lock:
            if self.path is None:
                self._memory = payload
                return
            tmp = self.path.with_name(f"{self.path.name}.tmp")
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                tmp.write_text(json.dumps(payload, indent=2, ensure_ascii=True) + "\n", encoding="utf-8")
                os.chmod(tmp, 0o600)
                os.replace(tmp, self.path)
            except OSError as exc:
                self._discard(tmp)
                raise StorageError(f"Cannot save session to {self.path}: {exc.strerror or exc}") from exc
        self.logger.debug("Session saved for %s", session.identity.owner_id)

    def load(self) -> Optional[Session]:
        with self._lock:
            data = self._read_locked()
        if not isinstance(data, dict):
            return None
        token = data.get("token")
        if not token or not isinstance(token, str):
            return None
        identity = Identity.from_user(data.get("user"))
        if identity is None:
            self.logger.warning("Stored session has no usable identity; treating as logged out")
            return None
        return Session(token=token, identity=identity)

    def clear(self) -> None:
        with self._lock:
            self._memory = None
            if self.path is not None:
                try:
                    self.path.unlink()
                except FileNotFoundError:
                    pass
                except OSError as exc:
                    raise StorageError(f"Cannot remove session file {self.path}: {exc.strerror or exc}") from exc
        self.logger.debug("Session cleared")

    def require(self) -> Session:
        session = self.load()
        if session is None:
            raise AuthError("User not found in session. Please login again.")
        return session

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink()
        except OSError:
            pass

    def _read_locked(self) -> Any:
        if self.path is None:
            return self._memory
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            self.logger.warning("Session file unreadable (%s): %s", self.path, exc)
            return None
        try:
            return json.loads(raw)
        except ValueError:
            self.logger.warning("Session file is not valid JSON: %s", self.path)
            return None
