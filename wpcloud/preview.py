import os
import tempfile
import threading
from typing import Optional

from .errors import StorageError
from .utils import get_logger


def _preview_dir() -> str:
    return os.getenv("WPCLOUD_PREVIEW_DIR") or os.path.join(tempfile.gettempdir(), "wpcloud_preview")


class PreviewHandle:
    """Local copy of just-uploaded bytes for display.

    Must be released exactly once; later calls to ``release`` are no-ops.
    """

    def __init__(self, path: str, key: str) -> None:
        self.path = path
        self.key = key
        self._released = False
        self._lock = threading.Lock()
        self.logger = get_logger("wpcloud.preview")

    @classmethod
    def create(cls, data: bytes, key: str, cache_dir: Optional[str] = None) -> "PreviewHandle":
        directory = cache_dir or _preview_dir()
        suffix = os.path.splitext(key)[1]
        try:
            os.makedirs(directory, exist_ok=True)
            fd, path = tempfile.mkstemp(prefix="preview-", suffix=suffix, dir=directory)
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
        except OSError as exc:
            raise StorageError(f"Uploaded, but the preview could not be written: {exc.strerror or exc}") from exc
        return cls(path, key)

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> bool:
        with self._lock:
            if self._released:
                return False
            self._released = True
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
        self.logger.debug("Preview released for %s", self.key)
        return True
