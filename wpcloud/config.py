import os
from dataclasses import dataclass
from typing import Optional

from endpoints import BASE_URL
from .session_store import DEFAULT_SESSION_PATH
from .utils import env_flag, env_float

DEFAULT_HTTP_LOG = "wpcloud_http.log"


@dataclass
class Settings:
    api_base: str = BASE_URL
    session_path: Optional[str] = DEFAULT_SESSION_PATH
    timeout: float = 30.0
    http_log_path: Optional[str] = None
    verify_object_key: bool = True
    preview_dir: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        session_path = os.getenv("WPCLOUD_SESSION_PATH", DEFAULT_SESSION_PATH)
        http_log = os.getenv("WPCLOUD_HTTP_LOG")
        if http_log is None or http_log == "":
            http_log = os.path.join(os.getcwd(), DEFAULT_HTTP_LOG)
        elif http_log in ("0", "false", "FALSE"):
            http_log = None
        return cls(
            api_base=os.getenv("WPCLOUD_API_BASE") or BASE_URL,
            session_path=session_path or None,
            timeout=env_float("WPCLOUD_TIMEOUT", 30.0),
            http_log_path=http_log,
            verify_object_key=env_flag("WPCLOUD_VERIFY_OBJECT_KEY", True),
            preview_dir=os.getenv("WPCLOUD_PREVIEW_DIR") or None,
        )
