import mimetypes
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar

from .preview import PreviewHandle

T = TypeVar("T")


@dataclass(frozen=True)
class Identity:
    owner_id: str
    display_name: Optional[str] = None
    user_id: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_user(cls, user: Any) -> Optional["Identity"]:
        if not isinstance(user, dict):
            return None
        email = user.get("email") or None
        user_id = user.get("user_id") or None
        owner_id = email or (str(user_id) if user_id else None)
        if not isinstance(owner_id, str) or not owner_id:
            return None
        display_name = user.get("display_name") or None
        return cls(
            owner_id=owner_id,
            display_name=str(display_name) if display_name else None,
            user_id=str(user_id) if user_id else None,
            email=str(email) if email else None,
        )

    def to_user(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "display_name": self.display_name,
        }

    @property
    def key_prefix(self) -> str:
        return f"{self.owner_id}/"


@dataclass(frozen=True)
class Session:
    token: str
    identity: Identity


@dataclass(frozen=True)
class FileItem:
    key: str
    size: Optional[int] = None
    last_modified: Optional[datetime] = None

    @property
    def name(self) -> str:
        return self.key.split("/", 1)[-1]

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "FileItem":
        size = row.get("size")
        try:
            size = int(size) if size is not None else None
        except (TypeError, ValueError):
            size = None
        return cls(key=row["key"], size=size, last_modified=_parse_timestamp(row.get("last_modified")))


@dataclass(frozen=True)
class UploadTicket:
    upload_url: str
    object_key: str


@dataclass(frozen=True)
class UploadFile:
    name: str
    data: bytes
    content_type: Optional[str] = None

    @classmethod
    def from_path(cls, path: str, name: Optional[str] = None) -> "UploadFile":
        filename = name or os.path.basename(path)
        content_type, _ = mimetypes.guess_type(filename)
        return cls(name=filename, data=Path(path).read_bytes(), content_type=content_type)


@dataclass(frozen=True)
class UploadReceipt:
    object_key: str
    files: List[FileItem] = field(default_factory=list)
    preview: Optional[PreviewHandle] = None


@dataclass(frozen=True)
class AnalysisResult:
    key: str
    tags: Tuple[str, ...] = ()
    malformed: bool = False


@dataclass(frozen=True)
class RegisterAck:
    email: str
    message: str = "Account created. You can now log in."


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """Outcome of decoding a response body.

    ``ok`` is False when the body was not JSON or lacked the expected shape;
    ``value`` then holds the caller's fallback so views can still render.
    """

    ok: bool
    value: T
    error: Optional[str] = None

    @classmethod
    def success(cls, value: T) -> "ParseResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, fallback: T, error: str) -> "ParseResult[T]":
        return cls(ok=False, value=fallback, error=error)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
