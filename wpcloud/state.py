from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .models import FileItem, Session
from .preview import PreviewHandle

CATALOG = "catalog"
SELECTION = "selection"
ANALYSIS = "analysis"


class Generations:
    """Per-view request counters; a result is applied only if its view has not
    been asked for anything newer since the request started."""

    def __init__(self) -> None:
        self._counters: Dict[str, int] = {}

    def bump(self, view: str) -> int:
        self._counters[view] = self._counters.get(view, 0) + 1
        return self._counters[view]

    def current(self, view: str) -> int:
        return self._counters.get(view, 0)

    def is_current(self, view: str, generation: int) -> bool:
        return self._counters.get(view, 0) == generation


class Selection:
    """Listed -> Selected -> Analyzed, for the one file in focus."""

    def __init__(self) -> None:
        self.key: Optional[str] = None
        self.tags: Tuple[str, ...] = ()
        self.analyzed = False
        self.preview: Optional[PreviewHandle] = None

    def select(self, key: Optional[str], preview: Optional[PreviewHandle] = None) -> None:
        if preview is not self.preview:
            self.release_preview()
            self.preview = preview
        self.key = key
        self.clear_tags()

    def set_tags(self, key: str, tags: Tuple[str, ...]) -> bool:
        if key != self.key:
            return False
        self.tags = tuple(tags)
        self.analyzed = True
        return True

    def clear_tags(self) -> None:
        self.tags = ()
        self.analyzed = False

    def release_preview(self) -> None:
        if self.preview is not None:
            self.preview.release()
            self.preview = None

    def reset(self) -> None:
        self.select(None)


@dataclass
class AppState:
    session: Optional[Session] = None
    files: List[FileItem] = field(default_factory=list)
    selection: Selection = field(default_factory=Selection)
    generations: Generations = field(default_factory=Generations)
    error: str = ""
    info: str = ""
    busy: bool = False

    @property
    def owner_id(self) -> str:
        return self.session.identity.owner_id if self.session else ""
