from typing import Any, Callable, Optional, Tuple

import httpx

from .analysis import AnalysisClient
from .auth import AuthClient
from .catalog import FileCatalog
from .client import VaultClient
from .config import Settings
from .errors import ValidationError, VaultError
from .models import AnalysisResult, FileItem, RegisterAck, Session, UploadFile, UploadReceipt
from .session_store import SessionStore
from .state import ANALYSIS, CATALOG, SELECTION, AppState
from .upload import UploadCoordinator
from .utils import get_logger

Work = Callable[[], Any]
Finish = Callable[[Any], None]


class VaultController:
    """User-action boundary over the vault components.

    Every action is split into ``prepare_*`` (local checks, returns the
    blocking network work and a finisher) so a UI can run the work on a
    worker thread and apply the result on its own thread. The plain action
    methods run both halves inline. Failures never escape an action: they
    land in ``state.error`` and leave the prior state untouched.
    """

    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.BaseTransport] = None) -> None:
        self.settings = settings or Settings.from_env()
        self.logger = get_logger("wpcloud.controller")
        self.sessions = SessionStore(self.settings.session_path)
        self.client = VaultClient(
            self.sessions,
            base_url=self.settings.api_base,
            timeout=self.settings.timeout,
            http_log_path=self.settings.http_log_path,
            transport=transport,
        )
        self.auth = AuthClient(self.client)
        self.catalog = FileCatalog(self.client)
        self.uploads = UploadCoordinator(
            self.client,
            self.sessions,
            self.catalog,
            verify_object_key=self.settings.verify_object_key,
            preview_dir=self.settings.preview_dir,
        )
        self.analysis = AnalysisClient(self.client, self.sessions)
        self.state = AppState(session=self.sessions.load())

    # -- boundary -----------------------------------------------------------

    def begin(self) -> None:
        self.state.error = ""
        self.state.info = ""

    def run(self, label: str, prepare: Callable[[], Tuple[Work, Finish]]) -> bool:
        self.begin()
        try:
            work, finish = prepare()
            result = work()
        except VaultError as exc:
            self.fail(label, exc)
            return False
        return self.complete(label, finish, result)

    def complete(self, label: str, finish: Finish, result: Any) -> bool:
        try:
            finish(result)
        except VaultError as exc:
            self.fail(label, exc)
            return False
        return True

    def fail(self, label: str, exc: Exception) -> None:
        message = str(exc) if isinstance(exc, VaultError) else f"{label} failed: {exc}"
        self.state.error = message or f"{label} failed"
        self.logger.info("%s failed: %s", label, self.state.error)

    def _require_session(self) -> Session:
        session = self.sessions.require()
        self.state.session = session
        return session

    # -- session ------------------------------------------------------------

    def prepare_login(self, email: str, password: str) -> Tuple[Work, Finish]:
        def finish(session: Session) -> None:
            self.sessions.save(session)
            self._reset_views()
            self.state.session = session

        return (lambda: self.auth.login(email, password)), finish

    def prepare_register(self, email: str, password: str, display_name: Optional[str] = None) -> Tuple[Work, Finish]:
        def finish(ack: RegisterAck) -> None:
            self.state.info = ack.message

        return (lambda: self.auth.register(email, password, display_name)), finish

    def login(self, email: str, password: str) -> bool:
        return self.run("Login", lambda: self.prepare_login(email, password))

    def register(self, email: str, password: str, display_name: Optional[str] = None) -> bool:
        return self.run("Register", lambda: self.prepare_register(email, password, display_name))

    def logout(self) -> bool:
        self.begin()
        self._reset_views()
        self.state.session = None
        try:
            self.sessions.clear()
        except VaultError as exc:
            self.fail("Logout", exc)
            return False
        return True

    def restore(self) -> bool:
        self.state.session = self.sessions.load()
        return self.state.session is not None

    def _reset_views(self) -> None:
        for view in (CATALOG, SELECTION, ANALYSIS):
            self.state.generations.bump(view)
        self.state.files = []
        self.state.selection.reset()

    # -- catalog ------------------------------------------------------------

    def prepare_refresh(self) -> Tuple[Work, Finish]:
        owner_id = self._require_session().identity.owner_id
        generation = self.state.generations.bump(CATALOG)
        return (lambda: self.catalog.list(owner_id)), (lambda items: self._apply_files(generation, items))

    def refresh(self) -> bool:
        return self.run("Load files", self.prepare_refresh)

    def _apply_files(self, generation: int, items: Any) -> None:
        if not self.state.generations.is_current(CATALOG, generation):
            self.logger.debug("Discarding stale file list (generation %d)", generation)
            return
        self.state.files = list(items)

    # -- selection ----------------------------------------------------------

    def select(self, key: Optional[str]) -> None:
        self.state.generations.bump(SELECTION)
        self.state.generations.bump(ANALYSIS)
        self.state.selection.select(key)

    def find(self, key: str) -> Optional[FileItem]:
        return next((item for item in self.state.files if item.key == key), None)

    # -- upload -------------------------------------------------------------

    def prepare_upload(self, file: UploadFile) -> Tuple[Work, Finish]:
        if not file.name or not file.name.strip():
            raise ValidationError("Choose a file to upload.")
        self._require_session()
        selection = self.state.selection
        selection.release_preview()
        selection.clear_tags()
        self.state.generations.bump(ANALYSIS)
        selection_gen = self.state.generations.bump(SELECTION)
        catalog_gen = self.state.generations.bump(CATALOG)

        def finish(receipt: UploadReceipt) -> None:
            if self.state.generations.is_current(SELECTION, selection_gen):
                selection.select(receipt.object_key, receipt.preview)
            elif receipt.preview is not None:
                receipt.preview.release()
            self._apply_files(catalog_gen, receipt.files)
            self.state.info = f"Uploaded {receipt.object_key}"

        return (lambda: self.uploads.upload(file)), finish

    def upload(self, file: UploadFile) -> bool:
        return self.run("Upload", lambda: self.prepare_upload(file))

    def upload_path(self, path: str) -> bool:
        try:
            file = UploadFile.from_path(path)
        except OSError as exc:
            self.fail("Upload", ValidationError(f"Cannot read {path}: {exc.strerror or exc}"))
            return False
        return self.upload(file)

    # -- analysis -----------------------------------------------------------

    def prepare_analyze(self, key: Optional[str] = None) -> Tuple[Work, Finish]:
        key = key or self.state.selection.key
        if not key:
            raise ValidationError("Select a file first.")
        self.analysis.check_owned(key)
        selection_gen = self.state.generations.current(SELECTION)
        generation = self.state.generations.bump(ANALYSIS)

        def finish(result: AnalysisResult) -> None:
            generations = self.state.generations
            if not generations.is_current(ANALYSIS, generation) or not generations.is_current(SELECTION, selection_gen):
                self.logger.debug("Discarding stale analysis for %s", result.key)
                return
            if result.key != self.state.selection.key:
                # Listed -> Selected only once the analysis actually succeeded.
                self.select(result.key)
            self.state.selection.set_tags(result.key, result.tags)
            if result.malformed:
                self.state.info = "Analysis response could not be read."
            elif not result.tags:
                self.state.info = "No tags found."

        return (lambda: self.analysis.analyze(key)), finish

    def analyze(self, key: Optional[str] = None) -> bool:
        return self.run("Analyze", lambda: self.prepare_analyze(key))

    def close(self) -> None:
        self.state.selection.release_preview()
        self.client.close()
