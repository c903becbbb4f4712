from typing import Optional, Tuple

from PySide6.QtCore import Qt
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import (
    QApplication,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ..controller import Finish, VaultController, Work
from ..errors import ValidationError
from ..models import UploadFile
from ..utils import format_bytes
from .threads import Prepare, TaskRunner
from .views.login_dialog import LoginDialog


class MainWindow(QMainWindow):
    def __init__(self, controller: VaultController) -> None:
        super().__init__()
        self.controller = controller
        self.state = controller.state
        self._runner = TaskRunner()
        self.setWindowTitle("WP Cloud - Vault")
        self.resize(1000, 700)

        central = QWidget(self)
        root = QVBoxLayout(central)
        root.setContentsMargins(12, 12, 12, 12)
        root.setSpacing(10)
        self.setCentralWidget(central)

        header = QHBoxLayout()
        self.identity_label = QLabel("Logged in as: -")
        header.addWidget(self.identity_label)
        header.addStretch(1)
        self.logout_btn = QPushButton("Logout")
        self.logout_btn.clicked.connect(self._logout)
        header.addWidget(self.logout_btn)
        root.addLayout(header)

        self.error_label = QLabel("")
        self.error_label.setWordWrap(True)
        self.error_label.setStyleSheet("color: #c0392b;")
        root.addWidget(self.error_label)

        actions = QHBoxLayout()
        self.upload_btn = QPushButton("Upload file")
        self.upload_btn.clicked.connect(self._upload_dialog)
        self.refresh_btn = QPushButton("Refresh")
        self.refresh_btn.clicked.connect(self.refresh)
        actions.addWidget(self.upload_btn)
        actions.addWidget(self.refresh_btn)
        actions.addStretch(1)
        root.addLayout(actions)

        body = QHBoxLayout()
        self.file_list = QListWidget()
        self.file_list.itemClicked.connect(self._on_item_clicked)
        body.addWidget(self.file_list, 1)

        side = QVBoxLayout()
        self.preview_label = QLabel("Upload an image to see its preview here.")
        self.preview_label.setAlignment(Qt.AlignCenter)
        self.preview_label.setMinimumSize(320, 320)
        self.selected_label = QLabel("Selected: -")
        self.selected_label.setWordWrap(True)
        self.tags_label = QLabel("")
        self.tags_label.setWordWrap(True)
        self.analyze_btn = QPushButton("Analyze selected")
        self.analyze_btn.clicked.connect(lambda: self.analyze())
        side.addWidget(self.preview_label)
        side.addWidget(self.selected_label)
        side.addWidget(self.tags_label)
        side.addWidget(self.analyze_btn)
        side.addStretch(1)
        body.addLayout(side, 1)
        root.addLayout(body)

        for btn in self.findChildren(QPushButton):
            btn.setCursor(Qt.PointingHandCursor)
        self.statusBar().showMessage("Ready")

    # -- plumbing -----------------------------------------------------------

    def _start(self, label: str, prepare: Prepare) -> None:
        def settled(ok: bool) -> None:
            if ok:
                self.statusBar().showMessage(self.state.info or f"{label} done.")
            else:
                self.statusBar().showMessage(f"{label} failed.")
            self._render()

        if self._runner.start(self.controller, label, prepare, settled) is not None:
            self.statusBar().showMessage(f"{label}...")
            self._render()

    def _render(self) -> None:
        session = self.state.session
        if session is not None:
            identity = session.identity
            shown = identity.owner_id if not identity.display_name else f"{identity.display_name} ({identity.owner_id})"
            self.identity_label.setText(f"Logged in as: {shown}")
        self.error_label.setText(self.state.error)
        self._render_files()
        self._render_selection()

    def _render_files(self) -> None:
        selection = self.state.selection
        self.file_list.clear()
        for item in self.state.files:
            row = QListWidgetItem(f"{item.key}    {format_bytes(item.size)}")
            row.setData(Qt.UserRole, item.key)
            self.file_list.addItem(row)
            if item.key == selection.key:
                row.setSelected(True)
        if not self.state.files:
            self.file_list.addItem(QListWidgetItem(f"No files for {self.state.owner_id} yet."))

    def _render_selection(self) -> None:
        selection = self.state.selection
        self.selected_label.setText(f"Selected: {selection.key or '-'}")
        self.tags_label.setText(f"Tags: {', '.join(selection.tags)}" if selection.tags else "")
        self.analyze_btn.setEnabled(bool(selection.key))
        if selection.preview is not None and not selection.preview.released:
            pixmap = QPixmap(selection.preview.path)
            if not pixmap.isNull():
                self.preview_label.setPixmap(pixmap.scaled(320, 320, Qt.KeepAspectRatio, Qt.SmoothTransformation))
                return
        self.preview_label.setPixmap(QPixmap())
        self.preview_label.setText("Upload an image to see its preview here.")

    # -- actions ------------------------------------------------------------

    def refresh(self) -> None:
        self._start("Load files", self.controller.prepare_refresh)

    def analyze(self, key: Optional[str] = None) -> None:
        self._start("Analyze", lambda: self.controller.prepare_analyze(key))

    def _on_item_clicked(self, row: QListWidgetItem) -> None:
        key = row.data(Qt.UserRole)
        if not key:
            return
        self.controller.select(key)
        self.error_label.setText(self.state.error)
        self._render_selection()

    def _upload_dialog(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Select file to upload", filter="Images (*.png *.jpg *.jpeg *.gif *.webp);;All files (*)")
        if not path:
            return

        def prepare() -> Tuple[Work, Finish]:
            try:
                file = UploadFile.from_path(path)
            except OSError as exc:
                raise ValidationError(f"Cannot read {path}: {exc.strerror or exc}") from exc
            return self.controller.prepare_upload(file)

        self._start("Upload", prepare)

    def _logout(self) -> None:
        if not self.controller.logout():
            self.statusBar().showMessage(self.state.error)
        self.hide()
        if not self.ensure_session():
            self.close()
            QApplication.quit()
            return
        self.show()

    def ensure_session(self) -> bool:
        if self.state.session is None:
            dialog = LoginDialog(self.controller, self)
            if not dialog.exec():
                return False
        self._render()
        self.refresh()
        return True

    def closeEvent(self, event) -> None:
        self.controller.close()
        super().closeEvent(event)
