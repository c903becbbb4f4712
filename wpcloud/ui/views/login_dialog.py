from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
)

from ...controller import VaultController
from ..threads import TaskRunner

LOGIN = "login"
REGISTER = "register"


class LoginDialog(QDialog):
    def __init__(self, controller: VaultController, parent=None) -> None:
        super().__init__(parent)
        self._controller = controller
        self._runner = TaskRunner()
        self._mode = LOGIN

        self.setWindowTitle("WP Cloud - Login")
        self.setModal(True)
        self.setMinimumWidth(420)

        root = QVBoxLayout(self)
        root.setContentsMargins(16, 16, 16, 16)
        root.setSpacing(10)

        form = QFormLayout()
        self.email_edit = QLineEdit()
        self.password_edit = QLineEdit()
        self.password_edit.setEchoMode(QLineEdit.Password)
        self.name_edit = QLineEdit()
        self.name_label = QLabel("Name (optional)")
        form.addRow("Email", self.email_edit)
        form.addRow("Password", self.password_edit)
        form.addRow(self.name_label, self.name_edit)
        root.addLayout(form)

        self.message = QLabel("")
        self.message.setWordWrap(True)
        root.addWidget(self.message)

        footer = QHBoxLayout()
        self.mode_btn = QPushButton()
        self.mode_btn.setFlat(True)
        self.mode_btn.setCursor(Qt.PointingHandCursor)
        self.mode_btn.clicked.connect(self._toggle_mode)
        footer.addWidget(self.mode_btn)
        footer.addStretch(1)
        self.submit_btn = QPushButton()
        self.submit_btn.setCursor(Qt.PointingHandCursor)
        self.submit_btn.setDefault(True)
        self.submit_btn.clicked.connect(self._submit)
        footer.addWidget(self.submit_btn)
        root.addLayout(footer)

        self._apply_mode()

    def _apply_mode(self) -> None:
        registering = self._mode == REGISTER
        self.name_label.setVisible(registering)
        self.name_edit.setVisible(registering)
        self.submit_btn.setText("Create account" if registering else "Login")
        self.mode_btn.setText("Have an account? Login" if registering else "No account? Register")

    def _toggle_mode(self) -> None:
        self._mode = LOGIN if self._mode == REGISTER else REGISTER
        self._show("", error=False)
        self._apply_mode()

    def _show(self, text: str, error: bool) -> None:
        self.message.setStyleSheet("color: #c0392b;" if error else "color: #1e8449;")
        self.message.setText(text)

    def _set_busy(self, busy: bool) -> None:
        for widget in (self.submit_btn, self.mode_btn, self.email_edit, self.password_edit, self.name_edit):
            widget.setEnabled(not busy)

    def _submit(self) -> None:
        email = self.email_edit.text()
        password = self.password_edit.text()
        if self._mode == LOGIN:
            label, prepare = "Login", lambda: self._controller.prepare_login(email, password)
        else:
            name = self.name_edit.text()
            label, prepare = "Register", lambda: self._controller.prepare_register(email, password, name)
        self._set_busy(True)

        def settled(ok: bool) -> None:
            self._set_busy(False)
            if not ok:
                self._show(self._controller.state.error, error=True)
            elif self._mode == REGISTER:
                self._mode = LOGIN
                self._apply_mode()
                self._show(self._controller.state.info, error=False)
            else:
                self.accept()

        self._runner.start(self._controller, label, prepare, settled)
