import faulthandler
import os
import sys

from PySide6.QtWidgets import QApplication

from ..config import Settings
from ..controller import VaultController
from ..utils import append_log_line, env_flag, get_logger
from .qt_app import MainWindow


def main() -> int:
    logger = get_logger("wpcloud.qt")
    fault_log = os.path.join(os.getcwd(), "wpcloud_fault.log")
    if env_flag("WPCLOUD_FAULTHANDLER", True):
        try:
            fh = open(fault_log, "a", buffering=1, encoding="utf-8")
            faulthandler.enable(file=fh, all_threads=True)
            append_log_line(fault_log, "faulthandler enabled")
            logger.info("Faulthandler enabled -> %s", fault_log)
        except OSError as exc:
            logger.info("Faulthandler enable failed: %s", exc)
    app = QApplication(sys.argv)
    controller = VaultController(Settings.from_env())
    win = MainWindow(controller)
    if not win.ensure_session():
        controller.close()
        return 0
    win.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
