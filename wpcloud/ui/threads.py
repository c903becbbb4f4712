from typing import Any, Callable, Optional, Set, Tuple

from PySide6.QtCore import QObject, QRunnable, Qt, QThread, QThreadPool, Signal, Slot

from ..controller import Finish, VaultController, Work
from ..errors import VaultError
from ..utils import get_logger

Prepare = Callable[[], Tuple[Work, Finish]]


class WorkerSignals(QObject):
    error = Signal(Exception)
    result = Signal(object)
    finished = Signal()


class Worker(QRunnable):
    """Runs one ``Work`` callable off the UI thread and reports back by signal."""

    def __init__(self, work: Work) -> None:
        super().__init__()
        self.work = work
        self.signals = WorkerSignals()
        self.logger = get_logger("wpcloud.qt")

    @Slot()
    def run(self) -> None:
        try:
            result = self.work()
        except Exception as exc:
            self.logger.debug("Worker failed on %s: %r", QThread.currentThread(), exc)
            self.signals.error.emit(exc)
        else:
            self.signals.result.emit(result)
        finally:
            self.signals.finished.emit()


class TaskRunner:
    """Runs vault actions on the global pool.

    ``start`` drives one controller action end to end: ``prepare`` runs on
    the UI thread, the network work on a pool thread, and the finisher back
    on the UI thread through a queued connection. ``on_update(ok)`` is called
    once the action has settled, whichever way it went, so the caller only
    has to re-render from ``controller.state``.
    """

    def __init__(self) -> None:
        self.pool = QThreadPool.globalInstance()
        self._workers: Set[Worker] = set()

    def start(
        self,
        controller: VaultController,
        label: str,
        prepare: Prepare,
        on_update: Callable[[bool], None],
    ) -> Optional[Worker]:
        controller.begin()
        try:
            work, finish = prepare()
        except VaultError as exc:
            controller.fail(label, exc)
            on_update(False)
            return None

        def done(result: Any) -> None:
            on_update(controller.complete(label, finish, result))

        def failed(exc: Exception) -> None:
            controller.fail(label, exc)
            on_update(False)

        return self.submit(work, on_result=done, on_error=failed)

    def submit(
        self,
        work: Work,
        on_result: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> Worker:
        worker = Worker(work)
        self._workers.add(worker)
        if on_result:
            worker.signals.result.connect(on_result, Qt.QueuedConnection)
        if on_error:
            worker.signals.error.connect(on_error, Qt.QueuedConnection)
        worker.signals.finished.connect(lambda: self._workers.discard(worker), Qt.QueuedConnection)
        self.pool.start(worker)
        return worker
