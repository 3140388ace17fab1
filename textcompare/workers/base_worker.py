"""
Base classes for comparisons that run off the UI thread.

A worker owns one unit of work (read inputs, align, refine), reports its
outcome through Qt signals, and can be asked to stop between steps.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Any, Optional

from PyQt6.QtCore import QObject, QThread, pyqtSignal, pyqtSlot, QMutex, QMutexLocker


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    """Lifecycle of a worker."""
    PENDING = auto()
    RUNNING = auto()
    COMPLETED = auto()
    FAILED = auto()
    CANCELLED = auto()

    @property
    def is_final(self) -> bool:
        return self in (WorkerState.COMPLETED, WorkerState.FAILED, WorkerState.CANCELLED)


class WorkerSignals(QObject):
    """Signals a worker emits; receivers in the UI thread get them queued."""
    status = pyqtSignal(str)
    started = pyqtSignal()
    finished = pyqtSignal(object)       # ComparisonResult
    error = pyqtSignal(str, str)        # (error_type, message)
    cancelled = pyqtSignal()


class CancelledException(Exception):
    """Raised inside ``do_work`` once a stop was requested."""


class WorkerMeta(type(QObject), type(ABC)):
    pass


class BaseWorker(QObject, ABC, metaclass=WorkerMeta):
    """
    One background comparison.

    Subclasses implement ``do_work`` and call ``check_cancelled`` between
    steps. ``run`` turns the outcome into exactly one of the ``finished``,
    ``error`` or ``cancelled`` signals.

    Usage:
        worker = FileCompareWorker(left_path, right_path)
        worker.signals.finished.connect(view.apply_result)
        thread = WorkerThread(worker)
        thread.start()
    """

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.signals = WorkerSignals()
        self._mutex = QMutex()
        self._stop_requested = False
        self.state = WorkerState.PENDING
        self.result: Any = None
        self.error: Optional[tuple[str, str]] = None

    @property
    def stop_requested(self) -> bool:
        with QMutexLocker(self._mutex):
            return self._stop_requested

    def cancel(self) -> None:
        """Ask the worker to stop at its next checkpoint. Safe from any thread."""
        with QMutexLocker(self._mutex):
            self._stop_requested = True

    def check_cancelled(self) -> None:
        if self.stop_requested:
            raise CancelledException(f"{type(self).__name__} cancelled")

    def report_status(self, message: str) -> None:
        self.signals.status.emit(message)

    @pyqtSlot()
    def run(self) -> None:
        """Execute ``do_work`` and publish its outcome."""
        self.state = WorkerState.RUNNING
        self.signals.started.emit()

        try:
            self.check_cancelled()
            result = self.do_work()
            self.check_cancelled()
        except CancelledException:
            logger.debug("%s stopped on request", type(self).__name__)
            self.state = WorkerState.CANCELLED
            self.signals.cancelled.emit()
            return
        except Exception as e:
            logger.debug("%s failed", type(self).__name__, exc_info=True)
            self.error = (type(e).__name__, str(e))
            self.state = WorkerState.FAILED
            self.signals.error.emit(*self.error)
            return

        self.result = result
        self.state = WorkerState.COMPLETED
        self.signals.finished.emit(result)

    @abstractmethod
    def do_work(self) -> Any:
        """Produce the result; may raise ``CancelledException``."""


class WorkerThread(QThread):
    """QThread that runs a single worker and quits when it is done."""

    def __init__(self, worker: BaseWorker, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.worker = worker
        self.worker.moveToThread(self)

        self.started.connect(self.worker.run)
        self.worker.signals.finished.connect(self.quit)
        self.worker.signals.error.connect(self.quit)
        self.worker.signals.cancelled.connect(self.quit)

    def cancel(self) -> None:
        self.worker.cancel()
