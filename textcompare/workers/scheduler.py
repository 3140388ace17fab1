"""
Debounced comparison scheduling.

Coalesces rapid edit notifications (e.g. one per keystroke) into a single
comparison once input has been quiet for the debounce interval, and drops
results of comparisons whose inputs were superseded while they ran.
"""

from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import QObject, QThreadPool, QTimer, pyqtSignal, pyqtSlot

from textcompare.core.diff.text_diff import TextCompareOptions
from textcompare.services.settings import ApplicationSettings
from textcompare.workers.compare_worker import TextCompareRunnable, compare_texts


logger = logging.getLogger(__name__)


class CompareScheduler(QObject):
    """
    Restartable-delay scheduler for text comparisons.

    Usage:
        scheduler = CompareScheduler.from_settings(settings_manager.settings)
        scheduler.result_ready.connect(view.apply_result)
        editor.textChanged.connect(
            lambda: scheduler.schedule(left.toPlainText(), right.toPlainText())
        )
    """

    # Latest comparison result (ComparisonResult)
    result_ready = pyqtSignal(object)

    # Latest comparison failed: (error_type, message)
    failed = pyqtSignal(str, str)

    def __init__(
        self,
        options: Optional[TextCompareOptions] = None,
        debounce_ms: int = 300,
        use_thread_pool: bool = True,
        strip_whitespace: bool = False,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.options = options or TextCompareOptions()
        self.use_thread_pool = use_thread_pool
        self.strip_whitespace = strip_whitespace

        self._generation = 0
        self._pending: Optional[tuple[str, str]] = None
        self._pool = QThreadPool.globalInstance()

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(debounce_ms)
        self._timer.timeout.connect(self._run)

    @classmethod
    def from_settings(
        cls,
        settings: ApplicationSettings,
        use_thread_pool: bool = True,
        parent: Optional[QObject] = None
    ) -> 'CompareScheduler':
        """Create a scheduler configured from the comparison settings."""
        comparison = settings.comparison
        return cls(
            options=settings.to_compare_options(),
            debounce_ms=comparison.debounce_ms,
            use_thread_pool=use_thread_pool,
            strip_whitespace=comparison.strip_trailing_whitespace,
            parent=parent,
        )

    @property
    def debounce_ms(self) -> int:
        return self._timer.interval()

    @property
    def generation(self) -> int:
        """Number of the newest comparison request."""
        return self._generation

    @property
    def is_pending(self) -> bool:
        """True while a request waits for the debounce interval to pass."""
        return self._timer.isActive()

    def schedule(self, left_text: str, right_text: str) -> int:
        """
        Request a comparison of the given texts.

        Restarts the debounce timer and supersedes any earlier request,
        including one already running.

        Returns:
            Generation number of this request
        """
        self._generation += 1
        self._pending = (left_text, right_text)
        self._timer.start()
        return self._generation

    def flush(self) -> None:
        """Run a pending request now instead of waiting for the timer."""
        if self._timer.isActive():
            self._timer.stop()
            self._run()

    def cancel(self) -> None:
        """Drop the pending request and any result still in flight."""
        self._timer.stop()
        self._pending = None
        self._generation += 1

    @pyqtSlot()
    def _run(self) -> None:
        if self._pending is None:
            return

        left_text, right_text = self._pending
        self._pending = None
        generation = self._generation

        if self.use_thread_pool:
            runnable = TextCompareRunnable(
                generation, left_text, right_text, self.options, self.strip_whitespace
            )
            runnable.signals.finished.connect(self._deliver)
            runnable.signals.error.connect(self._deliver_error)
            self._pool.start(runnable)
            return

        try:
            result = compare_texts(left_text, right_text, self.options, self.strip_whitespace)
        except Exception as e:
            logger.debug("Comparison %d failed", generation, exc_info=True)
            self._deliver_error(generation, type(e).__name__, str(e))
            return
        self._deliver(generation, result)

    @pyqtSlot(int, object)
    def _deliver(self, generation: int, result: object) -> None:
        if generation != self._generation:
            logger.debug("Dropping stale comparison %d (latest is %d)", generation, self._generation)
            return
        self.result_ready.emit(result)

    @pyqtSlot(int, str, str)
    def _deliver_error(self, generation: int, error_type: str, message: str) -> None:
        if generation != self._generation:
            return
        logger.warning("Comparison failed: %s: %s", error_type, message)
        self.failed.emit(error_type, message)
