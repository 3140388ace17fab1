"""
Workers for text comparison operations.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PyQt6.QtCore import QObject, QRunnable, pyqtSignal, pyqtSlot

from textcompare.core.diff.text_diff import TextCompareOptions, TextDiffEngine
from textcompare.core.models import ComparisonResult
from textcompare.services.text_io import TextIOService, split_lines, strip_trailing_whitespace
from textcompare.workers.base_worker import BaseWorker


logger = logging.getLogger(__name__)


def compare_texts(
    left_text: str,
    right_text: str,
    options: Optional[TextCompareOptions] = None,
    strip_whitespace: bool = False
) -> ComparisonResult:
    """Split two raw texts into lines and compare them."""
    if strip_whitespace:
        left_text = strip_trailing_whitespace(left_text)
        right_text = strip_trailing_whitespace(right_text)
    return TextDiffEngine(options).compare(split_lines(left_text), split_lines(right_text))


class TextCompareWorker(BaseWorker):
    """
    Worker for comparing text content already in memory.

    Runs the diff engine in a background thread.
    """

    def __init__(
        self,
        left_text: str,
        right_text: str,
        options: Optional[TextCompareOptions] = None,
        strip_whitespace: bool = False,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.left_text = left_text
        self.right_text = right_text
        self.options = options or TextCompareOptions()
        self.strip_whitespace = strip_whitespace

    def do_work(self) -> ComparisonResult:
        """Perform text comparison."""
        self.report_status("Computing differences...")
        self.check_cancelled()
        return compare_texts(self.left_text, self.right_text, self.options, self.strip_whitespace)


class FileCompareWorker(BaseWorker):
    """Worker for comparing two text files by path."""

    def __init__(
        self,
        left_path: str | Path,
        right_path: str | Path,
        options: Optional[TextCompareOptions] = None,
        encoding: Optional[str] = None,
        strip_whitespace: bool = False,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.left_path = Path(left_path)
        self.right_path = Path(right_path)
        self.options = options or TextCompareOptions()
        self.encoding = encoding
        self.strip_whitespace = strip_whitespace

    def do_work(self) -> ComparisonResult:
        """Read both files and compare them."""
        service = TextIOService()

        self.report_status(f"Reading {self.left_path.name}...")
        left_text = self._read(service, self.left_path)
        self.check_cancelled()

        self.report_status(f"Reading {self.right_path.name}...")
        right_text = self._read(service, self.right_path)
        self.check_cancelled()

        self.report_status("Computing differences...")
        return compare_texts(left_text, right_text, self.options, self.strip_whitespace)

    def _read(self, service: TextIOService, path: Path) -> str:
        result = service.read_text(path, encoding=self.encoding)
        if not result.success:
            if result.is_binary:
                raise IOError(f"File appears to be binary and cannot be compared as text: {path}")
            raise IOError(f"Failed to read {path}: {result.error}")
        return result.content.text


class CompareRunnableSignals(QObject):
    """Signals of a pooled comparison, tagged with the request generation."""
    finished = pyqtSignal(int, object)     # (generation, ComparisonResult)
    error = pyqtSignal(int, str, str)      # (generation, error_type, message)


class TextCompareRunnable(QRunnable):
    """
    Comparison task for QThreadPool.

    Lighter than a QThread-based worker; suited to frequent recomputation.
    """

    def __init__(
        self,
        generation: int,
        left_text: str,
        right_text: str,
        options: Optional[TextCompareOptions] = None,
        strip_whitespace: bool = False
    ):
        super().__init__()
        self.generation = generation
        self.left_text = left_text
        self.right_text = right_text
        self.options = options
        self.strip_whitespace = strip_whitespace
        self.signals = CompareRunnableSignals()
        self.setAutoDelete(True)

    @pyqtSlot()
    def run(self) -> None:
        try:
            result = compare_texts(
                self.left_text, self.right_text, self.options, self.strip_whitespace
            )
        except Exception as e:
            logger.debug("Pooled comparison %d failed", self.generation, exc_info=True)
            self.signals.error.emit(self.generation, type(e).__name__, str(e))
            return
        self.signals.finished.emit(self.generation, result)
