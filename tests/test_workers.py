from __future__ import annotations

from PyQt6.QtCore import QCoreApplication, QThreadPool
from PyQt6.QtTest import QSignalSpy

from textcompare.core.models import DiffStats
from textcompare.services.settings import ApplicationSettings
from textcompare.workers.base_worker import WorkerState, WorkerThread
from textcompare.workers.compare_worker import FileCompareWorker, TextCompareWorker, compare_texts
from textcompare.workers.scheduler import CompareScheduler


def test_compare_texts_splits_and_normalizes():
    result = compare_texts("a\r\nb  \n", "a\nb\n", strip_whitespace=True)
    assert result.is_identical
    assert result.left_lines == ("a", "b", "")

    result = compare_texts("a\r\nb  \n", "a\nb\n")
    assert result.stats == DiffStats(added=0, removed=0, modified=1)


class TestTextCompareWorker:
    def test_run_emits_result(self, qt_app):
        worker = TextCompareWorker("a\nb", "a\nc")
        results, errors = [], []
        worker.signals.finished.connect(results.append)
        worker.signals.error.connect(lambda kind, message: errors.append(kind))

        worker.run()

        assert errors == []
        assert results[0].stats == DiffStats(added=0, removed=0, modified=1)
        assert worker.state is WorkerState.COMPLETED
        assert worker.result is results[0]

    def test_cancelled_before_run(self, qt_app):
        worker = TextCompareWorker("a", "b")
        cancelled = []
        worker.signals.cancelled.connect(lambda: cancelled.append(True))

        worker.cancel()
        worker.run()

        assert cancelled == [True]
        assert worker.state is WorkerState.CANCELLED
        assert worker.result is None

    def test_strip_whitespace(self, qt_app):
        results = []
        for strip in (False, True):
            worker = TextCompareWorker("a  \nb", "a\nb\t", strip_whitespace=strip)
            worker.signals.finished.connect(results.append)
            worker.run()

        assert results[0].stats == DiffStats(added=0, removed=0, modified=2)
        assert results[1].is_identical


class TestFileCompareWorker:
    def test_compares_files(self, qt_app, tmp_path):
        left = tmp_path / "left.txt"
        right = tmp_path / "right.txt"
        left.write_text("one\ntwo\n", encoding="utf-8")
        right.write_text("one\ntwo\nthree\n", encoding="utf-8")

        worker = FileCompareWorker(left, right)
        results = []
        worker.signals.finished.connect(results.append)
        worker.run()

        assert results[0].stats == DiffStats(added=1, removed=0, modified=0)

    def test_strip_whitespace(self, qt_app, tmp_path):
        left = tmp_path / "left.txt"
        right = tmp_path / "right.txt"
        left.write_text("one  \ntwo\n", encoding="utf-8")
        right.write_text("one\ntwo\n", encoding="utf-8")

        worker = FileCompareWorker(left, right, strip_whitespace=True)
        worker.run()

        assert worker.result.is_identical

    def test_missing_file_reports_error(self, qt_app, tmp_path):
        right = tmp_path / "right.txt"
        right.write_text("x", encoding="utf-8")

        worker = FileCompareWorker(tmp_path / "missing.txt", right)
        errors = []
        worker.signals.error.connect(lambda kind, message: errors.append((kind, message)))
        worker.run()

        assert worker.state is WorkerState.FAILED
        assert errors[0][0] == "OSError"
        assert "missing.txt" in errors[0][1]


class TestCompareScheduler:
    def test_rapid_requests_are_coalesced(self, qt_app):
        scheduler = CompareScheduler(debounce_ms=50, use_thread_pool=False)
        spy = QSignalSpy(scheduler.result_ready)

        scheduler.schedule("a", "a")
        scheduler.schedule("a", "b")
        scheduler.schedule("a\nb", "a\nb\nc")
        assert scheduler.is_pending
        assert scheduler.generation == 3

        assert spy.wait(2000)
        assert len(spy) == 1
        assert spy[0][0].stats == DiffStats(added=1, removed=0, modified=0)
        assert not scheduler.is_pending

    def test_flush_runs_immediately(self, qt_app):
        scheduler = CompareScheduler(debounce_ms=10_000, use_thread_pool=False)
        results = []
        scheduler.result_ready.connect(results.append)

        scheduler.schedule("x", "y")
        scheduler.flush()

        assert not scheduler.is_pending
        assert results[0].stats == DiffStats(added=0, removed=0, modified=1)

    def test_stale_results_are_dropped(self, qt_app):
        scheduler = CompareScheduler(use_thread_pool=False)
        results = []
        scheduler.result_ready.connect(results.append)

        first = scheduler.schedule("a", "b")
        scheduler.schedule("a", "a")
        scheduler._deliver(first, object())

        assert results == []

    def test_cancel_drops_pending_request(self, qt_app):
        scheduler = CompareScheduler(debounce_ms=10_000, use_thread_pool=False)
        results = []
        scheduler.result_ready.connect(results.append)

        scheduler.schedule("a", "b")
        scheduler.cancel()
        scheduler.flush()

        assert not scheduler.is_pending
        assert results == []

    def test_thread_pool_delivers_only_latest(self, qt_app):
        scheduler = CompareScheduler(debounce_ms=10_000, use_thread_pool=True)
        spy = QSignalSpy(scheduler.result_ready)

        scheduler.schedule("a\nb", "a")
        scheduler.flush()
        scheduler.schedule("a", "a\nb\nc")
        scheduler.flush()

        assert QThreadPool.globalInstance().waitForDone(5000)
        QCoreApplication.processEvents()

        assert len(spy) == 1
        assert spy[0][0].stats == DiffStats(added=2, removed=0, modified=0)

    def test_from_settings(self, qt_app):
        settings = ApplicationSettings()
        settings.comparison.debounce_ms = 120
        settings.comparison.strip_trailing_whitespace = True
        settings.comparison.compute_intraline = False

        scheduler = CompareScheduler.from_settings(settings, use_thread_pool=False)
        results = []
        scheduler.result_ready.connect(results.append)

        assert scheduler.debounce_ms == 120
        assert scheduler.strip_whitespace
        assert scheduler.options == settings.to_compare_options()

        scheduler.schedule("a  \nfoo bar", "a\nfoo baz")
        scheduler.flush()

        assert results[0].stats == DiffStats(added=0, removed=0, modified=1)
        assert results[0].pairs[0].span is None


def test_worker_thread_runs_worker_off_the_main_thread(qt_app, tmp_path):
    left = tmp_path / "left.txt"
    right = tmp_path / "right.txt"
    left.write_text("a\nb\n", encoding="utf-8")
    right.write_text("a\n", encoding="utf-8")

    worker = FileCompareWorker(left, right)
    thread = WorkerThread(worker)
    done = QSignalSpy(thread.finished)

    thread.start()

    assert done.wait(5000)
    assert worker.state is WorkerState.COMPLETED
    assert worker.result.stats == DiffStats(added=0, removed=1, modified=0)
    assert WorkerState.COMPLETED.is_final
