from __future__ import annotations

import pytest
from PyQt6.QtCore import QCoreApplication

from textcompare.services.samples import SAMPLE_MODIFIED, SAMPLE_ORIGINAL


@pytest.fixture(scope="session")
def qt_app():
    """A core application so timers and queued signals have an event loop."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def sample_texts() -> tuple[str, str]:
    return SAMPLE_ORIGINAL, SAMPLE_MODIFIED
