"""Pytest configuration.

Bindings, surfaces, actions and the scheduler touch PySide6 objects, so a
single `QApplication` is created for the session as early as possible (before
collection imports Qt modules) and shut down cleanly at the end. Tests run on
the offscreen platform unless the caller chose another one.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import pytest

_APP: Any | None = None


def pytest_configure(config) -> None:  # noqa: ARG001
    """Ensure a QApplication exists before collecting/running tests."""
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

    # Import lazily so non-Qt environments can still import this conftest.
    try:
        from PySide6.QtWidgets import QApplication
    except ImportError:
        return

    global _APP

    app = QApplication.instance()
    if app is None:
        # Keep a strong ref so it isn't GC'd mid-session.
        _APP = QApplication([])
    else:
        _APP = app


def pytest_sessionfinish(session, exitstatus) -> None:  # noqa: ARG001
    """Attempt a clean Qt shutdown to avoid lingering threads at interpreter exit."""

    try:
        from PySide6.QtWidgets import QApplication
    except ImportError:
        return

    app = QApplication.instance()
    if app is None:
        return

    app.quit()
    app.processEvents()


@pytest.fixture(autouse=True)
def _reset_metrics():
    from modelbind.metrics import metrics

    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def project_log(caplog):
    """caplog that also sees the project logger (which does not propagate)."""
    base = logging.getLogger("modelbind")
    base.addHandler(caplog.handler)
    caplog.set_level(logging.DEBUG, logger="modelbind")
    try:
        yield caplog
    finally:
        base.removeHandler(caplog.handler)


@pytest.fixture
def test_logger(caplog):
    """Plain propagating logger to inject into controllers, groups and dispatchers."""
    logger = logging.getLogger("tests.modelbind")
    logger.propagate = True
    caplog.set_level(logging.DEBUG, logger="tests.modelbind")
    return logger
