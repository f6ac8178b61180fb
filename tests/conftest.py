"""
Pytest fixtures for spritr tests.
"""

import os
import time
from typing import Callable, Optional, Tuple

import pytest

# Headless Qt for CI; must be set before Qt is imported.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from spritr.qt import QtCore, QtGui
from spritr.core.exporter import encode_image
from spritr.core.layers import Layer

RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)


@pytest.fixture(scope="session")
def qapp():
    """One QCoreApplication for the whole run (timers and queued signals need it)."""
    app = QtCore.QCoreApplication.instance() or QtCore.QCoreApplication([])
    yield app


def make_png(width: int, height: int, color: Tuple[int, int, int, int] = RED,
             rect: Optional[Tuple[int, int, int, int]] = None) -> bytes:
    """PNG bytes: transparent canvas with `rect` (or everything) filled with `color`."""
    img = QtGui.QImage(width, height, QtGui.QImage.Format.Format_ARGB32)
    img.fill(QtCore.Qt.GlobalColor.transparent)
    p = QtGui.QPainter(img)
    try:
        target = QtCore.QRect(*rect) if rect else img.rect()
        p.fillRect(target, QtGui.QColor(*color))
    finally:
        p.end()
    return encode_image(img)


def make_layer(name: str, category: str = "base", show: bool = True, **png) -> Layer:
    png.setdefault("width", 4)
    png.setdefault("height", 4)
    return Layer(name=name, image_data=make_png(**png), category=category, show=show)


def wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Pump the Qt event loop until predicate() holds or timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        QtCore.QCoreApplication.processEvents(QtCore.QEventLoop.ProcessEventsFlag.AllEvents, 20)
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def pump(seconds: float) -> None:
    """Keep processing events for a fixed time."""
    wait_until(lambda: False, timeout=seconds)
