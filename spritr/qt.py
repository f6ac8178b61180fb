# spritr/qt.py
from PySide6 import QtCore, QtGui

Signal = QtCore.Signal
Slot = QtCore.Slot

__all__ = ["QtCore", "QtGui", "Signal", "Slot"]
