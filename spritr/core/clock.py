from __future__ import annotations
from enum import Enum
from typing import Optional

from spritr.qt import QtCore
from spritr.core.logging import get_logger


class ClockState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class AnimationClock(QtCore.QObject):
    """
    Fixed-rate frame index driver.

    One single-shot QTimer is re-armed after every tick with the period read
    from the current fps. An fps change re-arms the pending tick at the new
    rate and never resets the frame index. An empty sequence parks the clock.
    """
    frameChanged = QtCore.Signal(int)
    stateChanged = QtCore.Signal(object)   # ClockState

    def __init__(self, fps: float = 3, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._log = get_logger(__name__)
        if fps <= 0:
            raise ValueError(f"fps must be > 0 (got {fps})")
        self._fps = float(fps)
        self._length = 0
        self._index = 0
        self._enabled = False  # start() requested and not stopped since
        self._state = ClockState.STOPPED

        self._timer = QtCore.QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setTimerType(QtCore.Qt.TimerType.PreciseTimer)
        self._timer.timeout.connect(self._on_timeout)

    # ──────────────────────────────────────────────────────────────────────────
    # Properties
    # ──────────────────────────────────────────────────────────────────────────
    @property
    def fps(self) -> float:
        return self._fps

    @property
    def frame_index(self) -> int:
        return self._index

    @property
    def sequence_length(self) -> int:
        return self._length

    @property
    def state(self) -> ClockState:
        return self._state

    def interval_ms(self) -> int:
        return max(1, int(round(1000.0 / self._fps)))

    def is_armed(self) -> bool:
        return self._timer.isActive()

    # ──────────────────────────────────────────────────────────────────────────
    # Control
    # ──────────────────────────────────────────────────────────────────────────
    def set_fps(self, fps: float) -> None:
        if fps <= 0:
            raise ValueError(f"fps must be > 0 (got {fps})")
        self._fps = float(fps)
        if self._timer.isActive():
            # re-arm the pending tick at the new rate; frame index is kept
            self._timer.start(self.interval_ms())

    def set_sequence_length(self, length: int) -> None:
        self._length = max(0, int(length))
        if self._length == 0:
            self._index = 0
        elif self._index >= self._length:
            self._index %= self._length
            self.frameChanged.emit(self._index)
        self._sync()

    def start(self) -> None:
        self._enabled = True
        self._sync()

    def stop(self) -> None:
        self._enabled = False
        self._sync()

    def reset(self) -> None:
        self._index = 0
        self.frameChanged.emit(self._index)

    def tick(self) -> int:
        """Advance one frame with wrap-around; a no-op on an empty sequence."""
        if self._length == 0:
            return self._index
        self._index = (self._index + 1) % max(self._length, 1)
        self.frameChanged.emit(self._index)
        return self._index

    # ──────────────────────────────────────────────────────────────────────────
    # Internals
    # ──────────────────────────────────────────────────────────────────────────
    def _sync(self) -> None:
        state = ClockState.RUNNING if (self._enabled and self._length > 0) else ClockState.STOPPED
        if state is ClockState.RUNNING and not self._timer.isActive():
            self._timer.start(self.interval_ms())
        elif state is ClockState.STOPPED:
            self._timer.stop()
        if state is not self._state:
            self._log.debug("AnimationClock %s -> %s (len=%d, fps=%.2f)",
                            self._state.value, state.value, self._length, self._fps)
            self._state = state
            self.stateChanged.emit(state)

    @QtCore.Slot()
    def _on_timeout(self) -> None:
        # A timeout queued before stop() must not advance anything.
        if self._state is not ClockState.RUNNING:
            return
        self.tick()
        self._timer.start(self.interval_ms())
