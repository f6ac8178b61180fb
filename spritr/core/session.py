from __future__ import annotations
import random
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from app_config import DEFAULTS
from spritr.qt import QtCore, QtGui
from spritr.core.clock import AnimationClock
from spritr.core.compositor import CompositeResult, Compositor
from spritr.core.config import SpriteConfig, load_categories
from spritr.core.exporter import ExportResult, Exporter
from spritr.core.grid import Frame, GridGeometry, build_sequence
from spritr.core.layers import Category, Layer, LayerStore, read_layer_files
from spritr.core.logging import get_logger
from spritr.core.randomizer import LayerSelector


class SpriteSession(QtCore.QObject):
    """
    Owns the layer stack and everything derived from it.
    The UI feeds plain data in (files, indices, config values) and listens to
    the signals below; it never touches the compositor or clock directly.
    """
    layersChanged = QtCore.Signal()
    compositeReady = QtCore.Signal(object)       # CompositeResult
    gridChanged = QtCore.Signal(object)          # GridGeometry | None
    surfaceSizeChanged = QtCore.Signal(int, int)
    frameChanged = QtCore.Signal(object)         # Frame

    def __init__(self, config: Optional[SpriteConfig] = None,
                 categories: Optional[Sequence[Category]] = None,
                 rng: Optional[random.Random] = None,
                 compositor: Optional[Compositor] = None,
                 parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._log = get_logger(__name__)
        self.config = config or SpriteConfig.from_defaults()
        self.categories: List[Category] = list(categories) if categories is not None else load_categories()
        self.category: Optional[Category] = self.categories[0] if self.categories else None

        self.store = LayerStore()
        self.selector = LayerSelector(self.categories, rng)
        self.compositor = compositor or Compositor(
            max_workers=DEFAULTS["compositor"]["decode_workers"],
            default_size=(self.config.cell_size, self.config.cell_size),
        )
        self.compositor.setParent(self)
        self.exporter = Exporter(self.compositor, DEFAULTS["export"]["format"])
        self.clock = AnimationClock(self.config.fps, parent=self)

        # Derived once per sprite set, from the first composite with an image.
        self.grid: Optional[GridGeometry] = None
        self.sequence: List[Frame] = []
        self.last_composite: Optional[CompositeResult] = None

        self.compositor.compositeFinished.connect(self._on_composite)
        self.clock.frameChanged.connect(self._on_clock_frame)

    # ──────────────────────────────────────────────────────────────────────────
    # Layer actions
    # ──────────────────────────────────────────────────────────────────────────
    def select_category(self, name: str) -> Category:
        for cat in self.categories:
            if cat.name == name:
                self.category = cat
                return cat
        raise KeyError(f"unknown category: {name}")

    def add_files(self, files: Iterable[Tuple[str, bytes]], category: Optional[str] = None) -> List[Layer]:
        cat = category or (self.category.name if self.category else "")
        added = self.store.add_files(files, cat)
        self._log.info("Added %d layer(s) to %r", len(added), cat)
        if added:
            self._changed()
        return added

    def add_paths(self, paths: Iterable[str | Path], category: Optional[str] = None) -> List[Layer]:
        return self.add_files(read_layer_files(paths), category)

    def move_layer(self, from_index: int, to_index: int) -> bool:
        moved = self.store.move(from_index, to_index)
        if moved:
            self._changed()
        return moved

    def set_visibility(self, name: str, show: bool) -> bool:
        changed = self.store.set_visibility(name, show)
        if changed:
            self._changed()
        return changed

    def randomize(self) -> dict:
        picks = self.selector.randomize(self.store)
        self._changed()
        return picks

    def active_layers(self) -> List[Layer]:
        return self.store.active_layers()

    # ──────────────────────────────────────────────────────────────────────────
    # Config
    # ──────────────────────────────────────────────────────────────────────────
    def set_fps(self, fps: float) -> None:
        self.config = self.config.replace(fps=fps)
        self.clock.set_fps(self.config.fps)

    def set_scale(self, scale: int) -> None:
        self.config = self.config.replace(scale=scale)

    def set_cell_size(self, cell_size: int) -> None:
        # The grid stays as derived; call reset_grid() to re-derive it.
        self.config = self.config.replace(cell_size=cell_size)
        self.compositor.set_default_size((cell_size, cell_size))

    def set_sprite_name(self, name: str) -> None:
        self.config = self.config.replace(sprite_name=name)

    # ──────────────────────────────────────────────────────────────────────────
    # Preview
    # ──────────────────────────────────────────────────────────────────────────
    def refresh(self) -> int:
        """Request a fresh preview composite of the visible layers."""
        return self.compositor.request(self.store.active_layers())

    def start(self) -> None:
        self.clock.start()

    def stop(self) -> None:
        self.clock.stop()

    def close(self) -> None:
        self.clock.stop()
        self.compositor.close()

    def reset_grid(self) -> None:
        self.grid = None
        self.sequence = []
        self.compositor.reset_surface()
        self.clock.set_sequence_length(0)
        self.gridChanged.emit(None)

    @property
    def surface_size(self) -> Optional[Tuple[int, int]]:
        return self.compositor.surface_size

    def current_frame(self) -> Optional[Frame]:
        if not self.sequence:
            return None
        return self.sequence[self.clock.frame_index % len(self.sequence)]

    def frame_position(self) -> Tuple[int, int]:
        """Background-position pixels for the current frame."""
        frame = self.current_frame() or Frame(0, 0)
        return frame.x * self.config.cell_size, frame.y * self.config.cell_size

    def current_cell(self) -> Optional[QtGui.QImage]:
        """The current animation cell cut out of the latest composite."""
        if self.last_composite is None:
            return None
        x, y = self.frame_position()
        size = self.config.cell_size
        return self.last_composite.image.copy(-x, -y, size, size)

    # ──────────────────────────────────────────────────────────────────────────
    # Export
    # ──────────────────────────────────────────────────────────────────────────
    def export(self) -> ExportResult:
        self._log.info("Exporting %r", self.config.sprite_name)
        return self.exporter.export(self.store, self.config.sprite_name)

    def save(self, directory: Optional[str | Path] = None) -> Path:
        return self.export().write(directory or DEFAULTS["export"]["directory"])

    # ──────────────────────────────────────────────────────────────────────────
    # Internals
    # ──────────────────────────────────────────────────────────────────────────
    def _changed(self) -> None:
        self.layersChanged.emit()
        self.refresh()

    @QtCore.Slot(object)
    def _on_composite(self, result: CompositeResult) -> None:
        self.last_composite = result
        if self.grid is None and result.reference_size is not None:
            w, h = result.reference_size
            self.grid = GridGeometry(self.config.cell_size, w, h)
            self.sequence = build_sequence(self.grid.columns, self.grid.rows)
            self._log.info("Grid derived from %dx%d sheet: %s cols x %s rows, %d frames",
                           w, h, self.grid.columns, self.grid.rows, len(self.sequence))
            self.clock.set_sequence_length(len(self.sequence))
            self.gridChanged.emit(self.grid)
            self.surfaceSizeChanged.emit(*result.size)
        self.compositeReady.emit(result)

    @QtCore.Slot(int)
    def _on_clock_frame(self, _index: int) -> None:
        frame = self.current_frame()
        if frame is not None:
            self.frameChanged.emit(frame)
