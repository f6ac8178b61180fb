# spritr/core/layers.py
from __future__ import annotations
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from app_config import IMAGE_EXTS
from spritr.core.logging import get_logger

_log = get_logger(__name__)


@dataclass(frozen=True)
class Category:
    name: str
    nullable: bool = False  # may come out of randomize() with nothing shown


@dataclass
class Layer:
    name: str
    image_data: bytes = field(repr=False)
    category: str
    show: bool = True


def unique_name(name: str, taken: Iterable[str]) -> str:
    """
    Disambiguate a display name against the names already in use:
    hair.png -> hair (2).png -> hair (3).png ...
    """
    taken = set(taken)
    if name not in taken:
        return name
    p = Path(name)
    stem, suffix = (p.stem, p.suffix) if p.suffix else (name, "")
    n = 2
    while f"{stem} ({n}){suffix}" in taken:
        n += 1
    return f"{stem} ({n}){suffix}"


def read_layer_files(paths: Iterable[str | Path]) -> List[Tuple[str, bytes]]:
    """Read image files from disk as (name, bytes) pairs, skipping unknown formats."""
    out: List[Tuple[str, bytes]] = []
    for raw in paths:
        p = Path(raw)
        if p.suffix.lower() not in IMAGE_EXTS:
            _log.debug("Skipping %s: not a supported image type", p)
            continue
        out.append((p.name, p.read_bytes()))
    return out


class LayerStore:
    """
    Ordered layer collection. Order is paint order: index 0 is painted first,
    later entries land on top. Layer names are unique and act as identity.
    """

    def __init__(self, layers: Optional[Iterable[Layer]] = None) -> None:
        self._layers: List[Layer] = []
        for layer in layers or ():
            self.append(layer)

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(list(self._layers))

    def __getitem__(self, index: int) -> Layer:
        return self._layers[index]

    def names(self) -> List[str]:
        return [l.name for l in self._layers]

    def get(self, name: str) -> Optional[Layer]:
        for layer in self._layers:
            if layer.name == name:
                return layer
        return None

    def index_of(self, name: str) -> int:
        for i, layer in enumerate(self._layers):
            if layer.name == name:
                return i
        return -1

    def append(self, layer: Layer) -> Layer:
        """Add on top of the stack. A clashing name gets a numeric suffix."""
        name = unique_name(layer.name, self.names())
        if name != layer.name:
            _log.info("Layer name %r already taken; stored as %r", layer.name, name)
            layer = replace(layer, name=name)
        self._layers.append(layer)
        return layer

    def add_files(self, files: Iterable[Tuple[str, bytes]], category: str) -> List[Layer]:
        """File intake: one visible layer per (name, bytes) pair."""
        return [self.append(Layer(name=name, image_data=bytes(data), category=category))
                for name, data in files]

    def move(self, from_index: int, to_index: int) -> bool:
        """List-splice reorder. Out-of-range indices leave the store untouched."""
        n = len(self._layers)
        if not (0 <= to_index < n) or not (0 <= from_index < n):
            _log.debug("move(%s, %s) ignored: store has %d layers", from_index, to_index, n)
            return False
        layer = self._layers.pop(from_index)
        self._layers.insert(to_index, layer)
        return True

    def set_visibility(self, name: str, show: bool) -> bool:
        layer = self.get(name)
        if layer is None:
            _log.debug("set_visibility(%r) ignored: no such layer", name)
            return False
        layer.show = bool(show)
        return True

    def by_category(self, category: str) -> List[Layer]:
        return [l for l in self._layers if l.category == category]

    def active_layers(self) -> List[Layer]:
        return [l for l in self._layers if l.show]
