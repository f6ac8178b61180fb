from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Tuple

from app_config import EXPORT_FALLBACK_NAME, EXPORT_FORMAT
from spritr.qt import QtCore, QtGui
from spritr.core.compositor import Compositor
from spritr.core.errors import SpritrError
from spritr.core.layers import Layer
from spritr.core.logging import get_logger

_log = get_logger(__name__)


def export_filename(suggested_name: str, fmt: str = EXPORT_FORMAT) -> str:
    return f"{suggested_name or EXPORT_FALLBACK_NAME}.{fmt}"


def encode_image(image: QtGui.QImage, fmt: str = EXPORT_FORMAT) -> bytes:
    """Serialize a QImage to encoded bytes (png by default)."""
    buf = QtCore.QBuffer()
    buf.open(QtCore.QIODevice.OpenModeFlag.WriteOnly)
    try:
        if not image.save(buf, fmt.upper()):
            raise SpritrError(f"could not encode image as {fmt}")
        return bytes(buf.data().data())
    finally:
        buf.close()


@dataclass
class ExportResult:
    filename: str
    data: bytes = field(repr=False)
    size: Tuple[int, int] = (0, 0)
    layers: List[str] = field(default_factory=list)

    def write(self, directory: str | Path) -> Path:
        out_dir = Path(directory)
        out_dir.mkdir(parents=True, exist_ok=True)
        path = out_dir / self.filename
        path.write_bytes(self.data)
        _log.info("Exported %s (%dx%d, %d layers)", path, self.size[0], self.size[1], len(self.layers))
        return path


class Exporter:
    """Still-frame export of the visible layers, in store order."""

    def __init__(self, compositor: Compositor, fmt: str = EXPORT_FORMAT) -> None:
        self.compositor = compositor
        self.fmt = fmt

    def export(self, layers: Iterable[Layer], suggested_name: str = "") -> ExportResult:
        active = [l for l in layers if l.show]
        result = self.compositor.composite(active)
        return ExportResult(
            filename=export_filename(suggested_name or "", self.fmt),
            data=encode_image(result.image, self.fmt),
            size=result.size,
            layers=list(result.drawn),
        )
