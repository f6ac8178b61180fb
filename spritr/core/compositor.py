from __future__ import annotations
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple
import numpy as np

from spritr.qt import QtCore, QtGui
from spritr.core.errors import DecodeFailure, SpritrError
from spritr.core.layers import Layer
from spritr.core.logging import get_logger

Decoder = Callable[[bytes], QtGui.QImage]
Size = Tuple[int, int]

SURFACE_FORMAT = QtGui.QImage.Format.Format_ARGB32_Premultiplied


def decode_image(data: bytes) -> QtGui.QImage:
    """Decode encoded image bytes (png/gif/bmp/...) into a premultiplied ARGB QImage."""
    image = QtGui.QImage.fromData(QtCore.QByteArray(bytes(data)))
    if image.isNull():
        raise DecodeFailure(f"cannot decode {len(data)} bytes of image data")
    return image.convertToFormat(SURFACE_FORMAT)


def paint_layers(images: Sequence[QtGui.QImage], size: Size) -> QtGui.QImage:
    """Alpha-over every image at (0, 0) onto a cleared surface, index 0 first."""
    w, h = size
    surface = QtGui.QImage(max(1, int(w)), max(1, int(h)), SURFACE_FORMAT)
    surface.fill(QtCore.Qt.GlobalColor.transparent)
    p = QtGui.QPainter(surface)
    try:
        p.setCompositionMode(QtGui.QPainter.CompositionMode.CompositionMode_SourceOver)
        for image in images:
            p.drawImage(QtCore.QPoint(0, 0), image)
    finally:
        p.end()
    return surface


def qimage_to_rgba(image: QtGui.QImage) -> np.ndarray:
    """(h, w, 4) uint8 straight-alpha RGBA copy of a QImage."""
    img = image.convertToFormat(QtGui.QImage.Format.Format_RGBA8888)
    w, h = img.width(), img.height()
    stride = img.bytesPerLine()
    flat = np.frombuffer(img.constBits(), dtype=np.uint8, count=img.sizeInBytes())
    return flat.reshape(h, stride)[:, : 4 * w].reshape(h, w, 4).copy()


@dataclass
class CompositeResult:
    request_id: int
    image: QtGui.QImage
    reference_size: Optional[Size] = None   # natural size of the first decoded layer
    drawn: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def size(self) -> Size:
        return self.image.width(), self.image.height()


class Compositor(QtCore.QObject):
    """
    Deterministic layer compositing.

    Decodes are fanned out to a thread pool and joined before anything is
    painted; the paint pass then runs strictly in caller order, so the output
    depends only on the layer list and never on decode timing.

    request() runs the whole job on a long-lived job pool and publishes the
    result through compositeFinished on the owner thread. Superseded requests
    are dropped without side effects; the surface size is only committed for
    the request that is delivered.
    """
    compositeFinished = QtCore.Signal(object)     # CompositeResult
    _workerDone = QtCore.Signal(int, object)      # (request_id, CompositeResult)

    def __init__(self, decoder: Decoder = decode_image, max_workers: int = 4,
                 default_size: Size = (20, 20), parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._log = get_logger(__name__)
        self._decoder = decoder
        self._max_workers = max(1, int(max_workers))
        self._default_size: Size = default_size
        self._surface_size: Optional[Size] = None
        self._size_lock = threading.Lock()
        self._latest_request = 0
        self._jobs = ThreadPoolExecutor(max_workers=2, thread_name_prefix="SpritrComposite")
        self._closed = False
        self._workerDone.connect(self._on_worker_done)

    # ──────────────────────────────────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────────────────────────────────
    @property
    def surface_size(self) -> Optional[Size]:
        """Surface size locked in by the first composite that had an image, else None."""
        return self._surface_size

    @property
    def latest_request(self) -> int:
        return self._latest_request

    def set_default_size(self, size: Size) -> None:
        self._default_size = (int(size[0]), int(size[1]))

    def reset_surface(self) -> None:
        with self._size_lock:
            self._surface_size = None

    def composite(self, layers: Sequence[Layer], request_id: int = 0, *, commit: bool = True) -> CompositeResult:
        """
        Blocking composite of the given layers, in the given order.
        commit=False leaves the locked surface size alone (worker jobs).
        """
        decoded = self._decode_all(layers)
        images: List[QtGui.QImage] = []
        drawn: List[str] = []
        skipped: List[str] = []
        for layer, image in zip(layers, decoded):
            if image is None:
                skipped.append(layer.name)
                continue
            images.append(image)
            drawn.append(layer.name)

        reference = (images[0].width(), images[0].height()) if images else None
        with self._size_lock:
            if commit and self._surface_size is None and reference is not None:
                self._surface_size = reference
            size = self._surface_size or reference or self._default_size

        surface = paint_layers(images, size)
        return CompositeResult(request_id, surface, reference, drawn, skipped)

    def request(self, layers: Sequence[Layer]) -> int:
        """Start an async composite; returns its request id."""
        self._latest_request += 1
        request_id = self._latest_request
        if self._closed:
            raise SpritrError("compositor is closed")
        self._jobs.submit(self._run, request_id, list(layers))
        return request_id

    def cancel_pending(self) -> None:
        """Invalidate every in-flight request."""
        self._latest_request += 1

    def close(self) -> None:
        """Drop pending work and wait for the job pool to drain."""
        if self._closed:
            return
        self._closed = True
        self.cancel_pending()
        self._jobs.shutdown(wait=True, cancel_futures=True)

    # ──────────────────────────────────────────────────────────────────────────
    # Internals
    # ──────────────────────────────────────────────────────────────────────────
    def _decode_one(self, layer: Layer) -> Optional[QtGui.QImage]:
        try:
            return self._decoder(layer.image_data)
        except DecodeFailure as ex:
            self._log.warning("Skipping layer %r: %s", layer.name, ex)
            return None

    def _decode_all(self, layers: Sequence[Layer]) -> List[Optional[QtGui.QImage]]:
        if not layers:
            return []
        workers = min(self._max_workers, len(layers))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="SpritrDecode") as pool:
            futures = [pool.submit(self._decode_one, layer) for layer in layers]
            # fan-in: results keyed by position, whatever order they finished in
            return [f.result() for f in futures]

    def _run(self, request_id: int, layers: List[Layer]) -> None:
        if request_id != self._latest_request:
            return
        try:
            result = self.composite(layers, request_id, commit=False)
        except Exception:
            self._log.exception("Composite %d failed", request_id)
            return
        self._workerDone.emit(request_id, result)

    @QtCore.Slot(int, object)
    def _on_worker_done(self, request_id: int, result: CompositeResult) -> None:
        if request_id != self._latest_request:
            self._log.debug("Discarding stale composite %d (latest is %d)",
                            request_id, self._latest_request)
            return
        with self._size_lock:
            if self._surface_size is None and result.reference_size is not None:
                self._surface_size = result.size
        self.compositeFinished.emit(result)
