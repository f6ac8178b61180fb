"""
Tests for still-frame export.
"""
from conftest import BLUE, RED, make_layer
from spritr.core.compositor import Compositor, decode_image, qimage_to_rgba
from spritr.core.exporter import ExportResult, Exporter, encode_image, export_filename
from spritr.core.layers import LayerStore

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


class TestFilename:
    """Tests for export_filename."""

    def test_uses_name(self):
        assert export_filename("hero") == "hero.png"

    def test_blank_falls_back_to_sample(self):
        assert export_filename("") == "sample.png"

    def test_whitespace_name_is_kept(self):
        """Only an empty name falls back; whitespace is used as given."""
        assert export_filename(" ") == " .png"

    def test_format(self):
        assert export_filename("hero", "bmp") == "hero.bmp"


class TestExporter:
    """Tests for Exporter.export."""

    def _store(self):
        return LayerStore([
            make_layer("body", color=RED),
            make_layer("shirt", category="torsos", color=BLUE, rect=(0, 0, 4, 2)),
            make_layer("hat", category="hats", show=False, color=BLUE),
        ])

    def test_exports_png_of_visible_layers(self):
        result = Exporter(Compositor()).export(self._store(), "hero")
        assert result.filename == "hero.png"
        assert result.data.startswith(PNG_MAGIC)
        assert result.layers == ["body", "shirt"]
        assert result.size == (4, 4)
        arr = qimage_to_rgba(decode_image(result.data))
        assert tuple(arr[0, 0]) == BLUE
        assert tuple(arr[3, 0]) == RED

    def test_follows_store_order(self):
        store = self._store()
        store.move(1, 0)
        result = Exporter(Compositor()).export(store, "")
        assert result.filename == "sample.png"
        assert result.layers == ["shirt", "body"]
        arr = qimage_to_rgba(decode_image(result.data))
        assert tuple(arr[0, 0]) == RED

    def test_same_input_same_bytes(self):
        store = self._store()
        a = Exporter(Compositor()).export(store, "x")
        b = Exporter(Compositor()).export(store, "x")
        assert a.data == b.data

    def test_write(self, tmp_path):
        result = ExportResult(filename="hero.png", data=b"abc", size=(1, 1))
        path = result.write(tmp_path / "out")
        assert path == tmp_path / "out" / "hero.png"
        assert path.read_bytes() == b"abc"

    def test_encode_image_roundtrip_size(self):
        img = decode_image(encode_image(decode_image(make_layer("x", width=5, height=2).image_data)))
        assert (img.width(), img.height()) == (5, 2)
