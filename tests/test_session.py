"""
Tests for SpriteSession wiring (intake -> composite -> grid -> clock -> export).
"""
import random

import pytest

from conftest import BLUE, GREEN, RED, make_png, pump, wait_until
from spritr.core.clock import ClockState
from spritr.core.compositor import qimage_to_rgba
from spritr.core.config import SpriteConfig
from spritr.core.errors import SpritrError
from spritr.core.grid import Frame, GridGeometry
from spritr.core.layers import Category
from spritr.core.session import SpriteSession


@pytest.fixture
def session(qapp):
    s = SpriteSession(config=SpriteConfig(fps=50, cell_size=4), rng=random.Random(42))
    yield s
    s.close()


def _settle(session):
    """Wait for the latest requested composite to land."""
    target = session.compositor.latest_request
    assert wait_until(lambda: session.last_composite is not None
                      and session.last_composite.request_id == target)


class TestIntake:
    """Tests for adding and arranging layers."""

    def test_uses_selected_category(self, session):
        session.select_category("hairs")
        added = session.add_files([("hair.png", make_png(8, 4))])
        assert added[0].category == "hairs"
        assert added[0].show

    def test_explicit_category_wins(self, session):
        added = session.add_files([("hat.png", make_png(8, 4))], category="hats")
        assert added[0].category == "hats"

    def test_unknown_category_selection(self, session):
        with pytest.raises(KeyError):
            session.select_category("capes")

    def test_add_paths(self, session, tmp_path):
        p = tmp_path / "body.png"
        p.write_bytes(make_png(8, 4))
        (tmp_path / "readme.md").write_text("x")
        added = session.add_paths([p, tmp_path / "readme.md"], category="base")
        assert [l.name for l in added] == ["body.png"]

    def test_layers_changed_emitted(self, session):
        seen = []
        session.layersChanged.connect(lambda: seen.append(True))
        session.add_files([("a.png", make_png(4, 4))])
        session.add_files([("b.png", make_png(4, 4))])
        assert session.move_layer(1, 0)
        assert not session.move_layer(0, 5)
        assert session.set_visibility("a.png", False)
        assert len(seen) == 4
        assert [l.name for l in session.active_layers()] == ["b.png"]


class TestGrid:
    """Tests for the one-time grid derivation."""

    def test_grid_derived_from_first_composite(self, session):
        grids = []
        session.gridChanged.connect(grids.append)
        session.add_files([("sheet.png", make_png(12, 8))], category="base")
        _settle(session)
        assert session.grid == GridGeometry(cell_size=4, sheet_width=12, sheet_height=8)
        assert len(session.sequence) == 2 * (2 * 3 - 1)
        assert session.clock.sequence_length == len(session.sequence)
        assert session.surface_size == (12, 8)
        assert grids == [session.grid]

    def test_grid_not_recomputed(self, session):
        session.add_files([("sheet.png", make_png(12, 8))], category="base")
        _settle(session)
        grid = session.grid
        session.add_files([("wide.png", make_png(40, 40))], category="torsos")
        _settle(session)
        session.set_visibility("sheet.png", False)
        _settle(session)
        assert session.grid is grid

    def test_reset_grid(self, session):
        session.add_files([("sheet.png", make_png(12, 8))], category="base")
        _settle(session)
        session.reset_grid()
        assert session.grid is None
        assert session.sequence == []
        assert session.clock.state is ClockState.STOPPED
        session.set_cell_size(2)
        session.refresh()
        _settle(session)
        assert session.grid.as_tuple() == (6, 4)


class TestPlayback:
    """Tests for frame exposure."""

    def test_no_frame_before_grid(self, session):
        assert session.current_frame() is None
        assert session.frame_position() == (0, 0)
        assert session.current_cell() is None

    def test_frame_position_scales_by_cell(self, session):
        session.add_files([("sheet.png", make_png(12, 8))], category="base")
        _settle(session)
        assert session.current_frame() == Frame(0, 0)
        session.clock.tick()
        assert session.current_frame() == Frame(-1, 0)
        assert session.frame_position() == (-4, 0)

    def test_current_cell_crops_composite(self, session):
        # left cell red, middle cell blue
        sheet = make_png(12, 4, BLUE, rect=(4, 0, 4, 4))
        session.add_files([("base.png", make_png(12, 4, RED))], category="base")
        session.add_files([("sheet.png", sheet)], category="torsos")
        _settle(session)
        cell = session.current_cell()
        assert (cell.width(), cell.height()) == (4, 4)
        assert tuple(qimage_to_rgba(cell)[0, 0]) == RED
        session.clock.tick()
        assert tuple(qimage_to_rgba(session.current_cell())[0, 0]) == BLUE

    def test_clock_runs_and_emits_frames(self, session):
        frames = []
        session.frameChanged.connect(frames.append)
        session.add_files([("sheet.png", make_png(12, 8))], category="base")
        _settle(session)
        session.start()
        assert wait_until(lambda: len(frames) >= 2, timeout=3.0)
        assert all(isinstance(f, Frame) for f in frames)

    def test_fps_change_does_not_restart(self, session):
        session.add_files([("sheet.png", make_png(12, 8))], category="base")
        _settle(session)
        session.clock.tick()
        session.clock.tick()
        session.set_fps(12)
        assert session.clock.frame_index == 2
        assert session.clock.fps == 12

    def test_close_stops_everything(self, session):
        session.add_files([("sheet.png", make_png(12, 8))], category="base")
        _settle(session)
        session.start()
        session.close()
        index = session.clock.frame_index
        pump(0.1)
        assert session.clock.frame_index == index

    def test_close_drops_pending_preview(self, session):
        composites = []
        session.compositeReady.connect(composites.append)
        session.add_files([("sheet.png", make_png(12, 8))], category="base")
        session.close()
        pump(0.2)
        assert composites == []
        assert session.grid is None
        with pytest.raises(SpritrError):
            session.refresh()


class TestRandomizeAndExport:
    """End-to-end randomize and export."""

    def test_randomize_thousand_times(self, qapp):
        cats = [Category("base"), Category("torsos"), Category("hairs", nullable=True)]
        s = SpriteSession(config=SpriteConfig(cell_size=4), categories=cats, rng=random.Random(7))
        s.add_files([("body.png", make_png(4, 4, RED))], category="base")
        s.add_files([("shirt.png", make_png(4, 4, BLUE))], category="torsos")
        s.add_files([("hair.png", make_png(4, 4, GREEN))], category="hairs")
        for _ in range(1000):
            s.selector.randomize(s.store)
            assert sum(l.show for l in s.store.by_category("base")) == 1
            assert sum(l.show for l in s.store.by_category("hairs")) <= 1
        s.close()

    def test_export_uses_sprite_name(self, session, tmp_path):
        session.add_files([("body.png", make_png(8, 4))], category="base")
        session.set_sprite_name("hero")
        result = session.export()
        assert result.filename == "hero.png"
        assert result.layers == ["body.png"]
        path = session.save(tmp_path)
        assert path.name == "hero.png"
        assert path.read_bytes() == result.data

    def test_export_fallback_name(self, session):
        session.add_files([("body.png", make_png(8, 4))], category="base")
        session.set_sprite_name("")
        assert session.export().filename == "sample.png"

    def test_randomize_triggers_refresh(self, session):
        session.add_files([("a.png", make_png(4, 4)), ("b.png", make_png(4, 4))], category="base")
        before = session.compositor.latest_request
        picks = session.randomize()
        assert session.compositor.latest_request == before + 1
        assert picks["base"] in ("a.png", "b.png")
