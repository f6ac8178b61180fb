"""
Sprite-sheet geometry and the playback frame order.

A sheet is a rectangular grid of square cells. Frames are expressed as cell
offsets (both <= 0) so the UI can multiply them by the cell size and use the
result directly as a background position.
"""
from __future__ import annotations
from dataclasses import dataclass
from functools import lru_cache
from typing import List, NamedTuple, Optional, Tuple, Union

Number = Union[int, float]


class Frame(NamedTuple):
    x: int
    y: int


def _exact(value: float) -> Number:
    # Keep whole grids as ints; fractional ones propagate untouched.
    return int(value) if float(value).is_integer() else value


def derive_grid(sheet_width: int, sheet_height: int, cell_size: int) -> Tuple[Number, Number]:
    """(columns, rows) for a sheet of the given pixel size."""
    if cell_size <= 0:
        raise ValueError(f"cell_size must be > 0 (got {cell_size})")
    return _exact(sheet_width / cell_size), _exact(sheet_height / cell_size)


@dataclass(frozen=True)
class GridGeometry:
    cell_size: int
    sheet_width: int
    sheet_height: int

    @property
    def columns(self) -> Number:
        return derive_grid(self.sheet_width, self.sheet_height, self.cell_size)[0]

    @property
    def rows(self) -> Number:
        return derive_grid(self.sheet_width, self.sheet_height, self.cell_size)[1]

    def as_tuple(self) -> Tuple[Number, Number]:
        return self.columns, self.rows


@lru_cache(maxsize=64)
def _sequence(columns: int, rows: int) -> Tuple[Frame, ...]:
    out: List[Frame] = []
    for row in range(rows):
        forward = [Frame(-column, -row) for column in range(columns)]
        out.extend(forward)
        # there-and-back: walk home without repeating the far cell
        out.extend(reversed(forward[:-1]))
    return tuple(out)


def build_sequence(columns: Optional[Number], rows: Optional[Number]) -> List[Frame]:
    """
    Ping-pong traversal of the sheet, one row at a time.

    Each row r yields (0,-r) .. (-(c-1),-r) and then back to (0,-r), i.e.
    2*c - 1 frames. Rows are not chained: row r+1 starts again at column 0.
    Fractional grids are truncated; unset or non-positive grids give [].
    """
    if columns is None or rows is None:
        return []
    cols, nrows = int(columns), int(rows)
    if cols <= 0 or nrows <= 0:
        return []
    return list(_sequence(cols, nrows))


def sequence_length(columns: Optional[Number], rows: Optional[Number]) -> int:
    if columns is None or rows is None or int(columns) <= 0 or int(rows) <= 0:
        return 0
    return int(rows) * (2 * int(columns) - 1)
