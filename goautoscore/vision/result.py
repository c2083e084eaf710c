"""
Scan Result Dataclasses

Shared data structures for calibration and classification results.
"""

from dataclasses import dataclass
from enum import IntEnum
from collections.abc import Mapping
from types import MappingProxyType
from typing import Dict, Iterator, Tuple


# Standard Go board
GRID_SIZE = 19

CellKey = Tuple[int, int]  # (col, row), 1-based


class StoneColor(IntEnum):
    """Stone colour a pixel can match."""
    BLACK = 0
    WHITE = 1


@dataclass(frozen=True)
class ColorThreshold:
    """
    RGB boundary for one stone colour.

    Values are normally in [0, 255]. Values outside that range are accepted;
    they just make every comparison on that channel true (or false).
    """
    r: float
    g: float
    b: float

    def __post_init__(self):
        object.__setattr__(self, "r", float(self.r))
        object.__setattr__(self, "g", float(self.g))
        object.__setattr__(self, "b", float(self.b))

    @classmethod
    def from_sequence(cls, values) -> 'ColorThreshold':
        """Create from an (r, g, b) sequence, e.g. a settings list."""
        r, g, b = values
        return cls(r, g, b)

    def as_tuple(self) -> Tuple[float, float, float]:
        return self.r, self.g, self.b


@dataclass(frozen=True)
class Match:
    """Single pixel classified as one stone colour."""
    x: int
    y: int
    color: StoneColor


@dataclass(frozen=True)
class CellAggregate:
    """Match counts for one board intersection."""
    stone_count: int = 0
    black_count: int = 0
    white_count: int = 0


class BoardResult(Mapping):
    """
    Per-intersection match counts for one classification run.

    Always holds every key (col, row) in [1, grid_size] x [1, grid_size].
    Read-only once constructed.
    """

    def __init__(self, cells: Mapping[CellKey, CellAggregate], grid_size: int = GRID_SIZE):
        expected = grid_size * grid_size
        if len(cells) != expected:
            raise ValueError(f"Board result needs {expected} cells, got {len(cells)}")
        self._grid_size = grid_size
        self._cells = MappingProxyType(dict(cells))

    @classmethod
    def from_counts(cls, black, white, grid_size: int = GRID_SIZE) -> 'BoardResult':
        """
        Build a result from per-cell count grids.

        Args:
            black: Array-like [row][col] of black counts, 0-based, grid_size square
            white: Array-like [row][col] of white counts, same shape

        Returns:
            BoardResult keyed by 1-based (col, row)
        """
        cells: Dict[CellKey, CellAggregate] = {}
        for row in range(1, grid_size + 1):
            for col in range(1, grid_size + 1):
                b = int(black[row - 1][col - 1])
                w = int(white[row - 1][col - 1])
                cells[(col, row)] = CellAggregate(stone_count=b + w, black_count=b, white_count=w)
        return cls(cells, grid_size)

    @property
    def grid_size(self) -> int:
        return self._grid_size

    def __getitem__(self, key: CellKey) -> CellAggregate:
        return self._cells[key]

    def __iter__(self) -> Iterator[CellKey]:
        return iter(self._cells)

    def __len__(self) -> int:
        return len(self._cells)

    def __eq__(self, other):
        if not isinstance(other, BoardResult):
            return NotImplemented
        return self._grid_size == other._grid_size and dict(self._cells) == dict(other._cells)

    def __hash__(self):
        return hash(tuple(sorted(self._cells.items())))

    def __repr__(self):
        return (f"BoardResult({self._grid_size}x{self._grid_size}, "
                f"matches={self.total_matches()}, occupied={len(self.occupied_cells())})")

    def total_matches(self) -> int:
        """Sum of stone_count over all cells."""
        return sum(cell.stone_count for cell in self._cells.values())

    def occupied_cells(self) -> Dict[CellKey, CellAggregate]:
        """Cells with at least one match."""
        return {key: cell for key, cell in self._cells.items() if cell.stone_count > 0}

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        """
        JSON-friendly form keyed "row-col".

        Returns:
            {"row-col": {"stone": n, "black": n, "white": n}, ...}
        """
        return {
            f"{row}-{col}": {
                "stone": cell.stone_count,
                "black": cell.black_count,
                "white": cell.white_count,
            }
            for (col, row), cell in self._cells.items()
        }
