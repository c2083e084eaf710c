"""
Board Summary - Turn raw match counts into per-intersection stone calls.

This is presentation policy layered on top of BoardResult: the counts
themselves are never modified.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List

from .result import BoardResult, CellAggregate


class CellState(Enum):
    """Displayed state of one intersection."""
    EMPTY = "."
    BLACK = "X"
    WHITE = "O"
    CONFLICT = "?"  # Both colours above the share filter


@dataclass(frozen=True)
class BoardSummary:
    """
    Per-intersection calls for a whole board.

    Attributes:
        grid: [row][col] of CellState, 0-based
        min_share: Share filter the summary was built with
    """
    grid: tuple
    min_share: float

    @property
    def size(self) -> int:
        return len(self.grid)

    def state_at(self, col: int, row: int) -> CellState:
        """State of a 1-based (col, row) intersection."""
        return self.grid[row - 1][col - 1]

    def count(self, state: CellState) -> int:
        return sum(1 for row in self.grid for cell in row if cell is state)


def share(cell: CellAggregate, color_count: int) -> float:
    """Fraction of a cell's matches that belong to one colour."""
    if cell.stone_count == 0:
        return 0.0
    return color_count / cell.stone_count


def cell_state(cell: CellAggregate, min_share: float = 0.0) -> CellState:
    """
    Decide what to display for one cell.

    A colour counts as present when it has at least one match and its share of
    the cell's matches is at least min_share. Both present gives CONFLICT.

    Args:
        cell: Aggregated counts
        min_share: Minimum share in [0, 1] for a colour to be shown
    """
    has_black = cell.black_count > 0 and share(cell, cell.black_count) >= min_share
    has_white = cell.white_count > 0 and share(cell, cell.white_count) >= min_share

    if has_black and has_white:
        return CellState.CONFLICT
    if has_black:
        return CellState.BLACK
    if has_white:
        return CellState.WHITE
    return CellState.EMPTY


def summarize(result: BoardResult, min_share: float = 0.0) -> BoardSummary:
    """
    Build the display summary for a board result.

    Args:
        result: Classification result
        min_share: Minimum match share for a colour to be shown

    Returns:
        BoardSummary with one CellState per intersection
    """
    if not 0.0 <= min_share <= 1.0:
        raise ValueError(f"min_share must be in [0, 1], got {min_share}")

    size = result.grid_size
    grid = tuple(
        tuple(cell_state(result[(col, row)], min_share) for col in range(1, size + 1))
        for row in range(1, size + 1)
    )
    return BoardSummary(grid=grid, min_share=min_share)


def render_board(summary: BoardSummary, labels: bool = True) -> str:
    """
    Render a summary as text, one line per board row.

    Args:
        summary: Board summary
        labels: Prefix rows/columns with 1-based indices
    """
    lines: List[str] = []
    if labels:
        header = "   " + " ".join(f"{col % 10}" for col in range(1, summary.size + 1))
        lines.append(header)

    for row_idx, row in enumerate(summary.grid, start=1):
        cells = " ".join(state.value for state in row)
        lines.append(f"{row_idx:>2} {cells}" if labels else cells)

    return "\n".join(lines)
