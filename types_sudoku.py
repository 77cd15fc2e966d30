# types_sudoku.py
from __future__ import annotations

from typing import Any, TypedDict

Grid = list[list[int]]
"""A 9x9 Sudoku grid as rows of integers (0 = empty)."""

Cell = tuple[int, int]
"""A (row, col) coordinate, 0-based on the solver side."""

Candidates = dict[str, list[int]]
"""Map from cell key (e.g., 'r1c1') to a list of candidate digits (1..9)."""


class Placement(TypedDict):
    """One resolved cell, in the order the controller wrote it."""

    cell: str  # 1-based key, e.g. 'r4c7'
    digit: int
    round: int  # epoch the placement was made in


class Issue(TypedDict, total=False):
    """A problem found by the sanity check on an input grid."""

    type: str  # 'shape', 'value' or 'duplicate'
    unit: str  # e.g. 'r1', 'c3', 'b5'
    digits: list[int]
    cells: list[str]
    detail: str


class SolveReport(TypedDict, total=False):
    """Terminal result of a solve, as returned by the tool/API layer."""

    status: str  # 'solved', 'stagnated', 'invalid_puzzle' or 'protocol_error'
    grid: Grid
    placements: list[Placement]
    rounds: int
    passes: int
    empty_cells: int
    error: str
    issues: list[Issue]
    config: dict[str, Any]
