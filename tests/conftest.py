# tests/conftest.py
import sys
from pathlib import Path

import pytest

# Add project root to sys.path so "apps", "sudoku_workers", "types_sudoku" can be imported in tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sudoku_workers.sudoku_tools import CANONICAL_PUZZLE  # noqa: E402

CANONICAL_SOLUTION = [
    [7, 5, 9, 1, 2, 8, 4, 6, 3],
    [1, 2, 6, 4, 9, 3, 7, 5, 8],
    [3, 8, 4, 6, 7, 5, 9, 1, 2],
    [4, 3, 7, 8, 5, 9, 1, 2, 6],
    [6, 9, 5, 2, 4, 1, 3, 8, 7],
    [8, 1, 2, 7, 3, 6, 5, 4, 9],
    [2, 6, 3, 5, 1, 7, 8, 9, 4],
    [9, 4, 1, 3, 8, 2, 6, 7, 5],
    [5, 7, 8, 9, 6, 4, 2, 3, 1],
]


@pytest.fixture
def puzzle():
    return [row[:] for row in CANONICAL_PUZZLE]


@pytest.fixture
def solution():
    return [row[:] for row in CANONICAL_SOLUTION]


def assert_valid_solution(grid, givens):
    """Every unit holds 1..9 once and every given is kept."""
    digits = set(range(1, 10))
    for i in range(9):
        assert set(grid[i]) == digits, f"row {i}"
        assert {grid[r][i] for r in range(9)} == digits, f"col {i}"
    for b in range(9):
        r0, c0 = 3 * (b // 3), 3 * (b % 3)
        assert {grid[r0 + i][c0 + j] for i in range(3) for j in range(3)} == digits, f"box {b}"
    for i in range(9):
        for j in range(9):
            if givens[i][j]:
                assert grid[i][j] == givens[i][j]
