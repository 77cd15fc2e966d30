"""Tool-friendly interface over the solver: sanity check, candidates, solve, and board text in/out. Every function takes and returns plain lists/dicts so the CLI and the HTTP API can use them directly."""

# sudoku_tools.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional

from types_sudoku import Grid, SolveReport

from .config import SolverConfig
from .controller import solve
from .errors import InvalidPuzzle, ProtocolViolation
from .solver_core import BOX, SIZE, compute_candidates, find_issues

# 36 givens; solvable by naked singles alone.
CANONICAL_PUZZLE: Grid = [
    [0, 5, 9, 0, 2, 0, 4, 6, 0],
    [1, 0, 0, 4, 0, 3, 0, 0, 8],
    [3, 0, 0, 0, 7, 0, 0, 0, 2],
    [0, 3, 0, 8, 0, 9, 0, 2, 0],
    [6, 0, 5, 0, 0, 0, 3, 0, 7],
    [0, 1, 0, 7, 0, 6, 0, 4, 0],
    [2, 0, 0, 0, 1, 0, 0, 0, 4],
    [9, 0, 0, 3, 0, 2, 0, 0, 5],
    [0, 7, 8, 0, 6, 0, 2, 3, 0],
]


def sanity_check(current: Grid) -> Dict:
    issues = find_issues(current)
    return {"ok": len(issues) == 0, "issues": issues}


def compute_candidates_tool(current: Grid) -> Dict:
    """Candidate digits for each empty cell of a valid grid, e.g. {'candidates': {'r1c1': [7, 8], ...}}."""
    issues = find_issues(current)
    if issues:
        return {"candidates": {}, "issues": issues}
    return {"candidates": compute_candidates(current)}


def solve_tool(current: Grid, config: Optional[SolverConfig] = None, **overrides) -> SolveReport:
    """
    Run the worker solver and always return a report dict.

    status is one of 'solved', 'stagnated', 'invalid_puzzle', 'protocol_error'.
    For the two error statuses `grid` is the input grid unchanged.
    """
    config = (config or SolverConfig()).replace(**overrides)
    try:
        report = solve(current, config).as_report()
    except InvalidPuzzle as exc:
        return {"status": "invalid_puzzle", "grid": current, "error": str(exc),
                "issues": exc.issues, "config": config.as_dict()}
    except ProtocolViolation as exc:
        return {"status": "protocol_error", "grid": current, "error": str(exc),
                "config": config.as_dict()}
    report["config"] = config.as_dict()
    return report


# -------------------------------------------------------------------------
# Board text
# -------------------------------------------------------------------------
def format_board(grid: Grid) -> str:
    """9x9 board with | between blocks and a dashed rule above every block row."""
    rule = "-" * (SIZE * 3 + BOX + 1)
    lines: List[str] = []
    for i, row in enumerate(grid):
        if i % BOX == 0:
            lines.append(rule)
        cells = []
        for j, v in enumerate(row):
            if j % BOX == 0:
                cells.append("|")
            cells.append(f" {v} ")
        lines.append("".join(cells) + "|")
    lines.append(rule)
    return "\n".join(lines)


def parse_puzzle(text: str) -> Grid:
    """81 cells from a string of digits; '.' and '0' are blanks, whitespace and | - + are ignored."""
    cells = []
    for ch in text:
        if ch.isspace() or ch in "|-+":
            continue
        if ch == ".":
            cells.append(0)
        elif ch in "0123456789":
            cells.append(int(ch))
        else:
            raise InvalidPuzzle(f"unexpected character {ch!r} in puzzle text")
    if len(cells) != SIZE * SIZE:
        raise InvalidPuzzle(f"expected {SIZE * SIZE} cells, got {len(cells)}")
    return [cells[r * SIZE:(r + 1) * SIZE] for r in range(SIZE)]


def load_grid(path: str | Path) -> Grid:
    """Read a puzzle from JSON ({"grid": [[...]]} or a bare 9x9 list) or from plain text."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        data = json.loads(text)
        grid = data["grid"] if isinstance(data, dict) else data
        issues = find_issues(grid)
        if issues:
            raise InvalidPuzzle(f"{path}: invalid grid", issues)
        return grid
    return parse_puzzle(text)
