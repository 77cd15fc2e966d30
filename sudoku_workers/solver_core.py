"""Core Sudoku utilities shared by the controller and the worker roles: unit extraction, candidate sets, intersection, and grid predicates."""

# solver_core.py
# Grid is 9x9 list of lists of ints (0..9). 0 = blank.
# Solver coordinates are 0-based (i, j); cell keys shown to users are 1-based ("r1c1").

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Sequence

from types_sudoku import Candidates, Cell, Grid, Issue

from .errors import InvalidPuzzle, ProtocolViolation

SIZE = 9
BOX = 3
DIGITS = range(1, SIZE + 1)
FULL_MASK = (1 << SIZE) - 1


class UnitKind(Enum):
    ROW = "row"
    COL = "col"
    BOX = "box"

    @property
    def label(self) -> str:
        return self.value.upper()


def rc_to_key(r: int, c: int) -> str:
    return f"r{r}c{c}"


def cell_key(i: int, j: int) -> str:
    """1-based key for a 0-based coordinate."""
    return rc_to_key(i + 1, j + 1)


def clone_grid(grid: Grid) -> Grid:
    return [list(row) for row in grid]


# -------------------------------------------------------------------------
# Candidate sets
# -------------------------------------------------------------------------
@dataclass(frozen=True)
class CandidateSet:
    """Set of digits 1..9 stored as a 9-bit mask (bit d-1 set means d is a candidate)."""

    mask: int = 0

    def __post_init__(self):
        if not 0 <= self.mask <= FULL_MASK:
            raise ValueError(f"candidate mask out of range: {self.mask}")

    @classmethod
    def of(cls, digits: Iterable[int]) -> "CandidateSet":
        mask = 0
        for d in digits:
            if not _is_cell_value(d) or d not in DIGITS:
                raise ValueError(f"not a Sudoku digit: {d!r}")
            mask |= 1 << (d - 1)
        return cls(mask)

    @classmethod
    def full(cls) -> "CandidateSet":
        return cls(FULL_MASK)

    def __contains__(self, digit) -> bool:
        return _is_cell_value(digit) and digit in DIGITS and bool(self.mask >> (digit - 1) & 1)

    def __len__(self) -> int:
        return bin(self.mask).count("1")

    def __iter__(self) -> Iterator[int]:
        return (d for d in DIGITS if self.mask >> (d - 1) & 1)

    def __and__(self, other: "CandidateSet") -> "CandidateSet":
        return CandidateSet(self.mask & as_candidates(other).mask)

    def __or__(self, other: "CandidateSet") -> "CandidateSet":
        return CandidateSet(self.mask | as_candidates(other).mask)

    def digits(self) -> list[int]:
        return list(self)

    def __repr__(self) -> str:
        return f"CandidateSet({self.digits()})"


def as_candidates(values) -> CandidateSet:
    if isinstance(values, CandidateSet):
        return values
    return CandidateSet.of(values)


# -------------------------------------------------------------------------
# Unit extraction
# -------------------------------------------------------------------------
def row_of(grid: Grid, i: int) -> tuple[int, ...]:
    return tuple(grid[i][j] for j in range(SIZE))


def col_of(grid: Grid, j: int) -> tuple[int, ...]:
    return tuple(grid[i][j] for i in range(SIZE))


def box_of(grid: Grid, i: int, j: int) -> tuple[int, ...]:
    """The 3x3 block containing (i, j), read row-major within the block."""
    ib = (i // BOX) * BOX
    jb = (j // BOX) * BOX
    return tuple(grid[ib + di][jb + dj] for di in range(BOX) for dj in range(BOX))


def unit_cells(kind: UnitKind, i: int, j: int) -> list[Cell]:
    """Coordinates read by the extractor of `kind` for cell (i, j), in the same order."""
    if kind is UnitKind.ROW:
        return [(i, c) for c in range(SIZE)]
    if kind is UnitKind.COL:
        return [(r, j) for r in range(SIZE)]
    ib = (i // BOX) * BOX
    jb = (j // BOX) * BOX
    return [(ib + di, jb + dj) for di in range(BOX) for dj in range(BOX)]


def unit_of(kind: UnitKind, grid: Grid, i: int, j: int) -> tuple[int, ...]:
    if kind is UnitKind.ROW:
        return row_of(grid, i)
    if kind is UnitKind.COL:
        return col_of(grid, j)
    return box_of(grid, i, j)


# -------------------------------------------------------------------------
# Candidate solver / intersection
# -------------------------------------------------------------------------
def available_values(unit: Sequence[int]) -> CandidateSet:
    """Digits 1..9 that do not occur in `unit`. E.g. 4 0 5 1 9 0 0 6 7 -> {2, 3, 8}."""
    if len(unit) != SIZE:
        raise ProtocolViolation(f"unit must hold {SIZE} values, got {len(unit)}")
    mask = 0
    for d in DIGITS:
        for v in unit:
            if v == d:
                break
        else:
            mask |= 1 << (d - 1)
    return CandidateSet(mask)


def single_intersection(row_set, col_set, box_set) -> int | None:
    """The only digit shared by all three sets, or None if they share zero or several."""
    common = as_candidates(row_set) & as_candidates(col_set) & as_candidates(box_set)
    if len(common) != 1:
        return None
    return next(iter(common))


def cell_candidates(grid: Grid, i: int, j: int) -> CandidateSet:
    return (
        available_values(row_of(grid, i))
        & available_values(col_of(grid, j))
        & available_values(box_of(grid, i, j))
    )


def compute_candidates(grid: Grid) -> Candidates:
    cand: Candidates = {}
    for i, j in empty_cells(grid):
        cand[cell_key(i, j)] = cell_candidates(grid, i, j).digits()
    return cand


# -------------------------------------------------------------------------
# Grid predicates
# -------------------------------------------------------------------------
def empty_cells(grid: Grid) -> Iterator[Cell]:
    """Empty coordinates in row-major scan order."""
    for i in range(SIZE):
        for j in range(SIZE):
            if grid[i][j] == 0:
                yield (i, j)


def count_empty(grid: Grid) -> int:
    return sum(1 for _ in empty_cells(grid))


def is_solved(grid: Grid) -> bool:
    return all(v != 0 for row in grid for v in row)


def _duplicates_in_unit(vals) -> set:
    seen = set()
    dups = set()
    for v in vals:
        if v == 0:
            continue
        if v in seen:
            dups.add(v)
        seen.add(v)
    return dups


def _is_cell_value(v) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def find_issues(grid) -> list[Issue]:
    """Shape, range and duplicate problems in `grid`; an empty list means the puzzle may be solved."""
    if not isinstance(grid, (list, tuple)) or len(grid) != SIZE:
        return [{"type": "shape", "detail": f"expected {SIZE} rows"}]
    issues: list[Issue] = []
    for i, row in enumerate(grid):
        if not isinstance(row, (list, tuple)) or len(row) != SIZE:
            issues.append({"type": "shape", "unit": f"r{i + 1}", "detail": f"expected {SIZE} cells"})
    if issues:
        return issues

    for i in range(SIZE):
        for j in range(SIZE):
            v = grid[i][j]
            if not _is_cell_value(v) or not 0 <= v <= SIZE:
                issues.append(
                    {"type": "value", "cells": [cell_key(i, j)], "detail": f"value {v!r} outside 0..{SIZE}"}
                )
    if issues:
        return issues

    # rows
    for i in range(SIZE):
        dups = _duplicates_in_unit(grid[i])
        if dups:
            cells = [cell_key(i, j) for j in range(SIZE) if grid[i][j] in dups]
            issues.append({"type": "duplicate", "unit": f"r{i + 1}", "digits": sorted(dups), "cells": cells})
    # cols
    for j in range(SIZE):
        dups = _duplicates_in_unit(col_of(grid, j))
        if dups:
            cells = [cell_key(i, j) for i in range(SIZE) if grid[i][j] in dups]
            issues.append({"type": "duplicate", "unit": f"c{j + 1}", "digits": sorted(dups), "cells": cells})
    # boxes
    for b in range(SIZE):
        i0, j0 = BOX * (b // BOX), BOX * (b % BOX)
        coords = unit_cells(UnitKind.BOX, i0, j0)
        dups = _duplicates_in_unit(grid[i][j] for i, j in coords)
        if dups:
            cells = [cell_key(i, j) for i, j in coords if grid[i][j] in dups]
            issues.append({"type": "duplicate", "unit": f"b{b + 1}", "digits": sorted(dups), "cells": cells})
    return issues


def validate_puzzle(grid) -> Grid:
    """Raise InvalidPuzzle if `grid` cannot be solved as given; otherwise return a private copy of it."""
    issues = find_issues(grid)
    if issues:
        first = issues[0]
        where = first.get("unit") or ",".join(first.get("cells", [])) or "grid"
        raise InvalidPuzzle(f"invalid puzzle: {first['type']} issue at {where} ({len(issues)} total)", issues)
    return clone_grid(grid)
