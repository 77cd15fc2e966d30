# tests/test_solver_core.py
import pytest

from sudoku_workers.errors import InvalidPuzzle, ProtocolViolation
from sudoku_workers.solver_core import (
    CandidateSet,
    UnitKind,
    available_values,
    box_of,
    cell_candidates,
    col_of,
    compute_candidates,
    count_empty,
    empty_cells,
    find_issues,
    is_solved,
    row_of,
    single_intersection,
    unit_cells,
    validate_puzzle,
)

# every cell holds a distinct value 10*i + j so extracted views name their source cells
LABELLED = [[10 * i + j for j in range(9)] for i in range(9)]


def test_row_and_col_views():
    assert row_of(LABELLED, 4) == tuple(40 + j for j in range(9))
    assert col_of(LABELLED, 7) == tuple(10 * i + 7 for i in range(9))


@pytest.mark.parametrize("i,j", [(0, 0), (4, 7), (8, 8), (2, 5), (6, 1)])
def test_box_view_reads_each_block_cell_once(i, j):
    view = box_of(LABELLED, i, j)
    ib, jb = (i // 3) * 3, (j // 3) * 3
    expected = tuple(10 * (ib + di) + (jb + dj) for di in range(3) for dj in range(3))
    assert view == expected
    assert len(set(view)) == 9


def test_box_view_example():
    assert box_of(LABELLED, 4, 7) == (36, 37, 38, 46, 47, 48, 56, 57, 58)


@pytest.mark.parametrize("kind", list(UnitKind))
def test_unit_cells_match_views(kind):
    for i, j in [(0, 0), (3, 4), (8, 2)]:
        coords = unit_cells(kind, i, j)
        assert len(set(coords)) == 9
        assert (i, j) in coords


def test_available_values_example():
    assert available_values([4, 0, 5, 1, 9, 0, 0, 6, 7]).digits() == [2, 3, 8]


def test_available_values_edges():
    assert len(available_values([0] * 9)) == 9
    assert len(available_values(list(range(1, 10)))) == 0
    # a digit listed late in the unit is still excluded
    assert 9 not in available_values([0, 0, 0, 0, 0, 0, 0, 0, 9])


def test_available_values_complements_the_unit(solution):
    for i in range(9):
        unit = list(solution[i])
        unit[i] = 0
        unit[(i + 4) % 9] = 0
        cands = available_values(unit)
        present = {v for v in unit if v}
        assert present.isdisjoint(cands)
        assert present | set(cands) == set(range(1, 10))
        assert len(cands) == 9 - len(present)


def test_available_values_rejects_short_unit():
    with pytest.raises(ProtocolViolation):
        available_values([1, 2, 3])


def test_single_intersection_examples():
    assert single_intersection({2, 3, 8}, {3, 8}, {3}) == 3
    assert single_intersection({2, 3, 8}, {2, 8}, set()) is None
    assert single_intersection({2, 3}, {2, 3}, {2, 3}) is None


def test_single_intersection_ignores_ordering():
    a = CandidateSet.of([9, 1, 5])
    b = CandidateSet.of([5])
    c = CandidateSet.of([7, 6, 5, 4])
    assert single_intersection(a, b, c) == 5


def test_candidate_set_basics():
    s = CandidateSet.of([8, 2, 3])
    assert len(s) == 3
    assert 2 in s and 8 in s
    assert 4 not in s and 0 not in s and 10 not in s
    assert list(s) == [2, 3, 8]
    assert s & CandidateSet.of([3, 9]) == CandidateSet.of([3])
    assert (s | [9]).digits() == [2, 3, 8, 9]
    assert CandidateSet.full().digits() == list(range(1, 10))
    assert not CandidateSet()


@pytest.mark.parametrize("bad", [[0], [10], [-1], ["3"], [True], [2, False]])
def test_candidate_set_rejects_non_digits(bad):
    with pytest.raises(ValueError):
        CandidateSet.of(bad)


def test_candidate_set_membership_ignores_bools():
    s = CandidateSet.of([1])
    assert 1 in s
    assert True not in s
    assert False not in CandidateSet.full()


def test_cell_candidates_on_puzzle(puzzle):
    # r1c1: row {5,9,2,4,6}, col {1,3,6,2,9}, box {5,9,1,3} leave 7 and 8
    assert cell_candidates(puzzle, 0, 0).digits() == [7, 8]
    # r1c4 is a naked single
    assert cell_candidates(puzzle, 0, 3).digits() == [1]


def test_compute_candidates_keys(puzzle):
    cand = compute_candidates(puzzle)
    assert len(cand) == count_empty(puzzle) == 45
    assert cand["r1c1"] == [7, 8]
    assert "r1c2" not in cand


def test_grid_predicates(puzzle, solution):
    assert not is_solved(puzzle)
    assert is_solved(solution)
    assert list(empty_cells(puzzle))[:3] == [(0, 0), (0, 3), (0, 5)]


def test_find_issues_duplicates(puzzle):
    puzzle[0][0] = 5  # 5 already in row 1 and box 1
    issues = find_issues(puzzle)
    units = {i["unit"] for i in issues}
    assert units == {"r1", "b1"}
    assert all(i["digits"] == [5] for i in issues)


def test_find_issues_column_duplicate(puzzle):
    puzzle[8][0] = 1  # column 1 already has a 1 at r2
    issues = find_issues(puzzle)
    assert {"type": "duplicate", "unit": "c1", "digits": [1], "cells": ["r2c1", "r9c1"]} in issues


@pytest.mark.parametrize("value", [10, -1, 3.5, "4", True])
def test_validate_rejects_bad_values(puzzle, value):
    puzzle[4][4] = value
    with pytest.raises(InvalidPuzzle) as err:
        validate_puzzle(puzzle)
    assert err.value.issues[0]["type"] == "value"


def test_validate_rejects_bad_shape(puzzle):
    with pytest.raises(InvalidPuzzle):
        validate_puzzle(puzzle[:8])
    puzzle[3] = puzzle[3][:8]
    with pytest.raises(InvalidPuzzle):
        validate_puzzle(puzzle)


def test_validate_returns_private_copy(puzzle):
    copy = validate_puzzle(puzzle)
    copy[0][0] = 7
    assert puzzle[0][0] == 0
