"""
Sudoku unit-worker solver

A controller owns the grid and three long-lived workers (row, column, box)
compute candidate sets for it; naked singles are placed until the grid is
full or a pass makes no progress.
"""

from .config import SolverConfig
from .controller import Controller, SolveResult, SolveStatus, solve
from .errors import InvalidPuzzle, ProtocolViolation, SolverError
from .solver_core import (
    CandidateSet,
    UnitKind,
    available_values,
    box_of,
    col_of,
    is_solved,
    row_of,
    single_intersection,
)
from .sudoku_tools import CANONICAL_PUZZLE, format_board, solve_tool

__version__ = "1.0.0"
__all__ = [
    'SolverConfig',
    'Controller',
    'SolveResult',
    'SolveStatus',
    'solve',
    'SolverError',
    'InvalidPuzzle',
    'ProtocolViolation',
    'CandidateSet',
    'UnitKind',
    'available_values',
    'row_of',
    'col_of',
    'box_of',
    'is_solved',
    'single_intersection',
    'CANONICAL_PUZZLE',
    'format_board',
    'solve_tool',
]
