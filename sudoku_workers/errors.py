"""Exception types raised by the solver. Stagnation is a result status, not an error."""

from __future__ import annotations


class SolverError(Exception):
    """Base class for every error the solver raises."""


class InvalidPuzzle(SolverError):
    """The input grid is malformed or breaks a Sudoku rule; raised before any worker starts."""

    def __init__(self, message: str, issues: list | None = None):
        super().__init__(message)
        self.issues = list(issues or [])


class ProtocolViolation(SolverError):
    """Controller and workers fell out of step. Always fatal."""

    def __init__(self, message: str, kind=None):
        super().__init__(message)
        self.kind = kind
