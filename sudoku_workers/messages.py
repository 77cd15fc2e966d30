"""
Messages exchanged between the controller and the three worker roles.

Every message is a frozen dataclass so it can cross a process boundary
through a multiprocessing queue. Each carries a numeric tag naming its
direction and unit kind, and the round epoch it belongs to.
"""

from __future__ import annotations

from dataclasses import dataclass

from types_sudoku import Cell

from .solver_core import CandidateSet, UnitKind, cell_key

TAG_ASSIGN_ROW = 1
TAG_ASSIGN_COL = 2
TAG_ASSIGN_BOX = 3

TAG_RESULT_ROW = 4
TAG_RESULT_COL = 5
TAG_RESULT_BOX = 6

TAG_ROUND = 7
TAG_FAILURE = 8

ASSIGN_TAGS = {
    UnitKind.ROW: TAG_ASSIGN_ROW,
    UnitKind.COL: TAG_ASSIGN_COL,
    UnitKind.BOX: TAG_ASSIGN_BOX,
}
RESULT_TAGS = {
    UnitKind.ROW: TAG_RESULT_ROW,
    UnitKind.COL: TAG_RESULT_COL,
    UnitKind.BOX: TAG_RESULT_BOX,
}


@dataclass(frozen=True)
class Assignment:
    """Controller -> worker: the unit of `kind` for the cell being resolved."""

    kind: UnitKind
    epoch: int
    cell: Cell
    values: tuple

    @property
    def tag(self) -> int:
        return ASSIGN_TAGS[self.kind]

    def __str__(self) -> str:
        return f"{self.kind.label}-assign {cell_key(*self.cell)} epoch={self.epoch}"


@dataclass(frozen=True)
class CandidateResult:
    """Worker -> controller: candidates for the unit it was assigned."""

    kind: UnitKind
    epoch: int
    cell: Cell
    candidates: CandidateSet

    @property
    def tag(self) -> int:
        return RESULT_TAGS[self.kind]

    def __str__(self) -> str:
        return f"{self.kind.label}-result {cell_key(*self.cell)} epoch={self.epoch} {self.candidates.digits()}"


@dataclass(frozen=True)
class RoundSignal:
    """Controller -> all workers: end of round `epoch`. `final` tells workers to exit after the barrier."""

    epoch: int
    solved: bool
    final: bool = False

    @property
    def tag(self) -> int:
        return TAG_ROUND

    def __str__(self) -> str:
        return f"round epoch={self.epoch} solved={self.solved} final={self.final}"


@dataclass(frozen=True)
class WorkerFailure:
    """Worker -> controller: the worker hit a protocol error and is exiting."""

    kind: UnitKind
    reason: str

    @property
    def tag(self) -> int:
        return TAG_FAILURE

    def __str__(self) -> str:
        return f"{self.kind.label}-failure: {self.reason}"


def describe(message) -> str:
    """Short text for logs and error messages; tolerates arbitrary objects."""
    tag = getattr(message, "tag", None)
    if tag is None:
        return f"untagged {type(message).__name__}"
    return f"[tag {tag}] {message}"
