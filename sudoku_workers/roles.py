"""
Worker roles.

A `UnitRole` is what a worker knows how to do for one unit kind: read its
unit out of a grid, and turn a unit into candidates. A `WorkerRole` wraps a
`UnitRole` in the receive/compute/reply/round loop that runs in its own
thread or process for the whole solve.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Sequence

from types_sudoku import Grid

from .errors import ProtocolViolation
from .logging_utils import get_logger
from .messages import Assignment, CandidateResult, RoundSignal, WorkerFailure, describe
from .solver_core import CandidateSet, UnitKind, available_values, unit_of
from .transport import BrokenBarrierError, Empty

logger = get_logger(__name__)


class UnitRole:
    """Row, column or box capability. Stateless; one shared instance per kind."""

    def __init__(self, kind: UnitKind):
        self.kind = kind

    def extract(self, grid: Grid, i: int, j: int) -> tuple[int, ...]:
        return unit_of(self.kind, grid, i, j)

    def compute(self, unit: Sequence[int]) -> CandidateSet:
        return available_values(unit)

    def __repr__(self) -> str:
        return f"UnitRole({self.kind.label})"


UNIT_ROLES = {kind: UnitRole(kind) for kind in UnitKind}
ROW_ROLE = UNIT_ROLES[UnitKind.ROW]
COL_ROLE = UNIT_ROLES[UnitKind.COL]
BOX_ROLE = UNIT_ROLES[UnitKind.BOX]


class WorkerState(Enum):
    AWAITING_ASSIGNMENT = "awaiting_assignment"
    COMPUTING = "computing"
    AWAITING_ROUND = "awaiting_round"
    DONE = "done"


class WorkerRole:
    def __init__(self, role: UnitRole, inbox, outbox, barrier,
                 message_timeout: float, barrier_timeout: float):
        self.role = role
        self.inbox = inbox
        self.outbox = outbox
        self.barrier = barrier
        self.message_timeout = message_timeout
        self.barrier_timeout = barrier_timeout
        self.state = WorkerState.AWAITING_ASSIGNMENT
        self.epoch = 0
        self.tasks = 0

    @property
    def kind(self) -> UnitKind:
        return self.role.kind

    def run(self) -> int:
        """Serve assignments until a final round signal. Returns the number of units computed."""
        while self.state is not WorkerState.DONE:
            try:
                msg = self.inbox.get(timeout=self.message_timeout)
            except Empty:
                raise ProtocolViolation(
                    f"{self.kind.label} worker got no message within {self.message_timeout}s "
                    f"(state={self.state.value}, epoch={self.epoch})",
                    self.kind,
                ) from None
            self.handle(msg)
        return self.tasks

    def handle(self, msg) -> None:
        if isinstance(msg, Assignment):
            self._on_assignment(msg)
        elif isinstance(msg, RoundSignal):
            self._on_round(msg)
        else:
            raise ProtocolViolation(
                f"{self.kind.label} worker received unexpected {describe(msg)}", self.kind
            )

    def _on_assignment(self, msg: Assignment) -> None:
        if msg.kind is not self.kind:
            raise ProtocolViolation(
                f"{self.kind.label} worker received mistagged {describe(msg)}", self.kind
            )
        if msg.epoch != self.epoch:
            raise ProtocolViolation(
                f"{self.kind.label} worker at epoch {self.epoch} received {describe(msg)}", self.kind
            )
        self.state = WorkerState.COMPUTING
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "%s WORKER received task for %s: %s",
                self.kind.label, self.kind.value, " ".join(str(v) for v in msg.values),
            )
        candidates = self.role.compute(msg.values)
        self.tasks += 1
        self.outbox.put(CandidateResult(self.kind, msg.epoch, msg.cell, candidates))
        self.state = WorkerState.AWAITING_ROUND

    def _on_round(self, msg: RoundSignal) -> None:
        # A round may close without this worker having been assigned anything.
        if msg.epoch != self.epoch:
            raise ProtocolViolation(
                f"{self.kind.label} worker at epoch {self.epoch} received {describe(msg)}", self.kind
            )
        try:
            self.barrier.wait(self.barrier_timeout)
        except BrokenBarrierError:
            raise ProtocolViolation(
                f"{self.kind.label} worker: round barrier broken at epoch {self.epoch}", self.kind
            ) from None
        self.epoch += 1
        self.state = WorkerState.DONE if msg.final else WorkerState.AWAITING_ASSIGNMENT


def run_worker(kind: UnitKind, inbox, outbox, barrier,
               message_timeout: float, barrier_timeout: float) -> None:
    """Thread/process entry point for one worker role."""
    worker = WorkerRole(UNIT_ROLES[kind], inbox, outbox, barrier, message_timeout, barrier_timeout)
    try:
        tasks = worker.run()
    except ProtocolViolation as exc:
        logger.error("%s worker aborted: %s", kind.label, exc)
        outbox.put(WorkerFailure(kind, str(exc)))
        barrier.abort()
        return
    except Exception as exc:
        logger.exception("%s worker crashed", kind.label)
        outbox.put(WorkerFailure(kind, f"{type(exc).__name__}: {exc}"))
        barrier.abort()
        raise
    logger.debug("%s worker finished after %d units, %d rounds", kind.label, tasks, worker.epoch)
