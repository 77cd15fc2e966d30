"""
The controller owns the grid and drives the solve.

For every empty cell, scanned row-major, it sends the cell's row, column and
box to the matching worker, waits for all three candidate sets, and writes
the cell if the three sets share exactly one digit. After each cell ("cell"
sync) or each full pass ("pass" sync) it publishes a round signal carrying
the solved flag and meets every worker at the round barrier.

A pass that places nothing while cells are still empty ends the run as
STAGNATED: naked singles alone cannot finish that puzzle.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from types_sudoku import Grid, SolveReport

from .config import SolverConfig
from .errors import ProtocolViolation
from .logging_utils import get_logger
from .messages import Assignment, CandidateResult, RoundSignal, WorkerFailure, describe
from .roles import UNIT_ROLES, run_worker
from .solver_core import (
    CandidateSet,
    UnitKind,
    cell_key,
    clone_grid,
    count_empty,
    empty_cells,
    is_solved,
    single_intersection,
    validate_puzzle,
)
from .transport import BrokenBarrierError, Empty, Transport, make_transport

logger = get_logger(__name__)


class SolveStatus(Enum):
    SOLVED = "solved"
    STAGNATED = "stagnated"


class ControllerState(Enum):
    SCANNING_CELL = "scanning_cell"
    DISPATCHING = "dispatching"
    AWAITING_RESULTS = "awaiting_results"
    RESOLVING = "resolving"
    PUBLISHING = "publishing"
    DONE = "done"


@dataclass
class SolveResult:
    status: SolveStatus
    grid: Grid
    placements: list = field(default_factory=list)  # (i, j, digit, epoch), in write order
    rounds: int = 0
    passes: int = 0
    cells_visited: int = 0

    @property
    def solved(self) -> bool:
        return self.status is SolveStatus.SOLVED

    @property
    def empty_cells(self) -> int:
        return count_empty(self.grid)

    def as_report(self) -> SolveReport:
        return {
            "status": self.status.value,
            "grid": clone_grid(self.grid),
            "placements": [
                {"cell": cell_key(i, j), "digit": d, "round": epoch}
                for i, j, d, epoch in self.placements
            ],
            "rounds": self.rounds,
            "passes": self.passes,
            "empty_cells": self.empty_cells,
        }


class Controller:
    def __init__(self, grid: Grid, config: Optional[SolverConfig] = None,
                 transport: Optional[Transport] = None):
        self.config = config or SolverConfig()
        # raises InvalidPuzzle; the caller's grid is never written to
        self.grid = validate_puzzle(grid)
        self.transport = transport or make_transport(self.config)
        self.state = ControllerState.SCANNING_CELL
        self.epoch = 0
        self.passes = 0
        self.cells_visited = 0
        self.placements: list = []
        self._channels = None
        self._handles: dict = {}

    # -------------------------------------------------------------------------
    # Main driver
    # -------------------------------------------------------------------------
    def run(self) -> SolveResult:
        if self._channels is not None:
            raise RuntimeError("Controller.run() can only be called once")
        logger.info(
            "Solving %d empty cells with %s workers (sync=%s)",
            count_empty(self.grid), self.transport.name, self.config.sync,
        )
        self._channels = self.transport.open_channels()
        try:
            self._start_workers()
            status = self._solve_loop()
        except ProtocolViolation as exc:
            logger.error("Protocol violation, aborting: %s", exc)
            self._abort()
            raise
        finally:
            self._shutdown()

        result = SolveResult(
            status=status,
            grid=clone_grid(self.grid),
            placements=list(self.placements),
            rounds=self.epoch,
            passes=self.passes,
            cells_visited=self.cells_visited,
        )
        if result.solved:
            logger.info(
                "Sudoku has been solved: %d placements, %d passes, %d rounds",
                len(result.placements), result.passes, result.rounds,
            )
        else:
            logger.info(
                "Stagnated after %d passes: %d cells left that naked singles cannot resolve",
                result.passes, result.empty_cells,
            )
        return result

    def _solve_loop(self) -> SolveStatus:
        if is_solved(self.grid):
            self._publish(solved=True, final=True)
            return SolveStatus.SOLVED

        per_cell = self.config.sync == "cell"
        while True:
            self.passes += 1
            resolved = 0
            solved = False
            for i, j in empty_cells(self.grid):
                self.cells_visited += 1
                if self._resolve_cell(i, j) is not None:
                    resolved += 1
                solved = is_solved(self.grid)
                if per_cell or solved:
                    self._publish(solved=solved, final=solved)
                if solved:
                    break
            logger.debug("Pass %d placed %d digits", self.passes, resolved)
            if solved:
                return SolveStatus.SOLVED

            out_of_passes = self.config.max_passes is not None and self.passes >= self.config.max_passes
            if resolved == 0 or out_of_passes:
                if out_of_passes and resolved:
                    logger.warning("Stopping at the pass limit (%d)", self.config.max_passes)
                self._publish(solved=False, final=True)
                return SolveStatus.STAGNATED
            if not per_cell:
                self._publish(solved=False, final=False)

    # -------------------------------------------------------------------------
    # One cell: dispatch, collect, resolve
    # -------------------------------------------------------------------------
    def _resolve_cell(self, i: int, j: int) -> Optional[int]:
        self.state = ControllerState.DISPATCHING
        logger.debug("Sending tasks to workers. (x,y) = (%d,%d)", i, j)
        for kind, role in UNIT_ROLES.items():
            view = role.extract(self.grid, i, j)
            self._channels.inboxes[kind].put(Assignment(kind, self.epoch, (i, j), view))

        self.state = ControllerState.AWAITING_RESULTS
        results = self._collect((i, j))

        self.state = ControllerState.RESOLVING
        digit = single_intersection(results[UnitKind.ROW], results[UnitKind.COL], results[UnitKind.BOX])
        if digit is not None:
            self.grid[i][j] = digit
            self.placements.append((i, j, digit, self.epoch))
            logger.debug("Placed %d at %s", digit, cell_key(i, j))
        self.state = ControllerState.SCANNING_CELL
        return digit

    def _collect(self, cell) -> dict:
        """Wait for one candidate set per unit kind for `cell`, in any arrival order."""
        results: dict = {}
        while len(results) < len(UnitKind):
            msg = self._receive([kind for kind in UnitKind if kind not in results])
            if isinstance(msg, WorkerFailure):
                raise ProtocolViolation(f"{msg.kind.label} worker failed: {msg.reason}", msg.kind)
            if not isinstance(msg, CandidateResult):
                raise ProtocolViolation(f"controller expected a candidate result, got {describe(msg)}")
            if msg.kind in results:
                raise ProtocolViolation(f"duplicate {describe(msg)}", msg.kind)
            if tuple(msg.cell) != cell or msg.epoch != self.epoch:
                raise ProtocolViolation(
                    f"controller waiting on {cell_key(*cell)} epoch={self.epoch} got {describe(msg)}",
                    msg.kind,
                )
            if not isinstance(msg.candidates, CandidateSet):
                raise ProtocolViolation(f"malformed payload in {describe(msg)}", msg.kind)
            results[msg.kind] = msg.candidates
        return results

    def _receive(self, waiting=()):
        try:
            return self._channels.outbox.get(timeout=self.config.message_timeout)
        except Empty:
            detail = ""
            if waiting:
                detail += f"; waiting on: {', '.join(kind.label for kind in waiting)}"
            dead = [kind.label for kind, h in self._handles.items() if not h.is_alive()]
            if dead:
                detail += f"; dead workers: {', '.join(dead)}"
            raise ProtocolViolation(
                f"no worker reply within {self.config.message_timeout}s "
                f"(state={self.state.value}, epoch={self.epoch}){detail}",
                waiting[0] if len(waiting) == 1 else None,
            ) from None

    # -------------------------------------------------------------------------
    # Round synchronisation
    # -------------------------------------------------------------------------
    def _publish(self, solved: bool, final: bool) -> None:
        self.state = ControllerState.PUBLISHING
        signal = RoundSignal(self.epoch, solved, final)
        logger.debug("Publishing %s", signal)
        for inbox in self._channels.inboxes.values():
            inbox.put(signal)
        try:
            self._channels.barrier.wait(self.config.barrier_timeout)
        except BrokenBarrierError:
            reason = self._pending_failure()
            raise ProtocolViolation(
                f"round barrier broken at epoch {self.epoch}" + (f": {reason}" if reason else "")
            ) from None
        self.epoch += 1
        self.state = ControllerState.DONE if final else ControllerState.SCANNING_CELL

    def _pending_failure(self) -> str:
        """Reason reported by a failed worker, if one is waiting in the outbox."""
        try:
            msg = self._channels.outbox.get(timeout=0.1)
        except Empty:
            return ""
        if isinstance(msg, WorkerFailure):
            return f"{msg.kind.label} worker: {msg.reason}"
        return f"unexpected {describe(msg)}"

    # -------------------------------------------------------------------------
    # Worker lifecycle
    # -------------------------------------------------------------------------
    def _start_workers(self) -> None:
        ch = self._channels
        # outlasts the controller's reply wait
        idle_timeout = self.config.worker_idle_timeout
        for kind in UnitKind:
            self._handles[kind] = self.transport.start(
                run_worker,
                (kind, ch.inboxes[kind], ch.outbox, ch.barrier,
                 idle_timeout, self.config.barrier_timeout),
                name=f"{kind.value}-worker",
            )

    def _abort(self) -> None:
        # Break the barrier and send a terminal signal so blocked workers exit now.
        self._channels.barrier.abort()
        signal = RoundSignal(self.epoch, False, final=True)
        for inbox in self._channels.inboxes.values():
            inbox.put(signal)

    def _shutdown(self) -> None:
        for kind, handle in self._handles.items():
            if not self.transport.stop(handle, self.config.join_timeout):
                logger.warning("%s worker was not shut down cleanly", kind.label)
        self.transport.close(self._channels)
        self.state = ControllerState.DONE


def solve(grid: Grid, config: Optional[SolverConfig] = None,
          transport: Optional[Transport] = None, **overrides) -> SolveResult:
    """Solve `grid` with three unit workers. Raises InvalidPuzzle / ProtocolViolation."""
    config = (config or SolverConfig()).replace(**overrides)
    return Controller(grid, config, transport).run()
