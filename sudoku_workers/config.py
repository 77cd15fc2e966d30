"""
Solver settings.

Defaults live in the module-level constants below; `SolverConfig` bundles them
for one run and validates them once at construction.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from typing import Optional

# ==== transport / synchronisation ==========================================

# "process": one OS process per worker role. "thread": same protocol, in-process.
DEFAULT_TRANSPORT: str = "process"
TRANSPORTS = ("process", "thread")

# "pass": publish the round flag once per full scan of the grid.
# "cell": publish after every empty cell visited.
DEFAULT_SYNC: str = "pass"
SYNC_MODES = ("pass", "cell")

# ==== timeouts (seconds) ===================================================

# Upper bound on the controller's wait for a worker reply. Workers wait on
# their inbox for this plus the barrier timeout.
DEFAULT_MESSAGE_TIMEOUT: float = 10.0

# Upper bound on waiting at the end-of-round barrier.
DEFAULT_BARRIER_TIMEOUT: float = 10.0

# How long shutdown waits for each worker before giving up on it.
DEFAULT_JOIN_TIMEOUT: float = 5.0

# ==== environment overrides ================================================

ENV_TRANSPORT = "SUDOKU_WORKERS_TRANSPORT"
ENV_SYNC = "SUDOKU_WORKERS_SYNC"
ENV_TIMEOUT = "SUDOKU_WORKERS_TIMEOUT"


@dataclass(frozen=True)
class SolverConfig:
    transport: str = DEFAULT_TRANSPORT
    sync: str = DEFAULT_SYNC
    message_timeout: float = DEFAULT_MESSAGE_TIMEOUT
    barrier_timeout: float = DEFAULT_BARRIER_TIMEOUT
    join_timeout: float = DEFAULT_JOIN_TIMEOUT
    max_passes: Optional[int] = None  # None: stop only on solved or stagnation
    start_method: Optional[str] = None  # multiprocessing start method, None = platform default

    def __post_init__(self):
        if self.transport not in TRANSPORTS:
            raise ValueError(f"transport must be one of {TRANSPORTS}, got {self.transport!r}")
        if self.sync not in SYNC_MODES:
            raise ValueError(f"sync must be one of {SYNC_MODES}, got {self.sync!r}")
        for name in ("message_timeout", "barrier_timeout", "join_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if self.max_passes is not None and self.max_passes < 1:
            raise ValueError("max_passes must be >= 1 or None")

    @property
    def worker_idle_timeout(self) -> float:
        """How long a worker waits on its inbox before giving up."""
        return self.message_timeout + self.barrier_timeout

    def replace(self, **overrides) -> "SolverConfig":
        """Copy with some fields changed; None values are ignored."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return dataclasses.replace(self, **changes)

    def as_dict(self) -> dict:
        return dataclasses.asdict(self)

    @classmethod
    def from_env(cls, environ=None) -> "SolverConfig":
        """Defaults, overridden by SUDOKU_WORKERS_* environment variables when set."""
        env = os.environ if environ is None else environ
        overrides = {}
        if env.get(ENV_TRANSPORT):
            overrides["transport"] = env[ENV_TRANSPORT].strip().lower()
        if env.get(ENV_SYNC):
            overrides["sync"] = env[ENV_SYNC].strip().lower()
        if env.get(ENV_TIMEOUT):
            seconds = float(env[ENV_TIMEOUT])
            overrides["message_timeout"] = seconds
            overrides["barrier_timeout"] = seconds
        return cls(**overrides)
