"""
Transports carry the message protocol between the controller and the worker roles.

Both transports hand out the same three primitives: FIFO queues, a 4-party
barrier, and a way to start a worker. The protocol code never knows which one
it is talking through.
"""

from __future__ import annotations

import multiprocessing
import queue
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict

from .config import SolverConfig
from .logging_utils import get_logger
from .solver_core import UnitKind

logger = get_logger(__name__)

# controller + one worker per unit kind
PARTIES = 1 + len(UnitKind)

# Both queue implementations raise these.
Empty = queue.Empty
BrokenBarrierError = threading.BrokenBarrierError


@dataclass
class Channels:
    inboxes: Dict[UnitKind, Any]  # controller -> worker, one per role
    outbox: Any  # all workers -> controller
    barrier: Any  # end-of-round rendezvous for all participants


class Transport:
    name = "base"

    def make_queue(self):
        raise NotImplementedError

    def make_barrier(self, parties: int):
        raise NotImplementedError

    def start(self, target: Callable, args: tuple, name: str):
        raise NotImplementedError

    def stop(self, handle, timeout: float) -> bool:
        """Wait for a worker to exit. Returns False if it had to be abandoned or killed."""
        handle.join(timeout)
        return not handle.is_alive()

    def open_channels(self) -> Channels:
        return Channels(
            inboxes={kind: self.make_queue() for kind in UnitKind},
            outbox=self.make_queue(),
            barrier=self.make_barrier(PARTIES),
        )

    def close(self, channels: Channels) -> None:
        pass


class ThreadTransport(Transport):
    """Workers are daemon threads in this process."""

    name = "thread"

    def make_queue(self):
        return queue.Queue()

    def make_barrier(self, parties: int):
        return threading.Barrier(parties)

    def start(self, target: Callable, args: tuple, name: str):
        t = threading.Thread(target=target, args=args, name=name, daemon=True)
        t.start()
        return t

    def stop(self, handle, timeout: float) -> bool:
        handle.join(timeout)
        if handle.is_alive():
            # threads cannot be killed; the worker exits on its own receive timeout
            logger.warning("Worker thread %s did not exit within %.1fs", handle.name, timeout)
            return False
        return True


class ProcessTransport(Transport):
    """Workers are separate OS processes; messages are pickled through multiprocessing queues."""

    name = "process"

    def __init__(self, start_method: str | None = None):
        self.ctx = multiprocessing.get_context(start_method)

    def make_queue(self):
        return self.ctx.Queue()

    def make_barrier(self, parties: int):
        return self.ctx.Barrier(parties)

    def start(self, target: Callable, args: tuple, name: str):
        p = self.ctx.Process(target=target, args=args, name=name, daemon=True)
        p.start()
        return p

    def stop(self, handle, timeout: float) -> bool:
        handle.join(timeout)
        if handle.is_alive():
            logger.warning("Worker process %s did not exit within %.1fs; terminating", handle.name, timeout)
            handle.terminate()
            handle.join(timeout)
            return False
        return True

    def close(self, channels: Channels) -> None:
        for q in list(channels.inboxes.values()) + [channels.outbox]:
            q.close()
            q.cancel_join_thread()


def make_transport(config: SolverConfig) -> Transport:
    if config.transport == "thread":
        return ThreadTransport()
    return ProcessTransport(config.start_method)
