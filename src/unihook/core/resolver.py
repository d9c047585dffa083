"""
Deferred resolution of binding paths.

A :class:`PendingResolution` is an explicit wait task carrying its deadline
and a cancellation flag. :class:`Resolver` drives it cooperatively on the
running ``asyncio`` event loop, polling the environment at a fixed interval
until the path resolves or the timeout is reached.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Optional

from ..exceptions import ResolutionTimeout
from .environment import UNRESOLVED, Environment

DEFAULT_TIMEOUT_MS = 10000
POLL_INTERVAL_MS = 100


@dataclass
class PendingResolution:
    """A wait for ``path`` to become bound."""

    path: str
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    started: float = field(default_factory=time.monotonic)
    elapsed_ms: float = 0.0
    polls: int = 0
    cancelled: bool = False

    @property
    def deadline(self) -> float:
        return self.started + self.timeout_ms / 1000.0

    def cancel(self) -> None:
        self.cancelled = True

    def tick(self) -> bool:
        """Update elapsed time; True once the timeout is reached."""
        self.elapsed_ms = (time.monotonic() - self.started) * 1000.0
        return self.elapsed_ms >= self.timeout_ms


class Resolver:
    """Waits for binding paths to appear in an :class:`Environment`."""

    def __init__(
        self,
        environment: Environment,
        interval_ms: int = POLL_INTERVAL_MS,
        logger=None,
    ):
        self.environment = environment
        self.interval_ms = interval_ms
        self.log = logger

    def start(self, path: str, timeout_ms: Optional[int] = None) -> PendingResolution:
        """Create a wait task for ``path``; run it with :meth:`wait`."""
        if timeout_ms is None:
            timeout_ms = DEFAULT_TIMEOUT_MS
        return PendingResolution(path=path, timeout_ms=timeout_ms)

    async def wait(self, pending: PendingResolution) -> Any:
        """Poll until ``pending.path`` resolves, then return its value.

        Raises :class:`ResolutionTimeout` once the elapsed time reaches the
        timeout, and ``asyncio.CancelledError`` if the task was cancelled.
        """
        while True:
            if pending.cancelled:
                raise asyncio.CancelledError(f"Resolution of {pending.path} cancelled")

            value = self.environment.get(pending.path)
            pending.polls += 1
            if value is not UNRESOLVED:
                if self.log and pending.polls > 1:
                    self.log.debug(
                        "Resolved %s after %.0fms", pending.path, pending.elapsed_ms
                    )
                return value

            if pending.tick():
                raise ResolutionTimeout(pending.path, pending.timeout_ms)

            await asyncio.sleep(self.interval_ms / 1000.0)

    async def resolve(self, path: str, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> Any:
        """Return the value bound at ``path``, waiting for it if necessary."""
        return await self.wait(self.start(path, timeout_ms))
