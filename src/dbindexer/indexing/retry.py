"""Deadline-bounded retry while collections become available.

A RetryWindow is opened at the start of a flush or commit and discarded at
the end. Its deadline runs from the last forward progress, not from the
start: ``reset()`` restarts the clock whenever any write succeeds.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from dbindexer.config.models import RetryConfig
from dbindexer.core.errors import IndexingCancelledError

DEFAULT_BACKOFF_SEC = 1.0
DEFAULT_TIMEOUT_SEC = 60.0


@dataclass
class RetryPolicy:
    """How long to wait between attempts and when to give up.

    ``clock`` and ``sleep`` are injectable so timing can be tested without
    real waiting. When ``cancel_event`` is set, pauses wait on the event and
    a set event aborts the retry loop with IndexingCancelledError.
    """

    backoff_sec: float = DEFAULT_BACKOFF_SEC
    timeout_sec: float = DEFAULT_TIMEOUT_SEC
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], None] = time.sleep
    cancel_event: threading.Event | None = None

    @classmethod
    def from_config(cls, config: RetryConfig, **kwargs: object) -> RetryPolicy:
        return cls(backoff_sec=config.backoff_sec, timeout_sec=config.timeout_sec, **kwargs)  # type: ignore[arg-type]

    def open_window(self, operation: str) -> RetryWindow:
        return RetryWindow(policy=self, operation=operation, started_at=self.clock())


@dataclass
class RetryWindow:
    """Ephemeral {deadline start, attempt count} of one flush or commit."""

    policy: RetryPolicy
    operation: str
    started_at: float
    attempts: int = field(default=0)

    @property
    def elapsed(self) -> float:
        return self.policy.clock() - self.started_at

    @property
    def expired(self) -> bool:
        return self.elapsed >= self.policy.timeout_sec

    def reset(self) -> None:
        """Forward progress happened: restart the deadline clock."""
        self.started_at = self.policy.clock()

    def pause(self) -> None:
        """Count the failed attempt and wait one backoff interval.

        Raises:
            IndexingCancelledError: If the cancel event is set.
        """
        self.attempts += 1
        cancel = self.policy.cancel_event
        if cancel is None:
            self.policy.sleep(self.policy.backoff_sec)
        elif cancel.is_set() or cancel.wait(self.policy.backoff_sec):
            raise IndexingCancelledError.during(self.operation, self.attempts)
