"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages,
and provides the fake clock used by every retry-timing test.
"""

import sys
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local dbindexer package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of dbindexer modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("dbindexer"):
        del sys.modules[module_name]

from dbindexer.backend.memory import InMemoryBackend  # noqa: E402
from dbindexer.indexing.retry import RetryPolicy  # noqa: E402


class FakeClock:
    """Monotonic clock that only moves when slept on or advanced."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def policy(clock: FakeClock) -> RetryPolicy:
    """1 s backoff, 60 s deadline, on the fake clock."""
    return RetryPolicy(backoff_sec=1.0, timeout_sec=60.0, clock=clock, sleep=clock.sleep)


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend()
