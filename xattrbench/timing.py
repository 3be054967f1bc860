"""
Phase Timing Module

Wall-clock durations kept as (seconds, microseconds) pairs, the way the
benchmark reports them.

Example:
    >>> from xattrbench.timing import Stopwatch, format_duration
    >>> with Stopwatch() as watch:
    ...     do_work()
    >>> print(f"{format_duration(watch.elapsed)} seconds")
"""

import time
from typing import NamedTuple, Optional

USEC_PER_SEC = 1_000_000


class Duration(NamedTuple):
    """A normalized (seconds, microseconds) pair."""

    seconds: int
    microseconds: int

    @property
    def total_seconds(self) -> float:
        return self.seconds + self.microseconds / USEC_PER_SEC


def normalize(seconds: int, microseconds: int) -> Duration:
    """Carry or borrow whole seconds until 0 <= microseconds < 1_000_000.

    Example:
        >>> normalize(2, -250000)
        Duration(seconds=1, microseconds=750000)
    """
    while microseconds >= USEC_PER_SEC:
        microseconds -= USEC_PER_SEC
        seconds += 1

    while microseconds < 0:
        microseconds += USEC_PER_SEC
        seconds -= 1

    return Duration(seconds, microseconds)


def timeval_sub(stop: tuple[int, int], start: tuple[int, int]) -> Duration:
    """Return stop - start for two (seconds, microseconds) pairs."""
    return normalize(stop[0] - start[0], stop[1] - start[1])


def format_duration(duration: Duration) -> str:
    """Format as '<seconds>.<microseconds>' without zero padding."""
    return f"{duration.seconds}.{duration.microseconds}"


def _now() -> tuple[int, int]:
    ns = time.monotonic_ns()
    return (ns // 1_000_000_000, (ns // 1000) % USEC_PER_SEC)


class Stopwatch:
    """Context manager measuring the wall-clock time of a block."""

    def __init__(self):
        self._start: Optional[tuple[int, int]] = None
        self._stop: Optional[tuple[int, int]] = None

    def __enter__(self) -> 'Stopwatch':
        self._start = _now()
        self._stop = None
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._stop = _now()

    @property
    def elapsed(self) -> Duration:
        """Elapsed time, up to now if the block is still running."""
        if self._start is None:
            return Duration(0, 0)
        stop = self._stop if self._stop is not None else _now()
        return timeval_sub(stop, self._start)
