"""Wall-clock timing helpers for the experiment runner."""

from __future__ import annotations

import contextlib
import time
from dataclasses import dataclass
from typing import Callable, Generator, Tuple, TypeVar

T = TypeVar("T")


@dataclass
class TimerResult:
    """Result of a timed execution block.

    Attributes
    ----------
    seconds : float
        Elapsed wall-clock time in seconds.
    """

    seconds: float


@contextlib.contextmanager
def timer() -> Generator[TimerResult, None, None]:
    """Context manager measuring the enclosed block with ``perf_counter``.

    Example
    -------
    >>> with timer() as t:
    ...     engine.compute(a, rank=32)
    >>> print(t.seconds)
    """

    start = time.perf_counter()
    result = TimerResult(seconds=0.0)
    try:
        yield result
    finally:
        result.seconds = float(time.perf_counter() - start)


def time_function(func: Callable[[], T], repeats: int = 1) -> Tuple[T, TimerResult]:
    """Time a zero-argument function and return its last result and best timing.

    Parameters
    ----------
    func:
        Callable with no arguments.
    repeats:
        Number of runs; the fastest one is reported.

    Returns
    -------
    (result, TimerResult)
        The function's return value and a ``TimerResult`` structure.
    """

    if repeats < 1:
        raise ValueError("repeats must be at least 1")
    best = TimerResult(seconds=float("inf"))
    value = None
    for _ in range(repeats):
        with timer() as t:
            value = func()
        if t.seconds < best.seconds:
            best = t
    return value, best  # type: ignore[return-value]
