"""
Retry helpers for filesystem operations
"""
import time
from typing import Callable, TypeVar

from .logging import attempt_failed
from .file_utils import PathKind, PathState, stat_path
from ..errors import RetryExhaustedError

T = TypeVar("T")


def run_with_retry(operation: Callable[[], T], retry_count: int, delay_ms: int,
                   label: str, fatal: tuple = (),
                   sleep: Callable[[float], None] = time.sleep) -> T:
    """
    Run *operation* up to retry_count + 1 times, waiting delay_ms between attempts.

    Exceptions listed in *fatal* propagate immediately and do not consume the
    budget. When every attempt fails a RetryExhaustedError is raised, chained to
    the last underlying exception.
    """
    attempts = max(retry_count, 0) + 1
    remaining = attempts
    while True:
        try:
            return operation()
        except fatal:
            raise
        except Exception as exc:
            remaining -= 1
            attempt_failed(label, exc, remaining, delay_ms)
            if remaining <= 0:
                raise RetryExhaustedError(label, attempts, exc) from exc
            if delay_ms > 0:
                sleep(delay_ms / 1000.0)


def stat_or_absent(path: str, retry_count: int, delay_ms: int,
                   sleep: Callable[[float], None] = time.sleep) -> PathState:
    """
    Stat *path*, retrying transient errors.

    "Does not exist" is not an error: it comes back as an ABSENT state straight
    away and never touches the retry budget.
    """

    def _stat() -> PathState:
        try:
            return stat_path(path)
        except (FileNotFoundError, NotADirectoryError):
            return PathState(PathKind.ABSENT)

    return run_with_retry(_stat, retry_count, delay_ms, f"stats {path}", sleep=sleep)
