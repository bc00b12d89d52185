"""Utilities (logging, retry, patterns, filesystem primitives)"""
from .logging import log, vlog, warn, set_verbose, attempt_failed
from .retry import run_with_retry, stat_or_absent
from .patterns import match, parse_contents
from .file_utils import PathKind, PathState

__all__ = [
    "log", "vlog", "warn", "set_verbose", "attempt_failed",
    "run_with_retry", "stat_or_absent",
    "match", "parse_contents",
    "PathKind", "PathState",
]
