"""
Console logging for copyfiles

Every line is prefixed with the wall-clock time. Debug details (cache hits,
per-child removals, retry waits) only show with --verbose and carry a short
[tag] naming the step that produced them.
"""
from datetime import datetime
from typing import Optional

_verbose = False


def set_verbose(verbose: bool):
    global _verbose
    _verbose = verbose


def log(msg: str):
    ts = datetime.now().strftime("%H:%M:%S")
    print(f"[{ts}] {msg}", flush=True)


def vlog(msg: str, tag: Optional[str] = None):
    """Verbose-only log line; *tag* names the step (find, mkdir, clean, retry …)"""
    if _verbose:
        log(f"  [{tag}] {msg}" if tag else msg)


def warn(msg: str):
    log(f"⚠  {msg}")


def attempt_failed(label: str, exc: BaseException, remaining: int, delay_ms: int = 0):
    """Report one failed attempt of a retried operation."""
    warn(f"Error while {label}: {exc}. Remaining attempts: {remaining}")
    if remaining > 0 and delay_ms > 0:
        vlog(f"waiting {delay_ms} ms before retrying {label}", tag="retry")
