"""
Per-file copy decisions (skip / copy / overwrite) and timestamp propagation
"""
import enum
import sys
import time
from typing import Callable, Optional

from ..config import ReconciliationConfig
from ..errors import CopyFilesError, TargetIsDirectoryError
from ..utils.file_utils import (PathKind, PathState, clear_read_only, copy_file,
                                set_times, stat_path, target_is_writable)
from ..utils.logging import log, vlog, warn
from ..utils.retry import run_with_retry, stat_or_absent


class CopyOutcome(enum.Enum):
    SKIPPED = "skipped"
    COPIED = "copied"
    OVERWRITTEN = "overwritten"


def propagate_timestamps(source_file: str, target_path: str, retry_count: int = 0,
                         delay_ms: int = 0, sleep: Callable[[float], None] = time.sleep) -> bool:
    """
    Give *target_path* the access/modification times of *source_file*.
    Failures are reported as warnings and never fail the copy.
    """
    try:
        src = run_with_retry(lambda: stat_path(source_file), retry_count, delay_ms,
                             f"stats {source_file}", sleep=sleep)
        run_with_retry(lambda: set_times(target_path, src.stat.st_atime_ns, src.stat.st_mtime_ns),
                       retry_count, delay_ms, f"applying timestamp to {target_path}", sleep=sleep)
    except (CopyFilesError, OSError) as exc:
        warn(f"Problem preserving the timestamp: {exc}")
        return False
    return True


def observe_target(target_path: str, config: ReconciliationConfig,
                   sleep: Callable[[float], None] = time.sleep) -> PathState:
    """
    State of *target_path* before anything is written to it.
    With clean_target_folder the target is known to be absent, so it is not stat'ed.
    """
    if config.clean_target_folder:
        return PathState(PathKind.ABSENT)
    return stat_or_absent(target_path, config.retry_count, config.retry_delay_ms, sleep=sleep)


def apply_copy_policy(source_file: str, target_path: str, config: ReconciliationConfig,
                      sleep: Callable[[float], None] = time.sleep,
                      platform: str = sys.platform,
                      state: Optional[PathState] = None) -> CopyOutcome:
    """
    Decide and perform the action for one file.

    overwrite  target     action
    ---------  ---------  --------------------------------------------
    no         absent     copy
    no         file       skip
    yes        absent     copy
    yes        file       clear read-only attribute if set, then copy
    any        directory  TargetIsDirectoryError (fatal for the run)

    *state* is the target as observed before this run wrote to it; when omitted
    it is observed now. A partial file left by a failed copy must not be taken
    for an existing target, so retries of the same file pass the first state.
    """
    retry_count, delay_ms = config.retry_count, config.retry_delay_ms

    if state is None:
        state = observe_target(target_path, config, sleep=sleep)

    if state.is_dir:
        raise TargetIsDirectoryError(source_file, target_path)

    if not config.overwrite and state.exists:
        log(f"File {source_file} already exists at {target_path}")
        return CopyOutcome.SKIPPED

    log(f"Copying {source_file} to {target_path}")
    if config.overwrite and state.exists and not target_is_writable(state.stat, platform):
        vlog(f"removing readonly attribute on {target_path}", tag="chmod")
        run_with_retry(lambda: clear_read_only(target_path, state.stat), retry_count, delay_ms,
                       f"chmod {target_path}", sleep=sleep)

    run_with_retry(lambda: copy_file(source_file, target_path), retry_count, delay_ms,
                   f"copying {source_file} to {target_path}", sleep=sleep)

    if config.preserve_timestamp:
        propagate_timestamps(source_file, target_path, retry_count, delay_ms, sleep=sleep)

    return CopyOutcome.OVERWRITTEN if state.exists else CopyOutcome.COPIED
