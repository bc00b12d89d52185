"""
Copy engine - orchestration of one reconciliation run
"""
import os
import sys
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..config import ReconciliationConfig
from ..errors import CopyFilesError, TargetIsDirectoryError
from ..operations.clean import clean_target_folder
from ..operations.paths import TargetDirectoryCache, ensure_target_directory, map_to_target
from ..operations.scanner import select_files
from ..operations.transfer import CopyOutcome, apply_copy_policy, observe_target
from ..utils.logging import log, vlog, warn
from ..utils.retry import run_with_retry


@dataclass
class CopyResult:
    matched: int = 0
    outcomes: list = field(default_factory=list)  # [(source, target, CopyOutcome), …]
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def counts(self) -> dict:
        tally = {outcome: 0 for outcome in CopyOutcome}
        for _, _, outcome in self.outcomes:
            tally[outcome] += 1
        return tally


def reconcile(files: list[str], config: ReconciliationConfig,
              sleep: Callable[[float], None] = time.sleep,
              platform: str = sys.platform) -> CopyResult:
    """
    Copy the selected *files* into the target folder.

    Order: clean (if requested) → create target root → per file, in selection
    order: create its folder (once per run) and apply the copy policy. Each
    file's sequence is retried as a unit on top of the per-operation retries.
    The run stops at the first file that still fails; files already copied
    stay in place. An empty selection touches nothing.
    """
    result = CopyResult(matched=len(files))
    log(f"Found {len(files)} files")
    if not files:
        return result

    retry_count, delay_ms = config.retry_count, config.retry_delay_ms
    cache = TargetDirectoryCache()

    try:
        if config.clean_target_folder:
            clean_target_folder(config.target_root, retry_count, delay_ms, sleep=sleep)

        ensure_target_directory(config.target_root, cache, retry_count, delay_ms, sleep=sleep)

        for source_file in files:
            target_path = map_to_target(source_file, config.source_root,
                                        config.target_root, config.flatten_folders)

            observed = {}

            def _process_file():
                ensure_target_directory(os.path.dirname(target_path), cache,
                                        retry_count, delay_ms, sleep=sleep)
                # settled on the first pass: later passes may see our own partial write
                if "state" not in observed:
                    observed["state"] = observe_target(target_path, config, sleep=sleep)
                return apply_copy_policy(source_file, target_path, config, sleep=sleep,
                                         platform=platform, state=observed["state"])

            outcome = run_with_retry(_process_file, retry_count, delay_ms,
                                     f"processing {source_file}",
                                     fatal=(TargetIsDirectoryError,), sleep=sleep)
            result.outcomes.append((source_file, target_path, outcome))
            vlog(target_path, tag=outcome.value)

    except CopyFilesError as exc:
        warn(f"Copy failed: {exc}")
        result.error = exc

    return result


def run_copy(config: ReconciliationConfig,
             sleep: Callable[[float], None] = time.sleep,
             platform: str = sys.platform) -> CopyResult:
    """Select the source files by pattern, then reconcile the target folder."""
    print(f"\n{'=' * 64}")
    print(f"  Copy  {config.source_root}")
    print(f"   →   {config.target_root}")
    print(f"{'=' * 64}")
    print()

    try:
        files = select_files(config.source_root, list(config.contents),
                             follow_symlinks=config.follow_symlinks,
                             allow_broken_symlinks=config.allow_broken_symlinks,
                             platform=platform)
    except CopyFilesError as exc:
        warn(f"Copy failed: {exc}")
        return CopyResult(error=exc)

    return reconcile(files, config, sleep=sleep, platform=platform)


def print_summary(result: CopyResult):
    counts = result.counts()
    print()
    print(f"{'─' * 64}")
    print(" SUMMARY")
    print(f"  Matched     : {result.matched}")
    print(f"  Copied      : {counts[CopyOutcome.COPIED]}")
    print(f"  Overwritten : {counts[CopyOutcome.OVERWRITTEN]}")
    print(f"  Skipped     : {counts[CopyOutcome.SKIPPED]}")
    print(f"{'─' * 64}")
    if not result.succeeded:
        print()
        print(f"⚠  FAILED: {result.error}")
