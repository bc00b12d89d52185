"""
Source → target path mapping and target directory creation
"""
import os
import time
from typing import Callable

from ..utils.file_utils import make_dirs
from ..utils.logging import vlog
from ..utils.retry import run_with_retry


def map_to_target(source_file: str, source_root: str, target_root: str, flatten: bool) -> str:
    """
    Target path for *source_file*.

    flatten: target_root/<basename>. Same-named files from different folders
    land on the same target; the last one processed wins.
    Otherwise the path relative to *source_root* is kept. *source_root* must be
    normalized (no trailing separator) for the prefix strip to be right.
    """
    if flatten:
        relative = os.path.basename(source_file)
    else:
        relative = source_file[len(source_root):]
        if relative.startswith(os.sep) or (os.altsep and relative.startswith(os.altsep)):
            relative = relative[1:]
    return os.path.join(target_root, relative)


class TargetDirectoryCache:
    """Directories already created during the current run (write-once per path)."""

    def __init__(self):
        self._created: set[str] = set()

    def __contains__(self, path: str) -> bool:
        return os.path.normpath(path) in self._created

    def __len__(self) -> int:
        return len(self._created)

    def add(self, path: str):
        self._created.add(os.path.normpath(path))


def ensure_target_directory(target_dir: str, cache: TargetDirectoryCache,
                            retry_count: int = 0, delay_ms: int = 0,
                            sleep: Callable[[float], None] = time.sleep) -> bool:
    """
    Create *target_dir* unless this run already did. Returns True when mkdir
    was actually called.
    """
    if target_dir in cache:
        vlog(f"cached {target_dir}", tag="mkdir")
        return False
    run_with_retry(lambda: make_dirs(target_dir), retry_count, delay_ms,
                   f"mkDir of {target_dir}", sleep=sleep)
    cache.add(target_dir)
    return True
