"""
Clean target folder: empty (or remove) the target root before copying
"""
import os
import time
from typing import Callable

from ..utils.file_utils import list_dir, remove_path
from ..utils.logging import log, vlog
from ..utils.retry import run_with_retry, stat_or_absent


def clean_target_folder(target_root: str, retry_count: int = 0, delay_ms: int = 0,
                        sleep: Callable[[float], None] = time.sleep) -> bool:
    """
    Remove the children of *target_root*, or *target_root* itself when it is not
    a directory. The root directory is kept so its permissions, ACLs or mount
    point survive.

    Listing + removal loop is retried as one unit; a retry starts over from a
    fresh listing, which is fine because removing a missing entry is a no-op.
    Returns False when there was nothing to clean.
    """
    log(f"Cleaning target folder: {target_root}")

    state = stat_or_absent(target_root, retry_count, delay_ms, sleep=sleep)
    if not state.exists:
        vlog(f"{target_root} does not exist, nothing to clean", tag="clean")
        return False

    if state.is_dir:
        def _remove_children():
            for name in list_dir(target_root):
                item = os.path.join(target_root, name)
                run_with_retry(lambda: remove_path(item), retry_count, delay_ms,
                               f"removing of {item}", sleep=sleep)
                vlog(f"removed {item}", tag="clean")

        run_with_retry(_remove_children, retry_count, delay_ms,
                       f"reading of {target_root}", sleep=sleep)
    else:
        run_with_retry(lambda: remove_path(target_root), retry_count, delay_ms,
                       f"removing of {target_root}", sleep=sleep)
        vlog(f"removed {target_root}", tag="clean")
    return True
