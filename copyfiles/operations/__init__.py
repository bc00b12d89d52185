"""Operations (discovery, path mapping, clean, copy)"""
from .scanner import find, select_files
from .paths import map_to_target, TargetDirectoryCache, ensure_target_directory
from .clean import clean_target_folder
from .transfer import CopyOutcome, apply_copy_policy, observe_target, propagate_timestamps

__all__ = [
    "find", "select_files",
    "map_to_target", "TargetDirectoryCache", "ensure_target_directory",
    "clean_target_folder",
    "CopyOutcome", "apply_copy_policy", "observe_target", "propagate_timestamps",
]
