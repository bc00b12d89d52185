"""
Source discovery: walk the source folder and select files by Contents patterns
"""
import os
import sys

from ..errors import BrokenSymlinkError, ConfigError
from ..utils.logging import vlog
from ..utils.patterns import match


def find(root: str, follow_symlinks: bool = True, allow_broken_symlinks: bool = True) -> list[str]:
    """
    Return every path under *root* (root included), directories before their
    children, siblings in sorted order.
    """
    if not os.path.isdir(root):
        raise ConfigError(f"source folder does not exist or is not a directory: {root}")

    result = [root]

    def _walk(folder: str, ancestors: frozenset):
        for name in sorted(os.listdir(folder)):
            path = os.path.join(folder, name)
            result.append(path)
            if os.path.islink(path):
                if not os.path.exists(path):
                    if not allow_broken_symlinks:
                        raise BrokenSymlinkError(path)
                    vlog(f"broken symlink {path}", tag="find")
                    continue
                if not follow_symlinks:
                    continue
            if os.path.isdir(path):
                # a cycle is a link back into the current ancestor chain
                real = os.path.realpath(path)
                if real in ancestors:
                    vlog(f"symlink cycle at {path}", tag="find")
                    continue
                _walk(path, ancestors | {real})

    _walk(root, frozenset([os.path.realpath(root)]))
    return result


def select_files(root: str, patterns: list[str], follow_symlinks: bool = True,
                 allow_broken_symlinks: bool = True, platform: str = sys.platform) -> list[str]:
    """find → match → drop directories; the ordered FileSelection for one run."""
    all_paths = find(root, follow_symlinks, allow_broken_symlinks)
    matched = match(all_paths, patterns, root, platform)
    return [p for p in matched if not os.path.isdir(p)]
