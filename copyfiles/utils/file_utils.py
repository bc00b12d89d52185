"""
Filesystem primitives (stat, mkdir, remove, copy, chmod, utime)
"""
import enum
import os
import shutil
import stat
import sys
from dataclasses import dataclass
from typing import Optional

# "-w--w--w-": on Windows the mode reports r--r--r-- when the read-only attribute is set
WRITE_BITS = stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH


class PathKind(enum.Enum):
    ABSENT = "absent"
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class PathState:
    """Observed state of a path; *stat* is only set when the path exists."""
    kind: PathKind
    stat: Optional[os.stat_result] = None

    @property
    def exists(self) -> bool:
        return self.kind is not PathKind.ABSENT

    @property
    def is_dir(self) -> bool:
        return self.kind is PathKind.DIRECTORY


def stat_path(path: str) -> PathState:
    """Stat *path* (following symlinks). Raises FileNotFoundError when missing."""
    st = os.stat(path)
    kind = PathKind.DIRECTORY if stat.S_ISDIR(st.st_mode) else PathKind.FILE
    return PathState(kind, st)


def make_dirs(path: str):
    """mkdir -p; an existing directory is not an error"""
    os.makedirs(path, exist_ok=True)


def list_dir(path: str) -> list[str]:
    return sorted(os.listdir(path))


def remove_path(path: str):
    """rm -rf: removes a file, link or directory tree. Missing paths are ignored."""
    try:
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        else:
            os.remove(path)
    except FileNotFoundError:
        pass


def copy_file(src: str, dst: str):
    """Copy file contents byte-for-byte, replacing *dst* if it exists."""
    shutil.copyfile(src, dst)


def set_times(path: str, atime_ns: int, mtime_ns: int):
    os.utime(path, ns=(atime_ns, mtime_ns))


def change_mode(path: str, mode: int):
    os.chmod(path, mode)


def target_is_writable(st: os.stat_result, platform: str = sys.platform) -> bool:
    """
    False when the file carries the Windows read-only attribute.
    POSIX permission bits are left alone: only Windows has the attribute.
    """
    if platform != "win32":
        return True
    return (st.st_mode & WRITE_BITS) == WRITE_BITS


def clear_read_only(path: str, st: os.stat_result):
    """Drop the read-only attribute by turning the write bits back on."""
    change_mode(path, stat.S_IMODE(st.st_mode) | WRITE_BITS)
