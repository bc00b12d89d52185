"""
Exception types raised by copyfiles
"""
from typing import Optional


class CopyFilesError(Exception):
    """Base class for every error copyfiles raises on purpose."""


class ConfigError(CopyFilesError):
    """Configuration is missing or unusable (e.g. the source folder does not exist)."""


class TargetIsDirectoryError(CopyFilesError):
    """A file would be copied onto a path that already exists as a directory."""

    def __init__(self, source: str, target: str):
        super().__init__(f"Cannot copy {source} to {target}: the target is a directory")
        self.source = source
        self.target = target


class BrokenSymlinkError(CopyFilesError):
    """Discovery met a dangling symbolic link and broken links are not allowed."""

    def __init__(self, path: str):
        super().__init__(f"Broken symbolic link: {path}")
        self.path = path


class RetryExhaustedError(CopyFilesError):
    """
    An operation kept failing after every allowed attempt.
    The last underlying exception is chained as __cause__.
    """

    def __init__(self, label: str, attempts: int, last_error: Optional[BaseException] = None):
        super().__init__(f"Error while {label} (gave up after {attempts} attempt(s)): {last_error}")
        self.label = label
        self.attempts = attempts
        self.last_error = last_error
