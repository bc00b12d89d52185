"""
Configuration for copyfiles: defaults, .copyfiles profiles and the per-run config
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from .errors import ConfigError
from .utils.patterns import parse_contents

# ══════════════════════════════════════════════════════════════════════════════
#  DEFAULTS  ── overridden by a .copyfiles profile or command-line flags
# ══════════════════════════════════════════════════════════════════════════════

CONFIG_FILE_NAME = ".copyfiles"

DEFAULT_CONTENTS = ["**"]

CLEAN_TARGET_FOLDER = False
OVERWRITE = False
FLATTEN_FOLDERS = False
PRESERVE_TIMESTAMP = False

# Retry settings: retry count is extra attempts after the first one
RETRY_COUNT = 0
RETRY_DELAY_MS = 0

# Discovery: broken links may sit in the source tree but be filtered out by Contents
FOLLOW_SYMLINKS = True
ALLOW_BROKEN_SYMLINKS = True


def parse_non_negative_int(value, default: int = 0) -> int:
    """
    Parse a count or delay; fractions are truncated (2.7 → 2).
    Negative or non-numeric values clamp to *default*.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        parsed = int(float(str(value).strip()))
    except (ValueError, OverflowError):
        return default
    return parsed if parsed >= 0 else default


def parse_bool(value, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def normalize_root(path: str) -> str:
    """Absolute, normalized, no trailing separator (needed for prefix stripping)."""
    return os.path.normpath(os.path.abspath(os.path.expanduser(str(path))))


@dataclass(frozen=True)
class ReconciliationConfig:
    source_root: str
    target_root: str
    contents: tuple = tuple(DEFAULT_CONTENTS)
    clean_target_folder: bool = CLEAN_TARGET_FOLDER
    overwrite: bool = OVERWRITE
    flatten_folders: bool = FLATTEN_FOLDERS
    preserve_timestamp: bool = PRESERVE_TIMESTAMP
    retry_count: int = RETRY_COUNT
    retry_delay_ms: int = RETRY_DELAY_MS
    follow_symlinks: bool = FOLLOW_SYMLINKS
    allow_broken_symlinks: bool = ALLOW_BROKEN_SYMLINKS


def build_config(profile: Optional[dict] = None, **overrides) -> ReconciliationConfig:
    """
    Merge a profile dict with keyword overrides (None values are ignored) and
    validate the result into an immutable ReconciliationConfig.
    """
    merged = dict(profile or {})
    merged.update({k: v for k, v in overrides.items() if v is not None})

    source = merged.get("source")
    target = merged.get("target")
    if not source:
        raise ConfigError("source folder is required")
    if not target:
        raise ConfigError("target folder is required")

    contents = parse_contents(merged.get("contents")) or list(DEFAULT_CONTENTS)

    return ReconciliationConfig(
        source_root=normalize_root(source),
        target_root=normalize_root(target),
        contents=tuple(contents),
        clean_target_folder=parse_bool(merged.get("clean"), CLEAN_TARGET_FOLDER),
        overwrite=parse_bool(merged.get("overwrite"), OVERWRITE),
        flatten_folders=parse_bool(merged.get("flatten"), FLATTEN_FOLDERS),
        preserve_timestamp=parse_bool(merged.get("preserve_timestamp"), PRESERVE_TIMESTAMP),
        retry_count=parse_non_negative_int(merged.get("retry_count"), RETRY_COUNT),
        retry_delay_ms=parse_non_negative_int(merged.get("retry_delay_ms"), RETRY_DELAY_MS),
        follow_symlinks=parse_bool(merged.get("follow_symlinks"), FOLLOW_SYMLINKS),
        allow_broken_symlinks=parse_bool(merged.get("allow_broken_symlinks"), ALLOW_BROKEN_SYMLINKS),
    )


# ══════════════════════════════════════════════════════════════════════════════
#  GLOBAL CONFIG FILE  ── $XDG_CONFIG_HOME/copyfiles/config.yaml
# ══════════════════════════════════════════════════════════════════════════════

def get_global_config_dir() -> Path:
    """Return the global config directory for copyfiles."""
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    if xdg:
        return Path(xdg) / "copyfiles"
    if os.name == "nt":
        appdata = os.environ.get("APPDATA", "")
        if appdata:
            return Path(appdata) / "copyfiles"
    return Path.home() / ".config" / "copyfiles"


def load_global_config() -> dict:
    """Load the global config; a missing or unreadable file yields {}."""
    cfg_path = get_global_config_dir() / "config.yaml"
    if not cfg_path.is_file():
        return {}
    try:
        with cfg_path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}


# ══════════════════════════════════════════════════════════════════════════════
#  PROJECT CONFIG FILE  ── .copyfiles (searched upward)
# ══════════════════════════════════════════════════════════════════════════════

def find_copyfiles(start: Optional[Path] = None) -> Optional[Path]:
    """
    Search upward from *start* (default: cwd) for a .copyfiles YAML file.
    Returns the Path if found, or None if no parent has one.
    """
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_copyfiles_file(path: Path) -> dict:
    """Parse a .copyfiles YAML file and return its contents as a dict."""
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"cannot parse {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping")
    return data


def get_profile(data: dict, profile_name: str = "default") -> dict:
    """
    Extract a named profile from a .copyfiles or config.yaml data dict.
    Falls back to the first profile if the named one is not found.
    Returns a flat profile dict merged with top-level defaults.
    """
    defaults = data.get("defaults", {}) or {}
    profiles = data.get("profiles", []) or []
    if not profiles:
        return dict(defaults)
    profile = next((p for p in profiles if p.get("name") == profile_name), None)
    if profile is None:
        profile = profiles[0]
    merged = dict(defaults)
    merged.update(profile)
    return merged


def resolve_profile_paths(profile: dict, base_dir: Path) -> dict:
    """Make relative source/target entries relative to *base_dir*."""
    resolved = dict(profile)
    for key in ("source", "target"):
        value = resolved.get(key)
        if value and not Path(str(value)).expanduser().is_absolute():
            resolved[key] = str(base_dir / str(value))
    return resolved
