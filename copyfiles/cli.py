#!/usr/bin/env python3
"""
copyfiles  -  Copy files matching glob patterns into a target folder, retrying flaky I/O
========================================================================================

Subcommands:
  init      Create a .copyfiles config file in the current directory.
  copy      Copy files using the nearest .copyfiles profile and/or flags.

Run 'copyfiles <subcommand> --help' for more details.
"""
import sys
import argparse
from pathlib import Path


# ── init ─────────────────────────────────────────────────────────────────────

def cmd_init(args):
    """Create a .copyfiles profile file in the current directory."""
    import yaml
    from copyfiles import config as _cfg

    target = Path.cwd() / _cfg.CONFIG_FILE_NAME

    if target.exists() and not args.force:
        print(f"error: {_cfg.CONFIG_FILE_NAME} already exists in {Path.cwd()}", file=sys.stderr)
        print("Use --force to overwrite.", file=sys.stderr)
        sys.exit(1)

    g_defaults = _cfg.load_global_config().get("defaults", {}) or {}

    source = args.source or g_defaults.get("source") or "."
    dest = args.target or g_defaults.get("target")
    if not dest and sys.stdin.isatty():
        dest = input("Target folder: ").strip()
    if not dest:
        print("error: target folder is required.", file=sys.stderr)
        sys.exit(1)

    profile = {
        "name": args.profile or "default",
        # forward slashes avoid YAML backslash escapes on Windows
        "source": str(source).replace("\\", "/"),
        "target": str(dest).replace("\\", "/"),
        "contents": args.contents or g_defaults.get("contents") or list(_cfg.DEFAULT_CONTENTS),
        "clean": bool(g_defaults.get("clean", _cfg.CLEAN_TARGET_FOLDER)),
        "overwrite": bool(g_defaults.get("overwrite", _cfg.OVERWRITE)),
        "flatten": bool(g_defaults.get("flatten", _cfg.FLATTEN_FOLDERS)),
        "preserve_timestamp": bool(g_defaults.get("preserve_timestamp", _cfg.PRESERVE_TIMESTAMP)),
        "retry_count": _cfg.parse_non_negative_int(g_defaults.get("retry_count"), _cfg.RETRY_COUNT),
        "retry_delay_ms": _cfg.parse_non_negative_int(g_defaults.get("retry_delay_ms"), _cfg.RETRY_DELAY_MS),
    }

    header = [
        "# .copyfiles: copyfiles project configuration",
        "#",
        "# profiles: list of copy profiles for this project.",
        "# source/target may be relative to the folder holding this file.",
        "# contents: glob patterns relative to source ('!' excludes, '**' spans folders).",
    ]
    content = "\n".join(header) + "\n" + yaml.safe_dump(
        {"profiles": [profile]}, sort_keys=False, default_flow_style=False)

    if args.dry_run:
        print(f"[dry-run] Would write {target}:")
        print(content)
        return

    target.write_text(content, encoding="utf-8")
    print(f"Created {target}")
    if args.verbose:
        print(content)


# ── copy ─────────────────────────────────────────────────────────────────────

def cmd_copy(args):
    """Run a copy using the nearest .copyfiles profile, overridden by flags."""
    import copyfiles.config as _cfg
    from copyfiles.core.copy_engine import run_copy, print_summary
    from copyfiles.errors import ConfigError
    from copyfiles.utils.logging import set_verbose

    set_verbose(args.verbose)

    profile = {}
    config_path = _cfg.find_copyfiles()
    if config_path is not None:
        if args.verbose:
            print(f"[config] Using {config_path}")
        try:
            data = _cfg.load_copyfiles_file(config_path)
        except ConfigError as exc:
            print(f"error: {exc}", file=sys.stderr)
            sys.exit(1)
        profile = _cfg.resolve_profile_paths(_cfg.get_profile(data, args.profile or "default"),
                                             config_path.parent)

    try:
        config = _cfg.build_config(
            profile,
            source=args.source,
            target=args.target,
            contents=args.contents,
            clean=args.clean,
            overwrite=args.overwrite,
            flatten=args.flatten,
            preserve_timestamp=args.preserve_timestamp,
            retry_count=args.retry_count,
            retry_delay_ms=args.retry_delay,
        )
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        if config_path is None:
            print("Pass --source/--target or run 'copyfiles init'.", file=sys.stderr)
        sys.exit(1)

    result = run_copy(config)
    print_summary(result)
    if not result.succeeded:
        sys.exit(1)


# ── main ──────────────────────────────────────────────────────────────────────

def main():
    """CLI entry point for copyfiles"""
    parser = argparse.ArgumentParser(
        prog="copyfiles",
        description="Copy files matching glob patterns into a target folder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # ── init ──────────────────────────────────────────────────────────────────
    init_p = subparsers.add_parser(
        "init",
        help="Create a .copyfiles config file in the current directory",
        description="Create a .copyfiles YAML config file for this project.",
    )
    init_p.add_argument("--source", metavar="PATH",
                        help="Source folder (default: current directory)")
    init_p.add_argument("--target", metavar="PATH",
                        help="Target folder")
    init_p.add_argument("--contents", nargs="+", metavar="PATTERN",
                        help="Glob patterns to copy (default: **)")
    init_p.add_argument("--profile", metavar="NAME", default="default",
                        help="Profile name to create (default: default)")
    init_p.add_argument("--force", action="store_true",
                        help="Overwrite existing .copyfiles")
    init_p.add_argument("-n", "--dry-run", action="store_true",
                        help="Preview without writing files")
    init_p.add_argument("-v", "--verbose", action="store_true",
                        help="Show extra output")

    # ── copy ──────────────────────────────────────────────────────────────────
    copy_p = subparsers.add_parser(
        "copy",
        help="Copy matching files into the target folder",
        description="Copy files using settings from .copyfiles and/or flags.",
    )
    copy_p.add_argument("--profile", metavar="NAME", default="default",
                        help="Profile to use (default: default)")
    copy_p.add_argument("--source", metavar="PATH", help="Source folder")
    copy_p.add_argument("--target", metavar="PATH", help="Target folder")
    copy_p.add_argument("--contents", nargs="+", metavar="PATTERN",
                        help="Glob patterns relative to the source folder")
    copy_p.add_argument("--clean", action="store_true", default=None,
                        help="Empty the target folder before copying")
    copy_p.add_argument("--overwrite", action="store_true", default=None,
                        help="Replace files that already exist in the target")
    copy_p.add_argument("--flatten", action="store_true", default=None,
                        help="Copy every file directly into the target folder")
    copy_p.add_argument("--preserve-timestamp", action="store_true", default=None,
                        help="Give copies the source file's access/modification times")
    copy_p.add_argument("--retry-count", metavar="N", default=None,
                        help="Extra attempts for each failing operation (default: 0)")
    copy_p.add_argument("--retry-delay", metavar="MS", default=None,
                        help="Milliseconds to wait between attempts (default: 0)")
    copy_p.add_argument("-v", "--verbose", action="store_true",
                        help="Show debug details")

    args = parser.parse_args()

    if args.command == "init":
        cmd_init(args)
    elif args.command == "copy":
        cmd_copy(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
