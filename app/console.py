# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: command line entry point for revstamp. reads config (+ .env), asks git for the current short
hash, stamps it onto the manifest's version as a pre-release label and prints one status line.
errors from the tagger, git or the manifest are logged and turned into exit code 1; argparse
handles bad flags with exit code 2.
"""

from __future__ import annotations  # lets us use string annotations before classes are defined

import argparse  # for parsing command line arguments
import logging  # for status and error messages
import os  # for the NO_COLOR convention
import sys  # for stdout/stderr
from importlib.metadata import PackageNotFoundError, version  # for --version
from pathlib import Path  # for working with file paths
from typing import TextIO  # type hint for output streams

import colorama  # ANSI colors on Windows terminals
from dotenv import find_dotenv, load_dotenv  # REVSTAMP_* settings from a .env file

from app.config import load_config
from tagger.errors import TaggingError
from tagger.revision import GitRevisionSource, RevisionSource, StaticRevisionSource
from tagger.stamp import StampResult, stamp_manifest

PROG = "revstamp"

log = logging.getLogger("revstamp.console")

# ANSI codes, same palette as the rest of the terminal output
_PALETTE = {
    "cyan": "\x1b[36m",
    "mag": "\x1b[35m",
    "red": "\x1b[31m",
    "yellow": "\x1b[33m",
    "green": "\x1b[32m",
    "dim": "\x1b[2m",
    "reset": "\x1b[0m",
}


def _use_color(stream: TextIO) -> bool:
    # respect https://no-color.org and don't send escape codes into pipes or files
    if os.getenv("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def _colors(enabled: bool) -> dict[str, str]:
    if not enabled:
        return {k: "" for k in _PALETTE}  # empty strings so the output still works without colors
    colorama.just_fix_windows_console()  # enable ANSI codes on Windows, no-op elsewhere
    return dict(_PALETTE)


class ColoredLevelFormatter(logging.Formatter):
    """message-only formatter, warnings and errors get a colored prefix"""

    def __init__(self, use_color: bool = False) -> None:
        super().__init__("%(message)s")
        self.c = _colors(use_color)

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        c = self.c
        if record.levelno >= logging.ERROR:
            return f"{c['red']}error:{c['reset']} {msg}"
        if record.levelno >= logging.WARNING:
            return f"{c['yellow']}warning:{c['reset']} {msg}"
        if record.levelno <= logging.DEBUG:
            return f"{c['dim']}{msg}{c['reset']}"
        return msg


def setup_logging(level: str | int = logging.INFO, stream: TextIO | None = None) -> logging.Logger:
    """configure the "revstamp" logger tree: one handler, no propagation to the root logger"""
    stream = stream if stream is not None else sys.stderr
    root = logging.getLogger("revstamp")
    for h in list(root.handlers):  # calling main() twice must not double every message
        root.removeHandler(h)
    handler = logging.StreamHandler(stream)
    handler.setFormatter(ColoredLevelFormatter(use_color=_use_color(stream)))
    root.addHandler(handler)
    if not isinstance(level, int):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):  # unknown names come back as "Level FOO"
            level = logging.INFO
    root.setLevel(level)
    root.propagate = False  # prevent duplicate messages
    return root


def _package_version() -> str:
    try:
        return version(PROG)
    except PackageNotFoundError:  # running from a source checkout that was never installed
        return "0+unknown"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Append the current git short hash to a manifest's version as a pre-release label.",
    )
    parser.add_argument(
        "--manifest",
        type=Path,
        help="manifest to stamp (default: manifest_path from config, package.json)",
    )
    parser.add_argument(
        "--repo",
        type=Path,
        help="repository directory; git runs here and revstamp.json is read from here",
    )
    parser.add_argument(
        "--revision",
        help="use this revision instead of asking git",
    )
    parser.add_argument(
        "--field",
        help="manifest key that holds the version (default: version)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="print the new version without writing the manifest",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-q", "--quiet", action="store_true", help="only print the new version")
    verbosity.add_argument("-v", "--verbose", action="store_true", help="show git and file details")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")
    return parser


def print_result(result: StampResult, quiet: bool = False, stream: TextIO | None = None) -> None:
    stream = stream if stream is not None else sys.stdout
    if quiet:
        print(result.new_version, file=stream)  # bare value for shell scripts
        return
    c = _colors(_use_color(stream))
    note = f" {c['dim']}(dry run){c['reset']}" if not result.written else ""
    print(
        f"{c['mag']}⬩{c['reset']}{c['cyan']}➢ {c['reset']}{result.path}: "
        f"{result.old_version} -> {c['green']}{result.new_version}{c['reset']}{note}",
        file=stream,
    )


def main(argv: list[str] | None = None) -> int:
    # load .env from the directory we're run in (never overrides real env vars)
    load_dotenv(find_dotenv(usecwd=True))

    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging()  # early handler so config warnings are visible
    cfg = load_config(args.repo.resolve() if args.repo else None)

    if args.verbose:
        setup_logging(logging.DEBUG)
    elif args.quiet:
        setup_logging(logging.WARNING)
    else:
        setup_logging(cfg.log_level)

    manifest_path = args.manifest if args.manifest is not None else cfg.manifest_path
    field = args.field or cfg.version_field

    source: RevisionSource
    if args.revision is not None:
        source = StaticRevisionSource(args.revision)
    else:
        source = GitRevisionSource(
            cfg.base_dir,
            git=cfg.git_executable,
            abbrev=cfg.abbrev,
            timeout=cfg.git_timeout,
        )

    try:
        result = stamp_manifest(manifest_path, source, field=field, dry_run=args.dry_run)
    except TaggingError as e:
        log.error("%s: %s", e.kind, e)
        return 1

    print_result(result, quiet=args.quiet)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())  # run main function if this script is executed directly
