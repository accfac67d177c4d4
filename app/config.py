"""
goal: configuration loader for revstamp. loads settings from a JSON file (revstamp.json in the base
      directory) and REVSTAMP_* environment variables, with sensible defaults. returns a frozen
      Config dataclass with the manifest path and git settings the console needs.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

log = logging.getLogger("revstamp.config")

CONFIG_FILE_NAME = "revstamp.json"
ENV_PREFIX = "REVSTAMP_"


# the tool works on whatever repository it is run from
def _resolve_base_dir() -> Path:
    env = os.getenv(f"{ENV_PREFIX}BASE_DIR")
    if env:
        return Path(env).expanduser().resolve()
    return Path.cwd()


# frozen dataclass to hold all config values (immutable once created)
@dataclass(frozen=True)
class Config:
    base_dir: Path  # repository root, git runs here
    manifest_path: Path  # manifest to stamp
    version_field: str  # manifest key holding the version
    git_executable: str  # git binary name or path
    git_timeout: float  # max seconds to wait for git
    abbrev: int  # short hash length, 0 = git default
    log_level: str  # DEBUG / INFO / WARNING / ERROR


# turn a raw env/JSON value into the type of its default, warn and use the default when it won't fit
def _coerce(value, default, source: str):
    # bool is an int subclass, null/true/false in JSON are never a valid setting here
    if value is None or isinstance(value, bool):
        log.warning("ignoring %s=%r: wrong type", source, value)
        return default
    if isinstance(default, int):
        try:
            return int(value)
        except (TypeError, ValueError):
            log.warning("ignoring %s=%r: not an integer", source, value)
            return default
    if isinstance(default, float):
        try:
            return float(value)
        except (TypeError, ValueError):
            log.warning("ignoring %s=%r: not a number", source, value)
            return default
    if not isinstance(value, str):
        log.warning("ignoring %s=%r: not a string", source, value)
        return default
    return value


# get a config value with priority: environment variable > JSON file > default
def _get(obj: dict, key: str, default):
    # check for environment variable first (REVSTAMP_* prefix)
    env = os.getenv(f"{ENV_PREFIX}{key.upper()}")
    if env is not None:
        return _coerce(env, default, f"{ENV_PREFIX}{key.upper()}")
    # fall back to JSON file value, or default if not found
    if key not in obj:
        return default
    return _coerce(obj[key], default, f"{CONFIG_FILE_NAME}:{key}")


def _read_config_file(cfg_file: Path) -> dict:
    if not cfg_file.exists():
        return {}
    try:
        obj = json.loads(cfg_file.read_text(encoding="utf-8") or "{}")
    except (OSError, ValueError) as e:
        # if JSON is broken, just use empty dict (all defaults)
        log.warning("ignoring %s: %s", cfg_file, e)
        return {}
    if not isinstance(obj, dict):
        log.warning("ignoring %s: top level is not an object", cfg_file)
        return {}
    return obj


# load configuration from JSON file and environment variables
def load_config(base_dir: Path | None = None) -> Config:
    base = Path(base_dir) if base_dir is not None else _resolve_base_dir()
    obj = _read_config_file(base / CONFIG_FILE_NAME)

    # each value checks: env var > JSON file > default
    # absolute manifest paths survive the join unchanged
    return Config(
        base_dir=base,
        manifest_path=base / _get(obj, "manifest_path", "package.json"),
        version_field=_get(obj, "version_field", "version"),
        git_executable=_get(obj, "git_executable", "git"),
        git_timeout=_get(obj, "git_timeout", 10.0),
        abbrev=_get(obj, "abbrev", 0),
        log_level=_get(obj, "log_level", "INFO").upper(),
    )
