# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: reads and writes package manifests (package.json style JSON objects). the manifest is kept as
the raw dict json gave us, so only the version field changes and every other key keeps its value
and its position. the layout of the original file (indent, trailing newline) is detected on read
and reused on write. writes go to a uniquely named temp file next to the manifest first and are
swapped in with os.replace, so a failed write never leaves a half-written manifest behind.
"""

from __future__ import annotations  # lets us use string annotations before classes are defined

import contextlib  # for best-effort cleanup of the temp file
import json  # manifest format
import logging  # for debug output
import os  # for os.replace
import re  # for sniffing the indentation of the existing file
import shutil  # for copying file permissions onto the replacement
import tempfile  # for a unique temp file next to the manifest
from dataclasses import dataclass, field  # for the manifest record
from pathlib import Path  # for working with file paths
from typing import Any  # type hint for flexible dictionary values

from tagger.errors import (
    ManifestNotFound,
    ManifestParseError,
    ManifestReadError,
    ManifestWriteError,
)

log = logging.getLogger("revstamp.manifest")

DEFAULT_INDENT = 2  # what npm writes
VERSION_FIELD = "version"

# whitespace at the start of the first indented line, e.g. '{\n    "name"' -> "    "
_INDENT_RE = re.compile(r"\A\s*[\[{]\r?\n([ \t]+)\S")


@dataclass
class Manifest:
    path: Path  # where the manifest was read from
    data: dict[str, Any] = field(default_factory=dict)  # raw decoded JSON object
    indent: int | str | None = DEFAULT_INDENT  # None means the file was written on one line
    trailing_newline: bool = True  # whether the file ended with "\n"

    def get_version(self, name: str = VERSION_FIELD) -> str:
        """return the version string, ManifestParseError if it's missing or not a string"""
        if name not in self.data:
            raise ManifestParseError(f"{self.path}: no {name!r} field")
        value = self.data[name]
        if not isinstance(value, str):
            raise ManifestParseError(
                f"{self.path}: {name!r} must be a string, got {type(value).__name__}"
            )
        return value

    def set_version(self, value: str, name: str = VERSION_FIELD) -> None:
        # assigning an existing key keeps its position in the dict
        self.data[name] = str(value)

    def dumps(self) -> str:
        text = json.dumps(self.data, indent=self.indent, ensure_ascii=False)
        return text + "\n" if self.trailing_newline else text


def _detect_indent(text: str) -> int | str | None:
    body = text.strip()
    if "\n" not in body:  # single-line JSON stays single-line
        return None
    m = _INDENT_RE.match(text)
    if not m:
        return DEFAULT_INDENT
    ws = m.group(1)
    # json.dumps takes an int for spaces, a string for anything else (tabs)
    return len(ws) if set(ws) == {" "} else ws


def read_manifest(path: str | os.PathLike[str]) -> Manifest:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ManifestNotFound(f"manifest not found: {p}") from e
    except IsADirectoryError as e:
        raise ManifestNotFound(f"manifest path is a directory: {p}") from e
    except UnicodeDecodeError as e:
        raise ManifestParseError(f"{p}: not valid UTF-8 ({e})") from e
    except OSError as e:  # permissions, I/O errors
        raise ManifestReadError(f"cannot read {p}: {e}") from e

    text = text.lstrip("\ufeff")  # tolerate a BOM from Windows editors
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestParseError(f"{p}: invalid JSON at line {e.lineno} column {e.colno}: {e.msg}") from e
    if not isinstance(data, dict):
        raise ManifestParseError(f"{p}: top level must be a JSON object, got {type(data).__name__}")

    manifest = Manifest(
        path=p,
        data=data,
        indent=_detect_indent(text),
        trailing_newline=text.endswith("\n"),
    )
    log.debug("read %s (%d keys, indent=%r)", p, len(data), manifest.indent)
    return manifest


def _umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def write_manifest(path: str | os.PathLike[str], manifest: Manifest) -> None:
    p = Path(path)
    try:
        payload = manifest.dumps()
    except (TypeError, ValueError) as e:  # data we can't turn back into JSON
        raise ManifestWriteError(f"{p}: cannot serialise manifest: {e}") from e

    tmp: Path | None = None
    try:
        # unique name in the same directory, so os.replace stays on one filesystem
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            newline="\n",
            dir=p.parent,
            prefix=f".{p.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp = Path(f.name)
            f.write(payload)
        if p.exists():
            shutil.copymode(p, tmp)  # keep the original file's permissions
        else:
            os.chmod(tmp, 0o666 & ~_umask())  # mkstemp creates 0600, a new manifest gets the usual mode
        os.replace(tmp, p)  # atomic swap on the same filesystem
    except OSError as e:
        if tmp is not None:
            with contextlib.suppress(OSError):
                tmp.unlink()
        raise ManifestWriteError(f"cannot write {p}: {e}") from e
    log.debug("wrote %s (%d bytes)", p, len(payload.encode("utf-8")))
