# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: the whole job in one call: ask the revision source for the current revision, read the
manifest, tag its version with the revision and write it back. collaborators are passed in, so
nothing here depends on the current directory or on git being installed.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from tagger.manifest import VERSION_FIELD, read_manifest, write_manifest
from tagger.revision import RevisionSource
from tagger.version_tagger import tag_with_revision

log = logging.getLogger("revstamp.stamp")


@dataclass(frozen=True)
class StampResult:
    path: Path  # manifest that was (or would have been) rewritten
    old_version: str  # version field as it was on disk
    new_version: str  # canonical tagged version
    revision: str  # revision that went into the pre-release label
    written: bool  # False for dry runs

    @property
    def changed(self) -> bool:
        return self.old_version != self.new_version


def stamp_manifest(
    manifest_path: str | os.PathLike[str],
    revision_source: RevisionSource,
    field: str = VERSION_FIELD,
    dry_run: bool = False,
) -> StampResult:
    revision = revision_source.current_revision()
    manifest = read_manifest(manifest_path)
    old = manifest.get_version(field)
    new = str(tag_with_revision(old, revision))
    log.debug("%s: %s -> %s", manifest.path, old, new)

    if not dry_run:
        manifest.set_version(new, field)
        write_manifest(manifest.path, manifest)

    return StampResult(
        path=manifest.path,
        old_version=old,
        new_version=new,
        revision=revision,
        written=not dry_run,
    )
