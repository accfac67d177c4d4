# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: marks a semantic version as built from a specific revision. takes "major.minor.patch" (with
or without an old pre-release/build suffix), throws the suffix away and puts the revision in as
the new pre-release label: ("2.0.0-beta", "9f8e7d6") -> "2.0.0-9f8e7d6". pure functions only,
nothing here touches git or the filesystem.
"""

from __future__ import annotations  # lets us use string annotations before classes are defined

import re  # for validating version components and revision tokens
from dataclasses import dataclass  # for the immutable version record

from tagger.errors import InvalidRevision, MalformedVersion

# each release component is plain ASCII digits (no sign, no whitespace)
_NUMERIC_RE = re.compile(r"[0-9]+")
# pre-release identifier alphabet: no dots, no whitespace, no "+"
_REVISION_RE = re.compile(r"[0-9A-Za-z-]+")


def _split(text: str) -> tuple[tuple[int, int, int], str, str]:
    """read major.minor.patch off the front of `text`, return it with the "-" and the label after it"""
    if not isinstance(text, str):  # manifests can hold numbers or null in the version field
        raise MalformedVersion(f"version must be a string, got {type(text).__name__}")

    core, _, _build = text.partition("+")  # build metadata never matters to us
    release, sep, prerelease = core.partition("-")  # first "-" starts the pre-release label

    parts = release.split(".")
    if len(parts) != 3:
        raise MalformedVersion(
            f"{text!r} does not have exactly three dot-separated components"
        )
    for part in parts:
        if not _NUMERIC_RE.fullmatch(part):
            raise MalformedVersion(f"{text!r}: component {part!r} is not a non-negative integer")

    major, minor, patch = (int(p) for p in parts)
    return (major, minor, patch), sep, prerelease


# frozen dataclass so a parsed version can't be changed after the fact
@dataclass(frozen=True)
class SemanticVersion:
    major: int  # release line: major
    minor: int  # release line: minor
    patch: int  # release line: patch
    prerelease: str | None = None  # label after the "-", None for a plain release

    @classmethod
    def parse(cls, text: str) -> SemanticVersion:
        """
        parse "major.minor.patch[-prerelease][+build]". build metadata is dropped, the
        pre-release label is kept. raises MalformedVersion on anything else.
        """
        release, sep, prerelease = _split(text)

        label: str | None = None
        if sep:
            # an empty label ("1.2.3-") or one with whitespace is not a valid pre-release
            if not prerelease or any(ch.isspace() for ch in prerelease):
                raise MalformedVersion(f"{text!r} has an invalid pre-release label")
            label = prerelease

        return cls(*release, label)

    @property
    def release(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def with_prerelease(self, label: str | None) -> SemanticVersion:
        return SemanticVersion(self.major, self.minor, self.patch, label)

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}-{self.prerelease}" if self.prerelease else base


def parse_version(text: str) -> SemanticVersion:
    return SemanticVersion.parse(text)


def parse_release(text: str) -> SemanticVersion:
    """
    read only the release line of `text`. whatever follows the first "-" or "+" is dropped
    without being checked, so "1.2.3-" and "1.2.3-has space" both give 1.2.3.
    """
    release, _, _ = _split(text)
    return SemanticVersion(*release)


def validate_revision(revision: str) -> str:
    """return the revision unchanged, or raise InvalidRevision if it can't be a pre-release label"""
    if not isinstance(revision, str) or not revision:
        raise InvalidRevision("revision must be a non-empty string")
    if not _REVISION_RE.fullmatch(revision):
        raise InvalidRevision(
            f"revision {revision!r} may only contain letters, digits and '-' "
            "(no '.', whitespace or '+')"
        )
    return revision


def tag_with_revision(version: SemanticVersion | str, revision: str) -> SemanticVersion:
    """
    replace the pre-release label of `version` with `revision`, keeping major.minor.patch.
    accepts either a SemanticVersion or its string form; str() of the result is the
    canonical "major.minor.patch-revision".
    """
    # revision errors are reported before version errors
    rev = validate_revision(revision)
    # the old label is thrown away, so only the release line has to be valid
    parsed = version if isinstance(version, SemanticVersion) else parse_release(version)
    return parsed.with_prerelease(rev)
