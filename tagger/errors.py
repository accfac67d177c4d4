# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: error types for revstamp. every failure the tagger, the revision source or the manifest store
can raise derives from TaggingError, so the console can catch one type at the top and exit non-zero.
each error also subclasses the builtin it behaves like (ValueError, OSError, ...).
"""

from __future__ import annotations


class TaggingError(Exception):
    """base class for every revstamp failure"""

    kind = "tagging-error"  # short name shown in log output


class MalformedVersion(TaggingError, ValueError):
    """version string does not split into exactly three non-negative integers"""

    kind = "malformed-version"


class InvalidRevision(TaggingError, ValueError):
    """revision is empty or would break semantic-version pre-release syntax"""

    kind = "invalid-revision"


class RevisionUnavailable(TaggingError, RuntimeError):
    """the version-control tool is missing or the directory is not under version control"""

    kind = "revision-unavailable"


class ManifestNotFound(TaggingError, FileNotFoundError):
    kind = "manifest-not-found"


class ManifestReadError(TaggingError, OSError):
    """the manifest exists but can't be read (permissions, I/O errors)"""

    kind = "manifest-read-error"


class ManifestParseError(TaggingError, ValueError):
    kind = "manifest-parse-error"


class ManifestWriteError(TaggingError, OSError):
    kind = "manifest-write-error"
