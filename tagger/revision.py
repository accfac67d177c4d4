# SPDX-License-Identifier: GPL-3.0-or-later
"""
goal: finds out which revision we're building. GitRevisionSource asks git for the short hash of
HEAD (same as `git show -s --format=%h`), StaticRevisionSource just hands back whatever the
caller passed in (handy for CI where the hash is already in an env var, and for tests) after
checking it with validate_revision.
anything that goes wrong with git turns into RevisionUnavailable.
"""

from __future__ import annotations  # lets us use string annotations before classes are defined

import logging  # for debug output of the git command
import os  # for the default working directory
import subprocess  # for running git
from typing import Protocol  # structural type for anything that can give us a revision

from tagger.errors import RevisionUnavailable
from tagger.version_tagger import validate_revision

log = logging.getLogger("revstamp.revision")


class RevisionSource(Protocol):
    def current_revision(self) -> str: ...


class StaticRevisionSource:
    """returns a fixed revision given up front"""

    def __init__(self, revision: str) -> None:
        self.revision = revision

    def current_revision(self) -> str:
        # a caller-supplied value is checked like any other revision: "" is InvalidRevision
        return validate_revision(self.revision)


class GitRevisionSource:
    """Reads the abbreviated commit hash of HEAD from git."""

    def __init__(
        self,
        repo_dir: str | os.PathLike[str] | None = None,
        git: str = "git",
        abbrev: int = 0,
        timeout: float = 10.0,
    ) -> None:
        """
        :param repo_dir: directory git runs in (defaults to the current directory)
        :param git: git executable name or path
        :param abbrev: hash length, 0 means whatever git's core.abbrev says
        :param timeout: seconds to wait for git before giving up
        """
        self.repo_dir = os.fspath(repo_dir) if repo_dir is not None else os.getcwd()
        self.git = git
        self.abbrev = abbrev
        self.timeout = timeout

    def command(self) -> list[str]:
        cmd = [self.git, "show", "-s", "--format=%h"]  # -s: no diff, just the formatted line
        if self.abbrev > 0:
            cmd.insert(2, f"--abbrev={self.abbrev}")
        return cmd

    def current_revision(self) -> str:
        cmd = self.command()
        log.debug("running %s in %s", " ".join(cmd), self.repo_dir)
        try:
            proc = subprocess.run(
                cmd,
                cwd=self.repo_dir,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )  # run git, capture output, never wait forever
        except FileNotFoundError as e:  # git isn't installed, or repo_dir doesn't exist
            raise RevisionUnavailable(f"cannot run {self.git!r} in {self.repo_dir}: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise RevisionUnavailable(f"git did not answer within {self.timeout}s") from e
        except OSError as e:  # permission denied and friends
            raise RevisionUnavailable(f"cannot run {self.git!r}: {e}") from e

        if proc.returncode != 0:
            # usually "not a git repository" or a repo with no commits yet
            detail = (proc.stderr or "").strip() or f"exit status {proc.returncode}"
            raise RevisionUnavailable(f"git failed in {self.repo_dir}: {detail}")

        revision = (proc.stdout or "").strip()
        if not revision:
            raise RevisionUnavailable(f"git printed no revision in {self.repo_dir}")
        log.debug("current revision is %s", revision)
        return revision
