from __future__ import annotations

import json
import shutil
import subprocess
from pathlib import Path
from typing import Any

import pytest

# keeps a developer's own REVSTAMP_* settings out of the tests
_ENV_KEYS = (
    "REVSTAMP_BASE_DIR",
    "REVSTAMP_MANIFEST_PATH",
    "REVSTAMP_VERSION_FIELD",
    "REVSTAMP_GIT_EXECUTABLE",
    "REVSTAMP_GIT_TIMEOUT",
    "REVSTAMP_ABBREV",
    "REVSTAMP_LOG_LEVEL",
    "NO_COLOR",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def make_manifest(tmp_path):
    """Write a package.json-style manifest and return its path."""

    def _make(data: dict[str, Any] | None = None, name: str = "package.json", indent: int = 2) -> Path:
        if data is None:
            data = {"name": "champ-wasm", "version": "0.4.10", "files": ["champ_wasm_bg.wasm"]}
        path = tmp_path / name
        path.write_text(json.dumps(data, indent=indent), encoding="utf-8")
        return path

    return _make


def _git(repo: Path, *args: str) -> str:
    out = subprocess.run(["git", *args], cwd=repo, capture_output=True, text=True, check=True)
    return out.stdout.strip()


@pytest.fixture
def git_repo(tmp_path):
    """A throwaway git repository with one commit. Returns (path, short hash of HEAD)."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init", "-q")
    (repo / "README").write_text("hello\n", encoding="utf-8")
    _git(repo, "add", "README")
    _git(
        repo,
        "-c", "user.name=Test",
        "-c", "user.email=test@example.com",
        "-c", "commit.gpgsign=false",
        "commit", "-q", "-m", "init",
    )
    return repo, _git(repo, "rev-parse", "--short", "HEAD")


def read_json(path: Path) -> dict[str, Any]:
    return json.loads(path.read_text(encoding="utf-8"))
