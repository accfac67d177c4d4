"""
Integration tests for revstamp
Tests end-to-end runs against a real git repository.
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

from app.console import main
from conftest import read_json
from tagger.revision import GitRevisionSource
from tagger.stamp import stamp_manifest

PROJECT_ROOT = Path(__file__).resolve().parents[1]


class TestGitIntegration:
    """Tests that use the git binary"""

    def test_stamp_with_real_git(self, git_repo):
        """Test stamping a manifest with the repository's own HEAD"""
        repo, short_hash = git_repo
        manifest = repo / "package.json"
        manifest.write_text(json.dumps({"name": "champ-wasm", "version": "0.4.10"}, indent=2), encoding="utf-8")

        result = stamp_manifest(manifest, GitRevisionSource(repo))

        assert result.new_version == f"0.4.10-{short_hash}"
        assert read_json(manifest) == {"name": "champ-wasm", "version": f"0.4.10-{short_hash}"}

    def test_abbrev_length(self, git_repo):
        """Test that abbrev controls the hash length"""
        repo, short_hash = git_repo
        long_hash = GitRevisionSource(repo, abbrev=12).current_revision()
        assert len(long_hash) == 12
        assert long_hash.startswith(short_hash)

    def test_console_with_real_git(self, git_repo, capsys, monkeypatch):
        """Test the console entry point run from inside the repository"""
        repo, short_hash = git_repo
        (repo / "package.json").write_text(json.dumps({"version": "2.0.0-beta"}), encoding="utf-8")
        monkeypatch.chdir(repo)

        assert main([]) == 0

        assert read_json(repo / "package.json")["version"] == f"2.0.0-{short_hash}"
        assert f"2.0.0-beta -> 2.0.0-{short_hash}" in capsys.readouterr().out

    def test_bump_wasm_script(self, git_repo):
        """Test the wasm bump script stamps champ/lib/champ-wasm/pkg/package.json"""
        repo, short_hash = git_repo
        pkg = repo / "champ" / "lib" / "champ-wasm" / "pkg"
        pkg.mkdir(parents=True)
        (pkg / "package.json").write_text(
            json.dumps({"name": "champ-wasm", "version": "0.1.3", "files": ["champ_wasm_bg.wasm"]}, indent=2),
            encoding="utf-8",
        )
        env = dict(os.environ, PYTHONPATH=str(PROJECT_ROOT), NO_COLOR="1")

        proc = subprocess.run(
            [sys.executable, str(PROJECT_ROOT / "scripts" / "bump_wasm_version.py")],
            cwd=repo,
            env=env,
            capture_output=True,
            text=True,
            timeout=60,
        )

        assert proc.returncode == 0, proc.stderr
        assert read_json(pkg / "package.json") == {
            "name": "champ-wasm",
            "version": f"0.1.3-{short_hash}",
            "files": ["champ_wasm_bg.wasm"],
        }
