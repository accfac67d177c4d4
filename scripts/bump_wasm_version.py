"""
Goal: Stamp the wasm package manifest with the current git short hash before publishing.
"""
from __future__ import annotations

import subprocess
import sys

from app.console import main

# run from anywhere inside the checkout
root = subprocess.check_output(["git", "rev-parse", "--show-toplevel"], text=True).strip()
manifest = f"{root}/champ/lib/champ-wasm/pkg/package.json"
sys.exit(main(["--repo", root, "--manifest", manifest, *sys.argv[1:]]))
