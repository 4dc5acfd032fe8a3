from __future__ import annotations

import os
from importlib.resources import files as pkg_files
from pathlib import Path

HOME_ENV = "KAPREKAR_HOME"


def workspace_dir() -> Path:
    """$KAPREKAR_HOME, else ~/Documents/Kaprekar."""
    env = os.environ.get(HOME_ENV)
    base = Path(env).expanduser() if env else Path.home() / "Documents" / "Kaprekar"
    return base.resolve()


def profiles_dir() -> Path:
    return workspace_dir() / "profiles"


def ensure_workspace_seeded() -> tuple[Path, int]:
    """
    Copy the packaged profiles that are missing from the workspace.
    Existing files are never touched, so user edits survive upgrades.

    Returns: (workspace_path, files_copied)
    """
    dst = profiles_dir()
    dst.mkdir(parents=True, exist_ok=True)
    copied = 0
    for src in pkg_files("kaprekar").joinpath("profiles").iterdir():
        if not src.name.endswith(".toml"):
            continue
        target = dst / src.name
        if not target.exists():
            target.write_bytes(src.read_bytes())
            copied += 1
    return workspace_dir(), copied
