# src/kaprekar/symlink.py
from __future__ import annotations

import os
import shutil
import sys
from pathlib import Path

DEFAULT_LINK = Path("/usr/local/bin/kaprekar")


def current_executable() -> Path:
    """
    The console script this process was started from. Under `python -m` or
    `python cli.py` argv[0] is a source file, so the installed script on
    PATH is used instead.
    """
    argv0 = Path(sys.argv[0]) if sys.argv and sys.argv[0] else None
    if argv0 is not None and argv0.suffix.lower() not in (".py", ".pyc") and argv0.is_file():
        return argv0.resolve()
    found = shutil.which("kaprekar")
    if found:
        return Path(found).resolve()
    raise FileNotFoundError("cannot locate the kaprekar executable to link to")


def install_symlink(link: Path = DEFAULT_LINK, target: Path | None = None) -> Path:
    """
    Create `link` -> `target` (default: this executable), creating parent
    directories. OSError propagates: an existing link or missing permissions
    abort the run.
    """
    target = Path(target) if target is not None else current_executable()
    link = Path(link)
    link.parent.mkdir(parents=True, exist_ok=True)
    os.symlink(target, link)
    return link
