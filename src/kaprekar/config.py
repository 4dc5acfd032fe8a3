# config.py
"""
Profiles: TOML files under <workspace>/profiles.

    [_PROFILE_]            name / description, shown by --list-profiles
    [ROUTINE]              ITERATIONS, TRUNCATE
    [BEHAVIOUR]            MAX_DIGITS, DEBUG
    [OUTPUT]               OUTPUT_FILE
    [DISPLAY]/[FORMATTING] screen rendering

The last profile chosen with --profile is remembered in profiles/.current.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from kaprekar.utility import UserInputError
from kaprekar.workspace import ensure_workspace_seeded, profiles_dir

META_SECTION = "_PROFILE_"


@dataclass
class Settings:
    data: dict[str, Any]          # every section except [_PROFILE_]
    name: str
    description: str
    source: Path | None = None

    def as_dict(self) -> dict[str, Any]:
        return self.data


def _profile_path(name: str) -> Path:
    return profiles_dir() / f"{name}.toml"


def _read_profile(path: Path) -> Settings:
    try:
        with path.open("rb") as f:
            raw = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise UserInputError(f"reading profile {path.name}: {e}") from None

    meta = raw.pop(META_SECTION, None) or {}
    description = " ".join(str(meta.get("description") or "").split()) or "(no description)"
    return Settings(data=raw, name=str(meta.get("name") or path.stem), description=description, source=path)


def _check_routine(section: Any) -> None:
    """A wrongly typed [ROUTINE] value is a profile error, not a crash mid-sweep."""
    if not isinstance(section, dict):
        raise UserInputError("[ROUTINE] must be a table.")
    its = section.get("ITERATIONS", 0)
    if isinstance(its, bool) or not isinstance(its, int) or its < 0:
        raise UserInputError(f"ROUTINE.ITERATIONS must be a non-negative integer, got {its!r}.")
    if not isinstance(section.get("TRUNCATE", False), bool):
        raise UserInputError(f"ROUTINE.TRUNCATE must be true or false, got {section['TRUNCATE']!r}.")


def list_all_profiles() -> list[str]:
    ensure_workspace_seeded()
    return sorted(p.stem for p in profiles_dir().glob("*.toml"))


def list_profiles_with_descriptions() -> list[tuple[str, str]]:
    items = []
    for name in list_all_profiles():
        try:
            s = _read_profile(_profile_path(name))
            items.append((name, s.description))
        except UserInputError:
            items.append((name, "(unreadable profile)"))
    return items


def has_profile(name: str) -> bool:
    return _profile_path(name).exists()


def load_settings(name: str | None) -> Settings:
    """Load and validate a profile; FileNotFoundError if it does not exist."""
    path = _profile_path(name or "default")
    if not path.exists():
        raise FileNotFoundError(f"Profile '{name}' not found at {path}")
    settings = _read_profile(path)
    if "ROUTINE" in settings.data:
        _check_routine(settings.data["ROUTINE"])
    return settings


def _current_marker() -> Path:
    return profiles_dir() / ".current"


def read_current_profile() -> str | None:
    try:
        name = _current_marker().read_text(encoding="utf-8").strip()
    except OSError:
        return None
    return name.removesuffix(".toml") or None


def write_current_profile(name: str) -> None:
    marker = _current_marker()
    marker.parent.mkdir(parents=True, exist_ok=True)
    marker.write_text(name.strip().removesuffix(".toml"), encoding="utf-8")
