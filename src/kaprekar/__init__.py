from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

# Version
try:
    __version__ = _pkg_version("kaprekar")
except PackageNotFoundError:
    __version__ = "0+unknown"

# Public API re-exports
from .config import has_profile, load_settings, read_current_profile
from .expreval import parse_natural
from .output_manager import OutputManager, ResumeFileError, read_last_input
from .routine import (
    DEFAULT_ITERATIONS,
    TERMINAL_VALUES,
    KaprekarUnderflowError,
    kaprekar,
    kaprekar_step,
)
from .runtime import APPLY, CFG
from .sweep import SweepPlan, numbers, run_sweep, select_mode
from .symlink import install_symlink
from .utility import UserInputError
from .workspace import workspace_dir

__all__ = [
    "APPLY",
    "CFG",
    "DEFAULT_ITERATIONS",
    "TERMINAL_VALUES",
    "KaprekarUnderflowError",
    "OutputManager",
    "ResumeFileError",
    "SweepPlan",
    "UserInputError",
    "__version__",
    "has_profile",
    "install_symlink",
    "kaprekar",
    "kaprekar_step",
    "load_settings",
    "numbers",
    "parse_natural",
    "read_current_profile",
    "read_last_input",
    "run_sweep",
    "select_mode",
    "workspace_dir",
]
