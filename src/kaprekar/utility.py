# utility.py
from __future__ import annotations

import os
import sys

import gmpy2

from kaprekar.runtime import CFG

# Never a results file, whatever the user asks for
RESERVED_NAMES = frozenset({
    ".gitignore", "license", "pyproject.toml", "requirements.txt",
    # Windows device names
    "con", "prn", "aux", "nul",
    *(f"com{i}" for i in range(1, 10)),
    *(f"lpt{i}" for i in range(1, 10)),
})
RESERVED_SUFFIXES = frozenset({".py", ".md", ".toml"})


class UserInputError(Exception):
    pass


def dec_digits(n: int) -> int:
    """Exact decimal digit count of |n| without building str(n)."""
    m = abs(gmpy2.mpz(n))
    d = gmpy2.num_digits(m, 10)  # exact or one too many
    if d > 1 and m < gmpy2.mpz(10) ** (d - 1):
        return d - 1
    return d


def effective_digit_limit() -> int | None:
    """
    Digit limit for numeric input: BEHAVIOUR.MAX_DIGITS, tightened by
    CPython's int<->str guard when that is set (0 means unlimited).
    """
    limits = [sys.get_int_max_str_digits() or None]
    try:
        limits.append(int(CFG("BEHAVIOUR.MAX_DIGITS", 100_000)))
    except (TypeError, ValueError):
        pass
    limits = [x for x in limits if x]
    return min(limits) if limits else None


def apply_int_str_limit(limit: int) -> None:
    """Raise CPython's int<->str guard to `limit`, unless the user pinned it."""
    if os.environ.get("PYTHONINTMAXSTRDIGITS"):
        return
    sys.set_int_max_str_digits(max(int(limit), 640))  # 640 is the interpreter minimum


def validate_output_setting(output_file: str | None) -> str | None:
    """
    Return a results-file setting unchanged, or raise ValueError for a
    directory marker, a reserved name or a source/config suffix.
    None and "" mean no persistence.
    """
    if not output_file:
        return output_file

    if output_file in (".", "./") or output_file.endswith(("/", "\\")):
        raise ValueError(f"Output must be a file, not a directory: {output_file}")

    base = os.path.basename(output_file)
    stem, ext = os.path.splitext(base.lower())
    if base.lower() in RESERVED_NAMES or stem in RESERVED_NAMES:
        raise ValueError(f"Forbidden output filename: {base}")
    if ext in RESERVED_SUFFIXES:
        raise ValueError(f"Forbidden output file extension: {ext}")
    return output_file


def typename(v: object) -> str:
    return type(v).__name__


def flatten_dotted(d: dict, prefix: str = "") -> dict[str, object]:
    out: dict[str, object] = {}
    for k, v in (d or {}).items():
        key = f"{prefix}.{k}" if prefix else str(k)
        if isinstance(v, dict):
            out.update(flatten_dotted(v, key))
        else:
            out[key] = v
    return out
