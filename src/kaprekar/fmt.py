# src/kaprekar/fmt.py
from __future__ import annotations

import re
from collections.abc import Iterable

from colorama import Fore, Style

from kaprekar.routine import TERMINAL_VALUES
from kaprekar.runtime import CFG
from kaprekar.utility import dec_digits

# Single source of truth for ANSI stripping
ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")

SEQUENCE_STYLES = ("list", "arrow")


def abbr_int_fast(n: int, head: int = 10, tail: int = 10, threshold: int = 35, ellipsis: str = "…") -> str:
    """Abbreviate very large ints as first<head>…last<tail> without str(n)."""
    if not isinstance(n, int):
        return str(n)
    if n == 0:
        return "0"

    sign = "-" if n < 0 else ""
    a = -n if n < 0 else n

    # If not long enough, fall back to normal str()
    d = dec_digits(a)
    if d <= threshold or head + tail >= d:
        return sign + str(a)

    # compute first/last blocks exactly
    first = a // 10 ** (d - head)
    last = a % 10 ** tail
    # zero-pad last block to width 'tail'
    return f"{sign}{first}{ellipsis}{last:0{tail}d}"


def strip_ansi(s: str | None) -> str:
    """Return s with ANSI escape sequences removed."""
    return "" if s is None else ANSI_RE.sub("", s)


def format_list(seq: Iterable[int]) -> str:
    """Plain `[a, b, c]`, the same for terminals, pipes and logs."""
    return "[" + ", ".join(str(x) for x in seq) + "]"


def format_arrow(seq: Iterable[int]) -> str:
    """
    `a → b → c` with per-number abbreviation; a terminal value is highlighted.
    Returns "—" for an empty (truncated) sequence.
    """
    SEQ_ARROW = CFG("FORMATTING.SEQUENCE_ARROW", " → ")
    ELLIPSIS_NUM = CFG("FORMATTING.ELLIPSIS", "…")
    ABBR_ENABLED = CFG("FORMATTING.NUM_ABBR_ENABLED", True)
    HEAD = int(CFG("FORMATTING.NUM_ABBR_HEAD", 10))
    TAIL = int(CFG("FORMATTING.NUM_ABBR_TAIL", 10))
    THR = int(CFG("FORMATTING.NUM_ABBR_THRESHOLD", 35))

    parts = list(seq or [])
    if not parts:
        return "—"

    toks = [abbr_int_fast(x, HEAD, TAIL, THR, ELLIPSIS_NUM) if ABBR_ENABLED else str(x) for x in parts]
    if len(parts) == 1 and parts[0] in TERMINAL_VALUES:
        toks[0] = f"{Fore.GREEN}{Style.BRIGHT}{toks[0]}{Style.RESET_ALL}"
    return SEQ_ARROW.join(toks)


def format_sequence(seq: Iterable[int], style: str | None = None) -> str:
    style = style or CFG("DISPLAY.SEQUENCE_STYLE", "list")
    if style == "arrow":
        return format_arrow(seq)
    return format_list(seq)
