# src/kaprekar/routine.py
"""
Kaprekar's routine on arbitrary-precision naturals.

Each step rearranges the decimal digits of x into descending and ascending
order and subtracts: x -> desc(x) - asc(x). The digit string keeps its natural
length (no zero padding), so 1000 -> 1000 - 0001 = 999 -> 0.
"""

from __future__ import annotations

from collections.abc import Callable

import gmpy2

DEFAULT_ITERATIONS = 20

# 495 is the 3-digit constant, 6174 the 4-digit one. Both are checked for
# every input regardless of its digit count.
KAPREKAR_CONSTANTS = (495, 6174)
TERMINAL_VALUES = frozenset((0, *KAPREKAR_CONSTANTS))

TraceFn = Callable[[int, int, int], None]


class KaprekarUnderflowError(ArithmeticError):
    """desc < asc: the digit rearrangement is broken, never a user error."""


def _print_step(desc: int, asc: int, nxt: int) -> None:
    print(f"{desc} - {asc} = {nxt}")


def _step(x: gmpy2.mpz) -> tuple[gmpy2.mpz, gmpy2.mpz, gmpy2.mpz]:
    digits = sorted(x.digits(10))
    asc = gmpy2.mpz("".join(digits), 10)
    desc = gmpy2.mpz("".join(reversed(digits)), 10)
    if desc < asc:
        raise KaprekarUnderflowError(f"{desc} - {asc} underflows")
    return desc, asc, desc - asc


def kaprekar_step(n: int) -> tuple[int, int, int]:
    """One routine step: (desc, asc, desc - asc)."""
    if n < 0:
        raise ValueError(f"Kaprekar's routine needs a natural number, got {n}")
    return tuple(int(v) for v in _step(gmpy2.mpz(n)))


def kaprekar(
    n: int,
    iterations: int = DEFAULT_ITERATIONS,
    truncate: bool = False,
    verbose: bool = False,
    trace: TraceFn | None = None,
) -> list[int]:
    """
    Run Kaprekar's routine from n for at most `iterations` steps.

    Returns:
      [t]        once a terminal value t in {0, 495, 6174} is produced
      results    when the next value equals the first produced value
                 (the repeat itself is not included)
      results    when the cap is hit, or [] if `truncate` is set

    With `verbose`, every step is reported as "desc - asc = next" before the
    cycle/terminal checks, through `trace` or stdout.
    """
    if n < 0:
        raise ValueError(f"Kaprekar's routine needs a natural number, got {n}")

    report = (trace or _print_step) if verbose else None
    x = gmpy2.mpz(n)
    results: list[gmpy2.mpz] = []

    for _ in range(max(0, int(iterations))):
        desc, asc, x = _step(x)
        if report is not None:
            report(int(desc), int(asc), int(x))

        if results and x == results[0]:
            return [int(v) for v in results]

        results.append(x)
        if int(x) in TERMINAL_VALUES:
            return [int(x)]

    if truncate:
        return []
    return [int(v) for v in results]
