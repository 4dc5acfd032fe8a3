# src/kaprekar/sweep.py
"""
Driving loop: which numbers a run visits, and feeding each routine result to
the OutputManager.

Mode priority (first match wins):
    number > all > start+end > start > end > symlink > help
"""

from __future__ import annotations

import itertools
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, replace

from kaprekar.output_manager import OutputManager
from kaprekar.routine import DEFAULT_ITERATIONS, kaprekar

SWEEP_MODES = ("all", "range", "start", "end")


@dataclass(frozen=True)
class SweepPlan:
    mode: str                 # "number" | "all" | "range" | "start" | "end" | "symlink" | "help"
    start: int = 0
    end: int | None = None    # inclusive; None = unbounded

    @property
    def is_sweep(self) -> bool:
        return self.mode in SWEEP_MODES

    def numbers(self) -> Iterator[int]:
        if self.mode == "number":
            return iter((self.start,))
        if self.is_sweep:
            return numbers(self.start, self.end)
        return iter(())


def select_mode(
    number: int | None = None,
    all_: bool = False,
    start: int | None = None,
    end: int | None = None,
    symlink: bool = False,
) -> SweepPlan:
    if number is not None:
        return SweepPlan("number", start=number, end=number)
    if all_:
        return SweepPlan("all")
    if start is not None and end is not None:
        return SweepPlan("range", start=start, end=end)
    if start is not None:
        return SweepPlan("start", start=start)
    if end is not None:
        return SweepPlan("end", end=end)
    if symlink:
        return SweepPlan("symlink")
    return SweepPlan("help")


def resume(plan: SweepPlan, last_input: int | None) -> SweepPlan:
    """Continue a sweep at the successor of the last recorded input; the end is kept."""
    if last_input is None or not plan.is_sweep:
        return plan
    return replace(plan, start=max(plan.start, last_input + 1))


def numbers(start: int = 0, end: int | None = None) -> Iterator[int]:
    """start, start+1, ... up to end inclusive (forever when end is None)."""
    if end is None:
        return itertools.count(start)
    return iter(range(start, end + 1))


def run_sweep(
    nums: Iterable[int],
    om: OutputManager,
    *,
    iterations: int = DEFAULT_ITERATIONS,
    truncate: bool = False,
    verbose: bool = False,
    show_input: bool = True,
) -> int:
    """Run the routine on every number, handing each result to `om`. Returns the count."""
    done = 0
    for n in nums:
        seq = kaprekar(n, iterations, truncate, verbose=verbose, trace=om.write_trace)
        om.write_result(n, seq, show_input=show_input)
        done += 1
    return done
