# src/kaprekar/cli.py

"""
Kaprekar - Kaprekar's routine for numbers, ranges and resumable sweeps

Description:
    Repeatedly subtracts the ascending-digit rearrangement of a number from
    its descending-digit rearrangement, until 0, 495 or 6174 is reached, the
    first value comes round again, or the iteration cap is hit. Results can
    be written to a CSV file and a sweep resumed from it later.

usage: see kaprekar -h
"""

from __future__ import annotations

import argparse
import faulthandler
import os
import platform
import sys
import textwrap
import threading
import traceback
from importlib.resources import files as pkg_files

from colorama import Fore, Style, just_fix_windows_console

import kaprekar.config as CONFIG
from kaprekar import __version__ as _ver
from kaprekar.expreval import parse_natural
from kaprekar.output_manager import OutputManager, read_last_input, resolve_output_path
from kaprekar.routine import DEFAULT_ITERATIONS, KaprekarUnderflowError
from kaprekar.runtime import APPLY, CFG
from kaprekar.runtime import current as _rt_current
from kaprekar.sweep import SweepPlan, resume, run_sweep, select_mode
from kaprekar.symlink import DEFAULT_LINK, install_symlink
from kaprekar.utility import (
    UserInputError,
    apply_int_str_limit,
    flatten_dotted,
    typename,
    validate_output_setting,
)
from kaprekar.workspace import ensure_workspace_seeded, workspace_dir


def _install_loud_error_handlers(debug: bool) -> None:
    if not debug:
        return
    # Always show full Python tracebacks
    faulthandler.enable()

    def _excepthook(exc_type, exc, tb):
        sys.stderr.write("\n[UNCAUGHT EXCEPTION]\n")
        traceback.print_exception(exc_type, exc, tb, file=sys.stderr)
        sys.stderr.flush()
    sys.excepthook = _excepthook

    def _thread_excepthook(args):
        sys.stderr.write("\n[UNCAUGHT THREAD EXCEPTION]\n")
        traceback.print_exception(args.exc_type, args.exc_value, args.exc_traceback, file=sys.stderr)
        sys.stderr.flush()
    threading.excepthook = _thread_excepthook


def _print_user_error(msg: str) -> None:
    """Uniform, one-line friendly error."""
    prefix = f"{Fore.RED}Error:{Style.RESET_ALL}"
    if msg.startswith("Invalid input:"):
        msg = msg.replace("Invalid input:", f"{Fore.RED}Invalid input:{Style.RESET_ALL}", 1)
    elif not msg.startswith("Error:"):
        msg = f"{prefix} {msg}"
    print(msg, file=sys.stderr)


def _debug(msg: str) -> None:
    if _rt_current().debug:
        print(f"[debug] {msg}", file=sys.stderr)


# ---- argparse ----
def _build_parser() -> argparse.ArgumentParser:

    epilog = textwrap.dedent("""\
    modes (first match wins):
      -n N          run the routine on N
      -a            sweep 0, 1, 2, ... until interrupted
      -s S -e E     sweep S..E (inclusive)
      -s S          sweep S, S+1, ... until interrupted
      -e E          sweep 0..E (inclusive)
      --symlink     link this executable into /usr/local/bin

    numbers may be written as 6174, 1_000_000, 1e6 or 10**30+1.

    results files:
      --output FILE writes one CSV row per number: input,seq[0],...,seq[k-1]
      padded with empty fields to 1 + ITERATIONS columns.
      --cont FILE appends to FILE, continuing after the last recorded input.
    """)

    p = argparse.ArgumentParser(
        prog="kaprekar",
        description="Perform Kaprekar's routine on a number, a range or an unbounded sweep.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p.add_argument("-n", "--number", default=None, help="Perform Kaprekar's routine on a number.")
    p.add_argument("-s", "--start", default=None, help="Perform Kaprekar's routine starting from a number.")
    p.add_argument("-e", "--end", default=None, help="Perform Kaprekar's routine up to a number.")
    p.add_argument("-a", "--all", action="store_true", help="Perform Kaprekar's routine on all numbers.")
    p.add_argument("-i", "--iterations", type=int, default=None,
                   help=f"Number of iterations to perform (default: profile, else {DEFAULT_ITERATIONS}).")
    p.add_argument("-t", "--truncate", action="store_true", default=None,
                   help="Empty out non-series and non-constant sequences.")
    p.add_argument("-v", "--verbose", action="store_true", help="Print every subtraction step.")
    p.add_argument("--symlink", action="store_true", help=f"Create a symlink in {DEFAULT_LINK.parent}.")

    files = p.add_mutually_exclusive_group()
    files.add_argument("-o", "--output", default=None, metavar="FILE", help="Create FILE and write CSV rows to it.")
    files.add_argument("-c", "--cont", default=None, metavar="FILE",
                       help="Resume a sweep from the last row of FILE and append to it.")

    p.add_argument("--profile", default=None, help="Settings profile from the workspace (default: last used)")
    p.add_argument("--list-profiles", action="store_true", help="List available profiles and exit")
    p.add_argument("--where", action="store_true", help="Show the workspace and package paths and exit")
    p.add_argument("-q", "--quiet", action="store_true", help="Do not print results (files are still written)")
    p.add_argument("--debug", action="store_true", help="Show effective settings and full tracebacks")
    p.add_argument("-V", "--version", action="version", version=f"%(prog)s {_ver}")

    return p


def main(argv=None) -> int:
    """Thin wrapper: catch friendly errors, hide tracebacks unless debug."""
    try:
        return _main_impl(argv)
    except UserInputError as e:
        _print_user_error(str(e))
        return 2
    except KeyboardInterrupt:
        print("Aborted by user.", file=sys.stderr)
        return 130
    except Exception as e:
        debug = "--debug" in (sys.argv if argv is None else argv) or _rt_current().debug
        if debug:
            raise
        if isinstance(e, KaprekarUnderflowError):
            print(f"{Fore.RED}Internal error:{Style.RESET_ALL} {e}", file=sys.stderr)
        else:
            print(f"Unexpected error: {e.__class__.__name__}: {e}", file=sys.stderr)
        print("Run with --debug for a full traceback.", file=sys.stderr)
        return 1


def _configure_text_streams() -> None:
    # Respect explicit user choice
    if os.environ.get("PYTHONIOENCODING"):
        return
    # Only touch redirected output (pipes/files), leave TTY as-is
    if sys.stdout.isatty() or not hasattr(sys.stdout, "reconfigure"):
        return
    enc = (sys.stdout.encoding or "").lower()
    if platform.system() == "Windows" or enc in ("", "ascii", "us-ascii"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        sys.stderr.reconfigure(encoding="utf-8", errors="replace")


def _select_profile_name(explicit: str | None) -> str:
    """
    Precedence:
      1) explicit --profile
      2) last used (from workspace)
      3) 'default'
    """
    if explicit:
        return explicit
    last = CONFIG.read_current_profile()
    if last and CONFIG.has_profile(last):
        return last
    return "default"


def _apply_profile(explicit: str | None) -> str | None:
    """Load & apply a profile; returns its name, or None after reporting an unknown one."""
    if explicit and not CONFIG.has_profile(explicit):
        print(f"Unknown profile: '{explicit}'", file=sys.stderr)
        print("Available profiles:", ", ".join(CONFIG.list_all_profiles()), file=sys.stderr)
        return None

    name = _select_profile_name(explicit)
    if not CONFIG.has_profile(name):
        _debug(f"profile '{name}' missing; using built-in defaults")
        return name

    selected = CONFIG.load_settings(name)
    APPLY(selected)
    if explicit:
        CONFIG.write_current_profile(explicit)

    _debug(f"active profile: {name}")
    _debug(f"profile file: {selected.source}")
    if _rt_current().debug:
        for k, v in sorted(flatten_dotted(selected.as_dict()).items(), key=lambda kv: kv[0].lower()):
            print(f"        {k:.<40} {v!r} ({typename(v)})", file=sys.stderr)
    return name


def _parse_numbers(args) -> tuple[int | None, int | None, int | None]:
    def _opt(value, label):
        return None if value is None else parse_natural(value, label)
    return _opt(args.number, "--number"), _opt(args.start, "--start"), _opt(args.end, "--end")


def _resume_from(path: str, plan: SweepPlan, *, warn_missing: bool) -> SweepPlan:
    """Move a sweep past the last input recorded in `path`."""
    try:
        last = read_last_input(path)
    except FileNotFoundError:
        if warn_missing:
            print(f"{Fore.YELLOW}[WARNING]{Style.RESET_ALL} {path} does not exist; nothing to resume.",
                  file=sys.stderr)
        last = None
    except OSError as e:
        print(f"{Fore.YELLOW}[WARNING]{Style.RESET_ALL} Could not read {path} "
              f"({type(e).__name__}: {e}); nothing to resume.", file=sys.stderr)
        last = None
    plan = resume(plan, last)
    _debug(f"resume: last recorded input {last}, continuing at {plan.start}")
    return plan


def _open_results(args, plan: SweepPlan, iterations: int) -> tuple[SweepPlan, OutputManager]:
    """
    Pick the results file and open it:
      --cont FILE          append, resume the sweep after the last row
      --output FILE        create/truncate
      OUTPUT.OUTPUT_FILE   sweep log of the profile: append and resume like
                           --cont; single numbers are not logged to it
    """
    def _sink(path, append=False):
        return OutputManager(path, append=append, quiet=args.quiet, iterations=iterations,
                             style=CFG("DISPLAY.SEQUENCE_STYLE", "list"))

    if args.cont:
        path = resolve_output_path(args.cont)
        return _resume_from(path, plan, warn_missing=True), _sink(path, append=True)

    if args.output is not None:
        try:
            target = validate_output_setting(args.output)
        except ValueError as e:
            raise UserInputError(f"--output: {e}") from None
        return plan, _sink(target)

    try:
        target = validate_output_setting(CFG("OUTPUT.OUTPUT_FILE", None))
    except ValueError as e:
        raise UserInputError(f"OUTPUT.OUTPUT_FILE: {e}") from None
    if not target or not plan.is_sweep:
        return plan, _sink(None)
    path = resolve_output_path(target)
    return _resume_from(path, plan, warn_missing=False), _sink(path, append=True)


# ---- main ----
def _main_impl(argv=None) -> int:

    just_fix_windows_console()
    _configure_text_streams()

    parser = _build_parser()
    args = parser.parse_args(argv)
    rt = _rt_current()
    rt.debug = bool(args.debug)

    _install_loud_error_handlers(args.debug)

    ensure_workspace_seeded()

    if args.where:
        print(f"Workspace: {workspace_dir()}")
        print(f"Package:   {pkg_files('kaprekar')}")
        return 0

    if args.list_profiles:
        for name, desc in CONFIG.list_profiles_with_descriptions():
            print(f"{name:<16} {desc}")
        return 0

    if _apply_profile(args.profile) is None:
        return 2

    apply_int_str_limit(int(CFG("BEHAVIOUR.MAX_DIGITS", 100_000)))

    iterations = args.iterations if args.iterations is not None else CFG("ROUTINE.ITERATIONS", DEFAULT_ITERATIONS)
    if iterations < 0:
        raise UserInputError("Invalid input: --iterations must be >= 0.")
    truncate = bool(args.truncate) if args.truncate is not None else bool(CFG("ROUTINE.TRUNCATE", False))

    number, start, end = _parse_numbers(args)
    plan = select_mode(number=number, all_=args.all, start=start, end=end, symlink=args.symlink)
    _debug(f"mode: {plan.mode}, iterations: {iterations}, truncate: {truncate}")

    if plan.mode == "symlink":
        link = install_symlink()
        print(f"Created symlink {link}")
        return 0

    if plan.mode == "help":
        parser.print_help()
        return 0

    plan, om = _open_results(args, plan, iterations)
    if om.persisting:
        _debug(f"results file: {om.path}")
    try:
        done = run_sweep(
            plan.numbers(),
            om,
            iterations=iterations,
            truncate=truncate,
            verbose=args.verbose,
            show_input=plan.is_sweep,
        )
    finally:
        om.close()
    _debug(f"processed {done} number(s), wrote {om.rows_written} row(s)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
