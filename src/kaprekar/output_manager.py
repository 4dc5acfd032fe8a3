# output_manager.py

import csv
import os
import sys

from colorama import Fore, Style

from kaprekar.fmt import format_sequence, strip_ansi
from kaprekar.routine import DEFAULT_ITERATIONS
from kaprekar.utility import UserInputError

_TAIL_BLOCK = 8192


class ResumeFileError(UserInputError):
    pass


def resolve_output_path(path: str, root: str | None = None) -> str:
    """
    Resolve user-provided output path.

    Rules:
    - '~' expanded to user home
    - Absolute paths unchanged
    - Relative paths are relative to root (default: current directory)
    """
    if not path:
        raise ValueError("Output path is empty")

    path = os.path.expanduser(path)

    if os.path.isabs(path):
        return os.path.normpath(path)

    return os.path.normpath(os.path.join(root or os.getcwd(), path))


def row_fields(n: int, seq: list[int], iterations: int) -> list[object]:
    """
    One CSV row: the input, the sequence, then empty fields so that every row
    has exactly 1 + iterations fields (padding counts elements, not characters).
    """
    return [n, *seq, *([""] * max(0, iterations - len(seq)))]


def write_row(fh, n: int, seq: list[int], iterations: int) -> None:
    csv.writer(fh, lineterminator="\n").writerow(row_fields(n, seq, iterations))


def _last_line(path: str) -> str | None:
    """Last non-blank line of a (possibly huge) file, read backwards in blocks."""
    with open(path, "rb") as fh:
        fh.seek(0, os.SEEK_END)
        pos = fh.tell()
        buf = b""
        while True:
            tail = buf.rstrip()
            if b"\n" in tail or pos == 0:
                line = tail.rsplit(b"\n", 1)[-1].strip()
                return line.decode("utf-8") if line else None
            step = min(_TAIL_BLOCK, pos)
            pos -= step
            fh.seek(pos)
            buf = fh.read(step) + buf


def read_last_input(path: str) -> int | None:
    """
    Return the input recorded in the last row of a results file, or None when
    the file holds no rows. OSError (missing/unreadable file) propagates.
    """
    line = _last_line(path)
    if line is None:
        return None

    field = line.split(",", 1)[0].strip()
    if not (field.isascii() and field.isdigit()):
        raise ResumeFileError(
            f"cannot resume from {path}: last row does not start with a natural number ({field[:40]!r})."
        )
    try:
        return int(field)
    except ValueError:
        # int() refuses digit strings beyond the interpreter's str->int limit
        raise ResumeFileError(f"cannot resume from {path}: recorded input is too large.") from None


class OutputManager:
    """
    Handles all printing/output, including to screen and/or a CSV results file.

    Usage:
        # Fresh results file:
        om = OutputManager(output_file="results.csv", iterations=20)
        om.write_result(123, [495])   # prints "123\t[495]" and appends a row
        om.close()

        # Resume (append to an existing file):
        om = OutputManager(output_file="results.csv", append=True)

    A results file that cannot be opened is reported on stderr; the run then
    continues on screen only.
    """

    def __init__(
        self,
        output_file: str | None = None,
        *,
        append: bool = False,
        quiet: bool = False,
        iterations: int = DEFAULT_ITERATIONS,
        style: str | None = None,
    ):
        """
        Parameters:
            output_file: None or "" => screen only; otherwise CSV results path
            append:      True => keep existing rows (resume); False => truncate
            quiet:       if True, result lines are not printed (trace lines are)
            iterations:  column count used to pad CSV rows
            style:       sequence style for the screen ("list" | "arrow")
        """
        self.quiet = quiet
        self.iterations = max(0, int(iterations))
        self.style = style
        self.rows_written = 0
        self.path: str | None = None
        self._fh = None
        self._ansi = sys.stdout.isatty()

        if output_file:
            path = resolve_output_path(output_file)
            try:
                parent = os.path.dirname(path)
                if parent:
                    os.makedirs(parent, exist_ok=True)
                self._fh = open(path, "a" if append else "w", encoding="utf-8", newline="")  # noqa: SIM115
                self.path = path
            except OSError as e:
                self.warn(f"Could not open results file {path} ({type(e).__name__}: {e}); continuing without it.")

    @property
    def persisting(self) -> bool:
        return self._fh is not None

    def warn(self, msg: str) -> None:
        print(f"{Fore.YELLOW}[WARNING]{Style.RESET_ALL} {msg}", file=sys.stderr)

    def write_screen(self, *args, sep: str = " ", end: str = "\n", flush: bool = False) -> None:
        """Write only to the screen, never to the file."""
        text = sep.join(str(a) for a in args)
        if not self._ansi:
            text = strip_ansi(text)
        print(text, end=end, flush=flush)

    def write_trace(self, desc: int, asc: int, nxt: int) -> None:
        """Verbose step line; shown even when quiet."""
        self.write_screen(f"{desc} - {asc} = {nxt}")

    def write_result(self, n: int, seq: list[int], *, show_input: bool = True) -> None:
        """Print one routine result and persist it as a CSV row (flushed)."""
        if not self.quiet:
            rendered = format_sequence(seq, self.style)
            self.write_screen(f"{n}\t{rendered}" if show_input else rendered)

        if self._fh is None:
            return
        try:
            write_row(self._fh, n, seq, self.iterations)
            self._fh.flush()
            self.rows_written += 1
        except OSError as e:
            self.warn(f"Could not write to {self.path} ({type(e).__name__}: {e}); continuing without it.")
            self._close_file()

    def _close_file(self) -> None:
        fh, self._fh = self._fh, None
        if fh is None:
            return
        try:
            fh.close()
        except OSError:
            pass

    def close(self) -> None:
        self._close_file()

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.close()
