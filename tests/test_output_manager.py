# tests/test_output_manager.py
from __future__ import annotations

import io

import pytest

from kaprekar.fmt import abbr_int_fast, format_sequence, strip_ansi
from kaprekar.output_manager import (
    OutputManager,
    ResumeFileError,
    read_last_input,
    resolve_output_path,
    row_fields,
    write_row,
)
from kaprekar.utility import UserInputError

# ---------- CSV rows --------------------------------------------------------------

ROW_CASES = [
    # (n, seq, iterations, expected line)
    (123,   [495],                    3,  "123,495,,\n"),
    (123,   [198, 792, 693],          3,  "123,198,792,693\n"),
    (12345, [],                       4,  "12345,,,,\n"),
    (7,     [],                       0,  "7\n"),
    (6174,  [6174],                   20, "6174,6174" + "," * 19 + "\n"),
]


@pytest.mark.parametrize("n,seq,iterations,expected", ROW_CASES, ids=[c[3].strip() or "empty" for c in ROW_CASES])
def test_row_is_padded_to_iterations_columns(n, seq, iterations, expected):
    buf = io.StringIO()
    write_row(buf, n, seq, iterations)
    assert buf.getvalue() == expected
    assert len(row_fields(n, seq, iterations)) == 1 + iterations


def test_row_padding_counts_elements_not_characters():
    # a long number still occupies exactly one column
    buf = io.StringIO()
    write_row(buf, 10**30, [10**30 - 1], 3)
    assert buf.getvalue().count(",") == 3


# ---------- resume state ------------------------------------------------------------


def test_read_last_input(tmp_path):
    p = tmp_path / "r.csv"
    p.write_text("1,0,,\n2,0,,\n\n", encoding="utf-8")
    assert read_last_input(str(p)) == 2


def test_read_last_input_without_trailing_newline(tmp_path):
    p = tmp_path / "r.csv"
    p.write_text("4,0\n5,0", encoding="utf-8")
    assert read_last_input(str(p)) == 5


@pytest.mark.parametrize("content", ["", "\n", "\n  \n"], ids=["empty", "newline", "blank-lines"])
def test_read_last_input_no_rows(tmp_path, content):
    p = tmp_path / "r.csv"
    p.write_text(content, encoding="utf-8")
    assert read_last_input(str(p)) is None


def test_read_last_input_large_file(tmp_path):
    p = tmp_path / "big.csv"
    with p.open("w", encoding="utf-8", newline="") as fh:
        for n in range(3001):
            write_row(fh, n, [0], 20)
    assert p.stat().st_size > 8192
    assert read_last_input(str(p)) == 3000


@pytest.mark.parametrize("line", ["abc,1,2", "-5,0", "1.5,0", ",495"])
def test_read_last_input_malformed(tmp_path, line):
    p = tmp_path / "r.csv"
    p.write_text(f"1,0\n{line}\n", encoding="utf-8")
    with pytest.raises(ResumeFileError):
        read_last_input(str(p))
    assert issubclass(ResumeFileError, UserInputError)


def test_read_last_input_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_last_input(str(tmp_path / "nope.csv"))


# ---------- OutputManager --------------------------------------------------------------


def test_results_are_printed_and_persisted(tmp_path, capsys):
    p = tmp_path / "out" / "r.csv"
    with OutputManager(str(p), iterations=3) as om:
        assert om.persisting
        om.write_result(123, [495])
        om.write_result(4, [0], show_input=False)
    assert capsys.readouterr().out == "123\t[495]\n[0]\n"
    assert p.read_text(encoding="utf-8") == "123,495,,\n4,0,,\n"


def test_output_truncates_and_cont_appends(tmp_path):
    p = tmp_path / "r.csv"
    p.write_text("old\n", encoding="utf-8")
    with OutputManager(str(p), quiet=True, iterations=1) as om:
        om.write_result(1, [0])
    with OutputManager(str(p), append=True, quiet=True, iterations=1) as om:
        om.write_result(2, [0])
    assert p.read_text(encoding="utf-8") == "1,0\n2,0\n"


def test_quiet_still_writes_file(tmp_path, capsys):
    p = tmp_path / "r.csv"
    with OutputManager(str(p), quiet=True, iterations=2) as om:
        om.write_result(495, [495])
        assert om.rows_written == 1
    assert capsys.readouterr().out == ""
    assert p.read_text(encoding="utf-8") == "495,495,\n"


def test_trace_shown_when_quiet(capsys):
    om = OutputManager(quiet=True)
    om.write_trace(7641, 1467, 6174)
    assert capsys.readouterr().out == "7641 - 1467 = 6174\n"


def test_open_failure_is_reported_and_run_continues(tmp_path, capsys):
    blocker = tmp_path / "afile"
    blocker.write_text("x", encoding="utf-8")
    om = OutputManager(str(blocker / "r.csv"), iterations=2)
    assert not om.persisting
    om.write_result(6174, [6174])
    om.close()
    captured = capsys.readouterr()
    assert "[WARNING]" in captured.err
    assert "6174\t[6174]" in captured.out


def test_resolve_output_path_is_cwd_relative(tmp_path):
    assert resolve_output_path("r.csv") == str(tmp_path / "r.csv")
    assert resolve_output_path(str(tmp_path / "x.csv")) == str(tmp_path / "x.csv")
    with pytest.raises(ValueError):
        resolve_output_path("")


# ---------- formatting -------------------------------------------------------------------


def test_arrow_style(capsys):
    om = OutputManager(style="arrow")
    om.write_result(123, [198, 792])
    om.write_result(6174, [6174])
    om.write_result(12345, [])
    # captured stdout is not a tty, so colour codes are stripped
    assert capsys.readouterr().out == "123\t198 → 792\n6174\t6174\n12345\t—\n"


def test_format_sequence_styles():
    assert format_sequence([198, 792], "list") == "[198, 792]"
    assert format_sequence([], "list") == "[]"
    assert strip_ansi(format_sequence([495], "arrow")) == "495"


def test_abbr_int_fast():
    assert abbr_int_fast(6174) == "6174"
    assert abbr_int_fast(10**40) == "1000000000…0000000000"
    assert abbr_int_fast(10**40 + 7, head=3, tail=2) == "100…07"
