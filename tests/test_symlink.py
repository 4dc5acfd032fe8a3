# tests/test_symlink.py
from __future__ import annotations

import os
import shutil
import sys

import pytest

from kaprekar.symlink import current_executable, install_symlink

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges on Windows")


def test_install_symlink_creates_parents(tmp_path):
    target = tmp_path / "venv" / "bin" / "kaprekar"
    target.parent.mkdir(parents=True)
    target.write_text("#!/bin/sh\n", encoding="utf-8")

    link = install_symlink(tmp_path / "usr" / "local" / "bin" / "kaprekar", target)
    assert link.is_symlink()
    assert os.readlink(link) == str(target)


def test_existing_link_is_an_error(tmp_path):
    target = tmp_path / "kaprekar"
    target.write_text("", encoding="utf-8")
    link = tmp_path / "bin" / "kaprekar"
    install_symlink(link, target)
    with pytest.raises(FileExistsError):
        install_symlink(link, target)


def test_default_target_is_running_script(tmp_path, monkeypatch):
    script = tmp_path / "kaprekar"
    script.write_text("", encoding="utf-8")
    monkeypatch.setattr(sys, "argv", [str(script), "--symlink"])
    assert current_executable() == script.resolve()
    link = install_symlink(tmp_path / "bin" / "kaprekar")
    assert link.resolve() == script.resolve()


def test_module_run_links_installed_script(tmp_path, monkeypatch):
    # python -m kaprekar.cli: argv[0] is the cli.py source file
    source = tmp_path / "cli.py"
    source.write_text("", encoding="utf-8")
    script = tmp_path / "bin" / "kaprekar"
    script.parent.mkdir()
    script.write_text("", encoding="utf-8")
    monkeypatch.setattr(sys, "argv", [str(source), "--symlink"])
    monkeypatch.setattr(shutil, "which", lambda name: str(script))
    assert current_executable() == script.resolve()


def test_no_executable_to_link(tmp_path, monkeypatch):
    source = tmp_path / "cli.py"
    source.write_text("", encoding="utf-8")
    monkeypatch.setattr(sys, "argv", [str(source)])
    monkeypatch.setattr(shutil, "which", lambda name: None)
    with pytest.raises(FileNotFoundError):
        current_executable()
