# tests/conftest.py
from __future__ import annotations

import pytest

from kaprekar import runtime


@pytest.fixture(autouse=True)
def isolated_workspace(tmp_path, monkeypatch):
    """Every test gets its own workspace, cwd and a fresh runtime."""
    ws = tmp_path / "workspace"
    monkeypatch.setenv("KAPREKAR_HOME", str(ws))
    monkeypatch.chdir(tmp_path)
    runtime.reset()
    yield ws
    runtime.reset()
