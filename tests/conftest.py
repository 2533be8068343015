"""Shared fixtures for the wqkit test suite."""

from __future__ import annotations

import os
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_settings_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep `WQKIT_*` variables and stray `.env` files out of every test.

    Args:
        monkeypatch (pytest.MonkeyPatch): Pytest fixture for patching the environment.
        tmp_path (Path): Temporary directory used as the working directory.
    """
    for name in list(os.environ):
        if name.upper().startswith("WQKIT_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
