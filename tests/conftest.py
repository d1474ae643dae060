from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Callable

import pytest


@pytest.fixture
def fake_tools(tmp_path: Path, monkeypatch) -> Callable[[str, str], Path]:
    """Callable installing stub tools: fake_tools("ldd", "echo hi") -> script path.

    The stubs live in a private bin dir prepended to PATH, so anything that
    runs "pacman", "ldd" or "patchelf" by name picks them up.
    """
    bin_dir = tmp_path / "fakebin"
    bin_dir.mkdir()
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")

    def _install(name: str, body: str) -> Path:
        script = bin_dir / name
        script.write_text("#!/bin/sh\n" + body + "\n")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _install


@pytest.fixture
def make_file(tmp_path: Path) -> Callable[..., Path]:
    """Create a file under tmp_path with the given mode."""

    def _make(rel: str, mode: int = 0o644, content: str = "\x7fELF") -> Path:
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        path.chmod(mode)
        return path

    return _make
