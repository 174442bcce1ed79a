from __future__ import annotations

import sys
import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

# Ensure the src/ directory is importable when tests run without an install.
sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

ScriptFactory = Callable[[str, str], Path]


@pytest.fixture
def make_cli(tmp_path: Path) -> ScriptFactory:
    """Write an executable Python script standing in for a backend CLI."""

    def _make(name: str, body: str) -> Path:
        script = tmp_path / name
        script.write_text(
            f"#!{sys.executable}\n" + textwrap.dedent(body),
            encoding="utf-8",
        )
        script.chmod(0o755)
        return script

    return _make
