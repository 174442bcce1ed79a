"""Locate backend executables outside the inherited ``PATH``.

Desktop launchers often start the application with a minimal environment, so
CLIs installed through npm, Homebrew or their own installers are invisible to
a plain ``PATH`` lookup.
"""

from __future__ import annotations

import os
import shutil
import sys
from collections.abc import Mapping
from pathlib import Path


def _extra_directories() -> list[Path]:
    home = Path.home()
    if sys.platform == "win32":
        app_data = Path(os.environ.get("APPDATA", home / "AppData" / "Roaming"))
        local_app_data = Path(os.environ.get("LOCALAPPDATA", home / "AppData" / "Local"))
        return [
            home / ".local" / "bin",
            app_data / "npm",
            local_app_data / "npm",
            home / "scoop" / "shims",
            home / ".volta" / "bin",
        ]
    return [
        home / ".local" / "bin",
        home / ".claude" / "local",
        Path("/opt/homebrew/bin"),
        Path("/usr/local/bin"),
        home / ".npm-global" / "bin",
        home / "bin",
    ]


def known_locations(name: str) -> list[Path]:
    """Candidate install paths for an executable, in priority order."""

    suffixes = ("", ".exe", ".cmd") if sys.platform == "win32" else ("",)
    return [directory / f"{name}{suffix}" for directory in _extra_directories() for suffix in suffixes]


def resolve_executable(executable_path: str) -> str:
    """Return a runnable path for ``executable_path``.

    Explicit paths are returned untouched (after ``~`` expansion). Bare names are
    looked up on ``PATH`` first, then in known install locations. When nothing
    matches the name is returned as-is and spawning reports it as missing.
    """

    if os.sep in executable_path or (os.altsep and os.altsep in executable_path):
        return str(Path(executable_path).expanduser())

    found = shutil.which(executable_path)
    if found:
        return found
    for candidate in known_locations(executable_path):
        if candidate.is_file() and os.access(candidate, os.X_OK):
            return str(candidate)
    return executable_path


def spawn_env(base: Mapping[str, str] | None = None) -> dict[str, str]:
    """Copy of the environment with known install directories appended to ``PATH``."""

    env = dict(os.environ if base is None else base)
    parts = [part for part in env.get("PATH", "").split(os.pathsep) if part]
    for directory in _extra_directories():
        entry = str(directory)
        if entry not in parts:
            parts.append(entry)
    env["PATH"] = os.pathsep.join(parts)
    return env


__all__ = ["known_locations", "resolve_executable", "spawn_env"]
