"""Runtime execution result models."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from tailor_ai.domain import RunState
from tailor_ai.utils.time import elapsed_ms, utc_now


@dataclass(slots=True)
class CliExecutionOutcome:
    """Terminal result of one subprocess invocation."""

    command: Sequence[str]
    state: RunState
    exit_code: int | None = None
    signal: int | None = None
    stdout: str = ""
    stderr: str = ""
    stdout_truncated: bool = False
    stderr_truncated: bool = False
    cancelled: bool = False
    spawn_error: OSError | None = None
    started_at: datetime = field(default_factory=utc_now)
    completed_at: datetime = field(default_factory=utc_now)

    @property
    def duration_ms(self) -> int:
        return elapsed_ms(self.started_at, self.completed_at)

    @property
    def succeeded(self) -> bool:
        return self.state is RunState.COMPLETED and self.exit_code == 0


__all__ = ["CliExecutionOutcome"]
