"""Runtime layer exports."""

from .cli import CliRuntime
from .models import CliExecutionOutcome

__all__ = ["CliExecutionOutcome", "CliRuntime"]
