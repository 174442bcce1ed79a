"""Clock helpers for execution timing."""

from __future__ import annotations

from datetime import UTC, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)


def elapsed_ms(started_at: datetime, completed_at: datetime) -> int:
    """Whole milliseconds between two timestamps, never negative."""

    return max(0, int((completed_at - started_at).total_seconds() * 1000))


__all__ = ["elapsed_ms", "utc_now"]
