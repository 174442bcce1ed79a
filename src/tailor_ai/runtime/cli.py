"""CLI execution runtime.

``CliRuntime.run`` drives exactly one subprocess through the states
``IDLE -> SPAWNING -> RUNNING -> {COMPLETED | TIMED_OUT | SIGNALED | SPAWN_FAILED}``.
Process exit, the timeout and the caller's cancel event race at a single
``asyncio.wait`` call; whichever wins decides the terminal state.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
from collections.abc import Mapping, Sequence
from contextlib import suppress

from tailor_ai.domain import RunState
from tailor_ai.utils.time import utc_now

from .models import CliExecutionOutcome

DEFAULT_KILL_GRACE_MS = 1000
DEFAULT_MAX_OUTPUT_BYTES = 10 * 1024 * 1024
_READ_CHUNK = 64 * 1024
# Backends run in their own session so helpers they spawn are signalled with them.
_PROCESS_GROUPS = os.name == "posix"

logger = logging.getLogger(__name__)


class _StreamBuffer:
    """Accumulates one output stream up to a byte limit."""

    __slots__ = ("_chunks", "_limit", "_size", "truncated")

    def __init__(self, limit: int) -> None:
        self._chunks: list[bytes] = []
        self._limit = limit
        self._size = 0
        self.truncated = False

    def feed(self, chunk: bytes) -> None:
        room = self._limit - self._size
        if room <= 0:
            self.truncated = True
            return
        if len(chunk) > room:
            chunk = chunk[:room]
            self.truncated = True
        self._chunks.append(chunk)
        self._size += len(chunk)

    def text(self) -> str:
        return b"".join(self._chunks).decode("utf-8", errors="replace")


async def _drain(stream: asyncio.StreamReader | None, buffer: _StreamBuffer) -> None:
    if stream is None:
        return
    while True:
        chunk = await stream.read(_READ_CHUNK)
        if not chunk:
            return
        buffer.feed(chunk)


class CliRuntime:
    """Runs one CLI command under a timeout with graceful-then-forceful termination."""

    def __init__(
        self,
        *,
        kill_grace_ms: int = DEFAULT_KILL_GRACE_MS,
        max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
    ) -> None:
        self._kill_grace = kill_grace_ms / 1000
        self._max_output_bytes = max_output_bytes

    async def run(
        self,
        command: Sequence[str],
        *,
        stdin_payload: str | None = None,
        timeout_ms: int,
        cancel_event: asyncio.Event | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CliExecutionOutcome:
        command = list(command)
        started_at = utc_now()

        if cancel_event is not None and cancel_event.is_set():
            return CliExecutionOutcome(
                command=command,
                state=RunState.SIGNALED,
                cancelled=True,
                started_at=started_at,
                completed_at=utc_now(),
            )

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.PIPE
                if stdin_payload is not None
                else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=dict(env) if env is not None else None,
                start_new_session=_PROCESS_GROUPS,
            )
        except OSError as exc:
            logger.warning("Unable to start %s: %s", command[0], exc)
            return CliExecutionOutcome(
                command=command,
                state=RunState.SPAWN_FAILED,
                spawn_error=exc,
                started_at=started_at,
                completed_at=utc_now(),
            )

        logger.debug("Started %s (pid=%s, timeout=%sms)", command[0], process.pid, timeout_ms)
        stdout_buffer = _StreamBuffer(self._max_output_bytes)
        stderr_buffer = _StreamBuffer(self._max_output_bytes)
        readers = asyncio.gather(
            _drain(process.stdout, stdout_buffer),
            _drain(process.stderr, stderr_buffer),
        )
        exit_waiter = asyncio.ensure_future(process.wait())
        writer: asyncio.Task[None] | None = None
        if stdin_payload is not None:
            writer = asyncio.create_task(_feed_stdin(process, stdin_payload))

        try:
            trigger = await self._wait_for_exit(exit_waiter, timeout_ms, cancel_event)
            if trigger is RunState.TIMED_OUT:
                logger.warning("%s timed out after %sms; terminating", command[0], timeout_ms)
                await self._terminate(process, exit_waiter)
            elif trigger is RunState.SIGNALED:
                logger.info("%s cancelled by caller; terminating", command[0])
                await self._terminate(process, exit_waiter)
        except asyncio.CancelledError:
            await self._terminate(process, exit_waiter)
            readers.cancel()
            raise
        finally:
            if writer is not None and not writer.done():
                writer.cancel()
                await asyncio.wait({writer})

        await self._collect(process, readers)

        returncode = process.returncode
        signal_number = -returncode if returncode is not None and returncode < 0 else None
        cancelled = trigger is RunState.SIGNALED
        if trigger is RunState.COMPLETED and signal_number is not None:
            state = RunState.SIGNALED
        else:
            state = trigger

        return CliExecutionOutcome(
            command=command,
            state=state,
            exit_code=returncode,
            signal=signal_number,
            stdout=stdout_buffer.text(),
            stderr=stderr_buffer.text(),
            stdout_truncated=stdout_buffer.truncated,
            stderr_truncated=stderr_buffer.truncated,
            cancelled=cancelled,
            started_at=started_at,
            completed_at=utc_now(),
        )

    async def _wait_for_exit(
        self,
        exit_waiter: asyncio.Future[int],
        timeout_ms: int,
        cancel_event: asyncio.Event | None,
    ) -> RunState:
        waiters: set[asyncio.Future[object]] = {exit_waiter}
        cancel_waiter: asyncio.Future[object] | None = None
        if cancel_event is not None:
            cancel_waiter = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_waiter)
        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=timeout_ms / 1000,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            if cancel_waiter is not None and not cancel_waiter.done():
                cancel_waiter.cancel()

        if exit_waiter in done:
            return RunState.COMPLETED
        if cancel_waiter is not None and cancel_waiter in done:
            return RunState.SIGNALED
        return RunState.TIMED_OUT

    async def _terminate(
        self,
        process: asyncio.subprocess.Process,
        exit_waiter: asyncio.Future[int],
    ) -> None:
        if exit_waiter.done():
            _kill_group(process)
            return
        _terminate_group(process)
        try:
            await asyncio.wait_for(asyncio.shield(exit_waiter), timeout=self._kill_grace)
        except TimeoutError:
            logger.warning("pid %s ignored SIGTERM; sending SIGKILL", process.pid)
            _kill_group(process)
            await exit_waiter
        else:
            # Group members that outlived the leader are not given a second grace period.
            _kill_group(process)

    async def _collect(
        self,
        process: asyncio.subprocess.Process,
        readers: asyncio.Future[list[None]],
    ) -> None:
        # Grandchildren can keep the pipes open after the direct child exits.
        done, _ = await asyncio.wait({readers}, timeout=self._kill_grace)
        if done:
            readers.result()
            return
        logger.warning("Output pipes still open after exit; killing pid %s group", process.pid)
        _kill_group(process)
        readers.cancel()
        await asyncio.wait({readers})


def _terminate_group(process: asyncio.subprocess.Process) -> None:
    with suppress(ProcessLookupError, PermissionError):
        if _PROCESS_GROUPS:
            os.killpg(process.pid, signal.SIGTERM)
        else:
            process.terminate()


def _kill_group(process: asyncio.subprocess.Process) -> None:
    with suppress(ProcessLookupError, PermissionError):
        if _PROCESS_GROUPS:
            os.killpg(process.pid, signal.SIGKILL)
        elif process.returncode is None:
            process.kill()


async def _feed_stdin(process: asyncio.subprocess.Process, payload: str) -> None:
    stdin = process.stdin
    if stdin is None:
        return
    try:
        stdin.write(payload.encode("utf-8"))
        await stdin.drain()
    except (BrokenPipeError, ConnectionResetError):
        logger.debug("Process %s closed stdin before the prompt was fully written", process.pid)
    finally:
        stdin.close()


__all__ = ["CliRuntime", "DEFAULT_KILL_GRACE_MS", "DEFAULT_MAX_OUTPUT_BYTES"]
