from __future__ import annotations

import asyncio
import os
import signal
import sys
import time
from pathlib import Path

import pytest

from tailor_ai.domain import RunState
from tailor_ai.runtime import CliRuntime


def _python(code: str) -> list[str]:
    return [sys.executable, "-c", code]


def test_successful_run_captures_stdout() -> None:
    outcome = asyncio.run(CliRuntime().run(_python("print('hello')"), timeout_ms=10_000))

    assert outcome.state is RunState.COMPLETED
    assert outcome.exit_code == 0
    assert outcome.succeeded
    assert outcome.stdout.strip() == "hello"
    assert outcome.signal is None
    assert not outcome.cancelled


def test_stdin_payload_is_delivered_and_closed() -> None:
    code = "import sys; print(sys.stdin.read().upper())"
    outcome = asyncio.run(
        CliRuntime().run(_python(code), stdin_payload="tailor me", timeout_ms=10_000)
    )

    assert outcome.succeeded
    assert outcome.stdout.strip() == "TAILOR ME"


def test_non_zero_exit_is_completed_with_exit_code() -> None:
    code = "import sys; sys.stderr.write('boom'); sys.exit(3)"
    outcome = asyncio.run(CliRuntime().run(_python(code), timeout_ms=10_000))

    assert outcome.state is RunState.COMPLETED
    assert outcome.exit_code == 3
    assert not outcome.succeeded
    assert outcome.stderr == "boom"


def test_missing_executable_reports_spawn_failure(tmp_path) -> None:
    missing = str(tmp_path / "definitely-not-installed")
    outcome = asyncio.run(CliRuntime().run([missing, "--version"], timeout_ms=1_000))

    assert outcome.state is RunState.SPAWN_FAILED
    assert isinstance(outcome.spawn_error, FileNotFoundError)
    assert outcome.exit_code is None


def test_timeout_escalates_to_kill_when_sigterm_is_ignored() -> None:
    code = (
        "import signal, time\n"
        "signal.signal(signal.SIGTERM, signal.SIG_IGN)\n"
        "time.sleep(30)\n"
    )
    runtime = CliRuntime(kill_grace_ms=200)

    outcome = asyncio.run(runtime.run(_python(code), timeout_ms=300))

    assert outcome.state is RunState.TIMED_OUT
    assert outcome.exit_code is not None
    assert outcome.exit_code < 0
    assert outcome.duration_ms < 5_000


def test_output_is_capped_per_stream() -> None:
    code = "import sys; sys.stdout.write('x' * 1000); sys.stderr.write('y' * 5)"
    runtime = CliRuntime(max_output_bytes=100)

    outcome = asyncio.run(runtime.run(_python(code), timeout_ms=10_000))

    assert outcome.succeeded
    assert outcome.stdout == "x" * 100
    assert outcome.stdout_truncated
    assert outcome.stderr == "yyyyy"
    assert not outcome.stderr_truncated


def test_external_signal_is_reported_as_signaled() -> None:
    code = "import os, signal; os.kill(os.getpid(), signal.SIGKILL)"
    outcome = asyncio.run(CliRuntime().run(_python(code), timeout_ms=10_000))

    assert outcome.state is RunState.SIGNALED
    assert outcome.signal == signal.SIGKILL
    assert not outcome.cancelled


@pytest.mark.asyncio
async def test_cancel_event_terminates_running_process() -> None:
    cancel = asyncio.Event()
    asyncio.get_running_loop().call_later(0.2, cancel.set)

    outcome = await CliRuntime(kill_grace_ms=500).run(
        _python("import time; time.sleep(30)"),
        timeout_ms=20_000,
        cancel_event=cancel,
    )

    assert outcome.state is RunState.SIGNALED
    assert outcome.cancelled
    assert outcome.duration_ms < 5_000


@pytest.mark.asyncio
async def test_preset_cancel_event_never_spawns() -> None:
    cancel = asyncio.Event()
    cancel.set()

    outcome = await CliRuntime().run(["/nonexistent/binary"], timeout_ms=1_000, cancel_event=cancel)

    assert outcome.state is RunState.SIGNALED
    assert outcome.cancelled
    assert outcome.spawn_error is None
    assert outcome.exit_code is None


def _pid_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    stat = Path(f"/proc/{pid}/stat")
    if stat.exists():
        # Zombies still answer signal 0 until their new parent reaps them.
        return stat.read_text().rsplit(")", 1)[-1].split()[0] != "Z"
    return True


@pytest.mark.skipif(os.name != "posix", reason="process groups are POSIX only")
def test_timeout_also_stops_processes_the_backend_started(tmp_path: Path) -> None:
    pid_file = tmp_path / "helper.pid"
    code = (
        "import subprocess, time\n"
        "helper = subprocess.Popen(['sleep', '30'])\n"
        f"open({str(pid_file)!r}, 'w').write(str(helper.pid))\n"
        "time.sleep(30)\n"
    )

    outcome = asyncio.run(CliRuntime(kill_grace_ms=200).run(_python(code), timeout_ms=500))

    assert outcome.state is RunState.TIMED_OUT
    helper_pid = int(pid_file.read_text())
    deadline = time.monotonic() + 1.0
    while _pid_alive(helper_pid) and time.monotonic() < deadline:
        time.sleep(0.05)
    assert not _pid_alive(helper_pid)


@pytest.mark.skipif(os.name != "posix", reason="process groups are POSIX only")
def test_helper_holding_pipes_after_exit_is_killed(tmp_path: Path) -> None:
    pid_file = tmp_path / "helper.pid"
    code = (
        "import subprocess\n"
        "helper = subprocess.Popen(['sleep', '30'])\n"
        f"open({str(pid_file)!r}, 'w').write(str(helper.pid))\n"
        "print('done', flush=True)\n"
    )

    started = time.monotonic()
    outcome = asyncio.run(CliRuntime(kill_grace_ms=200).run(_python(code), timeout_ms=10_000))

    assert outcome.state is RunState.COMPLETED
    assert outcome.stdout.strip() == "done"
    assert time.monotonic() - started < 5
    helper_pid = int(pid_file.read_text())
    deadline = time.monotonic() + 1.0
    while _pid_alive(helper_pid) and time.monotonic() < deadline:
        time.sleep(0.05)
    assert not _pid_alive(helper_pid)
