from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from pathlib import Path

import pytest
from pydantic import ValidationError

from tailor_ai.domain import OutputFormat, ProviderConfig, ProviderErrorCode, ProviderRequest
from tailor_ai.providers import CliProvider, ProviderFailure, ProviderSuccess, classify_exit_failure
from tailor_ai.providers.anthropic import CLAUDE_PLUGIN, build_claude_invocation
from tailor_ai.providers.gemini import GEMINI_PLUGIN, build_gemini_invocation
from tailor_ai.providers.openai import CODEX_PLUGIN, build_codex_invocation

ScriptFactory = Callable[[str, str], Path]

JSON_REQUEST = ProviderRequest(prompt="Summarise", output_format=OutputFormat.JSON)
TEXT_REQUEST = ProviderRequest(prompt="Summarise")


def _claude(script: Path, **overrides: object) -> CliProvider:
    config = CLAUDE_PLUGIN.default_config.model_copy(
        update={"executable_path": str(script), **overrides}
    )
    return CliProvider(CLAUDE_PLUGIN, config=config)


def test_claude_invocation_sends_prompt_on_stdin() -> None:
    config = CLAUDE_PLUGIN.default_config

    text = build_claude_invocation(config, TEXT_REQUEST)
    structured = build_claude_invocation(config, JSON_REQUEST)

    assert text.args == ("--print",)
    assert text.stdin_payload == "Summarise"
    assert structured.args == ("--print", "--output-format", "json")


def test_codex_invocation_puts_prompt_last() -> None:
    invocation = build_codex_invocation(CODEX_PLUGIN.default_config, JSON_REQUEST)

    assert invocation.args == ("--model", "o3-mini", "--json", "Summarise")
    assert invocation.stdin_payload is None


def test_gemini_invocation_uses_prompt_flag() -> None:
    invocation = build_gemini_invocation(GEMINI_PLUGIN.default_config, JSON_REQUEST)

    assert invocation.args == (
        "-p",
        "Summarise",
        "-m",
        "gemini-2.5-flash",
        "--output-format",
        "json",
    )

    no_model = GEMINI_PLUGIN.default_config.model_copy(update={"model": None})
    assert build_gemini_invocation(no_model, TEXT_REQUEST).args == ("-p", "Summarise")


def test_default_configs_per_backend() -> None:
    assert CLAUDE_PLUGIN.default_config.timeout_ms == 120_000
    assert CLAUDE_PLUGIN.default_config.max_retries == 0
    assert CODEX_PLUGIN.default_config.timeout_ms == 120_000
    assert GEMINI_PLUGIN.default_config.timeout_ms == 60_000
    assert GEMINI_PLUGIN.default_config.max_retries == 1


def test_claude_json_round_trip_through_fake_cli(make_cli: ScriptFactory) -> None:
    script = make_cli(
        "claude",
        """
        import json, sys
        prompt = sys.stdin.read()
        assert "--output-format" in sys.argv
        inner = "```json\\n" + json.dumps({"x": 1, "prompt": prompt}) + "\\n```"
        print(json.dumps({"type": "result", "result": inner}))
        """,
    )

    response = asyncio.run(_claude(script).execute(JSON_REQUEST))

    assert isinstance(response, ProviderSuccess)
    assert response.success is True
    assert response.data == {"x": 1, "prompt": "Summarise"}


def test_text_request_returns_trimmed_stdout(make_cli: ScriptFactory) -> None:
    script = make_cli("claude", "print('  plain answer  ')\n")

    response = asyncio.run(_claude(script).execute(TEXT_REQUEST))

    assert isinstance(response, ProviderSuccess)
    assert response.raw_text == "plain answer"
    assert response.data is None


def test_codex_event_stream_through_fake_cli(make_cli: ScriptFactory) -> None:
    script = make_cli(
        "codex",
        """
        import json, sys
        prompt = sys.argv[-1]
        print(json.dumps({"type": "thread.started"}))
        item = {"type": "agent_message", "text": json.dumps({"echo": prompt})}
        print(json.dumps({"type": "item.completed", "item": item}))
        """,
    )
    config = CODEX_PLUGIN.default_config.model_copy(update={"executable_path": str(script)})

    response = asyncio.run(CliProvider(CODEX_PLUGIN, config=config).execute(JSON_REQUEST))

    assert isinstance(response, ProviderSuccess)
    assert response.data == {"echo": "Summarise"}


def test_gemini_response_envelope_through_fake_cli(make_cli: ScriptFactory) -> None:
    script = make_cli(
        "gemini",
        """
        import json, sys
        prompt = sys.argv[sys.argv.index("-p") + 1]
        print(json.dumps({"response": json.dumps({"echo": prompt})}))
        """,
    )
    config = GEMINI_PLUGIN.default_config.model_copy(update={"executable_path": str(script)})

    response = asyncio.run(CliProvider(GEMINI_PLUGIN, config=config).execute(JSON_REQUEST))

    assert isinstance(response, ProviderSuccess)
    assert response.data == {"echo": "Summarise"}


def test_non_zero_exit_is_provider_error(make_cli: ScriptFactory) -> None:
    script = make_cli("claude", "import sys\nsys.stderr.write('bad things')\nsys.exit(2)\n")

    response = asyncio.run(_claude(script).execute(JSON_REQUEST))

    assert isinstance(response, ProviderFailure)
    assert response.success is False
    assert response.error.code is ProviderErrorCode.PROVIDER_ERROR
    assert response.error.message == "CLI exited with code 2: bad things"
    assert response.error.backend == "claude"
    assert response.error.details["exit_code"] == 2


@pytest.mark.parametrize(
    ("stderr", "expected"),
    [
        ("Error: 429 Too Many Requests", ProviderErrorCode.RATE_LIMITED),
        ("RESOURCE_EXHAUSTED: quota exceeded", ProviderErrorCode.RATE_LIMITED),
        ("Invalid API key. Please run /login", ProviderErrorCode.AUTH_FAILED),
        ("segfault in module", ProviderErrorCode.PROVIDER_ERROR),
        ("see issue 429 for details", ProviderErrorCode.PROVIDER_ERROR),
        ("authentication module failed to load", ProviderErrorCode.PROVIDER_ERROR),
    ],
)
def test_exit_failures_are_classified(stderr: str, expected: ProviderErrorCode) -> None:
    assert classify_exit_failure(stderr) is expected


def test_stdout_mentions_do_not_change_the_error_code(make_cli: ScriptFactory) -> None:
    script = make_cli(
        "claude",
        """
        import sys
        print("Fixed bug 429 in parser; authentication flow untouched")
        sys.exit(1)
        """,
    )
    delays: list[float] = []

    async def _record(seconds: float) -> None:
        delays.append(seconds)

    config = CLAUDE_PLUGIN.default_config.model_copy(
        update={"executable_path": str(script), "max_retries": 2}
    )
    provider = CliProvider(CLAUDE_PLUGIN, config=config, sleep=_record)

    response = asyncio.run(provider.execute_with_retry(JSON_REQUEST))

    assert isinstance(response, ProviderFailure)
    assert response.error.code is ProviderErrorCode.PROVIDER_ERROR
    assert response.error.message.startswith("CLI exited with code 1: Fixed bug 429")
    assert delays == []


def test_missing_cli_is_not_available(tmp_path: Path) -> None:
    provider = _claude(tmp_path / "missing-claude")

    response = asyncio.run(provider.execute(JSON_REQUEST))

    assert isinstance(response, ProviderFailure)
    assert response.error.code is ProviderErrorCode.PROVIDER_NOT_AVAILABLE
    assert "not found" in response.error.message


def test_unparseable_output_is_invalid_json(make_cli: ScriptFactory) -> None:
    script = make_cli("claude", "print('I am not JSON at all')\n")

    response = asyncio.run(_claude(script).execute(JSON_REQUEST))

    assert isinstance(response, ProviderFailure)
    assert response.error.code is ProviderErrorCode.INVALID_JSON
    assert response.error.message.startswith("Failed to parse JSON: Unable to parse response as JSON")
    assert response.error.details["raw_response"] == "I am not JSON at all"


def test_slow_cli_times_out(make_cli: ScriptFactory) -> None:
    script = make_cli("claude", "import time\ntime.sleep(30)\n")

    response = asyncio.run(_claude(script, timeout_ms=200).execute(JSON_REQUEST))

    assert isinstance(response, ProviderFailure)
    assert response.error.code is ProviderErrorCode.TIMEOUT
    assert response.error.message == "Claude CLI timed out after 200ms"


def test_get_status_reports_version(make_cli: ScriptFactory) -> None:
    script = make_cli("claude", "print('1.0.42 (Claude Code)')\n")

    status = asyncio.run(_claude(script).get_status())

    assert status.available
    assert status.backend == "claude"
    assert status.version == "1.0.42 (Claude Code)"
    assert asyncio.run(_claude(script).is_available())


def test_get_status_reports_missing_cli(tmp_path: Path) -> None:
    missing = tmp_path / "nope"

    status = asyncio.run(_claude(missing).get_status())

    assert not status.available
    assert status.error == f"CLI not found at '{missing}'"


def test_get_status_reports_failed_version_check(make_cli: ScriptFactory) -> None:
    script = make_cli("claude", "import sys\nsys.exit(4)\n")

    status = asyncio.run(_claude(script).get_status())

    assert not status.available
    assert status.error == "CLI exited with code 4"


def test_gemini_status_falls_back_to_model(make_cli: ScriptFactory) -> None:
    script = make_cli("gemini", "pass\n")
    config = GEMINI_PLUGIN.default_config.model_copy(update={"executable_path": str(script)})

    status = asyncio.run(CliProvider(GEMINI_PLUGIN, config=config).get_status())

    assert status.available
    assert status.version == "Model: gemini-2.5-flash"


def test_update_config_merges_and_validates() -> None:
    provider = CliProvider(CLAUDE_PLUGIN)
    before = provider.get_config()

    updated = provider.update_config(timeout_ms=5_000)

    assert updated.timeout_ms == 5_000
    assert updated.executable_path == "claude"
    assert provider.get_config() is updated
    assert before.timeout_ms == 120_000

    with pytest.raises(ValidationError):
        provider.update_config(timeout_ms=-1)
    assert provider.get_config() is updated


def test_provider_config_is_frozen() -> None:
    config = ProviderConfig(executable_path="claude")

    with pytest.raises(ValidationError):
        config.timeout_ms = 10  # type: ignore[misc]

    assert json.loads(config.model_dump_json())["max_retries"] == 0
