"""Check which backend CLIs are installed and optionally smoke-test them."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from tailor_ai.cli.deps import get_container
from tailor_ai.domain import OutputFormat, ProviderRequest
from tailor_ai.providers import ProviderFailure

# Load .env file
_env_path = Path(__file__).parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path)

SMOKE_PROMPT = 'Reply with exactly this JSON object and nothing else: {"ok": true}'

app = typer.Typer(help="Check backend CLI availability")
console = Console()


@app.command()
def main(
    smoke: bool = typer.Option(False, help="Send a tiny JSON prompt to every available backend"),
    timeout_ms: int = typer.Option(60_000, min=1, help="Timeout for each smoke prompt"),
) -> None:
    """Render backend availability as a table."""

    registry = get_container().provider_registry

    async def _run() -> None:
        statuses = await registry.check_all_availability()

        table = Table(title="Backend CLIs")
        table.add_column("Backend", style="cyan")
        table.add_column("Default", style="magenta")
        table.add_column("Available", style="green")
        table.add_column("Version / Error")
        table.add_column("Executable", style="blue")
        for status in statuses:
            config = registry.require(status.backend).get_config()
            table.add_row(
                status.backend,
                "yes" if status.backend == registry.default_provider else "",
                "[green]yes[/green]" if status.available else "[red]no[/red]",
                status.version or status.error or "[dim]-[/dim]",
                config.executable_path,
            )
        console.print(table)

        if not smoke:
            return

        request = ProviderRequest(prompt=SMOKE_PROMPT, output_format=OutputFormat.JSON)
        for status in statuses:
            if not status.available:
                continue
            provider = registry.require(status.backend)
            config = provider.get_config().model_copy(update={"timeout_ms": timeout_ms})
            console.print(f"[cyan]Smoke testing {status.backend}...[/cyan]")
            response = await provider.execute_with_retry(request, config=config)
            if isinstance(response, ProviderFailure):
                console.print(
                    f"[red]{status.backend}: {response.error.code.value} - "
                    f"{response.error.message}[/red]"
                )
            else:
                console.print(f"[green]{status.backend}: {json.dumps(response.data)}[/green]")

    asyncio.run(_run())


if __name__ == "__main__":
    app()
