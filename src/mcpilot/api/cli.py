"""mcpilot Command Line Interface.

Provides commands to serve the API, send one natural-language request,
and check which capability backends are reachable.
"""

import asyncio
import os
from typing import Optional

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from mcpilot.core.config import get_llm_client, get_settings
from mcpilot.core.logging import configure_logging
from mcpilot.orchestration.errors import OrchestrationError
from mcpilot.orchestration.orchestrator import create_orchestrator
from mcpilot.orchestration.registry import CapabilityRegistry

app = typer.Typer(
    name="mcpilot",
    help="mcpilot - talk to your source-control and container backends in plain language",
    add_completion=False,
)
console = Console()


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    port: int = typer.Option(4000, "--port", "-p", help="Port to listen on"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the mcpilot API server."""
    import uvicorn

    uvicorn.run("mcpilot.api.main:app", host=host, port=port, reload=reload)


@app.command()
def ask(
    query: str = typer.Argument(..., help="What you want done, in plain language"),
    token: Optional[str] = typer.Option(
        None, "--token", "-t", help="Source-control access token (or MCPILOT_TOKEN)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show pipeline logs"),
):
    """Send one request through the orchestrator.

    Examples:
        mcpilot ask "list my repos" -t ghp_xxx
        mcpilot ask "create a private repo called notes"
    """
    configure_logging(quiet=not verbose)
    settings = get_settings()
    token = token or os.environ.get("MCPILOT_TOKEN")

    if not token:
        console.print(
            "[bold red]Error:[/bold red] a token is required (--token or MCPILOT_TOKEN).",
            style="red",
        )
        raise typer.Exit(1)

    try:
        llm_client = get_llm_client()
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}", style="red")
        raise typer.Exit(1)

    orchestrator = create_orchestrator(settings, llm_client)

    try:
        result = asyncio.run(orchestrator.ask(query, token))
    except OrchestrationError as e:
        console.print(f"[red]{e.reply}[/red]")
        console.print(f"[dim]{e.kind}: {e.message}[/dim]")
        raise typer.Exit(1)

    console.print(
        Panel(
            Markdown(result.reply),
            title="[bold blue]mcpilot[/bold blue]",
            border_style="blue",
        )
    )
    if result.action:
        console.print(f"[dim]{result.action.value} → {result.backend}[/dim]")


@app.command()
def status():
    """Probe every capability backend and show which are reachable."""
    configure_logging(quiet=True)
    settings = get_settings()
    registry = CapabilityRegistry(
        settings.backend_configs(),
        timeout=settings.probe_timeout,
    )

    available = asyncio.run(registry.probe())

    table = Table(show_header=True)
    table.add_column("Backend", style="bold")
    table.add_column("Address")
    table.add_column("Status")
    for backend in registry.backends:
        state = (
            "[green]running[/green]"
            if backend.capability in available
            else "[red]unavailable[/red]"
        )
        table.add_row(backend.capability, backend.base_url, state)

    console.print(table)


if __name__ == "__main__":
    app()
