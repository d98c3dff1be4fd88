"""
CODEWRIGHT CLI — The Interface

  codewright run "<task>" --repo <path>     (agent loop)
  codewright apply <file> <patch>           (apply a diff or JSON patch)
  codewright diff <old> <new>               (print a generated patch)
  codewright status                         (config + API keys)
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from codewright.agent import Agent
from codewright.config_loader import load_config, validate_api_keys
from codewright.console import StdoutAgentConsole
from codewright.errors import BudgetExceededError, ParseError, PatchError
from codewright.event_bus import AuditLogger, EventBus
from codewright.identity import BANNER, __codename__, __tagline__, __version__
from codewright.patch import apply_patch, apply_patch_with_similarity, create_patch, load_patch
from codewright.router import Router

load_dotenv()

app = typer.Typer(
    name="codewright",
    help=f"{__codename__} — {__tagline__}",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__codename__} v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
):
    pass


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command()
def run(
    task: str = typer.Argument(..., help="Natural-language task for the agent"),
    repo: Path = typer.Option(Path("."), "--repo", "-r", help="Working tree to operate on"),
    max_iterations: Optional[int] = typer.Option(None, "--max-iterations", "-n", help="Override the iteration cap"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Run the agent on a task."""
    console.print(f"[bright_green]{BANNER}[/]")
    console.print(f"  [dim]v{__version__} — {__tagline__}[/]\n")
    _configure_logging(verbose)

    repo = repo.resolve()
    if not repo.exists():
        console.print(f"[red]Repository not found: {repo}[/]")
        raise typer.Exit(1)

    config = load_config(repo)
    bus = EventBus()
    if config.audit.log_file:
        AuditLogger(repo / config.audit.log_file, bus)

    router = Router(config)
    agent = Agent(
        router,
        config=config,
        working_dir=repo,
        console=StdoutAgentConsole(console),
        event_bus=bus,
    )

    try:
        result = agent.start_task(task, max_iterations=max_iterations)
    except BudgetExceededError as e:
        console.print(f"[red]{e}[/]")
        raise typer.Exit(2)

    color = "green" if result.status == "completed" else "yellow"
    console.print(Panel(
        result.final_result or "(no result)",
        title=f"[{color}]{result.status}[/] after {result.iterations} iteration(s)",
        border_style=color,
    ))
    console.print(f"[dim]Budget: {router.budget.summary()}[/]")
    if result.status != "completed":
        raise typer.Exit(1)


@app.command()
def apply(
    file: Path = typer.Argument(..., help="File to patch"),
    patch_file: Path = typer.Argument(..., help="Unified diff or JSON patch"),
    strict: bool = typer.Option(False, "--strict", "-s", help="Trust hunk line numbers"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the result instead of writing it"),
):
    """Apply a patch to a file."""
    if not file.exists():
        console.print(f"[red]File not found: {file}[/]")
        raise typer.Exit(1)

    original = file.read_text(encoding="utf-8")
    patch_text = patch_file.read_text(encoding="utf-8")

    try:
        if strict or patch_text.lstrip().startswith("{"):
            updated = apply_patch(original, load_patch(patch_text))
        else:
            updated = apply_patch_with_similarity(original, patch_text)
    except (ParseError, PatchError) as e:
        console.print(f"[red]Patch rejected: {e}[/]")
        raise typer.Exit(1)

    if dry_run:
        typer.echo(updated)
        return

    file.write_text(updated, encoding="utf-8")
    console.print(f"[green]Patched {file}[/]")


@app.command()
def diff(
    old: Path = typer.Argument(..., help="Original file"),
    new: Path = typer.Argument(..., help="Modified file"),
    as_json: bool = typer.Option(False, "--json", help="Emit the patch as JSON"),
):
    """Print the patch that turns OLD into NEW."""
    patch = create_patch(old.read_text(encoding="utf-8"), new.read_text(encoding="utf-8"))
    if as_json:
        typer.echo(patch.to_json())
        return
    if not patch.hunks:
        console.print("[dim]No differences.[/]")
        return
    console.print(Syntax(patch.to_diff(), "diff", theme="ansi_dark"))


@app.command()
def status(
    repo: Path = typer.Option(Path("."), "--repo", "-r", help="Repository whose config to show"),
):
    """Show the resolved config and available API keys."""
    config = load_config(repo.resolve())

    table = Table(title="Configuration", border_style="bright_green")
    table.add_column("Setting")
    table.add_column("Value")
    table.add_row("model", config.routing.agent)
    table.add_row("max_iterations", str(config.limits.max_iterations))
    table.add_row("edit strategy", config.edit.strategy)
    table.add_row("command timeout", f"{config.limits.command_timeout}s")
    console.print(table)

    for key, present in validate_api_keys().items():
        mark = "[green]✓[/]" if present else "[dim]✗[/]"
        console.print(f"  {mark} {key}")


if __name__ == "__main__":
    app()
