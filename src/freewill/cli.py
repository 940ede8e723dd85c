"""CLI entry point for freewill."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from freewill import __version__

if TYPE_CHECKING:
    from freewill.colony.snapshot import ColonySnapshot
    from freewill.scoring.result import PriorityResult
    from freewill.scoring.settings import FreeWillSettings

console = Console()

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _configure_logging(level: str | None) -> None:
    if level is None:
        return
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__, prog_name="freewill")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Emit library logs at this level",
)
def main(log_level: str | None) -> None:
    """freewill: autonomous work priorities for colony agents."""
    _configure_logging(log_level.upper() if log_level else None)


@main.command()
@click.option("--levels", default=4, show_default=True, help="Number of active priority levels")
def levels(levels: int) -> None:
    """Show how continuous scores map onto priority levels."""
    from freewill.scoring.quantizer import OFF, PriorityScale

    try:
        scale = PriorityScale(levels)
    except ValueError as err:
        raise click.BadParameter(str(err), param_hint="--levels") from err

    table = Table(title=f"Priority scale (L={scale.levels})")
    table.add_column("Level", style="cyan")
    table.add_column("Score range")
    table.add_column("Manual value", style="green")

    for level in range(1, scale.levels + 1):
        low, high = scale.band(level)
        table.add_row(str(level), f"({low:.0%}, {high:.0%}]", f"{scale.value_for_level(level):.2f}")
    low, high = scale.band(OFF)
    table.add_row("off", f"[{low:.0%}, {high:.0%}]", "0.00")

    console.print(table)
    console.print(f"\nCutoff: {scale.cutoff}% | Band width: {scale.step_width:g}%")


@main.command()
@click.argument("task", required=False)
def dispatch(task: str | None) -> None:
    """List the considerations applied to TASK, in order (all tasks if omitted)."""
    from freewill.scoring.considerations import consideration_name
    from freewill.scoring.dispatch import DISPATCH_TABLE, considerations_for

    if task is None:
        table = Table(title="Dispatch table")
        table.add_column("Task", style="cyan")
        table.add_column("Considerations")
        for name, rules in DISPATCH_TABLE.items():
            table.add_row(name, str(len(rules)))
        console.print(table)
        return

    if task not in DISPATCH_TABLE:
        console.print(f"[yellow]{task} has no entry, using the default list[/yellow]")

    table = Table(title=f"Considerations for {task}")
    table.add_column("#", style="dim")
    table.add_column("Consideration", style="cyan")
    table.add_column("Breaker", style="yellow")
    for i, rule in enumerate(considerations_for(task), start=1):
        table.add_row(str(i), consideration_name(rule), getattr(rule, "breaker", None) or "")
    console.print(table)


def _load(
    snapshot: Path, settings: Path | None, verbose: bool
) -> tuple[ColonySnapshot, FreeWillSettings]:
    from freewill.colony.snapshot import load_snapshot
    from freewill.scoring.settings import DEFAULT_SETTINGS_PATH, load_settings

    try:
        colony = load_snapshot(snapshot)
    except (OSError, ValueError) as err:
        raise click.ClickException(f"could not read snapshot {snapshot}: {err}") from err

    config = load_settings(settings or DEFAULT_SETTINGS_PATH)
    if verbose:
        config.verbose = True
    return colony, config


@main.command()
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--agent", "agent_ids", multiple=True, help="Only score this agent (repeatable)")
@click.option("--task", "tasks", multiple=True, help="Only score this task category (repeatable)")
@click.option(
    "--settings",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Settings JSON file",
)
@click.option("--verbose", is_flag=True, help="Keep every reason in the explanation trail")
@click.option(
    "--workers", default=None, type=click.IntRange(min=1), help="Worker threads for batch scoring"
)
def score(
    snapshot: Path,
    agent_ids: tuple[str, ...],
    tasks: tuple[str, ...],
    settings: Path | None,
    verbose: bool,
    workers: int | None,
) -> None:
    """Score every agent in SNAPSHOT against its task categories."""
    from freewill.scoring.pipeline import ScoringPipeline

    colony, config = _load(snapshot, settings, verbose)
    agents = [a for a in colony.agents if not agent_ids or a.agent_id in agent_ids]
    if not agents:
        console.print("[dim]No matching agents in snapshot.[/dim]")
        return

    task_list = list(tasks) or list(colony.tasks)
    pipeline = ScoringPipeline(colony.world, config)
    results = pipeline.evaluate_batch(agents, task_list, max_workers=workers)

    table = Table(title="Work priorities")
    table.add_column("Agent", style="cyan")
    for task in task_list:
        table.add_column(task, justify="center")

    per_agent = len(task_list)
    for i, agent in enumerate(agents):
        row = results[i * per_agent : (i + 1) * per_agent]
        table.add_row(agent.label, *(_cell(r) for r in row))

    console.print(table)


def _cell(result: PriorityResult) -> str:
    if result.is_off:
        return "[dim]-[/dim]"
    text = f"{result.level} ({result.value:.0%})"
    if not result.autonomous:
        return f"[magenta]{text}[/magenta]"
    if result.level == 1:
        return f"[bold green]{text}[/bold green]"
    return text


@main.command()
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("agent_id")
@click.argument("task")
@click.option(
    "--settings",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Settings JSON file",
)
def explain(snapshot: Path, agent_id: str, task: str, settings: Path | None) -> None:
    """Show the full reasoning trail for AGENT_ID doing TASK."""
    from freewill.scoring.pipeline import ScoringPipeline

    colony, config = _load(snapshot, settings, verbose=True)
    try:
        agent = colony.agent(agent_id)
    except KeyError as err:
        raise click.ClickException(f"no agent {agent_id} in snapshot") from err

    result = ScoringPipeline(colony.world, config).evaluate(agent, task)
    console.print(f"[bold cyan]{agent.label}[/bold cyan] / [bold]{task}[/bold]")
    console.print(f"[bold]Value:[/bold] {result.value:.3f}")
    console.print(f"[bold]Level:[/bold] {'off' if result.is_off else result.level}")
    console.print()
    console.print(result.tooltip(colony.world.describe(task)), markup=False, highlight=False)


if __name__ == "__main__":
    main()
