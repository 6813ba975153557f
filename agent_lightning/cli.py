"""
Agent Lightning command-line interface.

    lightning train --episodes 100
    lightning online --enable [--once]
    lightning online --disable
    lightning status [--json]
"""

import asyncio
import json

import typer
from rich.console import Console
from rich.table import Table

from agent_lightning.config import settings
from agent_lightning.services.lightning import AgentLightning
from agent_lightning.services.storage import StorageError
from agent_lightning.utils.logging import configure_logging

app = typer.Typer(
    name="lightning",
    help="Q-learning optimizer for SEO / AI SEO / GEO / AIO scores",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main(
    data_dir: str | None = typer.Option(None, "--data-dir", help="Override the data directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Agent Lightning reinforcement-learning optimizer."""
    configure_logging("DEBUG" if verbose else settings.log_level, settings.log_json)
    if data_dir:
        AgentLightning._instance = AgentLightning(data_dir=data_dir)


@app.command()
def train(
    episodes: int = typer.Option(100, "--episodes", "-e", min=0, help="Number of episodes"),
):
    """Run a training session."""
    console.print(f"[bold blue]Training Agent Lightning ({episodes} episodes)...[/bold blue]")
    try:
        result = AgentLightning.get_instance().train(episodes)
    except Exception as exc:
        console.print(f"[red]Training failed: {exc}[/red]")
        raise typer.Exit(code=1)

    console.print(
        f"[green]Training complete[/green] -- {result.episodes} episodes, "
        f"avg reward {result.avg_reward:.2f}, Q-table {result.q_table_size} entries"
    )
    if result.checkpoint_stale:
        console.print(
            f"[yellow]{result.failed_saves} save(s) failed; "
            "the stored Q-table may be out of date[/yellow]"
        )


@app.command()
def online(
    enable: bool = typer.Option(False, "--enable", "-e", help="Enable online learning"),
    disable: bool = typer.Option(False, "--disable", "-d", help="Disable online learning"),
    once: bool = typer.Option(
        False, "--once", help="With --enable: run a single cycle and exit instead of looping"
    ),
):
    """Enable or disable online learning."""
    if enable == disable:
        console.print("[red]Pass exactly one of --enable or --disable[/red]")
        raise typer.Exit(code=2)

    lightning = AgentLightning.get_instance()
    try:
        if disable:
            asyncio.run(lightning.disable_online_learning())
            console.print("[yellow]Online learning disabled[/yellow]")
            return
        asyncio.run(_run_online(lightning, once))
    except StorageError as exc:
        console.print(f"[red]Could not update online learning: {exc}[/red]")
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        console.print("[yellow]Online learning loop interrupted[/yellow]")


async def _run_online(lightning: AgentLightning, once: bool) -> None:
    if once:
        await lightning.enable_online_learning(start_loop=False)
        console.print("[green]Online learning enabled[/green]")
        snapshot = await lightning.scheduler.search_and_learn()
        console.print(f"Cycle complete: {len(snapshot.insights)} insight(s)")
        return

    await lightning.enable_online_learning()
    console.print("[green]Online learning enabled[/green] -- press Ctrl+C to stop the loop")
    try:
        await asyncio.Event().wait()
    finally:
        await lightning.shutdown()


@app.command()
def status(
    as_json: bool = typer.Option(False, "--json", help="Print the status as JSON"),
):
    """Show config flags and Q-table size."""
    snapshot = AgentLightning.get_instance().status()
    if as_json:
        typer.echo(
            json.dumps(
                {
                    "enabled": snapshot.enabled,
                    "onlineLearning": snapshot.online_learning,
                    "qTableSize": snapshot.q_table_size,
                    "schedule": snapshot.schedule,
                }
            )
        )
        return

    table = Table(title="Agent Lightning")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Enabled", _flag(snapshot.enabled))
    table.add_row("Online learning", _flag(snapshot.online_learning))
    table.add_row("Q-table size", f"{snapshot.q_table_size} entries")
    table.add_row("Schedule", snapshot.schedule)
    console.print(table)


def _flag(value: bool) -> str:
    return "[green]yes[/green]" if value else "[red]no[/red]"


if __name__ == "__main__":
    app()
