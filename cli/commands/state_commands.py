"""
CLI commands for the persisted alert state

Usage:
    weekly-watch state show [--json]
    weekly-watch state reset [--yes]
"""

import click
import asyncio
import json
from rich.console import Console
from rich.table import Table
from rich import box

from alerts.formatters.format_utils import format_pct
from common import AlertState
from config.database import get_connection_string
from database import DatabaseManager
from persistence import StateStore

console = Console()


@click.group()
def state():
    """Commands for the persisted alert state"""
    pass


@state.command('show')
@click.option('--json', 'as_json', is_flag=True, help='Print the raw record as JSON')
@click.pass_context
def show_state(ctx, as_json):
    """Show the tracked event, latch flags and last digest date"""
    current = asyncio.run(_load_state_async(ctx.obj['DB_PATH']))
    if as_json:
        click.echo(json.dumps(current.to_dict(), indent=2))
        return
    _render_state(current, ctx.obj['DB_PATH'])


@state.command('reset')
@click.option('--yes', is_flag=True, help='Skip the confirmation prompt')
@click.pass_context
def reset_state(ctx, yes):
    """
    Forget the tracked event and re-arm both latches

    The next run starts from scratch and announces the event it finds.
    """
    if not yes and not click.confirm('Reset alert state?', default=False):
        console.print("[yellow]Aborted[/yellow]")
        return

    existed = asyncio.run(_reset_state_async(ctx.obj['DB_PATH']))
    if existed:
        console.print("[green]✅ Alert state reset[/green]")
    else:
        console.print("[dim]No stored alert state, nothing to reset[/dim]")


async def _load_state_async(db_path: str) -> AlertState:
    """Async implementation of show state"""
    db_manager = DatabaseManager(get_connection_string(db_path))
    try:
        return await StateStore(db_manager).load()
    finally:
        await db_manager.close()


async def _reset_state_async(db_path: str) -> bool:
    """Async implementation of reset state"""
    db_manager = DatabaseManager(get_connection_string(db_path))
    try:
        return await StateStore(db_manager).reset()
    finally:
        await db_manager.close()


def _flag(value: bool) -> str:
    return "[red]FIRED[/red]" if value else "[green]armed[/green]"


def _render_state(current: AlertState, db_path: str):
    table = Table(title="Alert State", box=box.ROUNDED, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("Tracked event", current.tracked_slug or "[dim]none[/dim]")
    table.add_row("Warn latch", _flag(current.warn_triggered))
    table.add_row("Crit latch", _flag(current.crit_triggered))
    table.add_row("Last probability", format_pct(current.last_probability))
    table.add_row("Last daily status", current.last_daily_status_date or "[dim]never[/dim]")
    table.add_row(
        "Updated",
        current.updated_at.strftime('%Y-%m-%d %H:%M:%S UTC') if current.updated_at else "[dim]never[/dim]"
    )

    console.print(table)
    console.print(f"[dim]Database: {db_path}[/dim]")
