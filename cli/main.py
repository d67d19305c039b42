"""
Main CLI entry point for Polymarket Weekly Watch

Usage:
    weekly-watch run                   # Run the monitoring loop
    weekly-watch run --once            # Run a single poll iteration
    weekly-watch state show            # View persisted alert state
    weekly-watch state reset           # Forget tracked event and latches
    weekly-watch locate                # Show which event would be tracked now
    weekly-watch notify-test           # Send a Telegram test message
"""

import click
import asyncio
import sys
from dotenv import load_dotenv

# Import command groups
from cli.commands.state_commands import state
from cli.commands.market_commands import locate, notify_test
from config.database import DATABASE_PATH
from config.settings import DEFAULT_CONFIG_PATH


@click.group()
@click.option('--db-path', default=DATABASE_PATH, help='Path to database file')
@click.pass_context
def cli(ctx, db_path):
    """
    Polymarket Weekly Watch - follow one outcome of the weekly event

    Tracks the current weekly event, alerts on threshold crossings and keeps
    alert state in a local database.
    """
    # Load environment variables from .env file
    load_dotenv()

    # Store db_path in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj['DB_PATH'] = db_path


@cli.command()
@click.option('--config', default=DEFAULT_CONFIG_PATH, help='Path to configuration file')
@click.option('--once', is_flag=True, help='Run a single poll iteration and exit')
@click.pass_context
def run(ctx, config, once):
    """
    Run the weekly watch monitoring loop

    This starts the poll loop that locates the weekly event, reads the
    outcome probability and sends Telegram alerts.
    """
    from main import setup_logging, run_monitor

    setup_logging()
    try:
        exit_code = asyncio.run(run_monitor(config, ctx.obj['DB_PATH'], once=once))
    except KeyboardInterrupt:
        click.echo("\n\n🛑 Shutting down gracefully...")
        exit_code = 0
    sys.exit(exit_code)


# Register command groups
cli.add_command(state)
cli.add_command(locate)
cli.add_command(notify_test)


if __name__ == '__main__':
    cli()
