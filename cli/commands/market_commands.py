"""
CLI commands for checking the live setup without running the loop

Usage:
    weekly-watch locate [--config PATH]
    weekly-watch notify-test [--config PATH]
"""

import click
import asyncio
import sys
from typing import Optional, Tuple

from rich.console import Console
from rich.panel import Panel

from alerts.formatters.format_utils import format_pct
from alerts.telegram_notifier import TelegramNotifier
from common import MonitorError, TrackedEvent
from common.exceptions import ConfigurationError
from config.settings import DEFAULT_CONFIG_PATH, Settings, read_config_file
from data_sources import GammaAPIClient, ClobAPIClient
from tracking import EventLocator, MarketSelector, ProbabilityOracle, Selection

console = Console()


def _settings_or_exit(config_path: str) -> Settings:
    # Diagnostics run without full validation so missing credentials do not block them
    try:
        return Settings(read_config_file(config_path))
    except ConfigurationError as e:
        console.print(f"[red]❌ {e}[/red]")
        sys.exit(1)


@click.command()
@click.option('--config', default=DEFAULT_CONFIG_PATH, help='Path to configuration file')
def locate(config):
    """
    Show the event, market and probability the monitor would track right now

    Example:
        weekly-watch locate
    """
    settings = _settings_or_exit(config)

    try:
        found = asyncio.run(_locate_async(settings))
    except MonitorError as e:
        console.print(f"[red]❌ {e}[/red]")
        sys.exit(1)

    if found is None:
        console.print("[yellow]No matching event found[/yellow]")
        sys.exit(1)

    event, selection, probability = found
    lines = [
        f"[cyan]Event:[/cyan] {event.slug}",
        f"[cyan]Title:[/cyan] {event.title or '-'}",
        f"[cyan]Ends:[/cyan] {event.end_time.strftime('%Y-%m-%d %H:%M UTC') if event.end_time else '-'}",
        f"[cyan]Market:[/cyan] {selection.question or '-'}",
        f"[cyan]Outcome:[/cyan] {selection.label}",
        f"[cyan]Token:[/cyan] {selection.token_id}",
        f"[cyan]Probability:[/cyan] [bold]{format_pct(probability)}[/bold]",
        f"[cyan]Link:[/cyan] {event.url}",
    ]
    console.print(Panel("\n".join(lines), title="📍 Tracked Event", border_style="blue"))


async def _locate_async(settings: Settings) -> Optional[Tuple[TrackedEvent, Selection, float]]:
    """Async implementation of locate"""
    async with GammaAPIClient(settings.api.gamma_api_base_url, timeout=settings.api.request_timeout) as gamma, \
            ClobAPIClient(settings.api.clob_api_base_url, timeout=settings.api.request_timeout) as clob:
        event = await EventLocator(settings.tracking, gamma).locate()
        if event is None:
            return None

        event_data = await gamma.get_event(event.slug)
        if event_data is None:
            return None

        selection = MarketSelector().select(event_data, settings.tracking.target_outcome)
        probability = await ProbabilityOracle(clob).probability(selection.token_id)
        return event, selection, probability


@click.command('notify-test')
@click.option('--config', default=DEFAULT_CONFIG_PATH, help='Path to configuration file')
def notify_test(config):
    """
    Send a test message to the configured Telegram chat

    Example:
        weekly-watch notify-test
    """
    settings = _settings_or_exit(config)
    notifier = TelegramNotifier(settings.alerts.telegram_bot_token, settings.alerts.telegram_chat_id)

    if not notifier.is_enabled():
        console.print("[red]❌ TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID are required[/red]")
        sys.exit(1)

    if asyncio.run(notifier.test_connection()):
        console.print("[green]✅ Test message delivered[/green]")
    else:
        console.print("[red]❌ Test message was not delivered, check the logs[/red]")
        sys.exit(1)
