#!/usr/bin/env python3
"""
Polymarket Weekly Watch
Follows one outcome of the weekly event and alerts on threshold crossings
"""

import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from colorama import init, Fore, Style
from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from common.exceptions import ConfigurationError
from config.database import DATABASE_PATH, get_connection_string
from config.settings import DEFAULT_CONFIG_PATH, Settings, load_settings
from database import DatabaseManager
from weekly_monitor import WeeklyMonitor

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE = 'logs/weekly_watch.log'


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = LOG_FILE):
    """Configure root logging from LOG_LEVEL (default INFO)"""
    level_name = (level or os.getenv('LOG_LEVEL') or 'INFO').upper()
    handlers = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers
    )
    logging.getLogger('aiohttp.access').setLevel(logging.WARNING)


def _print_banner(settings: Settings):
    """Format and print configuration summary nicely"""
    summary = settings.get_config_summary()
    tracking = summary['tracking']
    alerts = summary['alerts']
    monitoring = summary['monitoring']
    server = summary['server']

    print(f"\n{Fore.BLUE}{'=' * 80}{Style.RESET_ALL}")
    print(f"{Fore.CYAN + Style.BRIGHT}📅 POLYMARKET WEEKLY WATCH{Style.RESET_ALL}")
    print(f"{Fore.BLUE}{'=' * 80}{Style.RESET_ALL}\n")

    print(f"{Fore.YELLOW + Style.BRIGHT}⚙️  CONFIGURATION SUMMARY{Style.RESET_ALL}")
    print(f"{Fore.BLUE}{'─' * 40}{Style.RESET_ALL}")
    print(f"  🎯 {Fore.CYAN}Outcome:{Style.RESET_ALL} {Fore.GREEN}{tracking['target_outcome']}{Style.RESET_ALL}")
    print(f"  🔎 {Fore.CYAN}Event:{Style.RESET_ALL} {tracking['forced_event_slug'] or tracking['slug_prefix'] + '*'}")
    print(f"  🔔 {Fore.CYAN}Thresholds:{Style.RESET_ALL} warn {Fore.YELLOW}{alerts['warn_threshold']:.0%}{Style.RESET_ALL}, "
          f"crit {Fore.RED}{alerts['crit_threshold']:.0%}{Style.RESET_ALL}")
    print(f"  ⏱️  {Fore.CYAN}Cadence:{Style.RESET_ALL} poll {monitoring['poll_seconds']}s, rescan {monitoring['rescan_seconds']}s")
    print(f"  📅 {Fore.CYAN}Daily status:{Style.RESET_ALL} {alerts['daily_status'] + ' UTC' if alerts['daily_status'] else 'off'}")
    print(f"  🩺 {Fore.CYAN}Health:{Style.RESET_ALL} {':' + str(server['port']) if server['enabled'] else 'off'}")
    print()


async def run_monitor(config_path: Optional[str] = DEFAULT_CONFIG_PATH,
                      db_path: str = DATABASE_PATH,
                      once: bool = False) -> int:
    """
    Load settings and run the monitor.

    Returns:
        Process exit code
    """
    try:
        settings = load_settings(config_path)
    except ConfigurationError as e:
        for issue in e.issues:
            logger.error(f"❌ {issue}")
        logger.error("❌ Invalid configuration, refusing to start")
        return 1

    _print_banner(settings)
    settings.log_settings()

    monitor = WeeklyMonitor(settings, db_manager=DatabaseManager(get_connection_string(db_path)))

    if once:
        result = await monitor.run_once()
        return 0 if result is not None else 1

    try:
        await monitor.start_monitoring()
    except KeyboardInterrupt:
        logger.info("🛑 Received shutdown signal")
    finally:
        logger.info("👋 Monitor shutdown complete")
    return 0


def main():
    # Load environment variables from .env file
    load_dotenv()

    # Initialize colorama for cross-platform colored output
    init(autoreset=True)
    setup_logging()

    try:
        exit_code = asyncio.run(run_monitor())
    except KeyboardInterrupt:
        logger.info("🛑 Monitor stopped by user")
        exit_code = 0
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
