"""
Weekly Monitor Orchestrator
Drives event discovery, probability polling, alert latches and notifications

One asyncio task runs the poll loop. Event discovery runs on its own slower
cadence; every iteration is isolated so a failure only costs that cycle.
"""

import asyncio
import logging
import signal
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from alerts.formatters import TelegramFormatter
from alerts.formatters.format_utils import format_pct
from alerts.state_machine import AlertStateMachine, DailyDigestGate
from alerts.telegram_notifier import TelegramNotifier
from common import (
    AlertType, AlertState, IterationResult, MonitorError, TrackedEvent, UpstreamError
)
from config.database import get_connection_string
from config.settings import Settings
from data_sources import GammaAPIClient, ClobAPIClient
from database import DatabaseManager
from persistence import StateStore
from server import HealthServer
from tracking import EventLocator, MarketSelector, ProbabilityOracle

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WeeklyMonitor:
    """Main orchestrator for tracking one weekly event outcome"""

    def __init__(self, settings: Settings,
                 db_manager: Optional[DatabaseManager] = None,
                 gamma_client: Optional[GammaAPIClient] = None,
                 clob_client: Optional[ClobAPIClient] = None,
                 notifier: Optional[TelegramNotifier] = None,
                 clock: Callable[[], datetime] = _utcnow,
                 monotonic: Callable[[], float] = time.monotonic):
        self.settings = settings
        self.clock = clock
        self.monotonic = monotonic

        # Data sources
        self.gamma_client = gamma_client or GammaAPIClient(
            settings.api.gamma_api_base_url, timeout=settings.api.request_timeout
        )
        self.clob_client = clob_client or ClobAPIClient(
            settings.api.clob_api_base_url, timeout=settings.api.request_timeout
        )

        # Persistence
        self.db_manager = db_manager or DatabaseManager(get_connection_string())
        self.state_store = StateStore(self.db_manager)

        # Core components
        self.event_locator = EventLocator(settings.tracking, self.gamma_client, clock=clock)
        self.market_selector = MarketSelector()
        self.oracle = ProbabilityOracle(self.clob_client)
        self.state_machine = AlertStateMachine(settings.alerts.warn_threshold, settings.alerts.crit_threshold)
        self.digest_gate = DailyDigestGate(
            settings.alerts.daily_status_enabled,
            settings.alerts.daily_status_at if settings.alerts.daily_status_enabled else None
        )

        # Notifications
        self.notifier = notifier or TelegramNotifier(
            settings.alerts.telegram_bot_token, settings.alerts.telegram_chat_id
        )
        self.formatter = TelegramFormatter(settings.alerts.warn_threshold, settings.alerts.crit_threshold)

        self.health_server = (
            HealthServer(settings.server.host, settings.server.port) if settings.server.enabled else None
        )

        # Loop state
        self.state: Optional[AlertState] = None
        self.current_event: Optional[TrackedEvent] = None
        self._last_rescan: Optional[float] = None
        self._stop_event = asyncio.Event()
        self._signals = []
        self.running = False

        # Activity tracking
        self.iteration_count = 0
        self.error_count = 0

    async def start_monitoring(self):
        """Start the poll loop and run until stopped"""
        logger.info("🚀 Starting Weekly Monitor")

        await self._open()
        self._install_signal_handlers()
        self.running = True

        try:
            while self.running:
                await self.run_supervised()
                await self._sleep(self.settings.monitoring.poll_seconds)
        finally:
            await self.stop_monitoring()

    async def run_once(self) -> Optional[IterationResult]:
        """Run a single supervised iteration with full setup and teardown"""
        await self._open(start_server=False)
        try:
            return await self.run_supervised()
        finally:
            await self.stop_monitoring()

    async def stop_monitoring(self):
        """Stop the poll loop and release resources"""
        logger.info("🛑 Stopping Weekly Monitor")
        self.running = False
        self._stop_event.set()
        self._remove_signal_handlers()

        if self.health_server:
            await self.health_server.stop()

        # Close HTTP sessions to prevent leaks
        await self.gamma_client.close()
        await self.clob_client.close()
        await self.db_manager.close()

    def request_stop(self):
        logger.info("🛑 Received shutdown signal")
        self.running = False
        self._stop_event.set()

    async def _open(self, start_server: bool = True):
        await self.gamma_client.__aenter__()
        await self.clob_client.__aenter__()

        if start_server and self.health_server:
            await self.health_server.start()

        self.state = await self.state_store.load()

        if self.notifier.is_enabled():
            logger.info("📱 Telegram notifications enabled")

    def _install_signal_handlers(self):
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_stop)
                self._signals.append(sig)
            except (NotImplementedError, RuntimeError):
                # Not supported on this platform; KeyboardInterrupt still applies
                pass

    def _remove_signal_handlers(self):
        loop = asyncio.get_running_loop()
        while self._signals:
            loop.remove_signal_handler(self._signals.pop())

    async def _sleep(self, seconds: float):
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass

    async def run_supervised(self) -> Optional[IterationResult]:
        """
        Run one iteration; log and absorb any failure.

        On failure the in-memory state is dropped so the next iteration
        starts again from what was persisted.
        """
        self.iteration_count += 1
        try:
            return await self.run_iteration()
        except MonitorError as e:
            self.error_count += 1
            self.state = None
            logger.error(f"❌ Cycle {self.iteration_count} abandoned: {e}")
        except Exception as e:
            self.error_count += 1
            self.state = None
            logger.error(f"❌ Unexpected error in cycle {self.iteration_count}: {e}", exc_info=True)
        return None

    async def run_iteration(self) -> Optional[IterationResult]:
        """
        One poll iteration.

        Returns:
            IterationResult, or None when no event could be located

        Raises:
            MonitorError: When a stage fails; the cycle is abandoned
        """
        if self.state is None:
            self.state = await self.state_store.load()
        state = self.state

        event = await self._resolve_event(state)
        if event is None:
            logger.info("No event to track yet. Will retry.")
            return None

        result = IterationResult(slug=event.slug)

        # Roll-forward: latches re-armed before the first evaluation
        if self.state_machine.track(state, event.slug):
            result.slug_changed = True
            await self.state_store.save(state)
            await self._notify(self.formatter.format_new_tracking(event), AlertType.NEW_TRACKING)

        event_data = await self.gamma_client.get_event(event.slug)
        if event_data is None:
            raise UpstreamError(f"Tracked event {event.slug} no longer exists")

        selection = self.market_selector.select(event_data, self.settings.tracking.target_outcome)
        probability = await self.oracle.probability(selection.token_id)
        result.label = selection.label
        result.token_id = selection.token_id
        result.probability = probability

        last_probability = state.last_probability
        now = self.clock()

        if self.digest_gate.is_due(state, now):
            message = self.formatter.format_daily_status(
                selection.label, probability, event.url,
                state.warn_triggered, state.crit_triggered, now
            )
            if await self._notify(message, AlertType.DAILY_STATUS):
                self.digest_gate.mark_sent(state, now)
                result.daily_status_sent = True

        signals = self.state_machine.evaluate(state, probability)
        result.signals = signals
        await self.state_store.save(state)

        logger.info(
            f"📈 {event.slug} {selection.label} prob={format_pct(probability)} "
            f"(last={format_pct(last_probability)})"
        )

        if signals.warn:
            await self._notify(
                self.formatter.format_threshold_alert(AlertType.WARN_THRESHOLD, selection.label, probability, event.url),
                AlertType.WARN_THRESHOLD
            )
        if signals.crit:
            await self._notify(
                self.formatter.format_threshold_alert(AlertType.CRIT_THRESHOLD, selection.label, probability, event.url),
                AlertType.CRIT_THRESHOLD
            )

        return result

    async def _resolve_event(self, state: AlertState) -> Optional[TrackedEvent]:
        """Reuse the tracked event, rescanning when due or when nothing is tracked"""
        now = self.monotonic()
        rescan_due = (
            self.current_event is None
            or self._last_rescan is None
            or now - self._last_rescan >= self.settings.monitoring.rescan_seconds
        )
        if not rescan_due:
            return self.current_event

        located = await self.event_locator.locate()
        self._last_rescan = now

        if located is not None:
            self.current_event = located
        elif self.current_event is None and state.tracked_slug:
            logger.info(f"Rescan found nothing, keeping persisted event {state.tracked_slug}")
            self.current_event = TrackedEvent(slug=state.tracked_slug)

        return self.current_event

    async def _notify(self, message: str, alert_type: AlertType) -> bool:
        """Send one notification; failures are logged and never retried"""
        logger.info(f"🔔 {alert_type}: {message.splitlines()[0]}")
        sent = await self.notifier.send(message)
        if not sent:
            logger.warning(f"⚠️ {alert_type} notification was not delivered")
        return sent
