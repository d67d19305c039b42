"""
Unit tests for the WeeklyMonitor poll loop.

Upstream APIs and Telegram are replaced by in-memory fakes; alert state goes
to a temporary SQLite file so restarts can be exercised.
"""

import asyncio
import pytest
import pytest_asyncio
from datetime import datetime, timezone

from common import UpstreamError
from database import DatabaseManager
from persistence import StateStore
from weekly_monitor import WeeklyMonitor
from tests.fixtures.fakes import FakeGamma, FakeClob, FakeNotifier
from tests.fixtures.market_fixtures import SLUG_A, SLUG_B, make_event, make_listing_entry
from tests.test_utils import create_test_settings

NOW = datetime(2025, 10, 20, 10, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def db_manager(test_database_url):
    manager = DatabaseManager(test_database_url)
    yield manager
    await manager.close()


@pytest.fixture
def gamma():
    return FakeGamma(listing=[make_listing_entry(SLUG_A)], events={SLUG_A: make_event(SLUG_A)})


@pytest.fixture
def clob():
    return FakeClob()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def ticks():
    """Controllable monotonic clock"""
    return [0.0]


@pytest.fixture
def build_monitor(test_settings, db_manager, gamma, clob, notifier, ticks):
    def _build(settings=None):
        return WeeklyMonitor(
            settings or test_settings,
            db_manager=db_manager,
            gamma_client=gamma,
            clob_client=clob,
            notifier=notifier,
            clock=lambda: NOW,
            monotonic=lambda: ticks[0],
        )
    return _build


async def poll(monitor, clob, probability, token="chatgpt-a"):
    clob.midpoints[token] = probability
    return await monitor.run_supervised()


class TestIteration:

    @pytest.mark.asyncio
    async def test_first_iteration_tracks_and_announces(self, build_monitor, clob, notifier, db_manager):
        monitor = build_monitor()

        result = await poll(monitor, clob, 0.95)

        assert result.slug == SLUG_A
        assert result.slug_changed is True
        assert result.label == "ChatGPT"
        assert result.token_id == "chatgpt-a"
        assert result.probability == pytest.approx(0.95)
        assert not result.signals.any
        assert notifier.count("🆕") == 1

        stored = await StateStore(db_manager).load()
        assert stored.tracked_slug == SLUG_A
        assert stored.last_probability == pytest.approx(0.95)

    @pytest.mark.asyncio
    async def test_reference_sequence_notifications(self, build_monitor, clob, notifier):
        monitor = build_monitor()

        fired = []
        for probability in (0.95, 0.88, 0.40, 0.95, 0.30):
            result = await poll(monitor, clob, probability)
            fired.append((result.signals.warn, result.signals.crit))

        assert fired == [(False, False), (True, False), (False, True), (False, False), (True, True)]
        assert notifier.count("⚠️") == 2
        assert notifier.count("🚨") == 2
        assert notifier.count("🆕") == 1

    @pytest.mark.asyncio
    async def test_restart_does_not_repeat_alerts(self, build_monitor, clob, notifier):
        await poll(build_monitor(), clob, 0.85)
        assert notifier.count("⚠️") == 1

        restarted = build_monitor()
        result = await poll(restarted, clob, 0.84)

        assert not result.signals.any
        assert result.slug_changed is False
        assert notifier.count("⚠️") == 1
        assert notifier.count("🆕") == 1

    @pytest.mark.asyncio
    async def test_roll_forward_rearms_latches(self, build_monitor, gamma, clob, notifier, ticks, test_settings):
        monitor = build_monitor()
        await poll(monitor, clob, 0.30)
        assert notifier.count("🚨") == 1

        # New weekly instance appears; rescan only happens once the interval elapses
        gamma.listing = [make_listing_entry(SLUG_B, end_date="2025-10-24T17:00:00Z")]
        gamma.events[SLUG_B] = make_event(SLUG_B, token_suffix="b")

        ticks[0] = 10.0
        result = await poll(monitor, clob, 0.30)
        assert result.slug == SLUG_A

        ticks[0] = float(test_settings.monitoring.rescan_seconds)
        result = await poll(monitor, clob, 0.30, token="chatgpt-b")

        assert result.slug == SLUG_B
        assert result.slug_changed is True
        assert result.signals.warn and result.signals.crit
        assert notifier.count("🆕") == 2
        assert notifier.count("🚨") == 2

    @pytest.mark.asyncio
    async def test_keeps_tracked_event_when_rescan_finds_nothing(self, build_monitor, clob, ticks,
                                                                 test_settings, mocker):
        monitor = build_monitor()
        await poll(monitor, clob, 0.95)

        mocker.patch.object(monitor.event_locator, "locate", return_value=None)
        ticks[0] = float(test_settings.monitoring.rescan_seconds)
        result = await poll(monitor, clob, 0.95)

        assert result.slug == SLUG_A

    @pytest.mark.asyncio
    async def test_restart_falls_back_to_persisted_slug(self, build_monitor, clob, mocker):
        await poll(build_monitor(), clob, 0.95)

        restarted = build_monitor()
        mocker.patch.object(restarted.event_locator, "locate", return_value=None)
        result = await poll(restarted, clob, 0.95)

        assert result.slug == SLUG_A
        assert result.slug_changed is False

    @pytest.mark.asyncio
    async def test_nothing_to_track(self, build_monitor, gamma, clob, notifier):
        gamma.listing = []
        gamma.events = {}
        monitor = build_monitor()

        assert await poll(monitor, clob, 0.95) is None
        assert notifier.messages == []
        assert monitor.error_count == 0

    @pytest.mark.asyncio
    async def test_rescans_every_tick_while_nothing_tracked(self, build_monitor, gamma, clob, mocker):
        gamma.listing = []
        gamma.events = {}
        monitor = build_monitor()
        locate = mocker.spy(monitor.event_locator, "locate")

        # The monotonic clock never advances, so only the empty tracking forces a rescan
        assert await poll(monitor, clob, 0.95) is None
        assert await poll(monitor, clob, 0.95) is None
        assert await poll(monitor, clob, 0.95) is None

        assert locate.call_count == 3
        assert monitor.current_event is None

    @pytest.mark.asyncio
    async def test_failed_delivery_is_not_retried(self, build_monitor, clob, notifier, db_manager):
        monitor = build_monitor()
        await poll(monitor, clob, 0.95)

        notifier.deliver = False
        result = await poll(monitor, clob, 0.85)
        assert result.signals.warn

        notifier.deliver = True
        result = await poll(monitor, clob, 0.84)
        assert not result.signals.any
        assert (await StateStore(db_manager).load()).warn_triggered is True


class TestFailureIsolation:

    @pytest.mark.asyncio
    async def test_price_failure_abandons_cycle(self, build_monitor, clob, notifier, db_manager):
        monitor = build_monitor()
        await poll(monitor, clob, 0.95)

        clob.midpoints["chatgpt-a"] = UpstreamError("HTTP 500", status=500)
        assert await monitor.run_supervised() is None
        assert monitor.error_count == 1

        stored = await StateStore(db_manager).load()
        assert stored.last_probability == pytest.approx(0.95)

        # Next cycle works again and evaluates normally
        result = await poll(monitor, clob, 0.85)
        assert result.signals.warn
        assert notifier.count("⚠️") == 1

    @pytest.mark.asyncio
    async def test_vanished_event_abandons_cycle(self, build_monitor, gamma, clob):
        monitor = build_monitor()
        await poll(monitor, clob, 0.95)

        del gamma.events[SLUG_A]
        assert await poll(monitor, clob, 0.85) is None
        assert monitor.error_count == 1

    @pytest.mark.asyncio
    async def test_upstream_error_on_event_fetch(self, build_monitor, gamma, clob):
        monitor = build_monitor()
        await poll(monitor, clob, 0.95)

        gamma.events[SLUG_A] = UpstreamError("HTTP 502", status=502)
        assert await poll(monitor, clob, 0.85) is None
        assert monitor.error_count == 1

    @pytest.mark.asyncio
    async def test_unexpected_error_is_absorbed(self, build_monitor, clob, mocker):
        monitor = build_monitor()
        mocker.patch.object(monitor.market_selector, 'select', side_effect=KeyError('boom'))

        assert await poll(monitor, clob, 0.95) is None
        assert monitor.error_count == 1


class TestDailyStatus:

    @pytest.fixture
    def daily_settings(self, test_config):
        return create_test_settings(test_config, DAILY_STATUS_ENABLED="true", DAILY_STATUS_TIME="09:00")

    @pytest.mark.asyncio
    async def test_sent_once_per_day(self, build_monitor, daily_settings, clob, notifier, db_manager):
        monitor = build_monitor(daily_settings)

        first = await poll(monitor, clob, 0.95)
        second = await poll(monitor, clob, 0.95)

        assert first.daily_status_sent is True
        assert second.daily_status_sent is False
        assert notifier.count("📅") == 1
        assert (await StateStore(db_manager).load()).last_daily_status_date == "2025-10-20"

    @pytest.mark.asyncio
    async def test_failed_digest_is_retried(self, build_monitor, daily_settings, clob, notifier):
        monitor = build_monitor(daily_settings)
        notifier.deliver = False

        first = await poll(monitor, clob, 0.95)
        assert first.daily_status_sent is False

        notifier.deliver = True
        second = await poll(monitor, clob, 0.95)
        assert second.daily_status_sent is True


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_run_once_closes_resources(self, build_monitor, gamma, clob):
        monitor = build_monitor()
        clob.midpoints["chatgpt-a"] = 0.95

        result = await monitor.run_once()

        assert result.slug == SLUG_A
        assert gamma.closed and clob.closed

    @pytest.mark.asyncio
    async def test_loop_stops_on_request(self, build_monitor, clob):
        monitor = build_monitor()
        clob.midpoints["chatgpt-a"] = 0.95

        task = asyncio.create_task(monitor.start_monitoring())
        for _ in range(100):
            if monitor.iteration_count:
                break
            await asyncio.sleep(0.01)

        monitor.request_stop()
        await asyncio.wait_for(task, timeout=5)

        assert monitor.iteration_count == 1
        assert not monitor.running
