"""
Event Locator
Finds the slug of the weekly event instance that is currently relevant

Strategies, first success wins:
  1. A forced slug from configuration, returned as-is.
  2. The Gamma event listing, filtered by pattern and resolution window.
  3. Slugs guessed from calendar dates, probed one by one.

The date guess is only consulted when the listing yields nothing.
"""

import logging
import re
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from common import TrackedEvent, UpstreamError, PolymarketConstants, TimeConstants
from config.settings import TrackingSettings
from data_sources.gamma_client import GammaAPIClient

logger = logging.getLogger(__name__)

MONTH_NAMES = (
    'january', 'february', 'march', 'april', 'may', 'june',
    'july', 'august', 'september', 'october', 'november', 'december',
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_time(value) -> Optional[datetime]:
    """Parse an ISO timestamp or epoch seconds into an aware UTC datetime"""
    if value is None or value == '':
        return None
    try:
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value, tz=timezone.utc)
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except (ValueError, TypeError, OverflowError, OSError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_end_time(event: Dict) -> Optional[datetime]:
    """Resolution deadline of an event from the first parsable end-time key"""
    for key in PolymarketConstants.END_TIME_KEYS:
        end_time = parse_time(event.get(key))
        if end_time is not None:
            return end_time
    return None


def build_dated_slug(prefix: str, template: str, day: date) -> str:
    """
    Slug for the weekly event resolving on day.

    Example:
        >>> build_dated_slug("1-free-app-in-the-us-apple-app-store-on-", "{month}-{day}", date(2025, 10, 24))
        '1-free-app-in-the-us-apple-app-store-on-october-24'
    """
    return prefix + template.format(month=MONTH_NAMES[day.month - 1], day=day.day, year=day.year)


class EventLocator:
    """Locates the currently relevant weekly event"""

    def __init__(self, settings: TrackingSettings, gamma_client: GammaAPIClient,
                 clock: Callable[[], datetime] = _utcnow):
        self.settings = settings
        self.gamma_client = gamma_client
        self.clock = clock
        self._pattern = re.compile(settings.pattern, re.IGNORECASE)

    async def locate(self) -> Optional[TrackedEvent]:
        """
        Return the current event, or None when no strategy finds one.

        None is not an error; the caller retries on a later rescan.
        """
        if self.settings.forced_event_slug:
            logger.debug(f"Using forced event slug {self.settings.forced_event_slug}")
            return TrackedEvent(slug=self.settings.forced_event_slug)

        now = self.clock()

        event = await self._from_listing(now)
        if event is not None:
            logger.info(f"🔍 Located event from listing: {event.slug}")
            return event

        event = await self._from_dates(now)
        if event is not None:
            logger.info(f"🔍 Located event from date guess: {event.slug}")
            return event

        logger.info("No matching event found. Will retry.")
        return None

    def _matches(self, event: Dict) -> bool:
        for key in ('slug', 'title'):
            text = event.get(key)
            if isinstance(text, str) and self._pattern.search(text):
                return True
        return False

    def filter_candidates(self, events: List[Dict], now: datetime) -> List[TrackedEvent]:
        """
        Events matching the pattern whose deadline lies within the lookahead window.

        Ordered by soonest deadline; events without a deadline go last in listing order.
        """
        horizon = now + timedelta(days=self.settings.lookahead_days)
        dated: List[TrackedEvent] = []
        undated: List[TrackedEvent] = []

        for raw in events:
            slug = raw.get('slug')
            if not isinstance(slug, str) or not slug or not self._matches(raw):
                continue

            end_time = parse_end_time(raw)
            candidate = TrackedEvent(slug=slug, end_time=end_time, title=raw.get('title'))
            if end_time is None:
                undated.append(candidate)
            elif now <= end_time <= horizon:
                dated.append(candidate)
            else:
                logger.debug(f"Skipping {slug}: deadline {end_time.isoformat()} outside window")

        dated.sort(key=lambda c: c.end_time)
        return dated + undated

    async def _from_listing(self, now: datetime) -> Optional[TrackedEvent]:
        try:
            events = await self.gamma_client.list_events(
                limit=self.settings.listing_limit,
                closed=False,
                order=self.settings.listing_order or None,
                ascending=self.settings.listing_ascending
            )
        except UpstreamError as e:
            logger.warning(f"⚠️ Event listing failed, falling back to date guess: {e}")
            return None

        candidates = self.filter_candidates(events, now)
        logger.debug(f"Listing returned {len(events)} events, {len(candidates)} candidates")
        if not candidates:
            return None

        first = candidates[0]
        try:
            if await self.gamma_client.event_exists(first.slug):
                return first
        except UpstreamError as e:
            logger.warning(f"⚠️ Could not confirm listed event {first.slug}: {e}")
            return None

        logger.warning(f"⚠️ Listed event {first.slug} is not fetchable")
        return None

    def candidate_slugs(self, today: date) -> List[str]:
        """Date-guessed slugs: today..today+lookahead, then weekly offsets, without duplicates"""
        offsets = list(range(self.settings.lookahead_days + 1)) + list(TimeConstants.WEEKLY_PROBE_OFFSETS)
        slugs: List[str] = []
        for offset in offsets:
            slug = build_dated_slug(self.settings.slug_prefix, self.settings.slug_date_template,
                                    today + timedelta(days=offset))
            if slug not in slugs:
                slugs.append(slug)
        return slugs

    async def _from_dates(self, now: datetime) -> Optional[TrackedEvent]:
        for slug in self.candidate_slugs(now.date()):
            try:
                event = await self.gamma_client.get_event(slug)
            except UpstreamError as e:
                logger.debug(f"Probe for {slug} failed: {e}")
                continue
            if event is not None:
                return TrackedEvent(slug=slug, end_time=parse_end_time(event), title=event.get('title'))
        return None
