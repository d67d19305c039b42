"""
Polymarket Gamma API Client
Event listing and event detail lookups
"""

import logging
from typing import Dict, List, Optional
from urllib.parse import quote

from common import PolymarketConstants
from .http_client import BaseAPIClient

logger = logging.getLogger(__name__)


class GammaAPIClient(BaseAPIClient):
    """Async client for the Gamma metadata API"""

    def __init__(self, base_url: str = PolymarketConstants.GAMMA_API_BASE, **kwargs):
        super().__init__(base_url, **kwargs)

    async def list_events(self, limit: int = PolymarketConstants.EVENT_LISTING_LIMIT, offset: int = 0,
                          closed: Optional[bool] = False, order: Optional[str] = None,
                          ascending: bool = True) -> List[Dict]:
        """
        List events, optionally filtered and sorted by the provider.

        Args:
            limit: Maximum number of events to return
            offset: Pagination offset
            closed: Filter on the closed flag (None = no filter)
            order: Provider-side sort field, e.g. "endDate"
            ascending: Sort direction for order

        Returns:
            List of event dictionaries

        Raises:
            UpstreamError: If the request fails
        """
        params = {'limit': limit, 'offset': offset}
        if closed is not None:
            params['closed'] = 'true' if closed else 'false'
        if order:
            params['order'] = order
            params['ascending'] = 'true' if ascending else 'false'

        events = await self._get_json('/events', params=params)

        # Handle different response formats
        if isinstance(events, dict):
            events = events.get('data', events.get('events', []))
        if not isinstance(events, list):
            logger.error(f"Expected list of events, got {type(events).__name__}")
            return []

        logger.debug(f"Fetched {len(events)} events (offset={offset})")
        return [e for e in events if isinstance(e, dict)]

    async def get_event(self, slug: str) -> Optional[Dict]:
        """
        Fetch one event, including its markets, by slug.

        Returns:
            Event dictionary, or None if no such event exists

        Raises:
            UpstreamError: On any failure other than "not found"
        """
        event = await self._get_json(f"/events/slug/{quote(slug, safe='')}", allow_missing=True)

        # Some deployments answer a list for slug lookups
        if isinstance(event, list):
            event = event[0] if event else None
        if not isinstance(event, dict) or not event:
            return None
        return event

    async def event_exists(self, slug: str) -> bool:
        """True if the event slug resolves to an event"""
        return await self.get_event(slug) is not None
