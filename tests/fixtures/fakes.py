"""
In-memory stand-ins for the Gamma client, the CLOB client and the Telegram notifier
"""

from common import UpstreamError


class FakeGamma:
    """Serves a listing and fetchable events from memory"""

    def __init__(self, listing=None, events=None):
        self.listing = listing or []
        self.events = events or {}
        self.closed = False

    async def __aenter__(self):
        return self

    async def close(self):
        self.closed = True

    async def list_events(self, **kwargs):
        return self.listing

    async def get_event(self, slug):
        event = self.events.get(slug)
        if isinstance(event, Exception):
            raise event
        return event

    async def event_exists(self, slug):
        return await self.get_event(slug) is not None


class FakeClob:
    """Midpoints per token; buy/sell quotes are always unavailable"""

    def __init__(self):
        self.midpoints = {}
        self.closed = False

    async def __aenter__(self):
        return self

    async def close(self):
        self.closed = True

    async def get_midpoint(self, token_id):
        value = self.midpoints.get(token_id)
        if isinstance(value, Exception):
            raise value
        return {'mid': str(value)} if value is not None else {}

    async def get_price(self, token_id, side):
        raise UpstreamError(f"no {side} quote", status=404)


class FakeNotifier:
    """Records every message; delivery success is switchable"""

    def __init__(self):
        self.messages = []
        self.deliver = True

    def is_enabled(self):
        return True

    async def send(self, message, parse_mode="HTML"):
        self.messages.append(message)
        return self.deliver

    def count(self, emoji):
        return sum(1 for m in self.messages if m.startswith(emoji))
