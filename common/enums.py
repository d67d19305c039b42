"""
Common enums, constants and data structures for the weekly market watch.
Provides type safety and consistency across the codebase.
"""

from enum import Enum, auto
from dataclasses import dataclass, field
from typing import Dict, Any, Optional
from datetime import datetime, timezone


class AlertType(Enum):
    """Kinds of notifications the monitor can emit"""
    NEW_TRACKING = "NEW_TRACKING"
    WARN_THRESHOLD = "WARN_THRESHOLD"
    CRIT_THRESHOLD = "CRIT_THRESHOLD"
    DAILY_STATUS = "DAILY_STATUS"

    def __str__(self) -> str:
        return self.value


class LatchState(Enum):
    """State of a single hysteresis latch"""
    ARMED = auto()
    FIRED = auto()


class CrossDirection(Enum):
    """Which side of the threshold counts as a crossing"""
    BELOW = "below"
    ABOVE = "above"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TrackedEvent:
    """A weekly event instance chosen by the event locator"""
    slug: str
    end_time: Optional[datetime] = None
    title: Optional[str] = None

    @property
    def url(self) -> str:
        return f"{PolymarketConstants.EVENT_URL_BASE}/{self.slug}"


@dataclass
class AlertState:
    """Persisted tracking/alert aggregate. Sole basis for recovery after a restart."""
    tracked_slug: Optional[str] = None
    warn_triggered: bool = False
    crit_triggered: bool = False
    last_daily_status_date: Optional[str] = None
    last_probability: Optional[float] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            'tracked_slug': self.tracked_slug,
            'warn_triggered': self.warn_triggered,
            'crit_triggered': self.crit_triggered,
            'last_daily_status_date': self.last_daily_status_date,
            'last_probability': self.last_probability,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }


@dataclass
class AlertSignals:
    """Which notifications one poll iteration asked for"""
    warn: bool = False
    crit: bool = False

    @property
    def any(self) -> bool:
        return self.warn or self.crit


@dataclass
class IterationResult:
    """Outcome of a single poll iteration"""
    slug: Optional[str]
    label: Optional[str] = None
    token_id: Optional[str] = None
    probability: Optional[float] = None
    slug_changed: bool = False
    signals: AlertSignals = field(default_factory=AlertSignals)
    daily_status_sent: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class PolymarketConstants:
    """Upstream endpoints and request limits"""
    GAMMA_API_BASE = "https://gamma-api.polymarket.com"
    CLOB_API_BASE = "https://clob.polymarket.com"
    EVENT_URL_BASE = "https://polymarket.com/event"

    EVENT_LISTING_LIMIT = 200
    API_TIMEOUT_SECONDS = 10

    # Keys that may carry an event's resolution deadline, in priority order
    END_TIME_KEYS = (
        'endDate', 'end_date', 'endTime', 'end_time',
        'closeTime', 'close_time', 'resolutionTime', 'resolution_time',
    )


class SelectorConstants:
    """Market selection constants"""
    OUTCOME_SAMPLE_LIMIT = 20
    BINARY_OUTCOME = "yes"
    TEXT_FIELDS = ('groupItemTitle', 'title', 'question', 'description')


class TimeConstants:
    """Time-related constants"""
    DEFAULT_POLL_SECONDS = 60
    DEFAULT_RESCAN_SECONDS = 900
    DEFAULT_LOOKAHEAD_DAYS = 8
    WEEKLY_PROBE_OFFSETS = (7, 14, 21)
    DATE_FORMAT = "%Y-%m-%d"
