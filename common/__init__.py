"""
Common utilities, enums, and data structures for the weekly market watch.
"""

from .enums import (
    AlertType,
    LatchState,
    CrossDirection,
    TrackedEvent,
    AlertState,
    AlertSignals,
    IterationResult,
    PolymarketConstants,
    SelectorConstants,
    TimeConstants
)
from .exceptions import (
    MonitorError,
    ConfigurationError,
    UpstreamError,
    MarketSelectionError,
    PriceUnavailableError,
    PersistenceError
)

__all__ = [
    'AlertType',
    'LatchState',
    'CrossDirection',
    'TrackedEvent',
    'AlertState',
    'AlertSignals',
    'IterationResult',
    'PolymarketConstants',
    'SelectorConstants',
    'TimeConstants',
    'MonitorError',
    'ConfigurationError',
    'UpstreamError',
    'MarketSelectionError',
    'PriceUnavailableError',
    'PersistenceError'
]
