"""
Exception hierarchy for the weekly market watch.

Every error a poll iteration can raise on purpose derives from MonitorError so
the supervising loop can tell expected cycle failures from programming errors.
"""

from typing import List, Optional


class MonitorError(Exception):
    """Base class for expected, per-cycle failures"""


class ConfigurationError(MonitorError):
    """Configuration is missing or invalid; the process must not start"""

    def __init__(self, issues: List[str]):
        self.issues = list(issues)
        super().__init__("Invalid configuration: " + "; ".join(self.issues))


class UpstreamError(MonitorError):
    """Network failure or non-success response from an upstream API"""

    def __init__(self, message: str, status: Optional[int] = None, url: Optional[str] = None):
        self.status = status
        self.url = url
        super().__init__(message)


class MarketSelectionError(MonitorError):
    """Event or market payload does not have the shape we need"""

    def __init__(self, message: str, available_outcomes: Optional[List[str]] = None):
        self.available_outcomes = list(available_outcomes or [])
        super().__init__(message)


class PriceUnavailableError(MonitorError):
    """Neither the midpoint nor the buy/sell quotes produced a usable price"""


class PersistenceError(MonitorError):
    """Alert state could not be written"""
