"""
Tracking Module
Event discovery, market/token selection and live probability
"""

from .event_locator import EventLocator
from .market_selector import MarketSelector, Selection, decode_list
from .probability_oracle import ProbabilityOracle

__all__ = ['EventLocator', 'MarketSelector', 'Selection', 'decode_list', 'ProbabilityOracle']
