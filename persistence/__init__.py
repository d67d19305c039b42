"""
Persistence layer for the monitor's tracking and alert state.
"""

from .state_store import StateStore

__all__ = [
    "StateStore",
]
