"""
Alert State Machine
Hysteresis latches that decide when a threshold alert fires

Each threshold gets its own two-state latch. A latch fires once when the
probability crosses to the alerting side, stays quiet for the rest of the
episode, and re-arms silently once the probability recovers.
"""

import logging
from datetime import datetime, time

from common import AlertState, AlertSignals, CrossDirection, LatchState, TimeConstants

logger = logging.getLogger(__name__)


class HysteresisLatch:
    """Two-state (ARMED/FIRED) latch for a single threshold"""

    def __init__(self, name: str, threshold: float, direction: CrossDirection = CrossDirection.BELOW):
        self.name = name
        self.threshold = threshold
        self.direction = direction
        self.state = LatchState.ARMED

    @property
    def fired(self) -> bool:
        return self.state is LatchState.FIRED

    def is_alerting(self, value: float) -> bool:
        """True if value is on the alerting side of the threshold"""
        if self.direction is CrossDirection.BELOW:
            return value < self.threshold
        return value > self.threshold

    def observe(self, value: float) -> bool:
        """
        Feed one observation.

        Returns:
            True only on the transition ARMED -> FIRED
        """
        if self.is_alerting(value):
            if self.state is LatchState.ARMED:
                self.state = LatchState.FIRED
                logger.debug(f"Latch {self.name} fired at {value:.4f} ({self.direction} {self.threshold})")
                return True
            return False

        if self.state is LatchState.FIRED:
            logger.debug(f"Latch {self.name} re-armed at {value:.4f}")
        self.state = LatchState.ARMED
        return False

    def arm(self) -> None:
        self.state = LatchState.ARMED

    def restore(self, fired: bool) -> None:
        self.state = LatchState.FIRED if fired else LatchState.ARMED

    def __repr__(self) -> str:
        return f"HysteresisLatch({self.name!r}, {self.threshold}, {self.direction}, {self.state.name})"


class AlertStateMachine:
    """
    Warn and crit latches bound to the persisted AlertState.

    The latches are rebuilt from the state on every call so the persisted
    booleans stay the single source of truth across restarts.
    """

    def __init__(self, warn_threshold: float, crit_threshold: float):
        self.warn_latch = HysteresisLatch("warn", warn_threshold)
        self.crit_latch = HysteresisLatch("crit", crit_threshold)

    def track(self, state: AlertState, slug: str) -> bool:
        """
        Point the state at slug.

        A different slug re-arms both latches before any evaluation happens.

        Returns:
            True if the tracked slug changed
        """
        if state.tracked_slug == slug:
            return False

        logger.info(f"🔄 Tracked event changed: {state.tracked_slug} -> {slug}")
        state.tracked_slug = slug
        state.last_probability = None
        self.warn_latch.arm()
        self.crit_latch.arm()
        self._store(state)
        return True

    def evaluate(self, state: AlertState, probability: float) -> AlertSignals:
        """
        Run both latches against one probability reading and update state.

        A single reading can fire neither, one, or both latches.
        """
        self.warn_latch.restore(state.warn_triggered)
        self.crit_latch.restore(state.crit_triggered)

        signals = AlertSignals(
            warn=self.warn_latch.observe(probability),
            crit=self.crit_latch.observe(probability),
        )

        state.last_probability = probability
        self._store(state)
        return signals

    def _store(self, state: AlertState) -> None:
        state.warn_triggered = self.warn_latch.fired
        state.crit_triggered = self.crit_latch.fired


class DailyDigestGate:
    """Once-per-UTC-day gate for the status summary, independent of the latches"""

    def __init__(self, enabled: bool, at: time):
        self.enabled = enabled
        self.at = at

    def is_due(self, state: AlertState, now: datetime) -> bool:
        if not self.enabled:
            return False
        if now.time() < self.at:
            return False
        return state.last_daily_status_date != now.strftime(TimeConstants.DATE_FORMAT)

    def mark_sent(self, state: AlertState, now: datetime) -> None:
        state.last_daily_status_date = now.strftime(TimeConstants.DATE_FORMAT)
