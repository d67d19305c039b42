"""
Alerting: latch state machine, Telegram delivery and message formatting.
"""

from .state_machine import HysteresisLatch, AlertStateMachine, DailyDigestGate
from .telegram_notifier import TelegramNotifier

__all__ = ['HysteresisLatch', 'AlertStateMachine', 'DailyDigestGate', 'TelegramNotifier']
