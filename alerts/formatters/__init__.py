"""
Alert Formatters
Format monitor notifications for Telegram
"""

from .telegram_formatter import TelegramFormatter

__all__ = ['TelegramFormatter']
