"""
Telegram Notifier
Sends formatted alerts to Telegram using Bot API
"""

import aiohttp
import asyncio
import logging
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """Handles sending notifications to Telegram. Delivery is best effort."""

    def __init__(self, bot_token: str, chat_id: str, timeout: int = 10):
        """
        Initialize Telegram notifier

        Args:
            bot_token: Telegram Bot API token
            chat_id: Telegram chat ID to send messages to
            timeout: Request timeout in seconds
        """
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.timeout = timeout
        self.api_base_url = f"https://api.telegram.org/bot{self.bot_token}"
        self.enabled = bool(self.bot_token and self.chat_id)

        if not self.enabled:
            logger.warning("Telegram notifier disabled - missing bot_token or chat_id")

    async def send(self, message: str, parse_mode: str = "HTML") -> bool:
        """
        Send a message to Telegram

        Args:
            message: Formatted message text (HTML or Markdown)
            parse_mode: Parse mode for formatting (HTML or Markdown)

        Returns:
            bool: True if sent successfully, False otherwise
        """
        if not self.enabled:
            logger.debug("Telegram notifications disabled")
            return False

        try:
            url = f"{self.api_base_url}/sendMessage"

            payload = {
                "chat_id": self.chat_id,
                "text": message,
                "parse_mode": parse_mode,
                "disable_web_page_preview": True
            }

            async with aiohttp.ClientSession() as session:
                async with session.post(url, json=payload, timeout=aiohttp.ClientTimeout(total=self.timeout)) as resp:
                    if resp.status == 200:
                        logger.debug("Telegram message sent successfully")
                        return True
                    else:
                        response_text = await resp.text()
                        logger.error(f"Telegram API error: HTTP {resp.status} - {response_text[:300]}")
                        return False

        except aiohttp.ClientError as e:
            logger.error(f"Telegram connection error: {e}")
            return False
        except asyncio.TimeoutError:
            logger.error("Telegram request timed out")
            return False
        except Exception as e:
            logger.error(f"Failed to send Telegram message: {e}")
            return False

    async def test_connection(self) -> bool:
        """
        Test Telegram bot connection

        Returns:
            bool: True if connection successful, False otherwise
        """
        if not self.enabled:
            logger.warning("Cannot test Telegram connection - bot_token or chat_id missing")
            return False

        test_message = (
            "🧪 <b>Test Alert</b>\n\n"
            "Weekly Market Watch - Telegram delivery test\n\n"
            f"Time: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S')} UTC"
        )

        result = await self.send(test_message)

        if result:
            logger.info("✅ Telegram connection test successful")
        else:
            logger.warning("⚠️ Telegram connection test failed")

        return result

    def is_enabled(self) -> bool:
        """Check if Telegram notifications are enabled"""
        return self.enabled

