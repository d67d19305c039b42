"""
Unit tests for TelegramNotifier
"""

import asyncio
import pytest
import aiohttp
from unittest.mock import AsyncMock, patch, MagicMock

from alerts.telegram_notifier import TelegramNotifier


def mock_client_session(mock_session, status=200, text='', post_side_effect=None):
    """Wire a patched aiohttp.ClientSession to return one response"""
    mock_response = MagicMock()
    mock_response.status = status
    mock_response.text = AsyncMock(return_value=text)
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)

    # post returns the response context manager directly (not awaited)
    mock_post = MagicMock(return_value=mock_response, side_effect=post_side_effect)

    mock_session_obj = MagicMock()
    mock_session_obj.post = mock_post
    mock_session_obj.__aenter__ = AsyncMock(return_value=mock_session_obj)
    mock_session_obj.__aexit__ = AsyncMock(return_value=None)

    mock_session.return_value = mock_session_obj
    return mock_post


class TestTelegramNotifier:
    """Test TelegramNotifier functionality"""

    @pytest.fixture
    def notifier_enabled(self):
        """Create enabled Telegram notifier"""
        return TelegramNotifier(bot_token='test_token_123', chat_id='test_chat_456')

    @pytest.fixture
    def notifier_disabled(self):
        """Create disabled Telegram notifier (no credentials)"""
        return TelegramNotifier(bot_token='', chat_id='')

    def test_initialization_enabled(self, notifier_enabled):
        """Test notifier initializes correctly when enabled"""
        assert notifier_enabled.is_enabled()
        assert notifier_enabled.bot_token == 'test_token_123'
        assert notifier_enabled.chat_id == 'test_chat_456'
        assert 'test_token_123' in notifier_enabled.api_base_url

    def test_initialization_disabled(self, notifier_disabled):
        """Test notifier initializes correctly when disabled"""
        assert not notifier_disabled.is_enabled()

    @pytest.mark.asyncio
    @patch('alerts.telegram_notifier.aiohttp.ClientSession')
    async def test_send_success(self, mock_session, notifier_enabled):
        """Test successful message sending"""
        mock_post = mock_client_session(mock_session, status=200)

        message = "<b>Test Alert</b>\nThis is a test"
        result = await notifier_enabled.send(message)

        assert result is True
        mock_post.assert_called_once()

        # Check call arguments
        call_args = mock_post.call_args
        assert call_args[0][0].endswith('/bottest_token_123/sendMessage')
        payload = call_args[1]['json']
        assert payload['chat_id'] == 'test_chat_456'
        assert payload['text'] == message
        assert payload['parse_mode'] == 'HTML'
        assert payload['disable_web_page_preview'] is True

    @pytest.mark.asyncio
    @patch('alerts.telegram_notifier.aiohttp.ClientSession')
    async def test_send_disabled(self, mock_session, notifier_disabled):
        """Test sending when disabled returns False without any request"""
        result = await notifier_disabled.send("Test message")

        assert result is False
        mock_session.assert_not_called()

    @pytest.mark.asyncio
    @patch('alerts.telegram_notifier.aiohttp.ClientSession')
    async def test_send_api_error(self, mock_session, notifier_enabled):
        """Test sending with API error"""
        mock_client_session(mock_session, status=400, text='Bad Request: chat not found')

        result = await notifier_enabled.send("Test message")

        assert result is False

    @pytest.mark.asyncio
    @patch('alerts.telegram_notifier.aiohttp.ClientSession')
    async def test_send_connection_error(self, mock_session, notifier_enabled):
        """Test sending with connection error"""
        mock_client_session(mock_session, post_side_effect=aiohttp.ClientError("Connection failed"))

        result = await notifier_enabled.send("Test message")

        assert result is False

    @pytest.mark.asyncio
    @patch('alerts.telegram_notifier.aiohttp.ClientSession')
    async def test_send_timeout(self, mock_session, notifier_enabled):
        """Test sending that times out"""
        mock_client_session(mock_session, post_side_effect=asyncio.TimeoutError())

        result = await notifier_enabled.send("Test message")

        assert result is False

    @pytest.mark.asyncio
    @patch('alerts.telegram_notifier.aiohttp.ClientSession')
    async def test_test_connection_success(self, mock_session, notifier_enabled):
        """Test connection test success"""
        mock_post = mock_client_session(mock_session, status=200)

        result = await notifier_enabled.test_connection()

        assert result is True
        assert 'Test Alert' in mock_post.call_args[1]['json']['text']

    @pytest.mark.asyncio
    async def test_test_connection_disabled(self, notifier_disabled):
        """Test connection test when disabled"""
        assert await notifier_disabled.test_connection() is False

