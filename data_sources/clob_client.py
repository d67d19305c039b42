"""
Polymarket CLOB API Client
Midpoint and best-price quotes for outcome tokens
"""

import logging
from typing import Any, Dict

from common import PolymarketConstants
from .http_client import BaseAPIClient

logger = logging.getLogger(__name__)


class ClobAPIClient(BaseAPIClient):
    """Async client for the CLOB pricing endpoints"""

    BUY = "BUY"
    SELL = "SELL"

    def __init__(self, base_url: str = PolymarketConstants.CLOB_API_BASE, **kwargs):
        super().__init__(base_url, **kwargs)

    async def get_midpoint(self, token_id: str) -> Dict[str, Any]:
        """
        Fetch the midpoint quote for a token.

        Returns:
            Raw response body, e.g. {"mid": "0.915"}

        Raises:
            UpstreamError: If the request fails
        """
        return await self._get_json('/midpoint', params={'token_id': token_id})

    async def get_price(self, token_id: str, side: str) -> Dict[str, Any]:
        """
        Fetch the best price for one side of the book.

        Args:
            token_id: Outcome token id
            side: "BUY" or "SELL"

        Returns:
            Raw response body, e.g. {"price": "0.91"}

        Raises:
            UpstreamError: If the request fails
        """
        return await self._get_json('/price', params={'token_id': token_id, 'side': side})
