"""
Probability Oracle
Live probability for one outcome token: CLOB midpoint, else mean of best buy/sell
"""

import asyncio
import logging
import math
from typing import Any, Optional

from common import PriceUnavailableError
from data_sources.clob_client import ClobAPIClient

logger = logging.getLogger(__name__)


def parse_price(value: Any) -> Optional[float]:
    """Return value as a finite float, or None if it is not one"""
    if value is None or isinstance(value, bool):
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    return price if math.isfinite(price) else None


class ProbabilityOracle:
    """Resolves a probability estimate in [0, 1] for a token"""

    def __init__(self, clob_client: ClobAPIClient):
        self.clob_client = clob_client

    async def probability(self, token_id: str) -> float:
        """
        Current probability for token_id.

        Raises:
            PriceUnavailableError: If neither source yields a finite number
        """
        midpoint = await self._midpoint(token_id)
        if midpoint is not None:
            return midpoint
        return await self._buy_sell_mean(token_id)

    async def _midpoint(self, token_id: str) -> Optional[float]:
        # Any failure here only means "use the fallback"
        try:
            body = await self.clob_client.get_midpoint(token_id)
        except Exception as e:
            logger.debug(f"Midpoint unavailable for {token_id[:12]}...: {e}")
            return None

        if not isinstance(body, dict):
            return None
        price = parse_price(body.get('mid', body.get('midpoint')))
        if price is None:
            logger.debug(f"Midpoint for {token_id[:12]}... not numeric: {body}")
        return price

    async def _buy_sell_mean(self, token_id: str) -> float:
        results = await asyncio.gather(
            self.clob_client.get_price(token_id, ClobAPIClient.BUY),
            self.clob_client.get_price(token_id, ClobAPIClient.SELL),
            return_exceptions=True
        )

        prices = []
        for side, result in zip((ClobAPIClient.BUY, ClobAPIClient.SELL), results):
            if isinstance(result, Exception):
                raise PriceUnavailableError(f"{side} price request failed for {token_id[:12]}...: {result}") from result
            price = parse_price(result.get('price')) if isinstance(result, dict) else None
            if price is None:
                raise PriceUnavailableError(f"Could not read {side} price as a number: {result}")
            prices.append(price)

        buy, sell = prices
        logger.debug(f"Fallback price for {token_id[:12]}...: buy={buy} sell={sell}")
        return (buy + sell) / 2
