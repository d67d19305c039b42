"""
Base HTTP client for the Polymarket public APIs

Owns the aiohttp session lifecycle and turns transport failures and
non-success responses into UpstreamError.
"""

import aiohttp
import asyncio
import json
import logging
from typing import Any, Dict, Optional

from common import UpstreamError, PolymarketConstants

logger = logging.getLogger(__name__)


class BaseAPIClient:
    """
    Async JSON client around a single aiohttp session.

    Designed for use as an async context manager to ensure proper cleanup:
        async with GammaAPIClient() as client:
            event = await client.get_event(slug)
    """

    def __init__(self, base_url: str, timeout: int = PolymarketConstants.API_TIMEOUT_SECONDS,
                 session: Optional[aiohttp.ClientSession] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = session
        self._owned_session = False  # Track if we created the session

    async def __aenter__(self):
        """Async context manager entry - creates session"""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit - closes session"""
        await self.close()
        return False

    async def _ensure_session(self):
        """Create session if it doesn't exist"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    'User-Agent': 'WeeklyMarketWatch/1.0',
                    'Accept': 'application/json'
                },
                timeout=aiohttp.ClientTimeout(total=self.timeout * 3, connect=self.timeout),
                connector=aiohttp.TCPConnector(
                    limit=10,  # Connection pool limit
                    ttl_dns_cache=300  # DNS cache TTL
                )
            )
            self._owned_session = True
            logger.debug(f"{type(self).__name__} session created")

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None,
                        allow_missing: bool = False) -> Any:
        """
        GET base_url + path and decode the JSON body.

        Args:
            path: Path relative to base_url
            params: Query parameters
            allow_missing: Return None instead of raising on HTTP 404

        Raises:
            UpstreamError: On network failure, non-2xx status, or invalid JSON
        """
        await self._ensure_session()
        url = f"{self.base_url}{path}"

        try:
            async with self._session.get(url, params=params,
                                         timeout=aiohttp.ClientTimeout(total=self.timeout)) as response:
                if response.status == 404 and allow_missing:
                    return None
                if response.status >= 400:
                    body = await response.text()
                    raise UpstreamError(
                        f"HTTP {response.status} for {url} :: {body[:300]}",
                        status=response.status, url=url
                    )
                return await response.json(content_type=None)

        except aiohttp.ClientError as e:
            raise UpstreamError(f"Request to {url} failed: {e}", url=url) from e
        except asyncio.TimeoutError as e:
            raise UpstreamError(f"Request to {url} timed out", url=url) from e
        except (json.JSONDecodeError, ValueError) as e:
            raise UpstreamError(f"Invalid JSON from {url}: {e}", url=url) from e

    async def close(self):
        """Close the session and clean up resources"""
        if self._session and not self._session.closed and self._owned_session:
            await self._session.close()
            logger.debug(f"{type(self).__name__} session closed")
