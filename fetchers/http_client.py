"""
JSON-over-HTTP Client

This module provides the async HTTP client shared by the rate and price
fetchers. It handles:
- aiohttp session lifecycle (lazy creation, explicit close, context manager)
- Request timeouts
- Mapping transport and status failures onto two exception types
- Request/response logging

Requests are not retried. The fetchers decide what a failure falls back to.

Usage:
    async with JSONHTTPClient(timeout=10) as client:
        data = await client.get_json("https://api.blockchain.info/stats", source="fallback_price")
"""

import asyncio
import time
from typing import Any, Optional

import aiohttp

from core.logging import get_logger, log_api_request, log_api_response


class UpstreamError(RuntimeError):
    """Request to an external endpoint failed (network, timeout, unreadable body)."""


class UpstreamStatusError(UpstreamError):
    """External endpoint answered with a non-2xx HTTP status."""

    def __init__(self, url: str, status: int, reason: Optional[str] = None) -> None:
        self.url = url
        self.status = status
        self.reason = reason
        label = f"HTTP {status}" + (f" ({reason})" if reason else "")
        super().__init__(f"{label} from {url}")


class JSONHTTPClient:
    """
    Async HTTP client returning decoded JSON bodies.

    Attributes:
        timeout: Total timeout per request in seconds
        session: aiohttp ClientSession, created on first use

    Notes:
        - Bodies are decoded as JSON whatever Content-Type the server declares
          (the central bank rate feed is served as application/javascript)
        - One session is reused across cycles; call close() on shutdown
    """

    def __init__(self, timeout: float = 10) -> None:
        self.timeout = timeout
        self.logger = get_logger(__name__)
        self.session: Optional[aiohttp.ClientSession] = None

    # ============================================
    # Session Management
    # ============================================

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self.logger.debug("HTTP session created")
        return self.session

    async def close(self) -> None:
        """Close the underlying session if one is open."""
        if self.session and not self.session.closed:
            await self.session.close()
            self.logger.debug("HTTP session closed")
        self.session = None

    # ============================================
    # Requests
    # ============================================

    async def get_json(self, url: str, source: str = "http") -> Any:
        """
        GET ``url`` and return its JSON body.

        Args:
            url: Absolute URL
            source: Short label used in log lines (e.g. "rate", "primary_price")

        Returns:
            Decoded JSON value

        Raises:
            UpstreamStatusError: Non-2xx status; raised before the body is parsed,
                so a 502 error page is never handed to the JSON decoder
            UpstreamError: Timeout, connection failure or a body that is not JSON
        """
        session = await self._ensure_session()
        log_api_request(source, url)
        start = time.monotonic()

        try:
            async with session.get(url) as resp:
                log_api_response(source, url, resp.status, time.monotonic() - start)

                if not 200 <= resp.status < 300:
                    raise UpstreamStatusError(url, resp.status, resp.reason)

                try:
                    return await resp.json(content_type=None)
                except ValueError as e:
                    raise UpstreamError(f"Invalid JSON from {url}: {e}") from e

        except UpstreamError:
            raise
        except asyncio.TimeoutError as e:
            raise UpstreamError(f"Timeout after {self.timeout}s on {url}") from e
        except aiohttp.ClientError as e:
            raise UpstreamError(f"Request failed on {url}: {e}") from e
