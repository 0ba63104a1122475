"""
Base HTTP client - aiohttp session handling shared by every remote component.

Requests are issued one at a time and never retried.
"""

import asyncio
import json
import logging
import time
from typing import Any, Optional

import aiohttp

from ans_scraper.exceptions import FetchFailedError


logger = logging.getLogger(__name__)


class BaseHttpClient:
    """
    Owns (or borrows) an aiohttp session and wraps transport errors.

    Subclasses set `name` for log prefixes and call `_get_json()` /
    `_get_text()`. Any transport or decoding failure surfaces as
    FetchFailedError.
    """

    DEFAULT_TIMEOUT = 30.0

    name = "http"

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._timeout = timeout
        self._session = session
        self._owns_session = session is None
        self._request_count = 0
        self._last_latency_ms: Optional[float] = None

    # ─────────────────────────────────────────────────────────────
    # HTTP Helpers
    # ─────────────────────────────────────────────────────────────

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers=self._get_default_headers(),
            )
            self._owns_session = True
        return self._session

    def _get_default_headers(self) -> dict[str, str]:
        """Get default HTTP headers."""
        return {
            "Accept": "application/json",
            "User-Agent": "ans-scraper/0.1",
        }

    async def _make_request(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, Any]] = None,
        as_text: bool = False,
    ) -> Any:
        """Make HTTP request with error handling."""
        session = await self._get_session()
        self._request_count += 1

        start_time = time.time()
        try:
            async with session.request(method, url, params=params) as response:
                self._last_latency_ms = (time.time() - start_time) * 1000

                if response.status >= 400:
                    body = await response.text()
                    raise FetchFailedError(
                        message=f"HTTP {response.status}",
                        status_code=response.status,
                        request_url=url,
                        context={"response_body": body[:500]},
                    )

                if as_text:
                    return await response.text()
                # raw.githubusercontent.com serves JSON as text/plain
                return await response.json(content_type=None)

        except aiohttp.ClientError as e:
            raise FetchFailedError(
                message=f"Connection error: {e}",
                request_url=url,
                original_error=e,
            )
        except asyncio.TimeoutError as e:
            logger.warning(f"[{self.name}] Request timeout for {url}")
            raise FetchFailedError(
                message=f"Timeout after {self._timeout}s",
                request_url=url,
                original_error=e,
            )
        except json.JSONDecodeError as e:
            raise FetchFailedError(
                message="Invalid JSON response",
                request_url=url,
                original_error=e,
            )
        except UnicodeDecodeError as e:
            raise FetchFailedError(
                message="Undecodable response body",
                request_url=url,
                original_error=e,
            )

    async def _get_json(self, url: str, params: Optional[dict[str, Any]] = None) -> Any:
        logger.debug(f"[{self.name}] GET {url}")
        return await self._make_request("GET", url, params=params)

    async def _get_text(self, url: str) -> str:
        logger.debug(f"[{self.name}] GET {url} (text)")
        return await self._make_request("GET", url, as_text=True)

    def get_stats(self) -> dict[str, Any]:
        return {
            "requests": self._request_count,
            "last_latency_ms": self._last_latency_ms,
        }

    # ─────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────

    async def close(self) -> None:
        """Close resources."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "BaseHttpClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
