"""
Async HTTP client for fetching provider pages.

Built on httpx with:
- Per-domain rate limiting
- A bounded timeout per request
- A fixed, identifiable user agent

Failed requests are never retried within a run; the provider simply
contributes nothing until the next run.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlparse

import httpx
import structlog

logger = structlog.get_logger(__name__)


DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; AnalyticsTracker/1.0)"
DEFAULT_TIMEOUT = 15.0


class FetchError(Exception):
    """A page could not be fetched (timeout, network error or non-2xx status)."""

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
        self.status_code = status_code


@dataclass
class RateLimiter:
    """Per-domain rate limiter."""
    requests_per_second: float = 2.0
    last_request: float = 0.0
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    async def acquire(self) -> None:
        """Wait for rate limit slot."""
        async with self.lock:
            now = time.monotonic()
            min_interval = 1.0 / self.requests_per_second
            elapsed = now - self.last_request

            if elapsed < min_interval:
                await asyncio.sleep(min_interval - elapsed)

            self.last_request = time.monotonic()


class HttpClient:
    """
    Async HTTP client with rate limiting and a hard timeout.

    Usage:
        async with HttpClient() as client:
            html = await client.get_text("https://example.com")
    """

    def __init__(
        self,
        requests_per_second: float = 2.0,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            requests_per_second: Rate limit per domain
            timeout: Request timeout in seconds
            user_agent: User-Agent header sent with every request
            transport: Optional httpx transport (tests use MockTransport)
        """
        self.requests_per_second = requests_per_second
        self.timeout = timeout
        self.user_agent = user_agent
        self.transport = transport

        self._client: Optional[httpx.AsyncClient] = None
        self._rate_limiters: dict[str, RateLimiter] = {}

    async def __aenter__(self) -> "HttpClient":
        """Enter async context."""
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            headers={
                "User-Agent": self.user_agent,
                "Accept-Language": "en-US,en;q=0.9",
            },
            transport=self.transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _get_rate_limiter(self, url: str) -> RateLimiter:
        """Get or create rate limiter for domain."""
        domain = urlparse(url).netloc
        if domain not in self._rate_limiters:
            self._rate_limiters[domain] = RateLimiter(
                requests_per_second=self.requests_per_second
            )
        return self._rate_limiters[domain]

    async def get(self, url: str, **kwargs) -> httpx.Response:
        """
        GET request with rate limiting.

        Args:
            url: URL to fetch
            **kwargs: Additional httpx arguments

        Returns:
            httpx.Response with a 2xx status

        Raises:
            FetchError: On timeout, network failure or error status
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        limiter = self._get_rate_limiter(url)
        await limiter.acquire()

        logger.debug("http_get", url=url)

        try:
            # Whole request and body, not just each connect/read phase
            response = await asyncio.wait_for(self._client.get(url, **kwargs), self.timeout)
            response.raise_for_status()
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise FetchError(url, f"timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise FetchError(
                url,
                f"HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(url, f"{type(e).__name__}: {e}") from e

        return response

    async def get_text(self, url: str, **kwargs) -> str:
        """GET request returning text content."""
        response = await self.get(url, **kwargs)
        return response.text
