"""Bounded concurrency for outbound requests."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


class RequestLimiter:
    """
    Caps in-flight requests globally and per host.

    One limiter is shared by every fetch call made through the same
    ``LlmsFetcher``, so concurrent calls cannot together open more than
    ``max_concurrent`` connections.

    Example:
        limiter = RequestLimiter(max_concurrent=10, per_host_concurrent=5)

        async with limiter.limit("https://example.com/llms.txt"):
            response = await session.get(...)
    """

    def __init__(self, max_concurrent: int = 10, per_host_concurrent: int = 5):
        """
        Initialize the limiter.

        Args:
            max_concurrent: Maximum requests in flight across all hosts
            per_host_concurrent: Maximum requests in flight to one host
        """
        if max_concurrent < 1 or per_host_concurrent < 1:
            raise ValueError("Concurrency limits must be at least 1")

        self.max_concurrent = max_concurrent
        self.per_host_concurrent = per_host_concurrent

        self._global = asyncio.Semaphore(max_concurrent)
        self._per_host: dict[str, asyncio.Semaphore] = {}
        self._waiting: dict[str, int] = {}

    def _get_host(self, url: str) -> str:
        """Extract host from URL."""
        return urlparse(url).netloc.lower()

    @asynccontextmanager
    async def limit(self, url: str) -> AsyncIterator[None]:
        """
        Hold a per-host and a global slot for the duration of a request.

        The host slot is taken first so a request queued behind its own
        host does not keep a global slot from other hosts. A host's
        semaphore is dropped once no request holds or waits for it.

        Args:
            url: The URL being requested
        """
        host = self._get_host(url)
        host_sem = self._per_host.get(host)
        if host_sem is None:
            host_sem = self._per_host[host] = asyncio.Semaphore(self.per_host_concurrent)
        self._waiting[host] = self._waiting.get(host, 0) + 1

        try:
            async with host_sem, self._global:
                yield
        finally:
            self._waiting[host] -= 1
            if not self._waiting[host]:
                del self._waiting[host]
                del self._per_host[host]

    @property
    def hosts(self) -> list[str]:
        """Hosts with a request in flight or queued."""
        return list(self._per_host)
