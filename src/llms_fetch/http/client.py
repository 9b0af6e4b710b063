"""Async HTTP client with retry logic and bounded concurrency."""

from __future__ import annotations

import asyncio
import logging
import random
from types import TracebackType

import aiohttp
from charset_normalizer import from_bytes as detect_encoding

from ..errors import FetchError
from ..models.config import DEFAULT_USER_AGENT
from ..models.outcomes import FailureReason
from .limiter import RequestLimiter
from .protocols import HttpResponse

logger = logging.getLogger(__name__)


def charset_from_content_type(content_type: str | None) -> str | None:
    """Return the charset parameter of a Content-Type header, if any."""
    if not content_type:
        return None
    for part in content_type.split(";")[1:]:
        part = part.strip()
        if part.lower().startswith("charset="):
            return part.split("=", 1)[1].strip().strip("\"'") or None
    return None


def decode_body(content: bytes, content_type: str | None = None) -> str:
    """
    Decode response content with encoding detection.

    Fallback chain:
    1. Content-Type header charset
    2. Strict UTF-8
    3. charset-normalizer detection
    4. UTF-8 with replacement

    Args:
        content: Raw bytes content
        content_type: Content-Type header value

    Returns:
        Decoded string
    """
    encoding = charset_from_content_type(content_type)
    if encoding:
        try:
            return content.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            logger.debug(f"Failed to decode with declared encoding: {encoding}")

    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        pass

    best_match = detect_encoding(content).best()
    if best_match is not None:
        logger.debug(f"Detected encoding: {best_match.encoding}")
        return str(best_match)

    return content.decode("utf-8", errors="replace")


class AsyncHttpClient:
    """
    Async HTTP client with retry logic and bounded concurrency.

    Features:
    - Exponential backoff retry for 429/5xx and transient failures
    - Global and per-host concurrency caps via RequestLimiter
    - Content size limit to prevent memory exhaustion
    - Failures raised as FetchError with a FailureReason

    Non-2xx responses are returned to the caller, not raised.

    Example:
        client = AsyncHttpClient(limiter=RequestLimiter(max_concurrent=10))

        async with client:
            response = await client.get("https://example.com/llms.txt")
            print(response.status_code, len(response.content))
    """

    # Status codes that warrant a retry
    RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

    # Exceptions that warrant a retry
    RETRYABLE_EXCEPTIONS = (
        aiohttp.ClientConnectionError,
        asyncio.TimeoutError,
    )

    CHUNK_SIZE = 8192

    def __init__(
        self,
        limiter: RequestLimiter | None = None,
        max_retries: int = 0,
        retry_base_delay: float = 1.0,
        max_content_size: int = 50 * 1024 * 1024,
        user_agent: str | None = None,
        proxy: str | None = None,
        default_timeout: float = 30.0,
    ) -> None:
        """
        Initialize the HTTP client.

        Args:
            limiter: Concurrency limiter shared between requests
            max_retries: Maximum retry attempts for failed requests
            retry_base_delay: Base delay for exponential backoff (seconds)
            max_content_size: Maximum response size in bytes
            user_agent: Custom User-Agent string
            proxy: Proxy URL (http:// or https://)
            default_timeout: Default request timeout in seconds
        """
        self._limiter = limiter or RequestLimiter()
        self._max_retries = max_retries
        self._retry_base_delay = retry_base_delay
        self._max_content_size = max_content_size
        self._user_agent = user_agent or DEFAULT_USER_AGENT
        self._proxy = proxy
        self._default_timeout = default_timeout

        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> AsyncHttpClient:
        """Enter async context and create session."""
        connector = aiohttp.TCPConnector(
            limit=self._limiter.max_concurrent,
            limit_per_host=self._limiter.per_host_concurrent,
            ttl_dns_cache=300,
        )
        self._session = aiohttp.ClientSession(
            connector=connector,
            headers={"User-Agent": self._user_agent},
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context and close session."""
        if self._session:
            await self._session.close()
            self._session = None

    def _calculate_retry_delay(self, attempt: int) -> float:
        """
        Calculate delay for exponential backoff with jitter.

        Args:
            attempt: Current attempt number (0-indexed)

        Returns:
            Delay in seconds
        """
        delay: float = self._retry_base_delay * (2**attempt)
        jitter: float = random.uniform(0, 1)
        return delay + jitter

    async def _read_body(self, url: str, response: aiohttp.ClientResponse) -> bytes:
        """Read the response body, enforcing the size limit."""
        content_length = response.headers.get("Content-Length")
        if content_length and content_length.isdigit() and int(content_length) > self._max_content_size:
            raise FetchError(FailureReason.DECODE, url, f"content too large: {content_length} bytes")

        content = bytearray()
        try:
            async for chunk in response.content.iter_chunked(self.CHUNK_SIZE):
                content.extend(chunk)
                if len(content) > self._max_content_size:
                    raise FetchError(
                        FailureReason.DECODE,
                        url,
                        f"content size limit exceeded: >{self._max_content_size} bytes",
                    )
        except aiohttp.ClientPayloadError as e:
            raise FetchError(FailureReason.DECODE, url, f"could not read body: {e}") from e
        return bytes(content)

    async def _request(
        self,
        session: aiohttp.ClientSession,
        url: str,
        timeout: float,
        headers: dict[str, str] | None,
    ) -> HttpResponse:
        """Send one GET and read its body (caller holds a limiter slot)."""
        async with session.get(
            url,
            timeout=aiohttp.ClientTimeout(total=timeout),
            headers=headers,
            proxy=self._proxy,
            allow_redirects=True,
        ) as response:
            content = await self._read_body(url, response)
            return HttpResponse(
                status_code=response.status,
                content=content,
                content_type=response.headers.get("Content-Type", ""),
                headers=dict(response.headers),
                url=str(response.url),
            )

    async def get(
        self,
        url: str,
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """
        Perform an HTTP GET request with retry logic.

        The timeout applies to each attempt and starts once the request
        holds a limiter slot, so time spent queued behind other requests
        never counts against it.

        Args:
            url: The URL to fetch
            timeout: Request timeout in seconds (uses default if None)
            headers: Optional additional headers

        Returns:
            HttpResponse with status, content, and headers

        Raises:
            FetchError: On timeouts, network errors or unreadable bodies
                after retries are exhausted
        """
        session = self._session
        if session is None:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")

        timeout_val = timeout or self._default_timeout

        for attempt in range(self._max_retries + 1):
            try:
                async with self._limiter.limit(url):
                    response = await asyncio.wait_for(
                        self._request(session, url, timeout_val, headers),
                        timeout=timeout_val,
                    )

            except self.RETRYABLE_EXCEPTIONS as e:
                if attempt < self._max_retries:
                    delay = self._calculate_retry_delay(attempt)
                    logger.warning(
                        f"Error fetching {url}: {e!r}, retrying in {delay:.1f}s "
                        f"(attempt {attempt + 1}/{self._max_retries + 1})"
                    )
                    await asyncio.sleep(delay)
                    continue
                if isinstance(e, asyncio.TimeoutError):
                    raise FetchError(FailureReason.TIMEOUT, url, f"timed out after {timeout_val:g}s") from e
                raise FetchError(FailureReason.NETWORK, url, f"network error: {e}") from e

            except aiohttp.ClientError as e:
                raise FetchError(FailureReason.NETWORK, url, f"network error: {e}") from e

            if response.status_code in self.RETRYABLE_STATUS_CODES and attempt < self._max_retries:
                # Back off outside the limiter so the slot is free while waiting
                delay = self._calculate_retry_delay(attempt)
                logger.warning(
                    f"Got {response.status_code} for {url}, retrying in {delay:.1f}s "
                    f"(attempt {attempt + 1}/{self._max_retries + 1})"
                )
                await asyncio.sleep(delay)
                continue

            return response

        # Should not reach here: the last attempt always returns or raises
        raise RuntimeError(f"Unexpected error fetching {url}")
