"""Main LlmsFetcher class: one URL in, cached files out."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from types import TracebackType
from typing import Any

from ..cache import CacheRoot, CacheWriter, cache_path_for, separate_files_from_dirs
from ..conversion import HtmlNormalizer, generate_toc
from ..discovery import generate_variants
from ..errors import CachePathError
from ..http import AsyncHttpClient, FetchOrchestrator, HttpClient, RequestLimiter
from ..models.config import LlmsFetchConfig
from ..models.outcomes import ContentClass
from ..models.results import FileResult
from ..selection import PlannedWrite, content_type_label, select

logger = logging.getLogger(__name__)

_TEXT_CLASSES = (ContentClass.MARKDOWN, ContentClass.PLAIN_TEXT)


class LlmsFetcher:
    """
    Primary API for llms-fetch.

    For every URL the fetcher tries the page itself plus its LLM-friendly
    variants (``.md``, ``index.md``, ``llms.txt``, ``llms-full.txt``)
    concurrently, picks what to keep, converts a lone HTML result to
    Markdown, and writes everything to the cache directory.

    Example:
        async with LlmsFetcher() as fetcher:
            for result in await fetcher.fetch("https://docs.example.com/guide"):
                print(result.path, result.lines)

    Raises (from fetch):
        AllVariantsFailedError: No variant returned content
        CachePathError: The URL cannot be stored inside the cache
    """

    def __init__(self, config: LlmsFetchConfig | None = None, http_client: HttpClient | None = None):
        """
        Initialize the fetcher.

        Args:
            config: Configuration (defaults apply when omitted)
            http_client: Client to use instead of the built-in aiohttp one;
                the caller owns its lifecycle
        """
        self.config = config or LlmsFetchConfig()
        self._external_client = http_client

        self._limiter: RequestLimiter | None = None
        self._http_client: AsyncHttpClient | None = None
        self._orchestrator: FetchOrchestrator | None = None

        conversion = self.config.conversion
        self._normalizer = HtmlNormalizer(extract_main_content=conversion.extract_main_content)
        self.cache_root = CacheRoot(self.config.cache.directory)
        self._writer = CacheWriter(self.cache_root)

    async def __aenter__(self) -> LlmsFetcher:
        """Enter async context and open the HTTP session."""
        network = self.config.network
        client: HttpClient
        if self._external_client is not None:
            client = self._external_client
        else:
            self._limiter = RequestLimiter(
                max_concurrent=network.max_concurrent,
                per_host_concurrent=network.per_host_concurrent,
            )
            self._http_client = AsyncHttpClient(
                limiter=self._limiter,
                max_retries=network.max_retries,
                retry_base_delay=network.retry_base_delay,
                max_content_size=network.max_content_size,
                user_agent=network.user_agent,
                proxy=network.proxy,
                default_timeout=network.timeout,
            )
            await self._http_client.__aenter__()
            client = self._http_client

        self._orchestrator = FetchOrchestrator(client, timeout=network.timeout)
        logger.debug(f"Cache directory: {self.cache_root.directory}")
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context and close the HTTP session."""
        if self._http_client is not None:
            await self._http_client.__aexit__(exc_type, exc_val, exc_tb)
            self._http_client = None
        self._orchestrator = None

    def _store(self, write: PlannedWrite, path: Path) -> FileResult:
        """Persist one planned write at ``path`` and describe the result (blocking)."""
        entry = self._writer.persist(write.url, write.content, path)

        toc = None
        if write.was_converted or write.content_class in _TEXT_CLASSES:
            conversion = self.config.conversion
            toc = generate_toc(
                write.content.decode("utf-8", errors="replace"),
                entry.characters,
                budget=conversion.toc_budget,
                threshold=conversion.toc_threshold,
            )

        return FileResult.from_entry(
            entry,
            source_url=write.source_url,
            content_type=content_type_label(write.source_url, write.content_class, write.was_converted),
            table_of_contents=toc,
        )

    async def fetch(self, url: str) -> list[FileResult]:
        """
        Fetch a URL and its variants and store the chosen content.

        Args:
            url: Page to fetch

        Returns:
            One FileResult per stored file (never empty)

        Raises:
            AllVariantsFailedError: If every variant failed
            CachePathError: If no planned file could be stored
            OSError: If no planned file could be written
        """
        if self._orchestrator is None:
            raise RuntimeError("LlmsFetcher must be used as an async context manager")

        variants = generate_variants(url, github=self.config.conversion.github_variants)
        logger.debug(f"Trying {len(variants)} variants of {url}")

        outcomes = await self._orchestrator.fetch_all(variants)
        planned = await asyncio.to_thread(select, url, outcomes, self._normalizer)

        errors: list[Exception] = []
        mapped: list[tuple[PlannedWrite, Path]] = []
        for write in planned:
            try:
                mapped.append((write, cache_path_for(self.cache_root.directory, write.url)))
            except CachePathError as e:
                logger.error(f"Failed to save {write.url}: {e}")
                errors.append(e)

        results: list[FileResult] = []
        paths = separate_files_from_dirs([path for _, path in mapped])
        for (write, _), path in zip(mapped, paths):
            try:
                results.append(await asyncio.to_thread(self._store, write, path))
            except (CachePathError, OSError) as e:
                logger.error(f"Failed to save {write.url}: {e}")
                errors.append(e)

        if not results:
            raise errors[0]
        return results


def fetch_blocking(url: str, **kwargs: Any) -> list[FileResult]:
    """
    Blocking fetch for sync code that can't use async/await.

    WARNING: Do not call from within an existing event loop (e.g., Jupyter,
    asyncio-based frameworks). Use the async LlmsFetcher API instead.

    Args:
        url: The URL to fetch
        **kwargs: Config options passed to LlmsFetchConfig

    Returns:
        One FileResult per stored file

    Example:
        results = fetch_blocking(
            "https://docs.example.com/guide",
            cache={"directory": "/tmp/llms-cache"},
        )
    """
    try:
        asyncio.get_running_loop()
        raise RuntimeError("fetch_blocking() called from async context. Use 'async with LlmsFetcher()' instead.")
    except RuntimeError as e:
        if "no running event loop" not in str(e).lower():
            raise

    config = LlmsFetchConfig(**kwargs)

    async def _run() -> list[FileResult]:
        async with LlmsFetcher(config) as fetcher:
            return await fetcher.fetch(url)

    return asyncio.run(_run())
