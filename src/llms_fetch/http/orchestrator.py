"""Concurrent fetching of every candidate variant."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

import aiohttp

from ..conversion.classifier import SNIFF_BYTES, classify
from ..errors import FetchError
from ..models.outcomes import (
    FailureReason,
    FetchFailure,
    FetchOutcome,
    FetchSuccess,
    Variant,
)
from .protocols import HttpClient

logger = logging.getLogger(__name__)

# Markdown and plain text first, then HTML, then anything
ACCEPT_HEADER = "text/markdown, text/x-markdown, text/plain, text/html;q=0.5, */*;q=0.1"

DEFAULT_TIMEOUT = 30.0


class FetchOrchestrator:
    """
    Fetches all variants of a URL concurrently and joins every outcome.

    No variant waits for another and none is cancelled when a sibling
    succeeds: selection needs the full set of outcomes. Each request has
    its own timeout, enforced by the client from the moment the request
    is sent, so a variant queued behind the concurrency limit is never
    timed out unsent. Every failure is captured as a FetchFailure.
    Cancelling the caller cancels all in-flight requests.

    Example:
        orchestrator = FetchOrchestrator(http_client, timeout=30.0)
        outcomes = await orchestrator.fetch_all(generate_variants(url))
        successes = [o for o in outcomes if o.succeeded]
    """

    def __init__(self, http_client: HttpClient, timeout: float = DEFAULT_TIMEOUT) -> None:
        """
        Initialize the orchestrator.

        Args:
            http_client: HTTP client implementing the HttpClient protocol
            timeout: Per-variant timeout in seconds, passed to the client
        """
        self._client = http_client
        self._timeout = timeout

    async def fetch_one(self, variant: Variant) -> FetchOutcome:
        """
        Fetch a single variant, converting every failure into an outcome.

        Args:
            variant: The candidate to fetch

        Returns:
            FetchOutcome holding a FetchSuccess or a FetchFailure
        """
        url = variant.url
        try:
            response = await self._client.get(url, timeout=self._timeout, headers={"Accept": ACCEPT_HEADER})
        except asyncio.TimeoutError:
            failure = FetchFailure(FailureReason.TIMEOUT, f"timed out after {self._timeout:g}s")
        except FetchError as e:
            failure = FetchFailure(e.reason, e.detail, e.status)
        except (aiohttp.ClientError, OSError, ValueError) as e:
            failure = FetchFailure(FailureReason.NETWORK, f"network error: {e}")
        else:
            if response.ok:
                content_class = classify(response.content_type, response.content[:SNIFF_BYTES])
                logger.debug(
                    f"Fetched {url}: HTTP {response.status_code}, "
                    f"{len(response.content)} bytes, {content_class.value}"
                )
                return FetchOutcome(
                    variant=variant,
                    result=FetchSuccess(
                        status=response.status_code,
                        body=response.content,
                        content_type=response.content_type,
                        content_class=content_class,
                        headers=dict(response.headers),
                    ),
                )
            failure = FetchFailure(
                FailureReason.HTTP_STATUS,
                f"HTTP {response.status_code}",
                status=response.status_code,
            )

        logger.debug(f"Variant {url} failed: {failure.reason.value} ({failure.detail})")
        return FetchOutcome(variant=variant, result=failure)

    async def fetch_all(self, variants: Sequence[Variant]) -> list[FetchOutcome]:
        """
        Fetch every variant concurrently and wait for all of them.

        Args:
            variants: Candidates to fetch

        Returns:
            One FetchOutcome per variant, in input order
        """
        if not variants:
            return []

        tasks = [asyncio.ensure_future(self.fetch_one(variant)) for variant in variants]
        try:
            outcomes = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

        succeeded = sum(1 for outcome in outcomes if outcome.succeeded)
        logger.debug(f"Fetched {len(outcomes)} variants: {succeeded} succeeded")
        return list(outcomes)
