"""Decide what to store from the outcomes of one fetch."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from .errors import AllVariantsFailedError, NormalizationError
from .models.outcomes import ContentClass, FetchOutcome

logger = logging.getLogger(__name__)


class Normalizer(Protocol):
    def normalize(self, html: bytes, url: str = "", content_type: str | None = None) -> str: ...


@dataclass(frozen=True)
class PlannedWrite:
    """
    Content chosen for storage.

    Attributes:
        url: URL whose cache path receives the content
        content: Bytes to write
        was_converted: True if the content is Markdown rendered from HTML
        content_class: Classification of the fetched body
        source_url: URL the content was actually fetched from
    """

    url: str
    content: bytes
    was_converted: bool
    content_class: ContentClass
    source_url: str


def content_type_label(url: str, content_class: ContentClass, was_converted: bool) -> str:
    """
    Return the label reported for a stored file.

    Args:
        url: URL the content was fetched from
        content_class: Classification of the fetched body
        was_converted: Whether HTML was rendered to Markdown

    Returns:
        One of llms-full, llms, markdown, html-converted, html, text, binary
    """
    if was_converted:
        return "html-converted"
    if "/llms-full.txt" in url:
        return "llms-full"
    if "/llms.txt" in url:
        return "llms"
    if content_class is ContentClass.MARKDOWN:
        return "markdown"
    if content_class is ContentClass.HTML:
        return "html"
    if content_class is ContentClass.PLAIN_TEXT:
        return "text"
    return "binary"


def select(source_url: str, outcomes: Sequence[FetchOutcome], normalizer: Normalizer) -> list[PlannedWrite]:
    """
    Choose what to write for a set of fetch outcomes.

    - No successes: raise AllVariantsFailedError.
    - One success: store it under the original URL's path, rendering HTML
      to Markdown (raw bytes if rendering fails).
    - Several successes: store each verbatim under its own variant URL.

    Args:
        source_url: URL the caller asked for
        outcomes: One outcome per variant, in variant order
        normalizer: HTML to Markdown converter

    Returns:
        Planned writes, in variant order

    Raises:
        AllVariantsFailedError: If no variant succeeded
    """
    successes = [(outcome.variant, outcome.success) for outcome in outcomes if outcome.success is not None]

    if not successes:
        raise AllVariantsFailedError.from_outcomes(source_url, outcomes)

    if len(successes) > 1:
        logger.debug(f"{len(successes)} variants of {source_url} succeeded, storing each verbatim")
        return [
            PlannedWrite(
                url=variant.url,
                content=success.body,
                was_converted=False,
                content_class=success.content_class,
                source_url=variant.url,
            )
            for variant, success in successes
        ]

    variant, success = successes[0]
    content = success.body
    was_converted = False

    if success.content_class is ContentClass.HTML:
        try:
            markdown = normalizer.normalize(success.body, variant.url, success.content_type)
        except NormalizationError as e:
            logger.warning(f"Could not convert {variant.url} to Markdown, storing raw HTML: {e}")
        else:
            content = markdown.encode("utf-8")
            was_converted = True

    return [
        PlannedWrite(
            url=source_url,
            content=content,
            was_converted=was_converted,
            content_class=success.content_class,
            source_url=variant.url,
        )
    ]
