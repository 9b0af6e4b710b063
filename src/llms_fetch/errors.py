"""Exception hierarchy for llms-fetch.

Per-variant problems (``VariantGenerationError``, ``FetchError``) are captured
close to where they happen and never abort a whole fetch. Only
``AllVariantsFailedError`` escalates to the caller of ``LlmsFetcher.fetch``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models.outcomes import FailureReason, FetchOutcome


class LlmsFetchError(Exception):
    """Base class for all llms-fetch errors."""


class VariantGenerationError(LlmsFetchError):
    """A candidate URL could not be derived from the source URL."""


class FetchError(LlmsFetchError):
    """A single HTTP request failed.

    Attributes:
        reason: Failure category (timeout, network, HTTP status, decode)
        url: The URL that was requested
        detail: Human-readable description
        status: HTTP status code when the failure is a non-2xx response
    """

    def __init__(
        self,
        reason: FailureReason,
        url: str,
        detail: str,
        status: int | None = None,
    ) -> None:
        self.reason = reason
        self.url = url
        self.detail = detail
        self.status = status
        super().__init__(f"{url}: {detail}")


class NormalizationError(LlmsFetchError):
    """HTML could not be parsed or rendered to Markdown."""


class CachePathError(LlmsFetchError, ValueError):
    """A URL cannot be mapped to a path inside the cache root."""


class AllVariantsFailedError(LlmsFetchError):
    """Every candidate URL failed; nothing was written.

    Attributes:
        url: The URL the caller asked for
        failures: One ``(variant_url, reason, detail)`` tuple per attempt
    """

    def __init__(self, url: str, failures: Sequence[tuple[str, str, str]]) -> None:
        self.url = url
        self.failures = list(failures)
        if self.failures:
            details = "; ".join(f"{variant_url}: {reason} ({detail})" for variant_url, reason, detail in self.failures)
        else:
            details = "no variants were tried"
        super().__init__(f"Failed to fetch content from {url} ({details})")

    @classmethod
    def from_outcomes(cls, url: str, outcomes: Sequence[FetchOutcome]) -> AllVariantsFailedError:
        """Build the error from a set of failed outcomes."""
        failures = []
        for outcome in outcomes:
            failure = outcome.failure
            if failure is not None:
                failures.append((outcome.variant.url, failure.reason.value, failure.detail))
        return cls(url, failures)
