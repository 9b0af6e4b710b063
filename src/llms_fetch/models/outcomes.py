"""Candidate URLs and the outcome of fetching each one."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class VariantKind(str, Enum):
    """Which representation of a resource a candidate URL points at."""

    ORIGINAL = "original"
    MARKDOWN_SUFFIX = "markdown_suffix"
    INDEX_MARKDOWN = "index_markdown"
    LLMS_TXT = "llms_txt"
    LLMS_FULL_TXT = "llms_full_txt"

    # Only produced when GitHub variants are enabled
    GITHUB_RAW = "github_raw"
    GITHUB_README = "github_readme"


class ContentClass(str, Enum):
    """Semantic kind of a fetched payload."""

    MARKDOWN = "markdown"
    PLAIN_TEXT = "plain_text"
    HTML = "html"
    UNCLASSIFIED = "unclassified"


class FailureReason(str, Enum):
    """Why a single candidate fetch did not produce content."""

    TIMEOUT = "timeout"
    NETWORK = "network"
    HTTP_STATUS = "http_status"
    DECODE = "decode"


@dataclass(frozen=True)
class Variant:
    """A candidate URL to try for a source URL."""

    url: str
    kind: VariantKind


@dataclass(frozen=True)
class FetchSuccess:
    """
    A 2xx response with its body.

    Attributes:
        status: HTTP status code
        headers: Response headers
        body: Raw response body
        content_type: Content-Type header value ("" when absent)
        content_class: Classification of the body
    """

    status: int
    body: bytes
    content_type: str
    content_class: ContentClass
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class FetchFailure:
    """A candidate that produced no usable content."""

    reason: FailureReason
    detail: str
    status: Optional[int] = None


@dataclass(frozen=True)
class FetchOutcome:
    """Result of fetching one variant."""

    variant: Variant
    result: Union[FetchSuccess, FetchFailure]

    @property
    def succeeded(self) -> bool:
        return isinstance(self.result, FetchSuccess)

    @property
    def success(self) -> Optional[FetchSuccess]:
        return self.result if isinstance(self.result, FetchSuccess) else None

    @property
    def failure(self) -> Optional[FetchFailure]:
        return self.result if isinstance(self.result, FetchFailure) else None
