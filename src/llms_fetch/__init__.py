"""
llms-fetch - Fetch documentation in its most LLM-friendly form and cache it locally.

For a URL, llms-fetch also tries ``<url>.md``, ``<url>/index.md``,
``<url>/llms.txt`` and ``<url>/llms-full.txt``, converts a lone HTML page
to Markdown, and stores the results under ``.llms-fetch-mcp/<host>/<path>``.

Usage:
    from llms_fetch import LlmsFetcher

    async with LlmsFetcher() as fetcher:
        for result in await fetcher.fetch("https://docs.example.com/guide"):
            print(result.path, result.content_type, result.lines)
"""

__version__ = "0.1.0"

from .core.fetcher import LlmsFetcher, fetch_blocking
from .errors import (
    AllVariantsFailedError,
    CachePathError,
    FetchError,
    LlmsFetchError,
    NormalizationError,
    VariantGenerationError,
)
from .models.config import CacheConfig, ConversionConfig, LlmsFetchConfig, NetworkConfig
from .models.results import FileResult

__all__ = [
    "__version__",
    # Core
    "LlmsFetcher",
    "fetch_blocking",
    # Config
    "LlmsFetchConfig",
    "NetworkConfig",
    "CacheConfig",
    "ConversionConfig",
    # Results
    "FileResult",
    # Errors
    "LlmsFetchError",
    "VariantGenerationError",
    "FetchError",
    "NormalizationError",
    "CachePathError",
    "AllVariantsFailedError",
]
