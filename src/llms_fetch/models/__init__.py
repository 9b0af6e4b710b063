"""llms-fetch configuration and data models."""

from .config import (
    DEFAULT_CACHE_DIR,
    DEFAULT_USER_AGENT,
    ByteSize,
    CacheConfig,
    ConversionConfig,
    LlmsFetchConfig,
    NetworkConfig,
)
from .outcomes import (
    ContentClass,
    FailureReason,
    FetchFailure,
    FetchOutcome,
    FetchSuccess,
    Variant,
    VariantKind,
)
from .results import CacheEntry, FileResult

__all__ = [
    # Config
    "ByteSize",
    "CacheConfig",
    "ConversionConfig",
    "DEFAULT_CACHE_DIR",
    "DEFAULT_USER_AGENT",
    "LlmsFetchConfig",
    "NetworkConfig",
    # Outcomes
    "ContentClass",
    "FailureReason",
    "FetchFailure",
    "FetchOutcome",
    "FetchSuccess",
    "Variant",
    "VariantKind",
    # Results
    "CacheEntry",
    "FileResult",
]
