"""Cache directory layout and atomic writes."""

from .writer import (
    GITIGNORE_CONTENT,
    GITIGNORE_NAME,
    CacheRoot,
    CacheWriter,
    cache_path_for,
    compute_stats,
    separate_files_from_dirs,
)

__all__ = [
    "GITIGNORE_CONTENT",
    "GITIGNORE_NAME",
    "CacheRoot",
    "CacheWriter",
    "cache_path_for",
    "compute_stats",
    "separate_files_from_dirs",
]
