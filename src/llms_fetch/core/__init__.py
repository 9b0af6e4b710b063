from .fetcher import LlmsFetcher, fetch_blocking

__all__ = ["LlmsFetcher", "fetch_blocking"]
