"""HTTP client, concurrency limiting and variant fetching for llms-fetch."""

from .client import AsyncHttpClient, decode_body
from .limiter import RequestLimiter
from .orchestrator import ACCEPT_HEADER, FetchOrchestrator
from .protocols import HttpClient, HttpResponse

__all__ = [
    "ACCEPT_HEADER",
    "AsyncHttpClient",
    "FetchOrchestrator",
    "HttpClient",
    "HttpResponse",
    "RequestLimiter",
    "decode_body",
]
