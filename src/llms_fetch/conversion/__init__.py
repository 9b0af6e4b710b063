"""Content classification, HTML cleanup and Markdown rendering."""

from .classifier import SNIFF_BYTES, classify, looks_like_html, media_type
from .markdown import HtmlToMarkdown
from .normalizer import CONTENT_SELECTORS, HtmlNormalizer
from .policy import DEFAULT_CLEANING_POLICY, CleaningPolicy
from .protocols import MarkdownRenderer
from .toc import Heading, extract_headings, generate_toc, render_toc

__all__ = [
    "CONTENT_SELECTORS",
    "DEFAULT_CLEANING_POLICY",
    "SNIFF_BYTES",
    "CleaningPolicy",
    "Heading",
    "HtmlNormalizer",
    "HtmlToMarkdown",
    "MarkdownRenderer",
    "classify",
    "extract_headings",
    "generate_toc",
    "looks_like_html",
    "media_type",
    "render_toc",
]
