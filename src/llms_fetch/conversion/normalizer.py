"""Conservative HTML cleanup followed by Markdown rendering."""

import logging
import re
from typing import Optional, Union

from bs4 import BeautifulSoup, Tag

from ..errors import NormalizationError
from ..http.client import charset_from_content_type, decode_body
from .markdown import HtmlToMarkdown
from .policy import DEFAULT_CLEANING_POLICY, CleaningPolicy
from .protocols import MarkdownRenderer

logger = logging.getLogger(__name__)

# Containers that typically hold the main content, in priority order
CONTENT_SELECTORS = [
    ".markdown-body",
    "main",
    '[role="main"]',
    ".main-content",
    "#main-content",
    "#content",
    ".content",
    ".docs-content",
    ".documentation",
    ".page-content",
]

_META_CHARSET = re.compile(rb'<meta[^>]+charset=["\']?([A-Za-z0-9_\-]+)', re.IGNORECASE)


class HtmlNormalizer:
    """
    Turns an HTML document into Markdown in two phases.

    1. Removal: delete only elements the CleaningPolicy marks as
       navigation chrome (scripts, nav, banner roles, nav-like class/id,
       decorative icons). Everything else is kept.
    2. Render: hand the pruned tree to a MarkdownRenderer.

    Example:
        normalizer = HtmlNormalizer()
        markdown = normalizer.normalize(html_bytes, "https://docs.example.com/page")
    """

    def __init__(
        self,
        policy: CleaningPolicy = DEFAULT_CLEANING_POLICY,
        renderer: Optional[MarkdownRenderer] = None,
        extract_main_content: bool = False,
    ):
        """
        Initialize the normalizer.

        Args:
            policy: Table of removal rules
            renderer: Markdown renderer (html2text-backed by default)
            extract_main_content: Render only the main content container
                (see CONTENT_SELECTORS) instead of the whole body
        """
        self.policy = policy
        self._renderer: MarkdownRenderer = renderer or HtmlToMarkdown()
        self._extract_main_content = extract_main_content

    def _detect_encoding(self, html: bytes, content_type: Optional[str]) -> Optional[str]:
        """Find the declared encoding in the header or a meta tag."""
        declared = charset_from_content_type(content_type)
        if declared:
            return declared
        match = _META_CHARSET.search(html[:2048])
        if match:
            return match.group(1).decode("ascii")
        return None

    def parse(self, html: Union[str, bytes], content_type: Optional[str] = None) -> BeautifulSoup:
        """
        Parse an HTML document.

        Args:
            html: Document as text or raw bytes
            content_type: Content-Type header, used for the charset of bytes

        Returns:
            Parsed document

        Raises:
            NormalizationError: If the document cannot be parsed
        """
        if isinstance(html, bytes):
            encoding = self._detect_encoding(html, content_type)
            html = decode_body(html, f"text/html; charset={encoding}" if encoding else None)
        try:
            return BeautifulSoup(html, "html.parser")
        except Exception as e:
            raise NormalizationError(f"Could not parse HTML: {e}") from e

    def prune(self, soup: Union[BeautifulSoup, Tag]) -> int:
        """
        Remove every element the policy marks as chrome.

        Args:
            soup: Parsed document, modified in place

        Returns:
            Number of elements removed (descendants of removed elements
            are not counted separately)
        """
        removed = 0
        for tag in soup.find_all(True):
            # Already gone with a removed ancestor
            if tag.decomposed:
                continue
            reason = self.policy.removal_reason(tag)
            if reason is not None:
                logger.debug(f"Removing <{tag.name}>: {reason}")
                tag.decompose()
                removed += 1
        return removed

    def select_content(self, soup: BeautifulSoup) -> Tag:
        """Return the element to render: main content if enabled, else body."""
        if self._extract_main_content:
            for selector in CONTENT_SELECTORS:
                element = soup.select_one(selector)
                if element is not None:
                    return element

        body = soup.find("body")
        if isinstance(body, Tag):
            return body
        return soup

    def normalize(
        self,
        html: Union[str, bytes],
        url: str = "",
        content_type: Optional[str] = None,
    ) -> str:
        """
        Clean an HTML document and render it to Markdown.

        Args:
            html: Document as text or raw bytes
            url: Source URL (for resolving relative links)
            content_type: Content-Type header of the response

        Returns:
            Markdown text

        Raises:
            NormalizationError: If the document cannot be parsed or rendered
        """
        soup = self.parse(html, content_type)
        removed = self.prune(soup)
        content = self.select_content(soup)
        markdown = self._renderer.render(content, url)
        logger.debug(f"Normalized {url or 'document'}: removed {removed} elements, {len(markdown)} chars of Markdown")
        return markdown
