"""Content-type classification of fetched payloads."""

import re
from typing import Optional, Union

from ..models.outcomes import ContentClass

MARKDOWN_TYPES = frozenset({"text/markdown", "text/x-markdown"})
PLAIN_TEXT_TYPES = frozenset({"text/plain"})
HTML_TYPES = frozenset({"text/html", "application/xhtml+xml"})

# Declared types that say nothing about the payload
AMBIGUOUS_TYPES = frozenset({"", "application/octet-stream", "binary/octet-stream", "application/unknown"})

# How much of the body is inspected when sniffing
SNIFF_BYTES = 1024

# An HTML root marker, optionally preceded by an XML declaration and comments
_HTML_DOCUMENT = re.compile(
    r"^\s*(?:<\?xml[^>]*>\s*)?(?:<!--.*?-->\s*)*<(?:!doctype\s+html|html[\s>])",
    re.IGNORECASE | re.DOTALL,
)


def media_type(content_type: Optional[str]) -> str:
    """Return the lower-cased media type of a Content-Type header, or ""."""
    if not isinstance(content_type, str):
        return ""
    base = content_type.split(";", 1)[0].strip().lower()
    if base.count("/") != 1:
        return ""
    return base


def looks_like_html(body_prefix: Union[bytes, str]) -> bool:
    """Return True if the body starts like an HTML document."""
    if isinstance(body_prefix, bytes):
        text = body_prefix[:SNIFF_BYTES].decode("latin-1")
    else:
        text = body_prefix[:SNIFF_BYTES]
    # UTF-8 BOM read as latin-1, or a decoded BOM
    text = text.removeprefix("\xef\xbb\xbf").lstrip("\ufeff")
    return _HTML_DOCUMENT.match(text) is not None


def classify(content_type: Optional[str], body_prefix: Union[bytes, str]) -> ContentClass:
    """
    Classify a payload from its Content-Type header and the start of its body.

    - MARKDOWN: declared text/markdown or text/x-markdown
    - PLAIN_TEXT: declared text/plain and the body is not an HTML document
    - HTML: declared HTML, or an undeclared/ambiguous (or text/plain) type
      whose body starts with an HTML root marker
    - UNCLASSIFIED: anything else

    Pure and total: malformed headers never raise.

    Example:
        >>> classify("text/markdown; charset=utf-8", b"# Title")
        <ContentClass.MARKDOWN: 'markdown'>
        >>> classify(None, b"<!DOCTYPE html><html>...")
        <ContentClass.HTML: 'html'>
    """
    declared = media_type(content_type)

    if declared in MARKDOWN_TYPES:
        return ContentClass.MARKDOWN

    if declared in HTML_TYPES:
        return ContentClass.HTML

    if declared in PLAIN_TEXT_TYPES:
        return ContentClass.HTML if looks_like_html(body_prefix) else ContentClass.PLAIN_TEXT

    if declared in AMBIGUOUS_TYPES and looks_like_html(body_prefix):
        return ContentClass.HTML

    return ContentClass.UNCLASSIFIED
