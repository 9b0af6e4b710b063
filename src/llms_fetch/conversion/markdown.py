"""HTML to Markdown rendering."""

from __future__ import annotations

import re
from urllib.parse import urljoin

import html2text
from bs4 import Tag

from ..errors import NormalizationError

# [](url) directly followed by another link: keep the opening bracket
_EMPTY_LINK_BEFORE_LINK = re.compile(r"\[\]\([^)]*\)\[")
_EMPTY_LINK = re.compile(r"(?<!!)\[\]\([^)]*\)")
_ZERO_WIDTH_LINK_TEXT = re.compile("\\[[\u200b\u200c\u200d\ufeff]+\\]")
_EXCESSIVE_NEWLINES = re.compile(r"\n{3,}")
_MARKDOWN_LINK = re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)")


class HtmlToMarkdown:
    """
    Renders HTML to clean Markdown.

    Uses html2text with settings tuned for LLM consumption: no line
    wrapping, inline links, images kept.

    Example:
        renderer = HtmlToMarkdown()
        markdown = renderer.convert(html_string, "https://docs.example.com/page")
    """

    def __init__(
        self,
        body_width: int = 0,
        inline_links: bool = True,
        wrap_links: bool = False,
        ignore_images: bool = False,
        ignore_tables: bool = False,
        unicode_snob: bool = True,
        escape_snob: bool = False,
    ):
        """
        Initialize the Markdown renderer.

        Args:
            body_width: Max line width (0 = no wrapping)
            inline_links: Use inline [text](url) vs reference style
            wrap_links: Wrap long links
            ignore_images: Skip image conversion
            ignore_tables: Skip table conversion
            unicode_snob: Use Unicode chars where possible
            escape_snob: Escape special Markdown chars
        """
        self._options = {
            "body_width": body_width,
            "inline_links": inline_links,
            "wrap_links": wrap_links,
            "protect_links": False,
            "ignore_images": ignore_images,
            "ignore_tables": ignore_tables,
            "unicode_snob": unicode_snob,
            "escape_snob": escape_snob,
            "mark_code": False,
            "default_image_alt": "image",
            "single_line_break": False,
        }

    def _new_converter(self, url: str) -> html2text.HTML2Text:
        # HTML2Text keeps parser state, so each render gets its own instance
        converter = html2text.HTML2Text(baseurl=url)
        for name, value in self._options.items():
            setattr(converter, name, value)
        return converter

    def _clean_output(self, markdown: str) -> str:
        """Clean up the converted Markdown."""
        markdown = _EMPTY_LINK_BEFORE_LINK.sub("[", markdown)
        markdown = _EMPTY_LINK.sub("", markdown)
        markdown = _ZERO_WIDTH_LINK_TEXT.sub("", markdown)

        # Remove trailing whitespace on each line
        markdown = "\n".join(line.rstrip() for line in markdown.split("\n"))

        markdown = _EXCESSIVE_NEWLINES.sub("\n\n", markdown)

        # Ensure single newline at end
        return markdown.strip() + "\n"

    def _fix_relative_links(self, markdown: str, base_url: str) -> str:
        """Ensure all links are absolute."""
        if not base_url:
            return markdown

        def replace_link(match: re.Match[str]) -> str:
            text = match.group(1)
            url = match.group(2)

            if url.startswith(("#", "http://", "https://", "mailto:", "tel:", "data:")):
                result: str = match.group(0)
                return result

            return f"[{text}]({urljoin(base_url, url)})"

        return _MARKDOWN_LINK.sub(replace_link, markdown)

    def convert(self, html: str, url: str = "") -> str:
        """
        Convert an HTML string to Markdown.

        Args:
            html: HTML content string
            url: Source URL for resolving relative links

        Returns:
            Markdown string

        Raises:
            NormalizationError: If html2text fails on the input
        """
        try:
            markdown = self._new_converter(url).handle(html)
        except Exception as e:
            raise NormalizationError(f"Failed to convert HTML to Markdown: {e}") from e

        markdown = self._clean_output(markdown)
        return self._fix_relative_links(markdown, url)

    def render(self, tree: Tag, url: str = "") -> str:
        """Render a parsed (and pruned) tree to Markdown."""
        return self.convert(str(tree), url)
