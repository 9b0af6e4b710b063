"""Protocol definitions for content conversion."""

from typing import Protocol

from bs4 import Tag


class MarkdownRenderer(Protocol):
    """
    Protocol for turning a pruned HTML tree into Markdown.

    The normalizer decides what to remove; the renderer only maps the
    remaining elements (headings, lists, code, emphasis, links, tables)
    to Markdown.
    """

    def render(self, tree: Tag, url: str) -> str:
        """
        Render an HTML tree to Markdown.

        Args:
            tree: Pruned document or element
            url: Source URL (for resolving relative links)

        Returns:
            Markdown string

        Raises:
            NormalizationError if the tree cannot be rendered
        """
        ...
