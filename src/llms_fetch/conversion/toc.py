"""Compact table of contents for long Markdown documents.

Each entry is the heading line as it appears in the source (trailing
anchor links cut off), prefixed with its 1-based line number so a reader
can jump straight to the section::

      1→# Guide
     42→## Installation
    118→## Usage
"""

from __future__ import annotations

import re
from dataclasses import dataclass

DEFAULT_TOC_BUDGET = 4000
DEFAULT_TOC_THRESHOLD = 8000

_ATX_HEADING = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+.*)?$")
_FENCE = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_SETEXT_H1 = re.compile(r"^ {0,3}=+[ \t]*$")
_SETEXT_H2 = re.compile(r"^ {0,3}-+[ \t]*$")
_INDENTED = re.compile(r"^(?: {4}|\t)")
_LINK_START = re.compile(r"(?<!!)\[[^\]]*\]\(")
_BLOCK_START = re.compile(r"^ {0,3}(?:[-*+>]|\d+[.)])(?:[ \t]|$)")


@dataclass(frozen=True)
class Heading:
    """A heading found in a Markdown document."""

    level: int
    line_number: int
    text: str


def _heading_text(line: str) -> str:
    """Strip a heading line and cut it at the first link."""
    match = _LINK_START.search(line)
    if match:
        line = line[: match.start()]
    return line.strip()


def extract_headings(markdown: str) -> list[Heading]:
    """
    Find ATX (``#``) and setext (underlined) headings.

    Lines inside fenced or indented code blocks are never headings.

    Args:
        markdown: Markdown text

    Returns:
        Headings in document order
    """
    headings: list[Heading] = []
    fence: str | None = None
    # (first line number, lines) of the paragraph being read
    paragraph: tuple[int, list[str]] | None = None

    # Numbered by newline only, matching the line counts reported for the file
    for number, line in enumerate(markdown.split("\n"), start=1):
        line = line.rstrip("\r")
        if fence is not None:
            stripped = line.strip()
            if stripped.startswith(fence) and not stripped.strip(fence[0]):
                fence = None
            continue

        fence_match = _FENCE.match(line)
        if fence_match:
            fence = fence_match.group(1)
            paragraph = None
            continue

        if not line.strip():
            paragraph = None
            continue

        if paragraph is None and _INDENTED.match(line):
            continue

        if paragraph is not None and (_SETEXT_H1.match(line) or _SETEXT_H2.match(line)):
            level = 1 if _SETEXT_H1.match(line) else 2
            start, lines = paragraph
            text = _heading_text(" ".join(part.strip() for part in lines))
            if text:
                headings.append(Heading(level=level, line_number=start, text=text))
            paragraph = None
            continue

        atx = _ATX_HEADING.match(line)
        if atx:
            text = _heading_text(line)
            if text:
                headings.append(Heading(level=len(atx.group(1)), line_number=number, text=text))
            paragraph = None
            continue

        if _BLOCK_START.match(line):
            # List items and quotes never become setext headings here
            paragraph = None
            continue

        if paragraph is None:
            paragraph = (number, [line])
        else:
            paragraph[1].append(line)

    return headings


def render_toc(headings: list[Heading], max_level: int) -> str:
    """
    Render headings up to ``max_level`` as ``<line>→<text>`` entries.

    Line numbers are right-aligned to the widest number shown, at least
    three characters. Returns an empty string if no heading qualifies.
    """
    selected = [h for h in headings if h.level <= max_level]
    if not selected:
        return ""

    width = max(3, len(str(selected[-1].line_number)))
    return "\n".join(f"{h.line_number:>{width}}→{h.text}" for h in selected)


def find_optimal_level(headings: list[Heading], budget: int) -> int | None:
    """
    Return the deepest heading level whose rendering fits ``budget`` bytes.

    Levels are tried from 1 upwards; the search stops at the first level
    that no longer fits.
    """
    if not headings:
        return None

    best = None
    for level in range(1, max(h.level for h in headings) + 1):
        rendered = render_toc(headings, level)
        if not rendered:
            continue
        if len(rendered.encode("utf-8")) <= budget:
            best = level
        else:
            break
    return best


def generate_toc(
    markdown: str,
    total_chars: int,
    budget: int = DEFAULT_TOC_BUDGET,
    threshold: int = DEFAULT_TOC_THRESHOLD,
) -> str | None:
    """
    Build a table of contents for a document, if it is worth having one.

    Args:
        markdown: Document text
        total_chars: Document size in characters
        budget: Maximum size of the rendered table in bytes
        threshold: Documents shorter than this get no table

    Returns:
        Rendered table, or None if the document is short, has no
        headings, or even the top level exceeds the budget
    """
    if total_chars < threshold:
        return None

    headings = extract_headings(markdown)
    level = find_optimal_level(headings, budget)
    if level is None:
        return None
    return render_toc(headings, level) or None
