"""Results reported for each persisted file."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional


@dataclass(frozen=True)
class CacheEntry:
    """
    A file written to the cache.

    Attributes:
        path: Absolute path of the written file
        relative_path: Path relative to the cache root
        bytes_written: Size of the stored content
        lines: Number of lines
        words: Number of whitespace-delimited words
        characters: Number of unicode characters
    """

    path: Path
    relative_path: Path
    bytes_written: int
    lines: int
    words: int
    characters: int


@dataclass(frozen=True)
class FileResult:
    """
    Tool-facing description of one cached file.

    Example:
        >>> result.to_dict()
        {'path': '/work/.llms-fetch-mcp/example.com/docs/llms.txt', 'lines': 120, ...}
    """

    path: str
    lines: int
    words: int
    characters: int
    source_url: str
    content_type: str
    table_of_contents: Optional[str] = None

    @classmethod
    def from_entry(
        cls,
        entry: CacheEntry,
        source_url: str,
        content_type: str,
        table_of_contents: Optional[str] = None,
    ) -> FileResult:
        return cls(
            path=str(entry.path),
            lines=entry.lines,
            words=entry.words,
            characters=entry.characters,
            source_url=source_url,
            content_type=content_type,
            table_of_contents=table_of_contents,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dict, omitting an absent table of contents."""
        data: dict[str, Any] = {
            "path": self.path,
            "lines": self.lines,
            "words": self.words,
            "characters": self.characters,
            "source_url": self.source_url,
            "content_type": self.content_type,
        }
        if self.table_of_contents is not None:
            data["table_of_contents"] = self.table_of_contents
        return data
