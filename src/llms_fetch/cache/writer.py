"""Persist fetched content under a URL-derived path inside the cache root."""

from __future__ import annotations

import logging
import os
import re
import tempfile
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote, urlsplit

from ..errors import CachePathError
from ..models.results import CacheEntry

logger = logging.getLogger(__name__)

GITIGNORE_NAME = ".gitignore"
GITIGNORE_CONTENT = "*\n"
INDEX_NAME = "index"

_UNSAFE_QUERY_CHARS = re.compile(r'[/\\:*?"<>|]')


class CacheRoot:
    """
    The directory all cached files live under.

    Creates ``.gitignore`` (``*``) the first time something is written so
    the cache never shows up in version control. The marker is created
    with exclusive-create and never rewritten.

    Example:
        root = CacheRoot(".llms-fetch-mcp")
        writer = CacheWriter(root)
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory).expanduser().absolute()
        self._lock = threading.Lock()
        self._ignore_ready = False

    @property
    def gitignore_path(self) -> Path:
        return self.directory / GITIGNORE_NAME

    def ensure_ignore_marker(self) -> None:
        """Create ``<root>/.gitignore`` unless it already exists."""
        with self._lock:
            if self._ignore_ready:
                return
            self.directory.mkdir(parents=True, exist_ok=True)
            try:
                with open(self.gitignore_path, "x", encoding="utf-8") as f:
                    f.write(GITIGNORE_CONTENT)
                logger.debug(f"Created {self.gitignore_path}")
            except FileExistsError:
                pass
            self._ignore_ready = True


def _check_segment(segment: str, url: str) -> str:
    if segment in ("..", "."):
        raise CachePathError(f"Path traversal in URL {url!r}: segment {segment!r}")
    if "/" in segment or "\\" in segment or "\x00" in segment:
        raise CachePathError(f"Unsafe path segment {segment!r} in URL {url!r}")
    return segment


def _host_dir(netloc: str, url: str) -> str:
    # Drop credentials; keep the port as part of the directory name
    host = netloc.rpartition("@")[2].lower().replace(":", "_")
    if not host:
        raise CachePathError(f"URL has no host: {url!r}")
    return _check_segment(host, url)


def cache_path_for(root_dir: Union[str, Path], url: str) -> Path:
    """
    Map a URL to a file path inside ``root_dir``.

    ``https://example.com/docs/guide.md`` → ``<root>/example.com/docs/guide.md``.
    An empty path, a trailing slash, or a final segment without an
    extension maps to an ``index`` file in that directory. A query string
    is appended to the file name as ``?<query>``.

    Args:
        root_dir: Cache root directory
        url: URL to map

    Returns:
        Absolute path inside root_dir

    Raises:
        CachePathError: If the URL would escape the root or has an unusable path
    """
    root = Path(root_dir).absolute()
    parts = urlsplit(url)

    segments = [_check_segment(unquote(s), url) for s in parts.path.split("/") if s]
    if not segments or parts.path.endswith("/"):
        segments.append(INDEX_NAME)
    elif not os.path.splitext(segments[-1])[1]:
        segments.append(INDEX_NAME)

    if parts.query:
        segments[-1] = f"{segments[-1]}?{_UNSAFE_QUERY_CHARS.sub('_', parts.query)}"

    path = root.joinpath(_host_dir(parts.netloc, url), *segments)

    resolved_root = root.resolve()
    try:
        path.resolve().relative_to(resolved_root)
    except ValueError as err:
        raise CachePathError(f"Path for {url!r} is outside cache directory {resolved_root}") from err

    return path


def separate_files_from_dirs(paths: Sequence[Path]) -> list[Path]:
    """
    Move every path another path needs as a directory to ``<path>/index``.

    ``/docs/v1.2`` maps to a file, but its ``/docs/v1.2/llms.txt`` variant
    needs ``docs/v1.2/`` as a directory. When both are stored in one call
    the page goes to ``docs/v1.2/index`` instead.

    Args:
        paths: Target paths of the files stored together

    Returns:
        Paths in the same order, none of them a parent of another
    """
    parents = {parent for path in paths for parent in path.parents}
    return [path / INDEX_NAME if path in parents else path for path in paths]


def compute_stats(text: str) -> tuple[int, int, int]:
    """
    Return ``(lines, words, characters)`` for a text.

    Only a newline character ends a line; a final line without one
    still counts.
    """
    lines = text.count("\n") + (1 if text and not text.endswith("\n") else 0)
    return lines, len(text.split()), len(text)


def _atomic_write(path: Path, content: bytes) -> None:
    """Write via a temp file in the same directory, then rename into place."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name[:64]}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


class CacheWriter:
    """
    Writes content to the cache atomically and reports its statistics.

    Readers never see a partially written file: content goes to a temp
    file first and is renamed over the target.

    Example:
        writer = CacheWriter(CacheRoot("/tmp/cache"))
        entry = writer.persist("https://example.com/llms.txt", b"# Docs\\n")
        print(entry.path, entry.lines)
    """

    def __init__(self, root: CacheRoot):
        self.root = root

    def persist(self, url: str, content: bytes, path: Optional[Path] = None) -> CacheEntry:
        """
        Store content under the path derived from ``url``.

        Args:
            url: URL whose cache path receives the content
            content: Bytes to write
            path: Target inside the root, if already mapped from ``url``

        Returns:
            Where the content went and its line/word/character counts

        Raises:
            CachePathError: If the URL cannot be mapped inside the root
            OSError: If the file cannot be written
        """
        if path is None:
            path = cache_path_for(self.root.directory, url)
        if path.is_dir():
            # Left by an earlier call that stored a child of this URL
            path = path / INDEX_NAME
        path.parent.mkdir(parents=True, exist_ok=True)
        _atomic_write(path, content)
        self.root.ensure_ignore_marker()

        lines, words, characters = compute_stats(content.decode("utf-8", errors="replace"))
        logger.info(f"Saved: {path}")
        return CacheEntry(
            path=path,
            relative_path=path.relative_to(self.root.directory),
            bytes_written=len(content),
            lines=lines,
            words=words,
            characters=characters,
        )
