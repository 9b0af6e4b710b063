"""Candidate URL generation for LLM-friendly representations of a page."""

from __future__ import annotations

import logging
from typing import Callable
from urllib.parse import SplitResult, urlsplit, urlunsplit

from ..errors import VariantGenerationError
from ..models.outcomes import Variant, VariantKind

logger = logging.getLogger(__name__)

# Final path segments with these suffixes are already in a terminal textual form
TERMINAL_SUFFIXES = (".md", ".txt")

GITHUB_HOST = "github.com"
GITHUB_RAW_HOST = "raw.githubusercontent.com"


def _base_path(parts: SplitResult) -> str:
    return parts.path.rstrip("/")


def _with_path(parts: SplitResult, path: str) -> str:
    return urlunsplit((parts.scheme, parts.netloc, path, parts.query, parts.fragment))


def _markdown_suffix(parts: SplitResult) -> str:
    base = _base_path(parts)
    if not base:
        raise VariantGenerationError("Root path has no segment to suffix with .md")
    return _with_path(parts, base + ".md")


def _child(name: str) -> Callable[[SplitResult], str]:
    def derive(parts: SplitResult) -> str:
        return _with_path(parts, f"{_base_path(parts)}/{name}")

    return derive


# Fixed derivation order after the original URL
STANDARD_DERIVATIONS: tuple[tuple[VariantKind, Callable[[SplitResult], str]], ...] = (
    (VariantKind.MARKDOWN_SUFFIX, _markdown_suffix),
    (VariantKind.INDEX_MARKDOWN, _child("index.md")),
    (VariantKind.LLMS_TXT, _child("llms.txt")),
    (VariantKind.LLMS_FULL_TXT, _child("llms-full.txt")),
)


def is_terminal(url: str) -> bool:
    """Return True if the URL's final path segment ends in .md or .txt."""
    try:
        path = urlsplit(url).path
    except ValueError:
        return False
    return path.rsplit("/", 1)[-1].endswith(TERMINAL_SUFFIXES)


def _github_raw(parts: SplitResult) -> str | None:
    """
    Map a github.com blob/tree URL to its raw.githubusercontent.com form.

    /owner/repo/blob/<branch>/<path>  -> raw/<owner>/<repo>/<branch>/<path>
    /owner/repo/tree/<branch>[/<sub>] -> raw/<owner>/<repo>/<branch>[/<sub>]/README.md

    Branch names containing "/" cannot be told apart from paths and are
    treated as a single segment.
    """
    segments = parts.path.strip("/").split("/")
    if len(segments) < 4 or not all(segments[:4]):
        return None

    owner, repo, mode = segments[0], segments[1], segments[2]
    rest = "/".join(segment for segment in segments[3:] if segment)

    if mode == "blob":
        return f"https://{GITHUB_RAW_HOST}/{owner}/{repo}/{rest}"
    if mode == "tree":
        return f"https://{GITHUB_RAW_HOST}/{owner}/{repo}/{rest}/README.md"
    return None


def generate_variants(url: str, *, github: bool = False) -> list[Variant]:
    """
    Produce the ordered candidate URLs to try for a source URL.

    The original URL always comes first. Unless it already names a .md or
    .txt file, it is followed by ``<base>.md``, ``<base>/index.md``,
    ``<base>/llms.txt`` and ``<base>/llms-full.txt``, where ``<base>`` is the
    path without trailing slashes. Scheme, host, query and fragment are kept.

    Derivations that cannot be built are left out; this function never raises.

    Args:
        url: Source URL
        github: Also add raw.githubusercontent.com and README.md candidates
            for github.com URLs

    Returns:
        List of variants, original first

    Example:
        >>> [v.url for v in generate_variants("https://example.com/docs")]
        ['https://example.com/docs', 'https://example.com/docs.md',
         'https://example.com/docs/index.md', 'https://example.com/docs/llms.txt',
         'https://example.com/docs/llms-full.txt']
    """
    variants = [Variant(url=url, kind=VariantKind.ORIGINAL)]

    if is_terminal(url):
        return variants

    try:
        parts = urlsplit(url)
    except ValueError as e:
        logger.debug(f"Not deriving variants for unparsable URL {url!r}: {e}")
        return variants

    if not parts.scheme or not parts.netloc:
        logger.debug(f"Not deriving variants for {url!r}: missing scheme or host")
        return variants

    is_github = github and parts.hostname == GITHUB_HOST

    if is_github:
        raw_url = _github_raw(parts)
        if raw_url:
            variants.append(Variant(url=raw_url, kind=VariantKind.GITHUB_RAW))

    for kind, derive in STANDARD_DERIVATIONS:
        try:
            candidate = derive(parts)
        except (VariantGenerationError, ValueError) as e:
            logger.debug(f"Skipping {kind.value} variant of {url}: {e}")
            continue

        variants.append(Variant(url=candidate, kind=kind))

        if is_github and kind is VariantKind.MARKDOWN_SUFFIX:
            variants.append(
                Variant(
                    url=_with_path(parts, f"{_base_path(parts)}/README.md"),
                    kind=VariantKind.GITHUB_README,
                )
            )

    return variants
