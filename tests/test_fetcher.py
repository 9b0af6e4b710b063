"""End-to-end tests for LlmsFetcher with a mocked HTTP client."""

from unittest.mock import AsyncMock

import pytest

from llms_fetch import AllVariantsFailedError, LlmsFetchConfig, LlmsFetcher, fetch_blocking
from llms_fetch.http import HttpResponse

SOURCE = "https://example.com/docs"

HTML_PAGE = b"""<!DOCTYPE html>
<html><head><title>Docs</title></head>
<body>
  <nav class="navbar"><a href="/">Home</a><a href="/blog">Blog</a></nav>
  <header><h1>Documentation</h1></header>
  <p>Install with <code>pip install example</code>.</p>
  <script>trackPageView();</script>
  <footer><p>Built with care</p></footer>
</body></html>"""


def response(url, status=200, content=b"", content_type="text/html; charset=utf-8"):
    return HttpResponse(status_code=status, content=content, content_type=content_type, headers={}, url=url)


def client_for(routes):
    async def get(url, *, timeout=None, headers=None):
        return routes.get(url) or response(url, status=404, content=b"Not Found")

    client = AsyncMock()
    client.get.side_effect = get
    return client


def make_config(tmp_path, **conversion):
    return LlmsFetchConfig(cache={"directory": tmp_path / "cache"}, conversion=conversion)


class TestLlmsFetcher:
    """Tests for LlmsFetcher.fetch."""

    @pytest.mark.asyncio
    async def test_single_html_success_is_converted(self, tmp_path):
        """Test that a lone HTML page becomes Markdown under the original URL's path."""
        client = client_for({SOURCE: response(SOURCE, content=HTML_PAGE)})

        async with LlmsFetcher(make_config(tmp_path), http_client=client) as fetcher:
            results = await fetcher.fetch(SOURCE)

        assert len(results) == 1
        result = results[0]
        assert result.path == str(tmp_path / "cache" / "example.com" / "docs" / "index")
        assert result.content_type == "html-converted"
        assert result.source_url == SOURCE

        stored = (tmp_path / "cache" / "example.com" / "docs" / "index").read_text()
        assert "# Documentation" in stored
        assert "pip install example" in stored
        assert "Built with care" in stored
        assert "trackPageView" not in stored
        assert "Blog" not in stored
        assert result.lines == len(stored.splitlines())
        assert result.characters == len(stored)

        # Nothing written for the four failed variants
        files = sorted(p.relative_to(tmp_path / "cache").as_posix() for p in (tmp_path / "cache").rglob("*") if p.is_file())
        assert files == [".gitignore", "example.com/docs/index"]

    @pytest.mark.asyncio
    async def test_multiple_successes_stored_verbatim(self, tmp_path):
        """Test that every successful variant is stored as fetched."""
        md_url = "https://example.com/docs.md"
        llms_url = "https://example.com/docs/llms.txt"
        client = client_for(
            {
                SOURCE: response(SOURCE, content=HTML_PAGE),
                md_url: response(md_url, content=b"# Docs\n", content_type="text/markdown"),
                llms_url: response(llms_url, content=b"# Example\n\n- [Docs](/docs)\n", content_type="text/plain"),
            }
        )

        async with LlmsFetcher(make_config(tmp_path), http_client=client) as fetcher:
            results = await fetcher.fetch(SOURCE)

        cache = tmp_path / "cache" / "example.com"
        assert [r.path for r in results] == [
            str(cache / "docs" / "index"),
            str(cache / "docs.md"),
            str(cache / "docs" / "llms.txt"),
        ]
        assert [r.content_type for r in results] == ["html", "markdown", "llms"]
        assert (cache / "docs" / "index").read_bytes() == HTML_PAGE
        assert (cache / "docs.md").read_bytes() == b"# Docs\n"

    @pytest.mark.asyncio
    async def test_dotted_segment_with_every_variant(self, tmp_path):
        """Test that a page stored beside its own child variants gets an index file."""
        url = "https://example.com/docs/v1.2"
        variants = [url, f"{url}.md", f"{url}/index.md", f"{url}/llms.txt", f"{url}/llms-full.txt"]
        client = client_for({v: response(v, content=f"# {v}\n".encode(), content_type="text/plain") for v in variants})

        async with LlmsFetcher(make_config(tmp_path), http_client=client) as fetcher:
            results = await fetcher.fetch(url)

        docs = tmp_path / "cache" / "example.com" / "docs"
        assert len(results) == 5
        assert [r.path for r in results] == [
            str(docs / "v1.2" / "index"),
            str(docs / "v1.2.md"),
            str(docs / "v1.2" / "index.md"),
            str(docs / "v1.2" / "llms.txt"),
            str(docs / "v1.2" / "llms-full.txt"),
        ]
        assert (docs / "v1.2" / "index").read_text() == f"# {url}\n"
        assert (docs / "v1.2" / "llms.txt").read_text() == f"# {url}/llms.txt\n"

    @pytest.mark.asyncio
    async def test_terminal_url_fetches_once(self, tmp_path):
        """Test that an llms.txt URL is the only request."""
        url = "https://example.com/llms.txt"
        client = client_for({url: response(url, content=b"# Example\n", content_type="text/plain")})

        async with LlmsFetcher(make_config(tmp_path), http_client=client) as fetcher:
            results = await fetcher.fetch(url)

        assert client.get.await_count == 1
        assert results[0].path == str(tmp_path / "cache" / "example.com" / "llms.txt")
        assert results[0].content_type == "llms"

    @pytest.mark.asyncio
    async def test_all_variants_failed(self, tmp_path):
        """Test the aggregated error and that nothing is written."""
        client = client_for({})

        async with LlmsFetcher(make_config(tmp_path), http_client=client) as fetcher:
            with pytest.raises(AllVariantsFailedError) as exc_info:
                await fetcher.fetch(SOURCE)

        assert len(exc_info.value.failures) == 5
        assert all(reason == "http_status" for _, reason, _ in exc_info.value.failures)
        assert not (tmp_path / "cache").exists()

    @pytest.mark.asyncio
    async def test_gitignore_created_once(self, tmp_path):
        """Test the marker across two calls."""
        url = "https://example.com/llms.txt"
        client = client_for({url: response(url, content=b"x", content_type="text/plain")})
        marker = tmp_path / "cache" / ".gitignore"

        async with LlmsFetcher(make_config(tmp_path), http_client=client) as fetcher:
            await fetcher.fetch(url)
            assert marker.read_text() == "*\n"
            before = marker.stat().st_mtime_ns
            await fetcher.fetch(url)

        assert marker.read_text() == "*\n"
        assert marker.stat().st_mtime_ns == before

    @pytest.mark.asyncio
    async def test_known_statistics(self, tmp_path):
        """Test reported statistics for known content."""
        url = "https://example.com/notes.txt"
        content = b"The quick brown fox\njumps over the lazy dog\nsuccessfully\n"
        client = client_for({url: response(url, content=content, content_type="text/plain")})

        async with LlmsFetcher(make_config(tmp_path), http_client=client) as fetcher:
            (result,) = await fetcher.fetch(url)

        assert (result.lines, result.words, result.characters) == (3, 10, 57)
        assert result.to_dict() == {
            "path": str(tmp_path / "cache" / "example.com" / "notes.txt"),
            "lines": 3,
            "words": 10,
            "characters": 57,
            "source_url": url,
            "content_type": "text",
        }

    @pytest.mark.asyncio
    async def test_table_of_contents_for_long_markdown(self, tmp_path):
        """Test that long text files get a table of contents."""
        url = "https://example.com/llms-full.txt"
        sections = "".join(f"## Section {i}\n\n{'word ' * 40}\n\n" for i in range(50))
        content = f"# Full docs\n\n{sections}".encode()
        client = client_for({url: response(url, content=content, content_type="text/plain")})

        async with LlmsFetcher(make_config(tmp_path), http_client=client) as fetcher:
            (result,) = await fetcher.fetch(url)

        assert result.content_type == "llms-full"
        assert result.table_of_contents is not None
        assert result.table_of_contents.startswith("  1→# Full docs")
        assert "table_of_contents" in result.to_dict()

    @pytest.mark.asyncio
    async def test_traversal_url_rejected(self, tmp_path):
        """Test that a URL escaping the cache raises and writes nothing."""
        url = "https://example.com/%2e%2e/%2e%2e/escape.txt"
        client = client_for({url: response(url, content=b"x", content_type="text/plain")})

        async with LlmsFetcher(make_config(tmp_path), http_client=client) as fetcher:
            with pytest.raises(ValueError):
                await fetcher.fetch(url)

        assert not (tmp_path / "cache").exists()
        assert not (tmp_path / "escape.txt").exists()

    @pytest.mark.asyncio
    async def test_github_variants_enabled(self, tmp_path):
        """Test that the GitHub flag adds raw candidates."""
        url = "https://github.com/owner/repo/blob/main/README"
        raw = "https://raw.githubusercontent.com/owner/repo/main/README"
        client = client_for({raw: response(raw, content=b"# Repo\n", content_type="text/plain")})

        async with LlmsFetcher(make_config(tmp_path, github_variants=True), http_client=client) as fetcher:
            (result,) = await fetcher.fetch(url)

        assert client.get.await_count == 7
        assert result.source_url == raw
        assert result.path == str(tmp_path / "cache" / "github.com" / "owner/repo/blob/main/README/index")

    @pytest.mark.asyncio
    async def test_requires_context_manager(self, tmp_path):
        """Test that fetch outside the context fails clearly."""
        fetcher = LlmsFetcher(make_config(tmp_path), http_client=client_for({}))
        with pytest.raises(RuntimeError):
            await fetcher.fetch(SOURCE)


class TestFetchBlocking:
    """Tests for fetch_blocking."""

    @pytest.mark.asyncio
    async def test_rejects_running_loop(self):
        """Test the guard against nested event loops."""
        with pytest.raises(RuntimeError, match="async context"):
            fetch_blocking(SOURCE)
