"""Tests for HTML cleanup and Markdown rendering."""

from unittest.mock import MagicMock

from bs4 import BeautifulSoup

from llms_fetch.conversion import (
    DEFAULT_CLEANING_POLICY,
    HtmlNormalizer,
    HtmlToMarkdown,
)

PAGE_URL = "https://example.com/docs/page"


def first_tag(html):
    return BeautifulSoup(html, "html.parser").find(True)


class TestCleaningPolicy:
    """Tests for the default cleaning policy."""

    def test_removed_tags(self):
        """Test that chrome tags always match."""
        for name in ("script", "style", "noscript", "iframe", "nav"):
            assert DEFAULT_CLEANING_POLICY.matches(first_tag(f"<{name}>x</{name}>"))

    def test_protected_tags_never_match(self):
        """Test that protected tags survive even with navigation markers."""
        for html in (
            '<header class="site-header">x</header>',
            '<footer role="contentinfo">x</footer>',
            '<aside class="nav">x</aside>',
            '<form role="search">x</form>',
            '<button class="navbar">x</button>',
            '<svg id="navigation"></svg>',
        ):
            assert not DEFAULT_CLEANING_POLICY.matches(first_tag(html)), html

    def test_roles_match_exactly(self):
        """Test ARIA roles."""
        assert DEFAULT_CLEANING_POLICY.matches(first_tag('<div role="navigation">x</div>'))
        assert DEFAULT_CLEANING_POLICY.matches(first_tag('<div role="Banner">x</div>'))
        assert not DEFAULT_CLEANING_POLICY.matches(first_tag('<div role="main">x</div>'))
        assert not DEFAULT_CLEANING_POLICY.matches(first_tag('<div role="searchbox">x</div>'))

    def test_navigation_vocabulary_matches_whole_parts(self):
        """Test class/id matching on whole -/_ separated parts."""
        for html in (
            '<div class="main-nav">x</div>',
            '<div class="Breadcrumbs">x</div>',
            '<div class="wrapper site_footer">x</div>',
            '<ul id="top-navbar">x</ul>',
            '<div class="nav_links">x</div>',
        ):
            assert DEFAULT_CLEANING_POLICY.matches(first_tag(html)), html

    def test_generic_tokens_are_kept(self):
        """Test that generic or partial tokens are not navigation."""
        for html in (
            '<div class="canvas">x</div>',
            '<div class="unavailable">x</div>',
            '<div class="sidebar">x</div>',
            '<div class="toc">x</div>',
            '<div id="menu">x</div>',
            '<div class="search">x</div>',
            '<div aria-label="navigation">x</div>',
        ):
            assert not DEFAULT_CLEANING_POLICY.matches(first_tag(html)), html

    def test_decorative_images(self):
        """Test the image rules."""
        policy = DEFAULT_CLEANING_POLICY
        assert policy.matches(first_tag('<img role="presentation" src="/spacer.gif">'))
        assert policy.matches(first_tag('<img src="/static/icon-search.svg" alt="">'))
        assert policy.matches(first_tag('<img src="/static/icons/x.png">'))
        assert not policy.matches(first_tag('<img src="/static/ICONS/x.png">'))
        assert not policy.matches(first_tag('<img src="/static/icon.png" alt=" ">'))
        assert not policy.matches(first_tag('<img src="/static/icon-x.svg" alt="Close">'))
        assert not policy.matches(first_tag('<img src="/img/diagram.png">'))

    def test_root_tags_never_match(self):
        """Test that document containers ignore class, id and role rules."""
        for html in (
            '<html class="nav-open"><body>x</body></html>',
            '<body class="has-navbar-fixed-top">x</body>',
            '<body id="navigation">x</body>',
            '<main role="navigation">x</main>',
        ):
            assert not DEFAULT_CLEANING_POLICY.matches(first_tag(html)), html

    def test_removal_reason_describes_rule(self):
        """Test reasons used for debug logging."""
        assert DEFAULT_CLEANING_POLICY.removal_reason(first_tag("<nav>x</nav>")) == "tag <nav>"
        assert DEFAULT_CLEANING_POLICY.removal_reason(first_tag("<p>x</p>")) is None


class TestHtmlNormalizer:
    """Tests for HtmlNormalizer."""

    def test_prune_removes_chrome_only(self):
        """Test that pruning keeps protected and content elements."""
        normalizer = HtmlNormalizer()
        soup = normalizer.parse(
            """<html><body>
            <header><nav>Menu</nav><h1>Title</h1></header>
            <script>var x = 1;</script>
            <style>p { color: red }</style>
            <noscript>Enable JS</noscript>
            <iframe src="/ad"></iframe>
            <main><p>Body text</p></main>
            <aside>Tip</aside>
            <form><button>Send</button></form>
            <svg><circle r="1"></circle></svg>
            <footer>Copyright</footer>
            </body></html>"""
        )

        removed = normalizer.prune(soup)

        assert removed == 5
        for name in ("script", "style", "noscript", "iframe", "nav"):
            assert soup.find(name) is None
        for name in ("header", "footer", "aside", "form", "button", "svg", "main"):
            assert soup.find(name) is not None

    def test_prune_skips_descendants_of_removed_elements(self):
        """Test that nested chrome is removed once with its parent."""
        normalizer = HtmlNormalizer()
        soup = normalizer.parse('<div class="breadcrumb"><nav><a href="/">Home</a></nav></div><p>Text</p>')

        assert normalizer.prune(soup) == 1
        assert soup.find("a") is None
        assert soup.find("p") is not None

    def test_normalize_renders_markdown(self):
        """Test the full normalize pipeline."""
        normalizer = HtmlNormalizer()
        html = b"""<html><body>
            <nav class="navbar"><a href="/">Home</a></nav>
            <h1>Guide</h1>
            <p>See the <a href="/docs/api">API reference</a>.</p>
            <img src="/img/diagram.png" alt="Architecture diagram">
            <script>alert("x")</script>
        </body></html>"""

        result = normalizer.normalize(html, PAGE_URL, "text/html; charset=utf-8")

        assert "# Guide" in result
        assert "[API reference](https://example.com/docs/api)" in result
        assert "Architecture diagram" in result
        assert "diagram.png" in result
        assert "alert" not in result
        assert "Home" not in result

    def test_normalize_keeps_protected_text(self):
        """Test that header/footer/aside content reaches the Markdown."""
        normalizer = HtmlNormalizer()
        html = """<body>
            <header><p>Release notes</p></header>
            <p>Content</p>
            <aside><p>Note: requires Python 3.10</p></aside>
            <footer><p>Last updated 2024</p></footer>
        </body>"""

        result = normalizer.normalize(html, PAGE_URL)

        assert "Release notes" in result
        assert "requires Python 3.10" in result
        assert "Last updated 2024" in result

    def test_navbar_class_on_body_keeps_content(self):
        """Test that a framework class on <body> does not empty the page."""
        html = b'<html><body class="has-navbar-fixed-top"><h1>Guide</h1><p>Real content here.</p></body></html>'

        result = HtmlNormalizer().normalize(html, PAGE_URL)

        assert "# Guide" in result
        assert "Real content here." in result

    def test_normalize_decodes_declared_charset(self):
        """Test decoding with the Content-Type charset."""
        normalizer = HtmlNormalizer()
        html = "<html><body><p>Héllo Wörld</p></body></html>".encode("latin-1")

        result = normalizer.normalize(html, PAGE_URL, "text/html; charset=iso-8859-1")

        assert "Héllo Wörld" in result

    def test_normalize_decodes_meta_charset(self):
        """Test decoding with a <meta charset> declaration."""
        normalizer = HtmlNormalizer()
        html = '<html><head><meta charset="iso-8859-1"></head><body><p>Café</p></body></html>'.encode("latin-1")

        result = normalizer.normalize(html, PAGE_URL, "text/html")

        assert "Café" in result

    def test_main_content_extraction(self):
        """Test narrowing to the main content container."""
        html = "<body><div class='intro'>Intro text</div><main><p>Main text</p></main></body>"

        full = HtmlNormalizer().normalize(html, PAGE_URL)
        narrowed = HtmlNormalizer(extract_main_content=True).normalize(html, PAGE_URL)

        assert "Intro text" in full
        assert "Intro text" not in narrowed
        assert "Main text" in narrowed

    def test_main_content_falls_back_to_body(self):
        """Test fallback when no container matches."""
        result = HtmlNormalizer(extract_main_content=True).normalize("<body><p>Only body</p></body>", PAGE_URL)
        assert "Only body" in result

    def test_renderer_receives_pruned_tree(self):
        """Test that a custom renderer is used after pruning."""
        renderer = MagicMock()
        renderer.render.return_value = "# Rendered\n"
        normalizer = HtmlNormalizer(renderer=renderer)

        result = normalizer.normalize("<body><script>x()</script><p>Kept</p></body>", PAGE_URL)

        assert result == "# Rendered\n"
        tree, url = renderer.render.call_args.args
        assert url == PAGE_URL
        assert tree.find("script") is None
        assert tree.find("p").get_text() == "Kept"


class TestHtmlToMarkdown:
    """Tests for the html2text-backed renderer."""

    def test_converts_headings_and_lists(self):
        """Test basic structure conversion."""
        result = HtmlToMarkdown().convert("<h1>Title</h1><h2>Sub</h2><ul><li>One</li><li>Two</li></ul>")

        assert "# Title" in result
        assert "## Sub" in result
        assert "One" in result and "Two" in result

    def test_resolves_relative_links(self):
        """Test that links are absolute."""
        result = HtmlToMarkdown().convert('<p><a href="../guide">Guide</a></p>', PAGE_URL)
        assert "[Guide](https://example.com/guide)" in result

    def test_no_line_wrapping(self):
        """Test that long paragraphs stay on one line."""
        text = " ".join(["word"] * 100)
        result = HtmlToMarkdown().convert(f"<p>{text}</p>")
        assert text in result

    def test_removes_empty_links(self):
        """Test that anchor-only links disappear."""
        result = HtmlToMarkdown().convert('<h2>Install<a href="/page#install"></a></h2>', PAGE_URL)
        assert "[](" not in result
        assert "## Install" in result

    def test_clean_output(self):
        """Test post-processing of rendered Markdown."""
        converter = HtmlToMarkdown()

        assert converter._clean_output("a  \n\n\n\nb") == "a\n\nb\n"
        assert converter._clean_output("x[\u200b]y") == "xy\n"
        assert converter._clean_output("![](img.png)") == "![](img.png)\n"
        assert converter._clean_output("[](/a)[Next](/b)") == "[Next](/b)\n"

    def test_output_ends_with_single_newline(self):
        """Test trailing whitespace handling."""
        result = HtmlToMarkdown().convert("<p>Text</p>\n\n\n")
        assert result.endswith("Text\n")
