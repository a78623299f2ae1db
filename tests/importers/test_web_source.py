"""
Tests for the web page source.

Requests go through httpx.MockTransport; no network access is needed.
"""

import httpx
import pytest
from bs4 import BeautifulSoup

from zettelgraph.core.importers.web import (
    HttpWebPageSource,
    compose_web_note,
    extract_page_text,
    extract_page_title,
    normalize_url,
)
from zettelgraph.models.node import SourceKind
from zettelgraph.utils.exceptions import ImportSourceError, ValidationError

ARTICLE = """
<html>
  <head><title>  Growing   Tomatoes </title></head>
  <body>
    <nav><a href="/">Home</a></nav>
    <main>
      <h1>Growing Tomatoes</h1>
      <p>Start seeds indoors.</p>
      <ul><li>Water daily</li><li>Stake early</li></ul>
      <blockquote>Patience pays.</blockquote>
      <script>track()</script>
    </main>
    <footer>Copyright</footer>
  </body>
</html>
"""


def make_source(handler, **kwargs) -> HttpWebPageSource:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpWebPageSource(client=client, **kwargs)


def html_response(body: str, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code, text=body, headers={"content-type": "text/html; charset=utf-8"}
    )


@pytest.mark.unit
class TestNormalizeUrl:
    def test_adds_https(self):
        assert normalize_url("example.com/post") == "https://example.com/post"

    def test_keeps_http(self):
        assert normalize_url("  http://example.com ") == "http://example.com"

    @pytest.mark.parametrize("url", ["", "   ", "ftp://example.com/file", "javascript:alert(1)"])
    def test_rejects(self, url):
        with pytest.raises(ValidationError):
            normalize_url(url)


@pytest.mark.unit
class TestExtraction:
    def test_title_from_title_tag(self):
        soup = BeautifulSoup(ARTICLE, "html.parser")

        assert extract_page_title(soup) == "Growing Tomatoes"

    def test_title_from_og_meta(self):
        soup = BeautifulSoup(
            '<html><head><meta property="og:title" content="OG Title"></head></html>',
            "html.parser",
        )

        assert extract_page_title(soup) == "OG Title"

    def test_no_title(self):
        assert extract_page_title(BeautifulSoup("<p>text</p>", "html.parser")) is None

    def test_main_text_as_markdown(self):
        text = extract_page_text(BeautifulSoup(ARTICLE, "html.parser"))

        assert text == (
            "# Growing Tomatoes\n\nStart seeds indoors.\n\n- Water daily\n\n- Stake early"
            "\n\n> Patience pays."
        )

    def test_drops_chrome_and_repeats(self):
        html = "<body><header>Menu</header><p>Same</p><p>Same</p><p>Other</p></body>"

        assert extract_page_text(BeautifulSoup(html, "html.parser")) == "Same\n\nOther"

    def test_falls_back_to_plain_text(self):
        html = "<body><div>Loose   text only</div></body>"

        assert extract_page_text(BeautifulSoup(html, "html.parser")) == "Loose text only"

    def test_note_layout(self):
        assert compose_web_note("T", "Body", "https://x.test") == (
            "# T\n\nBody\n\n---\nSource: https://x.test"
        )


@pytest.mark.unit
class TestHttpWebPageSource:
    async def test_fetch_html(self):
        requested = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            return html_response(ARTICLE)

        source = make_source(handler)
        document = await source.fetch("example.com/tomatoes")
        await source.close()

        assert requested == ["https://example.com/tomatoes"]
        assert document.title == "Growing Tomatoes"
        assert document.source_kind == SourceKind.WEB
        assert document.source_url == "https://example.com/tomatoes"
        assert document.content.startswith("# Growing Tomatoes\n\n# Growing Tomatoes\n\nStart")
        assert document.content.endswith("\n\n---\nSource: https://example.com/tomatoes")
        assert "track()" not in document.content
        assert "Copyright" not in document.content

    async def test_title_falls_back_to_host(self):
        source = make_source(lambda request: html_response("<body><p>Untitled page</p></body>"))

        document = await source.fetch("https://blog.example.com/a")

        assert document.title == "blog.example.com"

    async def test_plain_text_imported_as_is(self):
        source = make_source(
            lambda request: httpx.Response(
                200, text="  line one\nline two  ", headers={"content-type": "text/plain"}
            )
        )

        document = await source.fetch("https://example.com/notes.txt")

        assert document.content == (
            "# example.com\n\nline one\nline two\n\n---\nSource: https://example.com/notes.txt"
        )

    async def test_truncates_long_text(self):
        source = make_source(
            lambda request: html_response(f"<p>{'a' * 50}</p>"), max_text_chars=10
        )

        document = await source.fetch("https://example.com")

        assert f"{'a' * 10}\n\n[content truncated]" in document.content

    async def test_http_error(self):
        source = make_source(lambda request: html_response("gone", status_code=404))

        with pytest.raises(ImportSourceError):
            await source.fetch("https://example.com/missing")

    async def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        source = make_source(handler)

        with pytest.raises(ImportSourceError):
            await source.fetch("https://example.com")

    async def test_binary_content_rejected(self):
        source = make_source(
            lambda request: httpx.Response(
                200, content=b"%PDF-1.7", headers={"content-type": "application/pdf"}
            )
        )

        with pytest.raises(ImportSourceError, match="Unsupported content type"):
            await source.fetch("https://example.com/paper.pdf")

    async def test_empty_page(self):
        source = make_source(lambda request: html_response("<html><body></body></html>"))

        with pytest.raises(ImportSourceError, match="no content"):
            await source.fetch("https://example.com/blank")

    async def test_invalid_url_not_requested(self):
        calls = []
        source = make_source(lambda request: calls.append(request) or html_response(ARTICLE))

        with pytest.raises(ValidationError):
            await source.fetch("mailto:someone@example.com")
        assert calls == []
