"""
Tests for the Readwise export source.
"""

import httpx
import pytest

from zettelgraph.core.importers.readwise import (
    ReadwiseExportSource,
    compose_book_note,
    format_highlight,
)
from zettelgraph.models.node import SourceKind
from zettelgraph.utils.exceptions import ImportSourceError

BASE_URL = "https://readwise.test/api/v2"

BOOK = {
    "id": 42,
    "title": "Deep Work",
    "author": "Cal Newport",
    "category": "books",
    "num_highlights": 2,
    "source_url": None,
    "highlights_url": "https://readwise.io/bookreview/42",
    "highlights": [
        {"text": "Focus is rare.", "note": "", "tags": []},
        {"text": "Shallow work is easy.", "note": "Agreed", "tags": [{"name": "work"}]},
    ],
}


def make_source(handler) -> ReadwiseExportSource:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ReadwiseExportSource(token="rw-token", base_url=BASE_URL, client=client)


@pytest.mark.unit
class TestFormatting:
    def test_plain_highlight(self):
        assert format_highlight({"text": "Focus is rare."}) == "> Focus is rare."

    def test_highlight_with_note_and_tags(self):
        text = format_highlight(
            {"text": "Quote", "note": "Mine", "tags": [{"name": "a"}, {"name": "b"}]}
        )

        assert text == "> Quote\n\n**Note**: Mine\n\n*Tags: a, b*"

    def test_book_note(self):
        content = compose_book_note(BOOK)

        assert content.startswith(
            "# Deep Work\n\n**Author**: Cal Newport\n**Category**: books\n**Highlights**: 2"
        )
        assert "> Focus is rare.\n\n---\n\n> Shallow work is easy." in content


@pytest.mark.unit
class TestReadwiseExportSource:
    async def test_export(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"results": [BOOK], "nextPageCursor": None})

        source = make_source(handler)
        documents = await source.export()
        await source.close()

        assert str(requests[0].url) == f"{BASE_URL}/export/"
        assert requests[0].headers["Authorization"] == "Token rw-token"

        assert len(documents) == 1
        document = documents[0]
        assert document.title == "Deep Work"
        assert document.source_kind == SourceKind.READWISE
        assert document.source_url == "https://readwise.io/bookreview/42"
        assert document.metadata == {"book_id": 42, "author": "Cal Newport", "highlight_count": 2}

    async def test_follows_page_cursor(self):
        pages = {
            None: {"results": [BOOK], "nextPageCursor": "page-2"},
            "page-2": {"results": [{**BOOK, "id": 43, "title": "Walden"}], "nextPageCursor": None},
        }
        cursors = []

        def handler(request: httpx.Request) -> httpx.Response:
            cursor = request.url.params.get("pageCursor")
            cursors.append(cursor)
            return httpx.Response(200, json=pages[cursor])

        documents = await make_source(handler).export()

        assert cursors == [None, "page-2"]
        assert [document.title for document in documents] == ["Deep Work", "Walden"]

    async def test_updated_after(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.params.get("updatedAfter"))
            return httpx.Response(200, json={"results": []})

        documents = await make_source(handler).export("2024-01-01T00:00:00Z")

        assert documents == []
        assert seen == ["2024-01-01T00:00:00Z"]

    async def test_prefers_source_url(self):
        book = {**BOOK, "source_url": "https://example.com/article"}
        source = make_source(lambda request: httpx.Response(200, json={"results": [book]}))

        documents = await source.export()

        assert documents[0].source_url == "https://example.com/article"

    async def test_untitled_book(self):
        book = {**BOOK, "title": "  "}
        source = make_source(lambda request: httpx.Response(200, json={"results": [book]}))

        documents = await source.export()

        assert documents[0].title == "Readwise book 42"
        assert documents[0].content.startswith("# Readwise book 42\n\n")

    async def test_auth_failure(self):
        source = make_source(lambda request: httpx.Response(401, json={"detail": "bad token"}))

        with pytest.raises(ImportSourceError, match="Readwise API error"):
            await source.export()

    async def test_malformed_body(self):
        source = make_source(lambda request: httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(ImportSourceError):
            await source.export()
