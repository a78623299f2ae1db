"""
Readwise highlight source over the v2 export API.
"""

from typing import Any

import httpx

from zettelgraph.core.importers.base import HighlightSource
from zettelgraph.models.imported import ImportedDocument
from zettelgraph.models.node import SourceKind
from zettelgraph.utils.exceptions import ImportSourceError
from zettelgraph.utils.logger import get_logger

logger = get_logger(__name__)


def format_highlight(highlight: dict[str, Any]) -> str:
    """Quote a highlight, followed by its note and tags when present."""
    text = f"> {highlight.get('text', '')}"
    if highlight.get("note"):
        text += f"\n\n**Note**: {highlight['note']}"
    tags = [tag.get("name", "") for tag in highlight.get("tags") or []]
    if tags:
        text += f"\n\n*Tags: {', '.join(tags)}*"
    return text


def compose_book_note(book: dict[str, Any]) -> str:
    highlights = "\n\n---\n\n".join(
        format_highlight(highlight) for highlight in book.get("highlights") or []
    )
    return (
        f"# {book.get('title')}\n\n"
        f"**Author**: {book.get('author')}\n"
        f"**Category**: {book.get('category')}\n"
        f"**Highlights**: {book.get('num_highlights', 0)}\n\n"
        f"## Highlights\n\n{highlights}"
    )


class ReadwiseExportSource(HighlightSource):
    """
    Exports books and highlights from Readwise.

    Follows `nextPageCursor` until the export is exhausted.
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://readwise.io/api/v2",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize Readwise export source.

        Args:
            token: Readwise access token
            base_url: API root
            timeout: Request timeout in seconds
            client: Optional preconfigured client; closed by close()
        """
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=timeout)
        self._headers = {"Authorization": f"Token {token}"}

    async def export(self, updated_after: str | None = None) -> list[ImportedDocument]:
        books = await self._fetch_books(updated_after)

        documents = []
        for book in books:
            title = (book.get("title") or "").strip() or f"Readwise book {book.get('id')}"
            documents.append(
                ImportedDocument(
                    title=title,
                    content=compose_book_note({**book, "title": title}),
                    source_kind=SourceKind.READWISE,
                    source_url=book.get("source_url") or book.get("highlights_url"),
                    metadata={
                        "book_id": book.get("id"),
                        "author": book.get("author"),
                        "highlight_count": book.get("num_highlights", 0),
                    },
                )
            )

        logger.info(
            f"Exported {len(documents)} Readwise books",
            extra={"books": len(documents), "updated_after": updated_after},
        )
        return documents

    async def _fetch_books(self, updated_after: str | None) -> list[dict[str, Any]]:
        books: list[dict[str, Any]] = []
        cursor: str | None = None

        while True:
            params = {}
            if cursor:
                params["pageCursor"] = cursor
            if updated_after:
                params["updatedAfter"] = updated_after

            try:
                response = await self.client.get(
                    f"{self.base_url}/export/", params=params, headers=self._headers
                )
                response.raise_for_status()
                data = response.json()
            except (httpx.HTTPError, ValueError) as e:
                logger.error(
                    f"Readwise API error: {e}",
                    extra={"error": str(e), "error_type": type(e).__name__, "cursor": cursor},
                )
                raise ImportSourceError(f"Readwise API error: {e}") from e

            books.extend(data.get("results") or [])
            cursor = data.get("nextPageCursor")
            if not cursor:
                return books

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
