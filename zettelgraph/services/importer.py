"""
Import Service - turns web pages, YouTube transcripts and Readwise
highlights into notes.
"""

from zettelgraph.config import ImportConfig
from zettelgraph.core.importers.base import HighlightSource, VideoTranscriptSource, WebPageSource
from zettelgraph.models.imported import ImportedDocument, ReadwiseImportResult
from zettelgraph.models.node import Node, NodeCreate, NodeKind
from zettelgraph.services.node_repository import NodeRepository
from zettelgraph.utils.exceptions import ConfigurationError
from zettelgraph.utils.logger import get_logger

logger = get_logger(__name__)


class ImportService:
    """
    Creates one note per imported document.

    Notes record where they came from through `source_kind` and
    `source_url`. Readwise is optional and needs a configured source.
    """

    def __init__(
        self,
        repository: NodeRepository,
        web: WebPageSource,
        video: VideoTranscriptSource,
        highlights: HighlightSource | None = None,
        config: ImportConfig | None = None,
    ):
        self.repository = repository
        self.web = web
        self.video = video
        self.highlights = highlights
        self.config = config or ImportConfig()

    async def import_url(self, url: str, owner_id: str, x: float = 0.0, y: float = 0.0) -> Node:
        """
        Import a web page as a note.

        Raises:
            ValidationError: If the URL is invalid
            ImportSourceError: If the page cannot be fetched
        """
        document = await self.web.fetch(url)
        return await self._create_note(document, owner_id, x, y)

    async def import_youtube(
        self, url: str, owner_id: str, x: float = 0.0, y: float = 0.0
    ) -> Node:
        """
        Import a YouTube video transcript as a note.

        Raises:
            ValidationError: If the URL has no video ID or the video has no transcript
            ImportSourceError: If the transcript cannot be fetched
        """
        document = await self.video.fetch(url)
        return await self._create_note(document, owner_id, x, y)

    async def import_readwise(
        self,
        owner_id: str,
        updated_after: str | None = None,
        x: float = 0.0,
        y: float = 0.0,
    ) -> ReadwiseImportResult:
        """
        Import every Readwise book as a note, laid out left to right.

        Notes created before a failure are kept.

        Raises:
            ConfigurationError: If no Readwise source is configured
            ImportSourceError: If the export fails
        """
        if self.highlights is None:
            raise ConfigurationError("Readwise not configured")

        documents = await self.highlights.export(updated_after)

        result = ReadwiseImportResult(total_books=len(documents))
        for i, document in enumerate(documents):
            node = await self._create_note(
                document, owner_id, x + i * self.config.grid_spacing, y
            )
            result.node_ids.append(node.id)
            result.total_highlights += int(document.metadata.get("highlight_count") or 0)

        logger.info(
            f"Imported {result.total_books} Readwise books",
            extra={
                "owner_id": owner_id,
                "books": result.total_books,
                "highlights": result.total_highlights,
            },
        )
        return result

    async def _create_note(
        self, document: ImportedDocument, owner_id: str, x: float, y: float
    ) -> Node:
        node = await self.repository.create_node(
            owner_id,
            NodeCreate(
                kind=NodeKind.NOTE,
                content=document.content,
                x=x,
                y=y,
                source_kind=document.source_kind,
                source_url=document.source_url,
            ),
        )
        logger.info(
            f"Imported {document.source_kind.value} note {node.id}",
            extra={"node_id": node.id, "source_url": document.source_url, "title": document.title},
        )
        return node

    async def close(self) -> None:
        """Close every source."""
        await self.web.close()
        await self.video.close()
        if self.highlights is not None:
            await self.highlights.close()
