"""
Tests for the import service.
"""

import pytest

from zettelgraph.config import ImportConfig
from zettelgraph.models.node import NodeKind, Position, SourceKind
from zettelgraph.services.importer import ImportService
from zettelgraph.utils.exceptions import ConfigurationError, ImportSourceError, ValidationError

OWNER = "owner-1"


@pytest.fixture
def importer(repository, web_source, video_source, highlight_source):
    return ImportService(
        repository,
        web=web_source,
        video=video_source,
        highlights=highlight_source,
        config=ImportConfig(grid_spacing=100.0),
    )


@pytest.mark.unit
class TestImportUrl:
    async def test_creates_web_note(self, importer, repository):
        node = await importer.import_url("https://example.com/post", OWNER, x=10, y=20)

        stored = await repository.get_node(node.id, OWNER)
        assert stored.kind == NodeKind.NOTE
        assert stored.source_kind == SourceKind.WEB
        assert stored.source_url == "https://example.com/post"
        assert stored.position == Position(x=10, y=20)
        assert stored.content.endswith("---\nSource: https://example.com/post")

    async def test_note_found_by_title(self, importer, resolver):
        node = await importer.import_url("https://example.com/post", OWNER)

        found = await resolver.find_node_by_title("Imported web", OWNER)
        assert found is not None
        assert found.id == node.id

    async def test_fetch_error_creates_nothing(self, importer, web_source, repository):
        web_source.error = ImportSourceError("Failed to fetch")

        with pytest.raises(ImportSourceError):
            await importer.import_url("https://example.com/down", OWNER)
        assert await repository.list_nodes_by_owner(OWNER) == []


@pytest.mark.unit
class TestImportYoutube:
    async def test_creates_youtube_note(self, importer, video_source):
        node = await importer.import_youtube("https://youtu.be/dQw4w9WgXcQ", OWNER)

        assert node.source_kind == SourceKind.YOUTUBE
        assert node.source_url == "https://youtu.be/dQw4w9WgXcQ"
        assert video_source.fetched == ["https://youtu.be/dQw4w9WgXcQ"]

    async def test_missing_transcript(self, importer, video_source, repository):
        video_source.error = ValidationError("Transcript not available for this video")

        with pytest.raises(ValidationError):
            await importer.import_youtube("https://youtu.be/dQw4w9WgXcQ", OWNER)
        assert await repository.list_nodes_by_owner(OWNER) == []


@pytest.mark.unit
class TestImportReadwise:
    async def test_one_note_per_book(self, importer, repository):
        result = await importer.import_readwise(OWNER)

        assert result.total_books == 2
        assert result.total_highlights == 5
        assert len(result.node_ids) == 2

        nodes = [await repository.get_node(node_id, OWNER) for node_id in result.node_ids]
        assert all(node.source_kind == SourceKind.READWISE for node in nodes)
        assert nodes[0].source_url == "https://readwise.io/bookreview/deep-work"

    async def test_books_laid_out_on_a_row(self, importer, repository):
        result = await importer.import_readwise(OWNER, x=50, y=30)

        positions = [(await repository.get_node(i, OWNER)).position for i in result.node_ids]
        assert positions == [Position(x=50, y=30), Position(x=150, y=30)]

    async def test_updated_after_passed_through(self, importer, highlight_source):
        await importer.import_readwise(OWNER, updated_after="2024-01-01T00:00:00Z")

        assert highlight_source.calls == ["2024-01-01T00:00:00Z"]

    async def test_empty_export(self, importer, highlight_source):
        highlight_source.documents = []

        result = await importer.import_readwise(OWNER)

        assert result.total_books == 0
        assert result.node_ids == []

    async def test_not_configured(self, repository, web_source, video_source):
        importer = ImportService(repository, web=web_source, video=video_source)

        with pytest.raises(ConfigurationError):
            await importer.import_readwise(OWNER)


@pytest.mark.unit
async def test_close_closes_sources(importer, web_source, video_source, highlight_source):
    await importer.close()

    assert web_source.closed
    assert video_source.closed
    assert highlight_source.closed
