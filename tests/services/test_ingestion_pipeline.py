"""
Tests for the voice note ingestion pipeline.
"""

from unittest.mock import AsyncMock

import pytest

from zettelgraph.models.concept import Concept
from zettelgraph.models.ingestion import IngestionResult
from zettelgraph.models.node import NodeCreate, NodeKind, SourceKind
from zettelgraph.models.voice_note import VoiceNoteStatus
from zettelgraph.services.ingestion_pipeline import compose_note_content
from zettelgraph.utils.exceptions import (
    EmbeddingError,
    ExtractionError,
    LLMError,
    NotFoundError,
    TranscriptionError,
    ValidationError,
)

OWNER = "owner-1"
OTHER_OWNER = "owner-2"


@pytest.fixture
async def voice_note(engine):
    return await engine.create_voice_note(OWNER, "owner-1/memo.webm", duration_seconds=30)


@pytest.mark.unit
class TestComposeNoteContent:
    def test_with_links(self):
        concept = Concept(
            title="Atomic notes",
            content="One idea each.",
            suggested_links=["Zettelkasten", "Notes"],
        )

        assert compose_note_content(concept) == (
            "# Atomic notes\n\nOne idea each.\n\n[[Zettelkasten]] [[Notes]]"
        )

    def test_without_links(self):
        concept = Concept(title="Solo", content="Stands alone.")

        assert compose_note_content(concept) == "# Solo\n\nStands alone."


@pytest.mark.unit
class TestIngestionPipeline:
    async def test_single_concept_on_empty_graph(
        self, engine, voice_note, transcriber, audio_source
    ):
        result = await engine.process_voice_note(voice_note.id, OWNER)

        assert isinstance(result, IngestionResult)
        assert result.status == VoiceNoteStatus.COMPLETED
        assert result.transcription == transcriber.text
        assert result.concept_count == 1
        assert len(result.node_ids) == 1
        assert result.edge_ids == []

        node = await engine.get_node(result.node_ids[0], OWNER)
        assert node.has_embedding
        assert node.kind == NodeKind.NOTE
        assert node.source_kind == SourceKind.VOICE
        assert node.source_id == voice_note.id
        assert node.content.startswith("# Composting kitchen scraps\n\n")

        stored = await engine.get_voice_note(voice_note.id)
        assert stored.status == VoiceNoteStatus.COMPLETED
        assert stored.transcription == transcriber.text
        assert audio_source.fetched == ["owner-1/memo.webm"]
        assert transcriber.calls == [(audio_source.default, "audio.webm")]

    async def test_transcription_failure(self, engine, voice_note, transcriber):
        transcriber.error = TranscriptionError("whisper unavailable")

        with pytest.raises(TranscriptionError):
            await engine.process_voice_note(voice_note.id)

        stored = await engine.get_voice_note(voice_note.id)
        assert stored.status == VoiceNoteStatus.ERROR
        assert stored.error_message == "whisper unavailable"
        assert await engine.get_nodes_by_voice_note(voice_note.id, OWNER) == []

    async def test_extraction_failure_keeps_transcript(self, engine, voice_note, llm, transcriber):
        llm.error = LLMError("bad json")

        with pytest.raises(ExtractionError):
            await engine.process_voice_note(voice_note.id)

        stored = await engine.get_voice_note(voice_note.id)
        assert stored.status == VoiceNoteStatus.ERROR
        assert stored.transcription == transcriber.text
        assert "bad json" in stored.error_message

    async def test_partial_failure_keeps_created_notes(
        self, engine, voice_note, llm, embedder, build_extraction
    ):
        llm.extraction = build_extraction("First idea", "Second idea", "Third idea")
        embedder.embed = AsyncMock(side_effect=[[1.0] * 32, EmbeddingError("quota exceeded")])

        with pytest.raises(EmbeddingError):
            await engine.process_voice_note(voice_note.id)

        nodes = await engine.get_nodes_by_voice_note(voice_note.id, OWNER)
        assert [engine.parser.extract_title(node.content) for node in nodes] == [
            "First idea",
            "Second idea",
        ]
        stored = await engine.get_voice_note(voice_note.id)
        assert stored.status == VoiceNoteStatus.ERROR
        assert stored.error_message == "quota exceeded"

    async def test_notes_laid_out_on_grid(self, engine, voice_note, llm, build_extraction, config):
        llm.extraction = build_extraction("One", "Two", "Three")

        result = await engine.process_voice_note(voice_note.id)

        nodes = [await engine.get_node(node_id) for node_id in result.node_ids]
        xs = [node.position.x for node in nodes]
        assert {node.position.y for node in nodes} == {nodes[0].position.y}
        assert xs[1] - xs[0] == pytest.approx(config.ingestion.grid_spacing)
        assert xs[2] - xs[1] == pytest.approx(config.ingestion.grid_spacing)
        low = config.ingestion.origin_min
        assert low <= xs[0] <= low + config.ingestion.origin_jitter
        assert low <= nodes[0].position.y <= low + config.ingestion.origin_jitter

    async def test_links_within_batch(self, engine, voice_note, llm, build_extraction):
        llm.extraction = build_extraction("Bees pollinate flowers", "Bees make honey")

        result = await engine.process_voice_note(voice_note.id)

        assert len(result.edge_ids) == 1
        edge = (await engine.list_edges(source=result.node_ids[1]))[0]
        assert edge.target == result.node_ids[0]

    async def test_batch_linking_disabled(self, engine, voice_note, llm, build_extraction):
        llm.extraction = build_extraction("Bees pollinate flowers", "Bees make honey")
        engine.pipeline.config.link_within_batch = False

        result = await engine.process_voice_note(voice_note.id)

        assert len(result.node_ids) == 2
        assert result.edge_ids == []

    async def test_links_to_existing_notes(self, engine, voice_note, embedder, llm):
        existing = await engine.create_node(
            OWNER,
            NodeCreate(kind=NodeKind.NOTE, content="# Compost\n\nKitchen scraps", x=0, y=0),
        )
        await engine.update_embedding(
            existing.id, await embedder.embed("Composting kitchen scraps explained")
        )

        result = await engine.process_voice_note(voice_note.id)

        edges = await engine.list_edges(source=result.node_ids[0])
        assert [edge.target for edge in edges] == [existing.id]
        assert "# Compost" in llm.prompts[0]

    async def test_no_concepts(self, engine, voice_note, llm, build_extraction):
        llm.extraction = build_extraction()

        result = await engine.process_voice_note(voice_note.id)

        assert result.status == VoiceNoteStatus.COMPLETED
        assert result.node_ids == []

    async def test_restart_after_failure(self, engine, voice_note, transcriber):
        transcriber.error = TranscriptionError("timeout")
        with pytest.raises(TranscriptionError):
            await engine.process_voice_note(voice_note.id)

        transcriber.error = None
        result = await engine.process_voice_note(voice_note.id)

        assert result.status == VoiceNoteStatus.COMPLETED
        stored = await engine.get_voice_note(voice_note.id)
        assert stored.status == VoiceNoteStatus.COMPLETED
        assert stored.error_message is None

    async def test_still_recording_rejected(self, engine):
        voice_note = await engine.voice_notes.create(
            OWNER, "live.webm", status=VoiceNoteStatus.RECORDING
        )

        with pytest.raises(ValidationError):
            await engine.process_voice_note(voice_note.id)

        assert (await engine.get_voice_note(voice_note.id)).status == VoiceNoteStatus.RECORDING

    async def test_other_owner_cannot_process(self, engine, voice_note, transcriber):
        with pytest.raises(NotFoundError):
            await engine.process_voice_note(voice_note.id, OTHER_OWNER)

        assert transcriber.calls == []

    async def test_process_many(self, engine, voice_note):
        second = await engine.create_voice_note(OWNER, "second.webm")

        results = await engine.process_voice_notes([voice_note.id, "voice_missing", second.id])

        assert isinstance(results[0], IngestionResult)
        assert isinstance(results[1], NotFoundError)
        assert isinstance(results[2], IngestionResult)
        assert results[2].status == VoiceNoteStatus.COMPLETED
