"""
Voice Note Ingestion Pipeline.

Turns an uploaded recording into a batch of linked atomic notes:

    uploaded -> transcribing -> processing -> completed
                     |              |
                     +---> error <--+

Every step is an awaited external call and the run stops at the first
failure. Notes created before a failure are kept; the voice note records
the error message.
"""

import asyncio
import random
import time

from zettelgraph.config import IngestionConfig
from zettelgraph.core.audio.base import AudioSource
from zettelgraph.core.transcription.base import Transcriber
from zettelgraph.models.concept import Concept
from zettelgraph.models.ingestion import IngestionResult
from zettelgraph.models.node import NodeCreate, NodeKind, SourceKind
from zettelgraph.models.voice_note import VoiceNoteStatus
from zettelgraph.services.concept_extractor import ConceptExtractor
from zettelgraph.services.node_repository import NodeRepository
from zettelgraph.services.similarity_linker import SimilarityLinker
from zettelgraph.services.voice_notes import VoiceNoteService
from zettelgraph.utils.exceptions import ValidationError, ZettelGraphError
from zettelgraph.utils.logger import get_logger

logger = get_logger(__name__)


def compose_note_content(concept: Concept) -> str:
    """Note body for a concept: heading, text and a trailing line of wiki-links."""
    content = f"# {concept.title}\n\n{concept.content}"
    if concept.suggested_links:
        content += "\n\n" + " ".join(f"[[{link}]]" for link in concept.suggested_links)
    return content


class IngestionPipeline:
    """
    Runs voice notes through transcription, concept extraction and linking.

    Features:
    - Strict status transitions, persisted at every step
    - Notes laid out on a horizontal grid from a random origin
    - Similarity links against the whole graph, including notes from the same run
    """

    def __init__(
        self,
        voice_notes: VoiceNoteService,
        repository: NodeRepository,
        linker: SimilarityLinker,
        extractor: ConceptExtractor,
        transcriber: Transcriber,
        audio_source: AudioSource,
        config: IngestionConfig | None = None,
        rng: random.Random | None = None,
        audio_filename: str | None = None,
    ):
        """
        Initialize pipeline.

        Args:
            voice_notes: Voice note records
            repository: Node/edge repository for created notes
            linker: Similarity linker run on every created note
            extractor: Concept extractor
            transcriber: Speech-to-text provider
            audio_source: Loads audio bytes for a voice note
            config: Layout, context and linking settings
            rng: Random source for the layout origin
            audio_filename: Filename hint passed to the transcriber
        """
        self.voice_notes = voice_notes
        self.repository = repository
        self.linker = linker
        self.extractor = extractor
        self.transcriber = transcriber
        self.audio_source = audio_source
        self.config = config or IngestionConfig()
        self.rng = rng or random.Random()
        self.audio_filename = audio_filename

    async def process(self, voice_note_id: str, owner_id: str | None = None) -> IngestionResult:
        """
        Run the full pipeline for one voice note.

        A voice note that is not freshly uploaded is restarted from
        transcription; notes from the earlier run are left in place.

        Args:
            voice_note_id: Voice note to process
            owner_id: Caller's owner ID for scoping

        Returns:
            Report of the completed run

        Raises:
            NotFoundError: If the voice note doesn't exist
            ValidationError: If the voice note is still recording
            ZettelGraphError: Whatever step failed, after the error is recorded
        """
        start_time = time.time()
        voice_note = await self.voice_notes.get(voice_note_id, owner_id)

        if voice_note.status == VoiceNoteStatus.RECORDING:
            raise ValidationError(
                "Voice note is still recording", context={"voice_note_id": voice_note_id}
            )

        restart = voice_note.status != VoiceNoteStatus.UPLOADED
        if restart:
            logger.warning(
                f"Restarting voice note {voice_note_id} from {voice_note.status.value}; "
                "notes from the previous run are kept and may be duplicated",
                extra={"voice_note_id": voice_note_id, "previous_status": voice_note.status.value},
            )

        await self.voice_notes.update_status(
            voice_note_id, VoiceNoteStatus.TRANSCRIBING, force=restart
        )
        result = IngestionResult(voice_note_id=voice_note_id, status=VoiceNoteStatus.TRANSCRIBING)

        try:
            transcript = await self._transcribe(voice_note.audio_ref)
            await self.voice_notes.update_status(
                voice_note_id, VoiceNoteStatus.PROCESSING, transcription=transcript
            )
            result.transcription = transcript
            result.status = VoiceNoteStatus.PROCESSING

            notes = await self.repository.list_notes(
                voice_note.owner_id, limit=self.config.context_note_limit
            )
            extraction = await self.extractor.extract(transcript, [note.content for note in notes])
            result.summary = extraction.summary
            result.concept_count = len(extraction.concepts)

            await self._create_notes(voice_note_id, voice_note.owner_id, extraction.concepts, result)

            await self.voice_notes.update_status(voice_note_id, VoiceNoteStatus.COMPLETED)
            result.status = VoiceNoteStatus.COMPLETED
        except Exception as e:
            message = e.message if isinstance(e, ZettelGraphError) else str(e)
            logger.error(
                f"Ingestion failed for voice note {voice_note_id}",
                extra={
                    "error": message,
                    "voice_note_id": voice_note_id,
                    "stage": result.status.value,
                    "notes_created": len(result.node_ids),
                    "error_type": type(e).__name__,
                },
            )
            await self._record_failure(voice_note_id, message or type(e).__name__)
            raise

        result.processing_time_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Voice note {voice_note_id} completed: {len(result.node_ids)} note(s), "
            f"{len(result.edge_ids)} link(s) in {result.processing_time_ms:.0f}ms",
            extra={"voice_note_id": voice_note_id, "concepts": result.concept_count},
        )
        return result

    async def process_many(
        self, voice_note_ids: list[str], owner_id: str | None = None
    ) -> list[IngestionResult | BaseException]:
        """
        Process independent voice notes concurrently.

        Returns:
            One entry per ID, in order: the result or the exception that ended the run
        """
        return await asyncio.gather(
            *(self.process(voice_note_id, owner_id) for voice_note_id in voice_note_ids),
            return_exceptions=True,
        )

    async def _transcribe(self, audio_ref: str) -> str:
        audio = await self.audio_source.fetch(audio_ref)
        return await self.transcriber.transcribe(audio, self.audio_filename)

    async def _create_notes(
        self,
        voice_note_id: str,
        owner_id: str,
        concepts: list[Concept],
        result: IngestionResult,
    ) -> None:
        """Create one note per concept, in order, and link each by similarity."""
        origin_x, origin_y = self._layout_origin()

        for i, concept in enumerate(concepts):
            node = await self.repository.create_node(
                owner_id,
                NodeCreate(
                    kind=NodeKind.NOTE,
                    content=compose_note_content(concept),
                    x=origin_x + i * self.config.grid_spacing,
                    y=origin_y,
                    source_kind=SourceKind.VOICE,
                    source_id=voice_note_id,
                ),
            )
            result.node_ids.append(node.id)

            exclude_ids = None if self.config.link_within_batch else set(result.node_ids)
            edges = await self.linker.link_by_similarity(
                node.id, concept.content, exclude_ids=exclude_ids
            )
            result.edge_ids.extend(edge.id for edge in edges)

    def _layout_origin(self) -> tuple[float, float]:
        low = self.config.origin_min
        jitter = self.config.origin_jitter
        return low + self.rng.random() * jitter, low + self.rng.random() * jitter

    async def _record_failure(self, voice_note_id: str, message: str) -> None:
        try:
            await self.voice_notes.update_status(
                voice_note_id, VoiceNoteStatus.ERROR, error_message=message
            )
        except ZettelGraphError as e:
            # The pipeline failure is re-raised by the caller
            logger.error(
                f"Could not record failure for voice note {voice_note_id}",
                extra={"voice_note_id": voice_note_id, "error": e.message},
            )
