"""
Voice note ingestion result models.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from zettelgraph.models.voice_note import VoiceNoteStatus


class IngestionResult(BaseModel):
    """
    Result of one ingestion pipeline run.

    Returned by IngestionPipeline.process() to report what was created.
    """

    voice_note_id: str
    status: VoiceNoteStatus
    transcription: str | None = None
    summary: str | None = None

    node_ids: list[str] = Field(default_factory=list, description="Notes created in this run")
    edge_ids: list[str] = Field(default_factory=list, description="Similarity edges created")
    concept_count: int = Field(default=0, ge=0)

    processing_time_ms: float = Field(default=0.0, ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
