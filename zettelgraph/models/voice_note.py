"""
Voice note model and its processing state machine.

    recording -> uploaded -> transcribing -> processing -> completed
                                  |              |
                                  +---> error <--+
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

from zettelgraph.utils.id_generator import generate_voice_note_id


class VoiceNoteStatus(str, Enum):
    """Processing status of a voice note."""

    RECORDING = "recording"
    UPLOADED = "uploaded"
    TRANSCRIBING = "transcribing"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (VoiceNoteStatus.COMPLETED, VoiceNoteStatus.ERROR)

    def can_transition_to(self, target: "VoiceNoteStatus") -> bool:
        """Check whether moving from this status to `target` is legal."""
        return target in _TRANSITIONS[self]


_TRANSITIONS: dict[VoiceNoteStatus, frozenset[VoiceNoteStatus]] = {
    VoiceNoteStatus.RECORDING: frozenset({VoiceNoteStatus.UPLOADED}),
    VoiceNoteStatus.UPLOADED: frozenset({VoiceNoteStatus.TRANSCRIBING}),
    VoiceNoteStatus.TRANSCRIBING: frozenset({VoiceNoteStatus.PROCESSING, VoiceNoteStatus.ERROR}),
    VoiceNoteStatus.PROCESSING: frozenset({VoiceNoteStatus.COMPLETED, VoiceNoteStatus.ERROR}),
    VoiceNoteStatus.COMPLETED: frozenset(),
    VoiceNoteStatus.ERROR: frozenset(),
}


class VoiceNote(BaseModel):
    """Uploaded audio recording awaiting or undergoing ingestion."""

    id: str = Field(default_factory=generate_voice_note_id)
    owner_id: str
    audio_ref: str = Field(..., description="Reference understood by the audio source")
    duration_seconds: float = Field(default=0.0, ge=0)
    transcription: str | None = None
    status: VoiceNoteStatus = VoiceNoteStatus.UPLOADED
    error_message: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
