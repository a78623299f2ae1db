"""
Voice note records and their status transitions.
"""

from datetime import UTC, datetime
from typing import Any

from zettelgraph.core.graph_store.base import GraphStore
from zettelgraph.models.voice_note import VoiceNote, VoiceNoteStatus
from zettelgraph.utils.exceptions import NotFoundError, ValidationError
from zettelgraph.utils.logger import get_logger

logger = get_logger(__name__)


class VoiceNoteService:
    """CRUD for voice notes with state-machine checks on every status change."""

    def __init__(self, graph_store: GraphStore):
        self.graph_store = graph_store

    async def create(
        self,
        owner_id: str,
        audio_ref: str,
        duration_seconds: float = 0.0,
        status: VoiceNoteStatus = VoiceNoteStatus.UPLOADED,
    ) -> VoiceNote:
        """
        Record an uploaded voice note.

        Raises:
            ValidationError: If owner or audio reference is missing
        """
        if not owner_id or not audio_ref:
            raise ValidationError("Voice note requires an owner and an audio reference")

        voice_note = VoiceNote(
            owner_id=owner_id,
            audio_ref=audio_ref,
            duration_seconds=max(duration_seconds, 0.0),
            status=status,
        )
        await self.graph_store.add_voice_note(voice_note)

        logger.info(
            f"Created voice note {voice_note.id}",
            extra={"voice_note_id": voice_note.id, "owner_id": owner_id},
        )
        return voice_note

    async def get(self, voice_note_id: str, owner_id: str | None = None) -> VoiceNote:
        """
        Raises:
            NotFoundError: If missing or owned by someone else
        """
        voice_note = await self.graph_store.get_voice_note(voice_note_id)
        if voice_note is None or (owner_id is not None and voice_note.owner_id != owner_id):
            raise NotFoundError(
                f"Voice note not found: {voice_note_id}",
                context={"voice_note_id": voice_note_id},
            )
        return voice_note

    async def list(self, owner_id: str, limit: int = 20) -> list[VoiceNote]:
        """Owner's voice notes, newest first."""
        return await self.graph_store.list_voice_notes(owner_id=owner_id, limit=limit)

    async def update_status(
        self,
        voice_note_id: str,
        status: VoiceNoteStatus,
        transcription: str | None = None,
        error_message: str | None = None,
        force: bool = False,
    ) -> VoiceNote:
        """
        Move a voice note to a new status.

        Args:
            voice_note_id: Voice note identifier
            status: Target status
            transcription: Transcript to store alongside the change
            error_message: Failure message to store alongside the change
            force: Skip the transition check (used to restart a run)

        Raises:
            NotFoundError: If the voice note doesn't exist
            ValidationError: If the transition isn't allowed
        """
        current = await self.get(voice_note_id)
        status = VoiceNoteStatus(status)

        if not force and not current.status.can_transition_to(status):
            raise ValidationError(
                f"Illegal voice note transition {current.status.value} -> {status.value}",
                context={
                    "voice_note_id": voice_note_id,
                    "from": current.status.value,
                    "to": status.value,
                },
            )

        changes: dict[str, Any] = {"status": status, "updated_at": datetime.now(UTC)}
        if transcription is not None:
            changes["transcription"] = transcription
        if error_message is not None:
            changes["error_message"] = error_message
        elif status == VoiceNoteStatus.TRANSCRIBING:
            # A fresh run starts without the previous failure
            changes["error_message"] = None

        updated = await self.graph_store.patch_voice_note(voice_note_id, changes)
        if updated is None:
            raise NotFoundError(
                f"Voice note not found: {voice_note_id}",
                context={"voice_note_id": voice_note_id},
            )

        logger.info(
            f"Voice note {voice_note_id}: {current.status.value} -> {status.value}",
            extra={"voice_note_id": voice_note_id, "status": status.value},
        )
        return updated
