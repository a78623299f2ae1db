"""
Filesystem audio source.
"""

import asyncio
from pathlib import Path

from zettelgraph.core.audio.base import AudioSource
from zettelgraph.utils.exceptions import NotFoundError, ValidationError
from zettelgraph.utils.logger import get_logger

logger = get_logger(__name__)


class LocalAudioSource(AudioSource):
    """
    Reads audio files from a storage directory.

    References are paths relative to base_dir and may not escape it.
    """

    def __init__(self, base_dir: str | Path = "data/audio"):
        self.base_dir = Path(base_dir)

    def resolve(self, audio_ref: str) -> Path:
        """Map a reference to a path inside base_dir."""
        base = self.base_dir.resolve()
        path = (base / audio_ref).resolve()
        if not path.is_relative_to(base):
            raise ValidationError(
                "Audio reference escapes the storage directory",
                context={"audio_ref": audio_ref},
            )
        return path

    async def fetch(self, audio_ref: str) -> bytes:
        path = self.resolve(audio_ref)
        if not path.is_file():
            raise NotFoundError(
                f"Audio not found: {audio_ref}", context={"audio_ref": audio_ref}
            )

        data = await asyncio.to_thread(path.read_bytes)
        logger.debug("Loaded audio", extra={"audio_ref": audio_ref, "size": len(data)})
        return data

    async def store(self, audio_ref: str, data: bytes) -> Path:
        """Write audio bytes under a reference, creating directories as needed."""
        path = self.resolve(audio_ref)
        path.parent.mkdir(parents=True, exist_ok=True)
        await asyncio.to_thread(path.write_bytes, data)
        return path
