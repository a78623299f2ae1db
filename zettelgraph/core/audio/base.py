"""
Abstract base class for audio sources.
"""

from abc import ABC, abstractmethod


class AudioSource(ABC):
    """Resolves a voice note's audio reference to raw bytes."""

    @abstractmethod
    async def fetch(self, audio_ref: str) -> bytes:
        """
        Load audio bytes.

        Args:
            audio_ref: Storage reference recorded on the voice note

        Returns:
            Raw audio bytes

        Raises:
            NotFoundError: If nothing is stored under audio_ref
        """
        pass
