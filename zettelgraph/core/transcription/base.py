"""
Abstract base class for speech-to-text providers.
"""

from abc import ABC, abstractmethod


class Transcriber(ABC):
    """Turns recorded audio into plain text."""

    @abstractmethod
    async def transcribe(self, audio: bytes, filename: str | None = None) -> str:
        """
        Transcribe audio to text.

        Args:
            audio: Raw audio bytes
            filename: Name hinting the container format (e.g. "audio.webm")

        Returns:
            Transcript text

        Raises:
            TranscriptionError: If the provider call fails or returns no text
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections."""
        pass
