"""
OpenAI Whisper transcriber using the official SDK.
"""

from openai import AsyncOpenAI

from zettelgraph.core.transcription.base import Transcriber
from zettelgraph.utils.exceptions import TranscriptionError
from zettelgraph.utils.logger import get_logger

logger = get_logger(__name__)


class OpenAITranscriber(Transcriber):
    """
    Whisper transcription over the OpenAI audio API.

    Accepts flac, m4a, mp3, mp4, mpeg, mpga, oga, ogg, wav and webm; the
    format is inferred from the filename extension.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "whisper-1",
        base_url: str | None = None,
        timeout: float = 120.0,
        default_filename: str = "audio.webm",
    ):
        """
        Initialize Whisper transcriber.

        Args:
            api_key: OpenAI API key
            model: Transcription model name
            base_url: Optional custom base URL
            timeout: Request timeout in seconds
            default_filename: Filename sent when the caller gives none
        """
        self.model = model
        self.default_filename = default_filename
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)

    async def transcribe(self, audio: bytes, filename: str | None = None) -> str:
        """
        Transcribe audio bytes with Whisper.

        Raises:
            TranscriptionError: On empty audio, API failure or empty transcript
        """
        if not audio:
            raise TranscriptionError("No audio data provided")

        filename = filename or self.default_filename

        logger.debug(
            "Transcribing audio",
            extra={"model": self.model, "filename": filename, "size": len(audio)},
        )

        try:
            response = await self.client.audio.transcriptions.create(
                model=self.model,
                file=(filename, audio),
                response_format="json",
            )
        except Exception as e:
            logger.error(
                f"Whisper API error: {e}",
                extra={"model": self.model, "error": str(e), "error_type": type(e).__name__},
            )
            raise TranscriptionError(f"Transcription failed: {e}") from e

        text = (response.text or "").strip()
        if not text:
            raise TranscriptionError(
                "Transcription returned no text", context={"model": self.model}
            )

        logger.info(
            "Transcription successful", extra={"model": self.model, "length": len(text)}
        )
        return text

    async def close(self) -> None:
        """Close OpenAI client."""
        await self.client.close()
