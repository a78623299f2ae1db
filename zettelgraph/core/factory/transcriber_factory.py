"""
Factory for creating transcription providers.
"""

from zettelgraph.config import TranscriptionConfig
from zettelgraph.core.transcription.base import Transcriber
from zettelgraph.core.transcription.openai import OpenAITranscriber
from zettelgraph.utils.exceptions import ConfigurationError


class TranscriberFactory:
    """Factory for creating transcribers from configuration."""

    @staticmethod
    def create(config: TranscriptionConfig) -> Transcriber:
        """
        Create transcriber from configuration.

        Raises:
            ConfigurationError: If provider is not supported or has no API key
        """
        if config.provider == "openai":
            if not config.api_key:
                raise ConfigurationError("OpenAI API key not configured for transcription")
            return OpenAITranscriber(
                api_key=config.api_key,
                model=config.model,
                base_url=config.base_url,
                timeout=config.timeout,
                default_filename=config.filename,
            )
        else:
            raise ConfigurationError(f"Unsupported transcription provider: {config.provider}")
