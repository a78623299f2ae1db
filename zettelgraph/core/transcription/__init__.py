"""
Speech-to-text providers.

Supported providers:
- OpenAI Whisper (official SDK)
"""

from zettelgraph.core.transcription.base import Transcriber
from zettelgraph.core.transcription.openai import OpenAITranscriber

__all__ = [
    "Transcriber",
    "OpenAITranscriber",
]
