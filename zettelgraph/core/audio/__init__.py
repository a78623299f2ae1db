"""
Audio sources for voice note ingestion.
"""

from zettelgraph.core.audio.base import AudioSource
from zettelgraph.core.audio.local import LocalAudioSource

__all__ = [
    "AudioSource",
    "LocalAudioSource",
]
