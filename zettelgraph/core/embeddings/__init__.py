"""
Embedder abstraction layer for text embeddings.

Supported providers:
- Ollama (native SDK)
- OpenAI (official SDK)
"""

from zettelgraph.core.embeddings.base import Embedder
from zettelgraph.core.embeddings.ollama import OllamaEmbedder
from zettelgraph.core.embeddings.openai import OpenAIEmbedder

__all__ = [
    "Embedder",
    "OllamaEmbedder",
    "OpenAIEmbedder",
]
