"""
Ollama embedder using the native ollama-python SDK.
"""

import ollama

from zettelgraph.core.embeddings.base import Embedder
from zettelgraph.utils.exceptions import EmbeddingError, ValidationError
from zettelgraph.utils.logger import get_logger

logger = get_logger(__name__)


class OllamaEmbedder(Embedder):
    """
    Ollama embedder (nomic-embed-text by default).
    """

    def __init__(
        self,
        host: str = "http://localhost:11434",
        model: str = "nomic-embed-text",
        timeout: float = 120.0,
    ):
        """
        Initialize Ollama embedder.

        Args:
            host: Ollama server URL
            model: Embedding model name
            timeout: Request timeout in seconds
        """
        self.host = host
        self.model = model
        self.timeout = timeout
        self._dimension: int | None = None

        self.client = ollama.AsyncClient(host=host, timeout=timeout)

    async def embed(self, text: str) -> list[float]:
        """
        Generate embedding for text using Ollama.

        Raises:
            ValidationError: If text is empty
            EmbeddingError: If the Ollama call fails or returns no vector
        """
        if not text or not text.strip():
            raise ValidationError("Text cannot be empty")

        try:
            response = await self.client.embed(model=self.model, input=text)
        except Exception as e:
            logger.error(
                f"Ollama embedding error: {e}",
                extra={"model": self.model, "host": self.host, "error": str(e)},
            )
            raise EmbeddingError(f"Ollama embedding error: {e}") from e

        embeddings = response.get("embeddings") if response else None
        if not embeddings:
            raise EmbeddingError(
                "Ollama returned invalid embedding response", context={"model": self.model}
            )

        vector = list(embeddings[0])
        self._dimension = len(vector)
        return vector

    async def get_dimension(self) -> int:
        """Embedding dimension, cached after the first call."""
        if self._dimension is None:
            await super().get_dimension()
        return self._dimension

    async def close(self) -> None:
        """Nothing to release; the SDK manages its own connections."""
        pass
