"""
Abstract base class for embedding providers.

Embeddings drive similarity linking: a node's vector is compared against
the owner's other nodes to pick its nearest neighbors.
"""

from abc import ABC, abstractmethod


class Embedder(ABC):
    """
    Abstract base for embedding providers.

    Implementations must return vectors of a fixed dimension for a given model.
    """

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """
        Generate embedding vector for text.

        Args:
            text: Text to embed

        Returns:
            Embedding vector

        Raises:
            ValidationError: If text is empty
            EmbeddingError: If the provider call fails
        """
        pass

    async def get_dimension(self) -> int:
        """
        Get the dimension of embeddings produced by this provider.

        Default implementation embeds a sample string and measures it.

        Returns:
            Embedding vector dimension
        """
        sample = await self.embed("dimension sample")
        return len(sample)

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections."""
        pass
