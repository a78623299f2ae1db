"""
Base interface for nearest-neighbor search over node embeddings.

The index holds one vector per node, keyed by node ID, and answers
"k most similar nodes" queries restricted by owner, kind and exclusions.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from zettelgraph.models.node import Node, NodeKind


class NeighborFilter(BaseModel):
    """Restrictions applied to a neighbor query."""

    owner_id: str
    kind: NodeKind | None = None
    exclude_ids: set[str] = Field(default_factory=set)


class NeighborMatch(BaseModel):
    """Nearest-neighbor search result."""

    node_id: str
    score: float


class NearestNeighborIndex(ABC):
    """Abstract base class for nearest-neighbor index implementations."""

    @abstractmethod
    async def initialize(self) -> None:
        """
        Initialize the index (create collections).

        Raises:
            SearchIndexError: If initialization fails
        """
        pass

    @abstractmethod
    async def upsert_node(self, node: Node) -> None:
        """
        Store or replace the vector for a node.

        Args:
            node: Node carrying an embedding

        Raises:
            ValidationError: If the node has no embedding
            SearchIndexError: If the write fails
        """
        pass

    @abstractmethod
    async def delete_node(self, node_id: str) -> None:
        """
        Remove a node's vector. Missing entries are ignored.

        Args:
            node_id: Node identifier

        Raises:
            SearchIndexError: If the delete fails
        """
        pass

    @abstractmethod
    async def query(
        self, vector: list[float], k: int, neighbor_filter: NeighborFilter
    ) -> list[NeighborMatch]:
        """
        Find the nodes most similar to a vector.

        Args:
            vector: Query embedding
            k: Maximum results
            neighbor_filter: Owner, kind and exclusion restrictions

        Returns:
            Up to k matches, best first

        Raises:
            SearchIndexError: If the query fails
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release index resources."""
        pass
