"""
Brute-force nearest-neighbor index over the graph store.

Vectors live on the nodes themselves, so upserts and deletes are no-ops
and every query scans the owner's embedded nodes.
"""

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity

from zettelgraph.core.graph_store.base import GraphStore
from zettelgraph.core.vector_store.base import NearestNeighborIndex, NeighborFilter, NeighborMatch
from zettelgraph.models.node import Node
from zettelgraph.utils.exceptions import SearchIndexError, ValidationError
from zettelgraph.utils.logger import get_logger

logger = get_logger(__name__)


class StoreScanIndex(NearestNeighborIndex):
    """Cosine similarity scan over embeddings persisted in a GraphStore."""

    def __init__(self, graph_store: GraphStore):
        self.graph_store = graph_store

    async def initialize(self) -> None:
        pass

    async def upsert_node(self, node: Node) -> None:
        if not node.embedding:
            raise ValidationError(
                f"Node {node.id} has no embedding", context={"node_id": node.id}
            )

    async def delete_node(self, node_id: str) -> None:
        pass

    async def query(
        self, vector: list[float], k: int, neighbor_filter: NeighborFilter
    ) -> list[NeighborMatch]:
        """Score every embedded candidate node and return the top k."""
        try:
            candidates = await self.graph_store.list_nodes(
                owner_id=neighbor_filter.owner_id,
                kind=neighbor_filter.kind,
                with_embedding=True,
            )
        except Exception as e:
            logger.error(
                f"Failed to load candidates for scan: {e}",
                extra={"owner_id": neighbor_filter.owner_id, "error": str(e)},
            )
            raise SearchIndexError(f"Failed to load candidates: {e}") from e

        # Vectors from a different embedding model can't be compared
        candidates = [
            node
            for node in candidates
            if node.id not in neighbor_filter.exclude_ids and len(node.embedding) == len(vector)
        ]
        if not candidates or k <= 0:
            return []

        scores = self.compute_batch_similarity(vector, [node.embedding for node in candidates])

        # Stable sort keeps insertion order among equal scores
        ranked = sorted(zip(candidates, scores), key=lambda pair: pair[1], reverse=True)

        return [NeighborMatch(node_id=node.id, score=score) for node, score in ranked[:k]]

    @staticmethod
    def compute_batch_similarity(
        query_embedding: list[float], embeddings: list[list[float]]
    ) -> list[float]:
        """
        Compute cosine similarity between a query and multiple embeddings.

        Args:
            query_embedding: Query embedding vector
            embeddings: List of embedding vectors to compare against

        Returns:
            List of similarity scores
        """
        query_vec = np.array(query_embedding).reshape(1, -1)
        embedding_matrix = np.array(embeddings)

        similarities = cosine_similarity(query_vec, embedding_matrix)[0]

        return similarities.tolist()

    async def close(self) -> None:
        pass
