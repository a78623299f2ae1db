"""
Similarity Linker - connects a node to its nearest embedded neighbors.
"""

import math

from zettelgraph.core.embeddings.base import Embedder
from zettelgraph.core.vector_store.base import NearestNeighborIndex, NeighborFilter
from zettelgraph.models.edge import Edge
from zettelgraph.models.node import NodeKind
from zettelgraph.services.node_repository import NodeRepository
from zettelgraph.utils.logger import get_logger

logger = get_logger(__name__)


def similarity_label(score: float) -> str:
    """Percentage label for a similarity score, rounded half up (0.835 -> "84%")."""
    return f"{math.floor(score * 100 + 0.5)}%"


class SimilarityLinker:
    """
    Embeds a node and links it to the k most similar nodes of the same owner.

    Each call is independent: it never checks edges made by earlier calls,
    so linking the same node twice can produce duplicate edges.
    """

    def __init__(
        self,
        repository: NodeRepository,
        embedder: Embedder,
        index: NearestNeighborIndex,
        default_k: int = 3,
    ):
        self.repository = repository
        self.embedder = embedder
        self.index = index
        self.default_k = default_k

    async def link_by_similarity(
        self,
        node_id: str,
        text: str,
        k: int | None = None,
        exclude_ids: set[str] | list[str] | None = None,
        kind: NodeKind | None = NodeKind.NOTE,
    ) -> list[Edge]:
        """
        Embed text for a node and create edges to its nearest neighbors.

        Args:
            node_id: Node to link from
            text: Text to embed for the node
            k: Maximum number of edges (default from configuration)
            exclude_ids: Nodes that must not be linked
            kind: Restrict neighbors to one node kind (None for any)

        Returns:
            Edges created, at most k, never a self-loop

        Raises:
            NotFoundError: If the node doesn't exist
            EmbeddingError: If embedding fails
            SearchIndexError: If the neighbor query fails
        """
        k = self.default_k if k is None else k
        node = await self.repository.get_node(node_id)

        vector = await self.embedder.embed(text)
        await self.repository.update_embedding(node_id, vector)

        excluded = {node_id, *(exclude_ids or ())}
        matches = await self.index.query(
            vector,
            k,
            NeighborFilter(owner_id=node.owner_id, kind=kind, exclude_ids=excluded),
        )

        linked: set[str] = set()
        edges: list[Edge] = []
        for match in matches:
            if len(edges) >= k:
                break
            if match.node_id in excluded or match.node_id in linked:
                continue

            # Index entries can outlive their nodes
            if await self.repository.find_node(match.node_id) is None:
                logger.warning(
                    f"Skipping stale neighbor {match.node_id}",
                    extra={"node_id": node_id, "neighbor_id": match.node_id},
                )
                continue

            edge = await self.repository.create_edge(
                node_id, match.node_id, label=similarity_label(match.score)
            )
            linked.add(match.node_id)
            edges.append(edge)

        logger.debug(
            f"Linked {node_id} to {len(edges)} similar node(s)",
            extra={"node_id": node_id, "k": k, "candidates": len(matches)},
        )
        return edges
