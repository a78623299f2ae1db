"""
Nearest-neighbor index implementations.

Available backends:
- StoreScanIndex: Brute-force cosine scan over embeddings held by the graph store
- QdrantNodeIndex: Qdrant collection with HNSW search
"""

from zettelgraph.core.vector_store.base import NearestNeighborIndex, NeighborFilter, NeighborMatch
from zettelgraph.core.vector_store.qdrant import QdrantNodeIndex
from zettelgraph.core.vector_store.scan import StoreScanIndex

__all__ = [
    "NearestNeighborIndex",
    "NeighborFilter",
    "NeighborMatch",
    "QdrantNodeIndex",
    "StoreScanIndex",
]
