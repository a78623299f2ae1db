"""
Factory for creating nearest-neighbor index backends.
"""

from zettelgraph.config import Config
from zettelgraph.core.graph_store.base import GraphStore
from zettelgraph.core.vector_store.base import NearestNeighborIndex
from zettelgraph.core.vector_store.qdrant import QdrantNodeIndex
from zettelgraph.core.vector_store.scan import StoreScanIndex
from zettelgraph.utils.exceptions import ConfigurationError


class VectorStoreFactory:
    """Factory for creating nearest-neighbor indexes from configuration."""

    @staticmethod
    def create(config: Config, graph_store: GraphStore) -> NearestNeighborIndex:
        """
        Create nearest-neighbor index from configuration.

        Args:
            config: Main configuration object
            graph_store: Graph store the scan backend reads embeddings from

        Returns:
            Index instance

        Raises:
            ConfigurationError: If backend is not supported
        """
        if config.vector_backend == "scan":
            return StoreScanIndex(graph_store)
        elif config.vector_backend == "qdrant":
            return QdrantNodeIndex(
                url=config.qdrant.url,
                collection_name=config.qdrant.collection_name,
                vector_size=config.embedder.dimension,
                use_grpc=config.qdrant.use_grpc,
                hnsw_m=config.qdrant.hnsw_m,
                hnsw_ef_construct=config.qdrant.hnsw_ef_construct,
                on_disk=config.qdrant.on_disk,
                timeout=config.qdrant.timeout,
            )
        else:
            raise ConfigurationError(f"Unsupported vector backend: {config.vector_backend}")
