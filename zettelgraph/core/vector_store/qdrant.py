"""
Qdrant nearest-neighbor index.

One point per node, keyed by a UUID derived from the node ID. The payload
carries node_id, owner_id and kind so queries can filter server-side.
"""

from uuid import NAMESPACE_DNS, UUID, uuid5

from qdrant_client import AsyncQdrantClient
from qdrant_client.models import (
    Distance,
    FieldCondition,
    Filter,
    HasIdCondition,
    HnswConfigDiff,
    MatchValue,
    PointIdsList,
    PointStruct,
    VectorParams,
)

from zettelgraph.core.vector_store.base import NearestNeighborIndex, NeighborFilter, NeighborMatch
from zettelgraph.models.node import Node
from zettelgraph.utils.exceptions import SearchIndexError, ValidationError
from zettelgraph.utils.logger import get_logger

logger = get_logger(__name__)


class QdrantNodeIndex(NearestNeighborIndex):
    """
    Qdrant-backed index for node embeddings.

    Features:
    - HNSW indexing with cosine distance
    - Payload indexes on owner_id and kind
    - Collection created on first upsert when the dimension isn't known up front
    """

    def __init__(
        self,
        url: str = "http://localhost:6333",
        collection_name: str = "nodes",
        vector_size: int | None = None,
        use_grpc: bool = False,
        hnsw_m: int = 16,
        hnsw_ef_construct: int = 100,
        on_disk: bool = False,
        timeout: int = 30,
    ):
        """
        Initialize Qdrant index.

        Args:
            url: Qdrant server URL
            collection_name: Collection name
            vector_size: Embedding dimension, or None to take it from the first upsert
            use_grpc: Use gRPC connection
            hnsw_m: HNSW M parameter (connections per node)
            hnsw_ef_construct: HNSW ef_construct parameter
            on_disk: Store vectors on disk
            timeout: Request timeout in seconds
        """
        self.url = url
        self.collection_name = collection_name
        self.vector_size = vector_size
        self.use_grpc = use_grpc
        self.hnsw_m = hnsw_m
        self.hnsw_ef_construct = hnsw_ef_construct
        self.on_disk = on_disk
        self.timeout = timeout
        self.client: AsyncQdrantClient | None = None
        self._collection_ready = False

    def _to_uuid(self, id_str: str) -> str:
        """Convert string ID to UUID format consistently."""
        try:
            UUID(id_str)
            return id_str
        except ValueError:
            return str(uuid5(NAMESPACE_DNS, id_str))

    async def connect(self) -> None:
        """
        Establish connection to Qdrant.

        Raises:
            SearchIndexError: If connection fails
        """
        if self.client is None:
            try:
                self.client = AsyncQdrantClient(
                    url=self.url,
                    prefer_grpc=self.use_grpc,
                    timeout=self.timeout,
                )
            except Exception as e:
                logger.error(
                    f"Failed to connect to Qdrant: {e}",
                    extra={"url": self.url, "error": str(e)},
                )
                raise SearchIndexError(f"Failed to connect to Qdrant: {e}") from e

    async def initialize(self) -> None:
        """
        Create the collection if the dimension is known and it doesn't exist yet.

        Raises:
            SearchIndexError: If initialization fails
        """
        await self.connect()

        if self.vector_size:
            await self._ensure_collection(self.vector_size)

    async def _ensure_collection(self, vector_size: int) -> None:
        if self._collection_ready:
            return

        try:
            if not await self.client.collection_exists(self.collection_name):
                await self.client.create_collection(
                    collection_name=self.collection_name,
                    vectors_config=VectorParams(
                        size=vector_size,
                        distance=Distance.COSINE,
                        hnsw_config=HnswConfigDiff(
                            m=self.hnsw_m,
                            ef_construct=self.hnsw_ef_construct,
                        ),
                        on_disk=self.on_disk,
                    ),
                )

                await self.client.create_payload_index(
                    collection_name=self.collection_name,
                    field_name="owner_id",
                    field_schema="keyword",
                )

                await self.client.create_payload_index(
                    collection_name=self.collection_name,
                    field_name="kind",
                    field_schema="keyword",
                )

                logger.info(
                    f"Created Qdrant collection {self.collection_name}",
                    extra={"collection": self.collection_name, "vector_size": vector_size},
                )

            self.vector_size = vector_size
            self._collection_ready = True
        except Exception as e:
            logger.error(
                f"Failed to initialize Qdrant collection: {e}",
                extra={"collection": self.collection_name, "error": str(e)},
            )
            raise SearchIndexError(f"Failed to initialize Qdrant collection: {e}") from e

    async def upsert_node(self, node: Node) -> None:
        """
        Store or replace a node's vector.

        Raises:
            ValidationError: If the node has no embedding
            SearchIndexError: If upsert fails
        """
        if not node.embedding:
            raise ValidationError(
                f"Node {node.id} has no embedding", context={"node_id": node.id}
            )

        await self.connect()
        await self._ensure_collection(len(node.embedding))

        try:
            await self.client.upsert(
                collection_name=self.collection_name,
                points=[
                    PointStruct(
                        id=self._to_uuid(node.id),
                        vector=node.embedding,
                        payload={
                            "node_id": node.id,
                            "owner_id": node.owner_id,
                            "kind": node.kind.value,
                        },
                    )
                ],
                wait=True,
            )
        except Exception as e:
            logger.error(
                f"Failed to upsert node {node.id}: {e}",
                extra={"node_id": node.id, "error": str(e)},
            )
            raise SearchIndexError(f"Failed to upsert node: {e}") from e

    async def delete_node(self, node_id: str) -> None:
        """Remove a node's vector."""
        await self.connect()

        try:
            if not await self.client.collection_exists(self.collection_name):
                return

            await self.client.delete(
                collection_name=self.collection_name,
                points_selector=PointIdsList(points=[self._to_uuid(node_id)]),
                wait=True,
            )
        except Exception as e:
            logger.error(
                f"Failed to delete node {node_id} from index: {e}",
                extra={"node_id": node_id, "error": str(e)},
            )
            raise SearchIndexError(f"Failed to delete node from index: {e}") from e

    async def query(
        self, vector: list[float], k: int, neighbor_filter: NeighborFilter
    ) -> list[NeighborMatch]:
        """Find the k most similar nodes for one owner."""
        await self.connect()

        conditions = [
            FieldCondition(key="owner_id", match=MatchValue(value=neighbor_filter.owner_id))
        ]
        if neighbor_filter.kind is not None:
            conditions.append(
                FieldCondition(key="kind", match=MatchValue(value=neighbor_filter.kind.value))
            )

        must_not = []
        if neighbor_filter.exclude_ids:
            must_not.append(
                HasIdCondition(
                    has_id=[self._to_uuid(node_id) for node_id in neighbor_filter.exclude_ids]
                )
            )

        try:
            if not await self.client.collection_exists(self.collection_name):
                return []

            response = await self.client.query_points(
                collection_name=self.collection_name,
                query=vector,
                limit=k,
                query_filter=Filter(must=conditions, must_not=must_not or None),
                with_payload=True,
            )
        except Exception as e:
            logger.error(
                f"Qdrant query failed: {e}",
                extra={"owner_id": neighbor_filter.owner_id, "k": k, "error": str(e)},
            )
            raise SearchIndexError(f"Nearest-neighbor query failed: {e}") from e

        return [
            NeighborMatch(node_id=point.payload["node_id"], score=point.score)
            for point in response.points
        ]

    async def close(self) -> None:
        """Close the connection to Qdrant."""
        if self.client is not None:
            await self.client.close()
            self.client = None
            self._collection_ready = False
