"""
Neo4j graph store implementation.

Nodes are stored as :GraphNode, voice notes as :VoiceNote and edges as
[:LINKS_TO] relationships carrying id, label and created_at.
"""

from datetime import datetime
from typing import Any

from neo4j import AsyncDriver, AsyncGraphDatabase

from zettelgraph.core.graph_store.base import (
    NODE_PATCH_FIELDS,
    VOICE_NOTE_PATCH_FIELDS,
    GraphStore,
    check_patch,
)
from zettelgraph.models.edge import Edge
from zettelgraph.models.node import Node, NodeKind, Position, Size, SourceKind
from zettelgraph.models.voice_note import VoiceNote, VoiceNoteStatus
from zettelgraph.utils.exceptions import GraphStoreError, ValidationError
from zettelgraph.utils.logger import get_logger

logger = get_logger(__name__)


class Neo4jGraphStore(GraphStore):
    """
    Neo4j-based graph store for nodes, edges and voice notes.

    Features:
    - Native graph traversal over LINKS_TO relationships
    - Unique constraints on node, voice note and edge IDs
    - Property-map patches (SET n += $props) for single-record atomicity

    Relationships cannot outlive their endpoints in Neo4j, so delete_node
    uses DETACH DELETE and add_edge fails when an endpoint is missing.
    """

    def __init__(
        self,
        uri: str = "bolt://localhost:7687",
        username: str = "neo4j",
        password: str = "password",
        database: str = "neo4j",
    ):
        """
        Initialize Neo4j graph store.

        Args:
            uri: Neo4j connection URI
            username: Username
            password: Password
            database: Database name
        """
        self.uri = uri
        self.username = username
        self.password = password
        self.database = database
        self.driver: AsyncDriver | None = None

    async def connect(self) -> None:
        """
        Establish connection to Neo4j.

        Raises:
            GraphStoreError: If connection fails
        """
        if self.driver is None:
            try:
                self.driver = AsyncGraphDatabase.driver(
                    self.uri,
                    auth=(self.username, self.password),
                )
            except Exception as e:
                logger.error(
                    f"Failed to connect to Neo4j: {e}",
                    extra={"uri": self.uri, "error": str(e)},
                )
                raise GraphStoreError(f"Failed to connect to Neo4j: {e}") from e

    async def initialize(self) -> None:
        """
        Create indexes and constraints.

        Raises:
            GraphStoreError: If initialization fails
        """
        try:
            await self.connect()

            async with self.driver.session(database=self.database) as session:
                await session.run(
                    "CREATE CONSTRAINT graph_node_id IF NOT EXISTS "
                    "FOR (n:GraphNode) REQUIRE n.id IS UNIQUE"
                )
                await session.run(
                    "CREATE CONSTRAINT voice_note_id IF NOT EXISTS "
                    "FOR (v:VoiceNote) REQUIRE v.id IS UNIQUE"
                )
                await session.run(
                    "CREATE INDEX graph_node_owner IF NOT EXISTS FOR (n:GraphNode) ON (n.owner_id)"
                )
                await session.run(
                    "CREATE INDEX graph_node_source IF NOT EXISTS "
                    "FOR (n:GraphNode) ON (n.source_id)"
                )
                await session.run(
                    "CREATE INDEX voice_note_owner IF NOT EXISTS FOR (v:VoiceNote) ON (v.owner_id)"
                )
                await session.run(
                    "CREATE INDEX link_id IF NOT EXISTS FOR ()-[r:LINKS_TO]-() ON (r.id)"
                )
        except Exception as e:
            logger.error(
                f"Failed to initialize Neo4j: {e}",
                extra={"database": self.database, "error": str(e)},
            )
            raise GraphStoreError(f"Failed to initialize Neo4j: {e}") from e

    # ═══════════════════════════════════════════════════════════
    # NODE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def add_node(self, node: Node) -> None:
        """
        Add a node to the graph.

        Raises:
            ValidationError: If node ID is empty
            GraphStoreError: If add operation fails
        """
        if not node.id:
            raise ValidationError("Node ID cannot be empty")

        try:
            await self.connect()

            async with self.driver.session(database=self.database) as session:
                await session.run(
                    "CREATE (n:GraphNode) SET n = $props",
                    {"props": self._node_to_props(node)},
                )

            logger.debug(
                f"Added node: {node.id}",
                extra={"node_id": node.id, "kind": node.kind.value},
            )
        except Exception as e:
            logger.error(
                f"Failed to add node {node.id}: {e}",
                extra={"node_id": node.id, "error": str(e)},
            )
            raise GraphStoreError(f"Failed to add node: {e}") from e

    async def get_node(self, node_id: str) -> Node | None:
        """Retrieve a node by ID."""
        try:
            await self.connect()

            async with self.driver.session(database=self.database) as session:
                result = await session.run(
                    "MATCH (n:GraphNode {id: $id}) RETURN n", {"id": node_id}
                )
                record = await result.single()
                if not record:
                    return None

                return self._record_to_node(record["n"])
        except Exception as e:
            logger.error(
                f"Failed to get node {node_id}: {e}",
                extra={"node_id": node_id, "error": str(e)},
            )
            raise GraphStoreError(f"Failed to get node: {e}") from e

    async def patch_node(self, node_id: str, changes: dict[str, Any]) -> Node | None:
        """Apply a partial update with a single SET."""
        check_patch(changes, NODE_PATCH_FIELDS)

        if not changes:
            return await self.get_node(node_id)

        props = {column: _encode_value(value) for column, value in changes.items()}

        try:
            await self.connect()

            async with self.driver.session(database=self.database) as session:
                result = await session.run(
                    "MATCH (n:GraphNode {id: $id}) SET n += $props RETURN n",
                    {"id": node_id, "props": props},
                )
                record = await result.single()
                if not record:
                    return None

                return self._record_to_node(record["n"])
        except Exception as e:
            logger.error(
                f"Failed to patch node {node_id}: {e}",
                extra={"node_id": node_id, "fields": sorted(changes), "error": str(e)},
            )
            raise GraphStoreError(f"Failed to patch node: {e}") from e

    async def delete_node(self, node_id: str) -> bool:
        """Delete a node. Any remaining relationships go with it."""
        await self.connect()

        async with self.driver.session(database=self.database) as session:
            result = await session.run(
                "MATCH (n:GraphNode {id: $id}) DETACH DELETE n RETURN count(n) AS deleted",
                {"id": node_id},
            )
            record = await result.single()
            return bool(record and record["deleted"])

    async def list_nodes(
        self,
        owner_id: str | None = None,
        kind: NodeKind | None = None,
        source_id: str | None = None,
        parent_node_id: str | None = None,
        with_embedding: bool = False,
    ) -> list[Node]:
        """List nodes matching every given filter."""
        await self.connect()

        query = "MATCH (n:GraphNode) WHERE 1=1"
        params: dict[str, Any] = {}

        if owner_id is not None:
            query += " AND n.owner_id = $owner_id"
            params["owner_id"] = owner_id

        if kind is not None:
            query += " AND n.kind = $kind"
            params["kind"] = NodeKind(kind).value

        if source_id is not None:
            query += " AND n.source_id = $source_id"
            params["source_id"] = source_id

        if parent_node_id is not None:
            query += " AND n.parent_node_id = $parent_node_id"
            params["parent_node_id"] = parent_node_id

        if with_embedding:
            query += " AND n.embedding IS NOT NULL"

        query += " RETURN n"

        async with self.driver.session(database=self.database) as session:
            result = await session.run(query, params)

            nodes = []
            async for record in result:
                nodes.append(self._record_to_node(record["n"]))

            return nodes

    # ═══════════════════════════════════════════════════════════
    # EDGE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def add_edge(self, edge: Edge) -> None:
        """
        Create a LINKS_TO relationship.

        Raises:
            GraphStoreError: If an endpoint is missing or the write fails
        """
        await self.connect()

        try:
            async with self.driver.session(database=self.database) as session:
                result = await session.run(
                    """
                    MATCH (s:GraphNode {id: $source})
                    MATCH (t:GraphNode {id: $target})
                    CREATE (s)-[r:LINKS_TO {id: $id, created_at: $created_at}]->(t)
                    SET r.label = $label
                    RETURN r.id AS id
                    """,
                    {
                        "id": edge.id,
                        "source": edge.source,
                        "target": edge.target,
                        "label": edge.label,
                        "created_at": edge.created_at.isoformat(),
                    },
                )
                record = await result.single()
        except Exception as e:
            logger.error(
                f"Failed to add edge: {e}",
                extra={"source": edge.source, "target": edge.target, "error": str(e)},
            )
            raise GraphStoreError(f"Failed to add edge: {e}") from e

        if not record:
            raise GraphStoreError(
                f"Cannot add edge {edge.id}: endpoint missing",
                context={"source": edge.source, "target": edge.target},
            )

    async def get_edge(self, edge_id: str) -> Edge | None:
        """Get edge by ID."""
        await self.connect()

        async with self.driver.session(database=self.database) as session:
            result = await session.run(
                """
                MATCH (s:GraphNode)-[r:LINKS_TO {id: $edge_id}]->(t:GraphNode)
                RETURN r, s.id AS source, t.id AS target
                """,
                {"edge_id": edge_id},
            )
            record = await result.single()
            if not record:
                return None

            return self._record_to_edge(record)

    async def delete_edge(self, edge_id: str) -> bool:
        """Delete an edge."""
        await self.connect()

        async with self.driver.session(database=self.database) as session:
            result = await session.run(
                "MATCH ()-[r:LINKS_TO {id: $edge_id}]->() DELETE r RETURN count(r) AS deleted",
                {"edge_id": edge_id},
            )
            record = await result.single()
            return bool(record and record["deleted"])

    async def list_edges(self, source: str | None = None, target: str | None = None) -> list[Edge]:
        """List edges by source and/or target."""
        await self.connect()

        query = "MATCH (s:GraphNode)-[r:LINKS_TO]->(t:GraphNode) WHERE 1=1"
        params: dict[str, Any] = {}

        if source is not None:
            query += " AND s.id = $source"
            params["source"] = source

        if target is not None:
            query += " AND t.id = $target"
            params["target"] = target

        query += " RETURN r, s.id AS source, t.id AS target ORDER BY r.created_at"

        async with self.driver.session(database=self.database) as session:
            result = await session.run(query, params)

            edges = []
            async for record in result:
                edges.append(self._record_to_edge(record))

            return edges

    # ═══════════════════════════════════════════════════════════
    # VOICE NOTE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def add_voice_note(self, voice_note: VoiceNote) -> None:
        """Add a voice note record."""
        try:
            await self.connect()

            async with self.driver.session(database=self.database) as session:
                await session.run(
                    "CREATE (v:VoiceNote) SET v = $props",
                    {"props": self._voice_note_to_props(voice_note)},
                )
        except Exception as e:
            logger.error(
                f"Failed to add voice note {voice_note.id}: {e}",
                extra={"voice_note_id": voice_note.id, "error": str(e)},
            )
            raise GraphStoreError(f"Failed to add voice note: {e}") from e

    async def get_voice_note(self, voice_note_id: str) -> VoiceNote | None:
        """Retrieve a voice note by ID."""
        await self.connect()

        async with self.driver.session(database=self.database) as session:
            result = await session.run(
                "MATCH (v:VoiceNote {id: $id}) RETURN v", {"id": voice_note_id}
            )
            record = await result.single()
            if not record:
                return None

            return self._record_to_voice_note(record["v"])

    async def patch_voice_note(
        self, voice_note_id: str, changes: dict[str, Any]
    ) -> VoiceNote | None:
        """Apply a partial update with a single SET."""
        check_patch(changes, VOICE_NOTE_PATCH_FIELDS)

        if not changes:
            return await self.get_voice_note(voice_note_id)

        props = {column: _encode_value(value) for column, value in changes.items()}

        try:
            await self.connect()

            async with self.driver.session(database=self.database) as session:
                result = await session.run(
                    "MATCH (v:VoiceNote {id: $id}) SET v += $props RETURN v",
                    {"id": voice_note_id, "props": props},
                )
                record = await result.single()
                if not record:
                    return None

                return self._record_to_voice_note(record["v"])
        except Exception as e:
            logger.error(
                f"Failed to patch voice note {voice_note_id}: {e}",
                extra={"voice_note_id": voice_note_id, "error": str(e)},
            )
            raise GraphStoreError(f"Failed to patch voice note: {e}") from e

    async def list_voice_notes(
        self,
        owner_id: str | None = None,
        status: VoiceNoteStatus | None = None,
        limit: int = 20,
    ) -> list[VoiceNote]:
        """List voice notes, newest first."""
        await self.connect()

        query = "MATCH (v:VoiceNote) WHERE 1=1"
        params: dict[str, Any] = {"limit": limit}

        if owner_id is not None:
            query += " AND v.owner_id = $owner_id"
            params["owner_id"] = owner_id

        if status is not None:
            query += " AND v.status = $status"
            params["status"] = VoiceNoteStatus(status).value

        query += " RETURN v ORDER BY v.created_at DESC LIMIT $limit"

        async with self.driver.session(database=self.database) as session:
            result = await session.run(query, params)

            voice_notes = []
            async for record in result:
                voice_notes.append(self._record_to_voice_note(record["v"]))

            return voice_notes

    # UTILITY METHODS

    async def count_nodes(self, owner_id: str | None = None) -> int:
        """Count nodes."""
        await self.connect()

        query = "MATCH (n:GraphNode) WHERE 1=1"
        params: dict[str, Any] = {}

        if owner_id is not None:
            query += " AND n.owner_id = $owner_id"
            params["owner_id"] = owner_id

        query += " RETURN count(n) as count"

        async with self.driver.session(database=self.database) as session:
            result = await session.run(query, params)
            record = await result.single()
            return record["count"] if record else 0

    async def count_edges(self) -> int:
        """Count edges."""
        await self.connect()

        async with self.driver.session(database=self.database) as session:
            result = await session.run("MATCH ()-[r:LINKS_TO]->() RETURN count(r) as count")
            record = await result.single()
            return record["count"] if record else 0

    async def close(self) -> None:
        """Close the Neo4j driver."""
        if self.driver is not None:
            await self.driver.close()
            self.driver = None

    # HELPER METHODS

    @staticmethod
    def _node_to_props(node: Node) -> dict[str, Any]:
        return {
            "id": node.id,
            "owner_id": node.owner_id,
            "kind": node.kind.value,
            "content": node.content,
            "x": node.position.x,
            "y": node.position.y,
            "width": node.size.width,
            "height": node.size.height,
            "message_ref": node.message_ref,
            "conversation_ref": node.conversation_ref,
            "source_kind": node.source_kind.value,
            "source_id": node.source_id,
            "source_url": node.source_url,
            "parent_node_id": node.parent_node_id,
            "outgoing_links": list(node.outgoing_links),
            "embedding": node.embedding,
            "created_at": node.created_at.isoformat(),
            "updated_at": node.updated_at.isoformat(),
        }

    @staticmethod
    def _voice_note_to_props(voice_note: VoiceNote) -> dict[str, Any]:
        return {
            "id": voice_note.id,
            "owner_id": voice_note.owner_id,
            "audio_ref": voice_note.audio_ref,
            "duration_seconds": voice_note.duration_seconds,
            "transcription": voice_note.transcription,
            "status": voice_note.status.value,
            "error_message": voice_note.error_message,
            "created_at": voice_note.created_at.isoformat(),
            "updated_at": voice_note.updated_at.isoformat(),
        }

    def _record_to_node(self, node) -> Node:
        """Convert a Neo4j node to Node. Null properties are absent, hence .get()."""
        return Node(
            id=node["id"],
            owner_id=node["owner_id"],
            kind=NodeKind(node["kind"]),
            content=node.get("content", ""),
            position=Position(x=node["x"], y=node["y"]),
            size=Size(width=node["width"], height=node["height"]),
            message_ref=node.get("message_ref"),
            conversation_ref=node.get("conversation_ref"),
            source_kind=SourceKind(node["source_kind"]),
            source_id=node.get("source_id"),
            source_url=node.get("source_url"),
            parent_node_id=node.get("parent_node_id"),
            outgoing_links=list(node.get("outgoing_links") or []),
            embedding=list(node["embedding"]) if node.get("embedding") else None,
            created_at=datetime.fromisoformat(node["created_at"]),
            updated_at=datetime.fromisoformat(node["updated_at"]),
        )

    def _record_to_edge(self, record) -> Edge:
        rel = record["r"]
        return Edge(
            id=rel["id"],
            source=record["source"],
            target=record["target"],
            label=rel.get("label"),
            created_at=datetime.fromisoformat(rel["created_at"]),
        )

    def _record_to_voice_note(self, node) -> VoiceNote:
        return VoiceNote(
            id=node["id"],
            owner_id=node["owner_id"],
            audio_ref=node["audio_ref"],
            duration_seconds=node["duration_seconds"],
            transcription=node.get("transcription"),
            status=VoiceNoteStatus(node["status"]),
            error_message=node.get("error_message"),
            created_at=datetime.fromisoformat(node["created_at"]),
            updated_at=datetime.fromisoformat(node["updated_at"]),
        )


def _encode_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if hasattr(value, "value"):  # Enum members
        return value.value
    if isinstance(value, tuple):
        return list(value)
    return value
