"""
Node/Edge Repository - single entry point for graph CRUD.

Wraps the graph store and the nearest-neighbor index so services never
write to either directly. Responsibilities:
- Validated node/edge creation with defaults and derived outgoing links
- Partial, single-record node updates
- Cascade delete (incident edges, then node, then index entry)
- Owner scoping: another owner's node is reported as not found
"""

from datetime import UTC, datetime
from typing import Any

import pydantic

from zettelgraph.core.content.parser import ContentParser
from zettelgraph.core.graph_store.base import GraphStore
from zettelgraph.core.vector_store.base import NearestNeighborIndex
from zettelgraph.models.edge import Edge
from zettelgraph.models.node import (
    Node,
    NodeCreate,
    NodeKind,
    NodeUpdate,
    Position,
    Size,
    SourceKind,
)
from zettelgraph.utils.exceptions import NotFoundError, ValidationError
from zettelgraph.utils.logger import get_logger

logger = get_logger(__name__)


class NodeRepository:
    """
    CRUD facade over the graph store and nearest-neighbor index.

    Cascade delete is sequential and non-transactional: a failure midway
    leaves the edges deleted so far gone and the node still present.
    """

    def __init__(
        self,
        graph_store: GraphStore,
        index: NearestNeighborIndex,
        parser: ContentParser | None = None,
    ):
        """
        Initialize repository.

        Args:
            graph_store: Persistence for nodes and edges
            index: Nearest-neighbor index kept in step with node embeddings
            parser: Content parser used to derive outgoing links
        """
        self.graph_store = graph_store
        self.index = index
        self.parser = parser or ContentParser()

    # ═══════════════════════════════════════════════════════════
    # NODE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def create_node(self, owner_id: str, data: NodeCreate | dict[str, Any]) -> Node:
        """
        Create a node.

        Args:
            owner_id: Owner of the new node
            data: Creation fields; kind, content, x and y are required

        Returns:
            Stored node with ID, timestamps and outgoing links filled in

        Raises:
            ValidationError: If a required field is missing or invalid
        """
        if not owner_id or not owner_id.strip():
            raise ValidationError("Owner ID cannot be empty")

        if not isinstance(data, NodeCreate):
            try:
                data = NodeCreate.model_validate(data)
            except pydantic.ValidationError as e:
                raise ValidationError(
                    f"Invalid node fields: {e.error_count()} error(s)",
                    context={"errors": e.errors(include_url=False)},
                ) from e

        now = datetime.now(UTC)
        node = Node(
            owner_id=owner_id,
            kind=data.kind,
            content=data.content,
            position=Position(x=data.x, y=data.y),
            size=Size(
                **{
                    field: value
                    for field, value in (("width", data.width), ("height", data.height))
                    if value is not None
                }
            ),
            message_ref=data.message_ref,
            conversation_ref=data.conversation_ref,
            source_kind=data.source_kind or SourceKind.MANUAL,
            source_id=data.source_id,
            source_url=data.source_url,
            parent_node_id=data.parent_node_id,
            outgoing_links=self.parser.extract_referenced_titles(data.content),
            created_at=now,
            updated_at=now,
        )

        await self.graph_store.add_node(node)

        logger.debug(
            f"Created node {node.id}",
            extra={"node_id": node.id, "owner_id": owner_id, "kind": node.kind.value},
        )
        return node

    async def find_node(self, node_id: str) -> Node | None:
        """Node by ID, or None. No owner check."""
        return await self.graph_store.get_node(node_id)

    async def get_node(self, node_id: str, owner_id: str | None = None) -> Node:
        """
        Get a node, scoped to an owner when one is given.

        Raises:
            NotFoundError: If the node doesn't exist or belongs to another owner
        """
        node = await self.graph_store.get_node(node_id)
        if node is None or (owner_id is not None and node.owner_id != owner_id):
            raise NotFoundError(f"Node not found: {node_id}", context={"node_id": node_id})
        return node

    async def update_node(
        self,
        node_id: str,
        changes: NodeUpdate | dict[str, Any],
        owner_id: str | None = None,
    ) -> Node:
        """
        Merge the provided fields into a node.

        `updated_at` is always bumped; outgoing links are recomputed when
        content is among the changes.

        Args:
            node_id: Node identifier
            changes: Fields to merge; unset fields are left alone
            owner_id: Caller's owner ID for scoping

        Returns:
            Updated node

        Raises:
            ValidationError: If a field value is invalid
            NotFoundError: If the node doesn't exist or belongs to another owner
        """
        if not isinstance(changes, NodeUpdate):
            try:
                changes = NodeUpdate.model_validate(changes)
            except pydantic.ValidationError as e:
                raise ValidationError(
                    f"Invalid node update: {e.error_count()} error(s)",
                    context={"errors": e.errors(include_url=False)},
                ) from e

        patch = {
            field: value
            for field, value in changes.model_dump(exclude_unset=True).items()
            if value is not None
        }

        if owner_id is not None:
            await self.get_node(node_id, owner_id)

        if "content" in patch:
            patch["outgoing_links"] = self.parser.extract_referenced_titles(patch["content"])
        patch["updated_at"] = datetime.now(UTC)

        node = await self.graph_store.patch_node(node_id, patch)
        if node is None:
            raise NotFoundError(f"Node not found: {node_id}", context={"node_id": node_id})

        logger.debug(
            f"Updated node {node_id}",
            extra={"node_id": node_id, "fields": sorted(patch)},
        )
        return node

    async def delete_node(self, node_id: str, owner_id: str | None = None) -> None:
        """
        Delete a node and every edge touching it.

        Order: outgoing edges, incoming edges, the node, its index entry.

        Raises:
            NotFoundError: If the node doesn't exist or belongs to another owner
        """
        await self.get_node(node_id, owner_id)

        deleted_edges = 0
        for edge in await self.graph_store.list_edges(source=node_id):
            if await self.graph_store.delete_edge(edge.id):
                deleted_edges += 1

        for edge in await self.graph_store.list_edges(target=node_id):
            if await self.graph_store.delete_edge(edge.id):
                deleted_edges += 1

        await self.graph_store.delete_node(node_id)
        await self.index.delete_node(node_id)

        logger.info(
            f"Deleted node {node_id} with {deleted_edges} incident edge(s)",
            extra={"node_id": node_id, "deleted_edges": deleted_edges},
        )

    async def update_embedding(self, node_id: str, embedding: list[float]) -> Node:
        """
        Persist a node's embedding and upsert it into the index.

        Raises:
            ValidationError: If the embedding is empty
            NotFoundError: If the node doesn't exist
        """
        if not embedding:
            raise ValidationError("Embedding cannot be empty", context={"node_id": node_id})

        node = await self.graph_store.patch_node(node_id, {"embedding": list(embedding)})
        if node is None:
            raise NotFoundError(f"Node not found: {node_id}", context={"node_id": node_id})

        await self.index.upsert_node(node)
        return node

    async def list_nodes_by_owner(self, owner_id: str) -> list[Node]:
        return await self.graph_store.list_nodes(owner_id=owner_id)

    async def list_nodes_by_kind(self, kind: NodeKind, owner_id: str | None = None) -> list[Node]:
        return await self.graph_store.list_nodes(owner_id=owner_id, kind=kind)

    async def list_nodes_by_source(self, source_id: str, owner_id: str | None = None) -> list[Node]:
        return await self.graph_store.list_nodes(owner_id=owner_id, source_id=source_id)

    async def get_nodes_by_voice_note(self, voice_note_id: str, owner_id: str) -> list[Node]:
        """Notes created from a voice note, in creation order."""
        nodes = await self.list_nodes_by_source(voice_note_id, owner_id)
        return sorted(nodes, key=lambda node: (node.created_at, node.id))

    async def list_notes(self, owner_id: str, limit: int | None = None) -> list[Node]:
        """Notes for an owner, most recently updated first."""
        notes = await self.list_nodes_by_kind(NodeKind.NOTE, owner_id)
        notes.sort(key=lambda node: node.updated_at, reverse=True)
        return notes[:limit] if limit is not None else notes

    # ═══════════════════════════════════════════════════════════
    # EDGE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def create_edge(self, source: str, target: str, label: str | None = None) -> Edge:
        """
        Create a directed edge. Duplicate edges between the same pair are allowed.

        Raises:
            ValidationError: On a self-loop or a missing endpoint ID
        """
        if not source or not target:
            raise ValidationError("Edge source and target are required")
        if source == target:
            raise ValidationError(
                "Edge cannot connect a node to itself", context={"node_id": source}
            )

        edge = Edge(source=source, target=target, label=label)
        await self.graph_store.add_edge(edge)

        logger.debug(
            f"Created edge {edge.id}",
            extra={"edge_id": edge.id, "source": source, "target": target, "label": label},
        )
        return edge

    async def get_edge(self, edge_id: str, owner_id: str | None = None) -> Edge:
        """
        Get an edge, scoped to an owner when one is given.

        Edges carry no owner of their own; an edge belongs to the owner of
        its source node, or of its target when the source is gone.

        Raises:
            NotFoundError: If the edge doesn't exist or belongs to another owner
        """
        edge = await self.graph_store.get_edge(edge_id)
        if edge is None or (owner_id is not None and not await self._owns_edge(edge, owner_id)):
            raise NotFoundError(f"Edge not found: {edge_id}", context={"edge_id": edge_id})
        return edge

    async def delete_edge(self, edge_id: str, owner_id: str | None = None) -> None:
        """
        Raises:
            NotFoundError: If the edge doesn't exist or belongs to another owner
        """
        if owner_id is not None:
            await self.get_edge(edge_id, owner_id)
        if not await self.graph_store.delete_edge(edge_id):
            raise NotFoundError(f"Edge not found: {edge_id}", context={"edge_id": edge_id})

    async def list_edges(
        self,
        source: str | None = None,
        target: str | None = None,
        owner_id: str | None = None,
    ) -> list[Edge]:
        """Edges by source and/or target, limited to the owner's nodes when one is given."""
        edges = await self.graph_store.list_edges(source=source, target=target)
        if owner_id is None:
            return edges

        owned = {node.id for node in await self.list_nodes_by_owner(owner_id)}
        return [edge for edge in edges if edge.source in owned or edge.target in owned]

    async def _owns_edge(self, edge: Edge, owner_id: str) -> bool:
        for endpoint in (edge.source, edge.target):
            node = await self.graph_store.get_node(endpoint)
            if node is not None:
                return node.owner_id == owner_id
        return False
