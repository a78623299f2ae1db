"""
Base interface for graph storage.

Stores three record sets: nodes, edges and voice notes. Each method is
atomic for a single record only; multi-record consistency (cascade delete)
is the caller's responsibility.
"""

from abc import ABC, abstractmethod
from typing import Any

from zettelgraph.models.edge import Edge
from zettelgraph.models.node import Node, NodeKind
from zettelgraph.models.voice_note import VoiceNote, VoiceNoteStatus

# Columns a node patch may touch
NODE_PATCH_FIELDS = frozenset(
    {"content", "x", "y", "width", "height", "outgoing_links", "embedding", "updated_at"}
)

# Columns a voice note patch may touch
VOICE_NOTE_PATCH_FIELDS = frozenset({"status", "transcription", "error_message", "updated_at"})


class GraphStore(ABC):
    """Abstract base class for graph storage implementations."""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the graph store (create tables/schema)."""
        pass

    # ═══════════════════════════════════════════════════════════
    # NODE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def add_node(self, node: Node) -> None:
        """
        Insert a node.

        Args:
            node: Node to store
        """
        pass

    @abstractmethod
    async def get_node(self, node_id: str) -> Node | None:
        """
        Retrieve a node by ID.

        Args:
            node_id: Node identifier

        Returns:
            Node or None if not found
        """
        pass

    @abstractmethod
    async def patch_node(self, node_id: str, changes: dict[str, Any]) -> Node | None:
        """
        Apply a partial update to a single node in one write.

        Args:
            node_id: Node identifier
            changes: Field values keyed by NODE_PATCH_FIELDS names

        Returns:
            Updated node, or None if the node doesn't exist
        """
        pass

    @abstractmethod
    async def delete_node(self, node_id: str) -> bool:
        """
        Delete a single node record. Incident edges are left untouched.

        Args:
            node_id: Node identifier

        Returns:
            True if a node was deleted
        """
        pass

    @abstractmethod
    async def list_nodes(
        self,
        owner_id: str | None = None,
        kind: NodeKind | None = None,
        source_id: str | None = None,
        parent_node_id: str | None = None,
        with_embedding: bool = False,
    ) -> list[Node]:
        """
        List nodes matching every given filter.

        Args:
            owner_id: Restrict to one owner
            kind: Restrict to one node kind
            source_id: Restrict to nodes created from one voice note
            parent_node_id: Restrict to nodes split from one parent
            with_embedding: Only nodes that carry an embedding

        Returns:
            Matching nodes, no ordering guarantee
        """
        pass

    # ═══════════════════════════════════════════════════════════
    # EDGE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def add_edge(self, edge: Edge) -> None:
        """
        Insert an edge. Endpoints are not checked.

        Args:
            edge: Edge to store
        """
        pass

    @abstractmethod
    async def get_edge(self, edge_id: str) -> Edge | None:
        """
        Get edge by ID.

        Args:
            edge_id: Edge identifier

        Returns:
            Edge or None
        """
        pass

    @abstractmethod
    async def delete_edge(self, edge_id: str) -> bool:
        """
        Delete an edge.

        Args:
            edge_id: Edge identifier

        Returns:
            True if an edge was deleted
        """
        pass

    @abstractmethod
    async def list_edges(self, source: str | None = None, target: str | None = None) -> list[Edge]:
        """
        List edges, optionally by source and/or target node.

        Args:
            source: Source node ID
            target: Target node ID

        Returns:
            Matching edges
        """
        pass

    # ═══════════════════════════════════════════════════════════
    # VOICE NOTE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def add_voice_note(self, voice_note: VoiceNote) -> None:
        """Insert a voice note record."""
        pass

    @abstractmethod
    async def get_voice_note(self, voice_note_id: str) -> VoiceNote | None:
        """Retrieve a voice note by ID."""
        pass

    @abstractmethod
    async def patch_voice_note(
        self, voice_note_id: str, changes: dict[str, Any]
    ) -> VoiceNote | None:
        """
        Apply a partial update to a voice note in one write.

        Args:
            voice_note_id: Voice note identifier
            changes: Field values keyed by VOICE_NOTE_PATCH_FIELDS names

        Returns:
            Updated voice note, or None if it doesn't exist
        """
        pass

    @abstractmethod
    async def list_voice_notes(
        self,
        owner_id: str | None = None,
        status: VoiceNoteStatus | None = None,
        limit: int = 20,
    ) -> list[VoiceNote]:
        """
        List voice notes, newest first.

        Args:
            owner_id: Restrict to one owner
            status: Restrict to one status
            limit: Maximum results

        Returns:
            Matching voice notes
        """
        pass

    # ═══════════════════════════════════════════════════════════
    # UTILITY METHODS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def count_nodes(self, owner_id: str | None = None) -> int:
        """Count nodes, optionally for one owner."""
        pass

    @abstractmethod
    async def count_edges(self) -> int:
        """Count edges."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the connection to the graph store."""
        pass


def check_patch(changes: dict[str, Any], allowed: frozenset[str]) -> None:
    """Reject patches naming fields outside the allowed set."""
    unknown = set(changes) - allowed
    if unknown:
        raise ValueError(f"Unsupported patch fields: {sorted(unknown)}")
