"""
SQLite graph store implementation.

Local, file-backed storage for nodes, edges and voice notes using aiosqlite.
Edges carry no foreign keys: cascade on node delete is done by the caller.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from zettelgraph.core.graph_store.base import (
    NODE_PATCH_FIELDS,
    VOICE_NOTE_PATCH_FIELDS,
    GraphStore,
    check_patch,
)
from zettelgraph.models.edge import Edge
from zettelgraph.models.node import Node, NodeKind, Position, Size, SourceKind
from zettelgraph.models.voice_note import VoiceNote, VoiceNoteStatus
from zettelgraph.utils.exceptions import GraphStoreError
from zettelgraph.utils.logger import get_logger

logger = get_logger(__name__)


class SQLiteGraphStore(GraphStore):
    """
    SQLite-based graph store.

    Features:
    - Fast local storage
    - JSON columns for outgoing links and embeddings
    - Secondary indexes matching the lookup paths (owner, source, target, status)
    - Single-statement patches for record-level atomicity
    """

    def __init__(self, db_path: str = "data/zettelgraph.db"):
        """
        Initialize SQLite graph store.

        Args:
            db_path: Path to SQLite database file (":memory:" for a transient store)
        """
        self.db_path = db_path
        self.connection: aiosqlite.Connection | None = None

        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    async def connect(self) -> None:
        """Establish connection to SQLite."""
        if self.connection is None:
            try:
                self.connection = await aiosqlite.connect(self.db_path)
                self.connection.row_factory = aiosqlite.Row
                await self.connection.execute("PRAGMA journal_mode = WAL")
                await self.connection.commit()
            except Exception as e:
                logger.error(
                    f"Failed to open SQLite database: {e}",
                    extra={"db_path": self.db_path, "error": str(e)},
                )
                raise GraphStoreError(f"Failed to open SQLite database: {e}") from e

    async def initialize(self) -> None:
        """Initialize database schema."""
        await self.connect()

        await self.connection.execute(
            """
            CREATE TABLE IF NOT EXISTS nodes (
                id TEXT PRIMARY KEY,
                owner_id TEXT NOT NULL,
                kind TEXT NOT NULL,
                content TEXT NOT NULL,
                x REAL NOT NULL,
                y REAL NOT NULL,
                width REAL NOT NULL,
                height REAL NOT NULL,
                message_ref TEXT,
                conversation_ref TEXT,
                source_kind TEXT NOT NULL,
                source_id TEXT,
                source_url TEXT,
                parent_node_id TEXT,
                outgoing_links TEXT DEFAULT '[]',
                embedding TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """
        )

        await self.connection.execute(
            """
            CREATE TABLE IF NOT EXISTS edges (
                id TEXT PRIMARY KEY,
                source TEXT NOT NULL,
                target TEXT NOT NULL,
                label TEXT,
                created_at TEXT NOT NULL
            )
        """
        )

        await self.connection.execute(
            """
            CREATE TABLE IF NOT EXISTS voice_notes (
                id TEXT PRIMARY KEY,
                owner_id TEXT NOT NULL,
                audio_ref TEXT NOT NULL,
                duration_seconds REAL NOT NULL,
                transcription TEXT,
                status TEXT NOT NULL,
                error_message TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """
        )

        for statement in (
            "CREATE INDEX IF NOT EXISTS idx_nodes_owner ON nodes(owner_id)",
            "CREATE INDEX IF NOT EXISTS idx_nodes_kind ON nodes(kind)",
            "CREATE INDEX IF NOT EXISTS idx_nodes_source_id ON nodes(source_id)",
            "CREATE INDEX IF NOT EXISTS idx_nodes_parent ON nodes(parent_node_id)",
            "CREATE INDEX IF NOT EXISTS idx_edges_source ON edges(source)",
            "CREATE INDEX IF NOT EXISTS idx_edges_target ON edges(target)",
            "CREATE INDEX IF NOT EXISTS idx_voice_notes_owner ON voice_notes(owner_id)",
            "CREATE INDEX IF NOT EXISTS idx_voice_notes_status ON voice_notes(status)",
        ):
            await self.connection.execute(statement)

        await self.connection.commit()

    # ═══════════════════════════════════════════════════════════
    # NODE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def add_node(self, node: Node) -> None:
        """Insert a node."""
        await self.connect()

        try:
            await self.connection.execute(
                """
                INSERT INTO nodes (
                    id, owner_id, kind, content, x, y, width, height,
                    message_ref, conversation_ref, source_kind, source_id, source_url,
                    parent_node_id, outgoing_links, embedding, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    node.id,
                    node.owner_id,
                    node.kind.value,
                    node.content,
                    node.position.x,
                    node.position.y,
                    node.size.width,
                    node.size.height,
                    node.message_ref,
                    node.conversation_ref,
                    node.source_kind.value,
                    node.source_id,
                    node.source_url,
                    node.parent_node_id,
                    json.dumps(node.outgoing_links),
                    json.dumps(node.embedding) if node.embedding else None,
                    node.created_at.isoformat(),
                    node.updated_at.isoformat(),
                ),
            )
            await self.connection.commit()
        except Exception as e:
            logger.error(
                f"Failed to add node {node.id}: {e}",
                extra={"node_id": node.id, "error": str(e)},
            )
            raise GraphStoreError(f"Failed to add node: {e}") from e

    async def get_node(self, node_id: str) -> Node | None:
        """Retrieve a node by ID."""
        await self.connect()

        cursor = await self.connection.execute("SELECT * FROM nodes WHERE id = ?", (node_id,))
        row = await cursor.fetchone()

        return self._row_to_node(row) if row else None

    async def patch_node(self, node_id: str, changes: dict[str, Any]) -> Node | None:
        """Apply a partial update in a single UPDATE statement."""
        check_patch(changes, NODE_PATCH_FIELDS)
        await self.connect()

        if changes:
            assignments = ", ".join(f"{column} = ?" for column in changes)
            params = [self._encode_node_value(column, value) for column, value in changes.items()]
            params.append(node_id)

            try:
                cursor = await self.connection.execute(
                    f"UPDATE nodes SET {assignments} WHERE id = ?", params
                )
                await self.connection.commit()
            except Exception as e:
                logger.error(
                    f"Failed to patch node {node_id}: {e}",
                    extra={"node_id": node_id, "fields": sorted(changes), "error": str(e)},
                )
                raise GraphStoreError(f"Failed to patch node: {e}") from e

            if cursor.rowcount == 0:
                return None

        return await self.get_node(node_id)

    async def delete_node(self, node_id: str) -> bool:
        """Delete a node record."""
        await self.connect()

        cursor = await self.connection.execute("DELETE FROM nodes WHERE id = ?", (node_id,))
        await self.connection.commit()
        return cursor.rowcount > 0

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

        query = "SELECT * FROM nodes WHERE 1=1"
        params: list[Any] = []

        if owner_id is not None:
            query += " AND owner_id = ?"
            params.append(owner_id)

        if kind is not None:
            query += " AND kind = ?"
            params.append(NodeKind(kind).value)

        if source_id is not None:
            query += " AND source_id = ?"
            params.append(source_id)

        if parent_node_id is not None:
            query += " AND parent_node_id = ?"
            params.append(parent_node_id)

        if with_embedding:
            query += " AND embedding IS NOT NULL"

        cursor = await self.connection.execute(query, params)
        rows = await cursor.fetchall()

        return [self._row_to_node(row) for row in rows]

    # ═══════════════════════════════════════════════════════════
    # EDGE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def add_edge(self, edge: Edge) -> None:
        """Insert an edge."""
        await self.connect()

        try:
            await self.connection.execute(
                "INSERT INTO edges (id, source, target, label, created_at) VALUES (?, ?, ?, ?, ?)",
                (edge.id, edge.source, edge.target, edge.label, edge.created_at.isoformat()),
            )
            await self.connection.commit()
        except Exception as e:
            logger.error(
                f"Failed to add edge: {e}",
                extra={"source": edge.source, "target": edge.target, "error": str(e)},
            )
            raise GraphStoreError(f"Failed to add edge: {e}") from e

    async def get_edge(self, edge_id: str) -> Edge | None:
        """Get edge by ID."""
        await self.connect()

        cursor = await self.connection.execute("SELECT * FROM edges WHERE id = ?", (edge_id,))
        row = await cursor.fetchone()

        return self._row_to_edge(row) if row else None

    async def delete_edge(self, edge_id: str) -> bool:
        """Delete an edge."""
        await self.connect()

        cursor = await self.connection.execute("DELETE FROM edges WHERE id = ?", (edge_id,))
        await self.connection.commit()
        return cursor.rowcount > 0

    async def list_edges(self, source: str | None = None, target: str | None = None) -> list[Edge]:
        """List edges by source and/or target."""
        await self.connect()

        query = "SELECT * FROM edges WHERE 1=1"
        params: list[Any] = []

        if source is not None:
            query += " AND source = ?"
            params.append(source)

        if target is not None:
            query += " AND target = ?"
            params.append(target)

        query += " ORDER BY created_at"

        cursor = await self.connection.execute(query, params)
        rows = await cursor.fetchall()

        return [self._row_to_edge(row) for row in rows]

    # ═══════════════════════════════════════════════════════════
    # VOICE NOTE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def add_voice_note(self, voice_note: VoiceNote) -> None:
        """Insert a voice note record."""
        await self.connect()

        try:
            await self.connection.execute(
                """
                INSERT INTO voice_notes (
                    id, owner_id, audio_ref, duration_seconds, transcription,
                    status, error_message, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    voice_note.id,
                    voice_note.owner_id,
                    voice_note.audio_ref,
                    voice_note.duration_seconds,
                    voice_note.transcription,
                    voice_note.status.value,
                    voice_note.error_message,
                    voice_note.created_at.isoformat(),
                    voice_note.updated_at.isoformat(),
                ),
            )
            await self.connection.commit()
        except Exception as e:
            logger.error(
                f"Failed to add voice note {voice_note.id}: {e}",
                extra={"voice_note_id": voice_note.id, "error": str(e)},
            )
            raise GraphStoreError(f"Failed to add voice note: {e}") from e

    async def get_voice_note(self, voice_note_id: str) -> VoiceNote | None:
        """Retrieve a voice note by ID."""
        await self.connect()

        cursor = await self.connection.execute(
            "SELECT * FROM voice_notes WHERE id = ?", (voice_note_id,)
        )
        row = await cursor.fetchone()

        return self._row_to_voice_note(row) if row else None

    async def patch_voice_note(
        self, voice_note_id: str, changes: dict[str, Any]
    ) -> VoiceNote | None:
        """Apply a partial update in a single UPDATE statement."""
        check_patch(changes, VOICE_NOTE_PATCH_FIELDS)
        await self.connect()

        if changes:
            assignments = ", ".join(f"{column} = ?" for column in changes)
            params = [_encode_scalar(value) for value in changes.values()]
            params.append(voice_note_id)

            try:
                cursor = await self.connection.execute(
                    f"UPDATE voice_notes SET {assignments} WHERE id = ?", params
                )
                await self.connection.commit()
            except Exception as e:
                logger.error(
                    f"Failed to patch voice note {voice_note_id}: {e}",
                    extra={"voice_note_id": voice_note_id, "error": str(e)},
                )
                raise GraphStoreError(f"Failed to patch voice note: {e}") from e

            if cursor.rowcount == 0:
                return None

        return await self.get_voice_note(voice_note_id)

    async def list_voice_notes(
        self,
        owner_id: str | None = None,
        status: VoiceNoteStatus | None = None,
        limit: int = 20,
    ) -> list[VoiceNote]:
        """List voice notes, newest first."""
        await self.connect()

        query = "SELECT * FROM voice_notes WHERE 1=1"
        params: list[Any] = []

        if owner_id is not None:
            query += " AND owner_id = ?"
            params.append(owner_id)

        if status is not None:
            query += " AND status = ?"
            params.append(VoiceNoteStatus(status).value)

        query += " ORDER BY created_at DESC LIMIT ?"
        params.append(limit)

        cursor = await self.connection.execute(query, params)
        rows = await cursor.fetchall()

        return [self._row_to_voice_note(row) for row in rows]

    # ═══════════════════════════════════════════════════════════
    # UTILITY METHODS
    # ═══════════════════════════════════════════════════════════

    async def count_nodes(self, owner_id: str | None = None) -> int:
        """Count nodes."""
        await self.connect()

        if owner_id is None:
            cursor = await self.connection.execute("SELECT COUNT(*) FROM nodes")
        else:
            cursor = await self.connection.execute(
                "SELECT COUNT(*) FROM nodes WHERE owner_id = ?", (owner_id,)
            )
        row = await cursor.fetchone()

        return row[0] if row else 0

    async def count_edges(self) -> int:
        """Count edges."""
        await self.connect()

        cursor = await self.connection.execute("SELECT COUNT(*) FROM edges")
        row = await cursor.fetchone()

        return row[0] if row else 0

    async def close(self) -> None:
        """Close the connection."""
        if self.connection is not None:
            await self.connection.close()
            self.connection = None

    # ═══════════════════════════════════════════════════════════
    # HELPER METHODS
    # ═══════════════════════════════════════════════════════════

    @staticmethod
    def _encode_node_value(column: str, value: Any) -> Any:
        if column == "outgoing_links":
            return json.dumps(list(value or []))
        if column == "embedding":
            return json.dumps(list(value)) if value else None
        return _encode_scalar(value)

    def _row_to_node(self, row: aiosqlite.Row) -> Node:
        """Convert database row to Node."""
        return Node(
            id=row["id"],
            owner_id=row["owner_id"],
            kind=NodeKind(row["kind"]),
            content=row["content"],
            position=Position(x=row["x"], y=row["y"]),
            size=Size(width=row["width"], height=row["height"]),
            message_ref=row["message_ref"],
            conversation_ref=row["conversation_ref"],
            source_kind=SourceKind(row["source_kind"]),
            source_id=row["source_id"],
            source_url=row["source_url"],
            parent_node_id=row["parent_node_id"],
            outgoing_links=json.loads(row["outgoing_links"]) if row["outgoing_links"] else [],
            embedding=json.loads(row["embedding"]) if row["embedding"] else None,
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _row_to_edge(self, row: aiosqlite.Row) -> Edge:
        """Convert database row to Edge."""
        return Edge(
            id=row["id"],
            source=row["source"],
            target=row["target"],
            label=row["label"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def _row_to_voice_note(self, row: aiosqlite.Row) -> VoiceNote:
        """Convert database row to VoiceNote."""
        return VoiceNote(
            id=row["id"],
            owner_id=row["owner_id"],
            audio_ref=row["audio_ref"],
            duration_seconds=row["duration_seconds"],
            transcription=row["transcription"],
            status=VoiceNoteStatus(row["status"]),
            error_message=row["error_message"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


def _encode_scalar(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if hasattr(value, "value"):  # Enum members
        return value.value
    return value
