"""Graph node models."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

from zettelgraph.utils.id_generator import generate_node_id

DEFAULT_NODE_WIDTH = 300.0
DEFAULT_NODE_HEIGHT = 150.0


class NodeKind(str, Enum):
    """Types of nodes on the canvas."""

    TEXT = "text"
    CHAT_REFERENCE = "chat_reference"
    NOTE = "note"


class SourceKind(str, Enum):
    """Where a node's content came from."""

    MANUAL = "manual"
    VOICE = "voice"
    CHAT = "chat"
    AI_EXTRACTED = "ai_extracted"
    WEB = "web"
    YOUTUBE = "youtube"
    READWISE = "readwise"


class Position(BaseModel):
    """Canvas coordinates of a node."""

    x: float
    y: float


class Size(BaseModel):
    """Canvas dimensions of a node."""

    width: float = DEFAULT_NODE_WIDTH
    height: float = DEFAULT_NODE_HEIGHT


class Node(BaseModel):
    """
    Atomic content unit placed on the graph.

    `outgoing_links` caches the lower-cased titles referenced from `content`
    and is recomputed on every content write. `embedding` is empty until the
    node has been embedded; nodes without one are invisible to similarity search.
    """

    id: str = Field(default_factory=generate_node_id)
    owner_id: str
    kind: NodeKind
    content: str
    position: Position
    size: Size = Field(default_factory=Size)

    message_ref: str | None = None
    conversation_ref: str | None = None

    # Source tracking
    source_kind: SourceKind = SourceKind.MANUAL
    source_id: str | None = Field(default=None, description="Originating voice note ID")
    source_url: str | None = None
    parent_node_id: str | None = Field(default=None, description="Node this was split from")

    outgoing_links: list[str] = Field(default_factory=list)
    embedding: list[float] | None = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def has_embedding(self) -> bool:
        return bool(self.embedding)

    def is_note(self) -> bool:
        return self.kind == NodeKind.NOTE


class NodeCreate(BaseModel):
    """Fields accepted when creating a node. kind, content, x and y are required."""

    kind: NodeKind
    content: str
    x: float
    y: float
    width: float | None = None
    height: float | None = None
    message_ref: str | None = None
    conversation_ref: str | None = None
    source_kind: SourceKind | None = None
    source_id: str | None = None
    source_url: str | None = None
    parent_node_id: str | None = None


class NodeUpdate(BaseModel):
    """Partial node update. Only fields explicitly set are merged."""

    content: str | None = None
    x: float | None = None
    y: float | None = None
    width: float | None = None
    height: float | None = None
