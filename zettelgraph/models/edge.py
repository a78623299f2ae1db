"""Graph edge models."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from zettelgraph.models.node import Node
from zettelgraph.utils.id_generator import generate_edge_id


class Edge(BaseModel):
    """Directed, optionally labelled connection between two nodes."""

    id: str = Field(default_factory=generate_edge_id)
    source: str  # Source node ID
    target: str  # Target node ID
    label: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class Backlink(BaseModel):
    """A node linking to another through an explicit edge."""

    node: Node
    edge_id: str
    edge_label: str | None = None


class NoteBacklink(BaseModel):
    """A note referencing a title through a wiki-link in its content."""

    node: Node
    title: str
