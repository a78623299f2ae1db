"""
Imported content models.
"""

from typing import Any

from pydantic import BaseModel, Field

from zettelgraph.models.node import SourceKind


class ImportedDocument(BaseModel):
    """
    Content fetched from an external source, ready to become a note.

    `content` is already composed in the note layout for its source
    (heading, body and a source line or metadata block).
    """

    title: str = Field(..., min_length=1)
    content: str
    source_kind: SourceKind
    source_url: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class ReadwiseImportResult(BaseModel):
    """Notes created from one Readwise export."""

    node_ids: list[str] = Field(default_factory=list)
    total_books: int = Field(default=0, ge=0)
    total_highlights: int = Field(default=0, ge=0)
