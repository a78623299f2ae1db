"""
Data models for ZettelGraph.

- Node, NodeCreate, NodeUpdate: canvas nodes and their write models
- Edge, Backlink, NoteBacklink: explicit links and backlink views
- VoiceNote, VoiceNoteStatus: uploaded recordings and their state machine
- Concept, ConceptExtraction: structured extraction output
- IngestionResult: report of a pipeline run
- ImportedDocument, ReadwiseImportResult: content fetched from web, YouTube and Readwise
"""

from zettelgraph.models.concept import Concept, ConceptExtraction
from zettelgraph.models.edge import Backlink, Edge, NoteBacklink
from zettelgraph.models.imported import ImportedDocument, ReadwiseImportResult
from zettelgraph.models.ingestion import IngestionResult
from zettelgraph.models.node import (
    DEFAULT_NODE_HEIGHT,
    DEFAULT_NODE_WIDTH,
    Node,
    NodeCreate,
    NodeKind,
    NodeUpdate,
    Position,
    Size,
    SourceKind,
)
from zettelgraph.models.voice_note import VoiceNote, VoiceNoteStatus

__all__ = [
    # Nodes
    "Node",
    "NodeCreate",
    "NodeUpdate",
    "NodeKind",
    "SourceKind",
    "Position",
    "Size",
    "DEFAULT_NODE_WIDTH",
    "DEFAULT_NODE_HEIGHT",
    # Edges
    "Edge",
    "Backlink",
    "NoteBacklink",
    # Voice notes
    "VoiceNote",
    "VoiceNoteStatus",
    # Extraction
    "Concept",
    "ConceptExtraction",
    "IngestionResult",
    # Imports
    "ImportedDocument",
    "ReadwiseImportResult",
]
