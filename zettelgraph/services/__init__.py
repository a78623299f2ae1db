"""
Services for ZettelGraph.

- NodeRepository: node/edge CRUD with cascade delete
- LinkResolver: title lookup and backlinks
- SimilarityLinker: embedding-based edges
- ConceptExtractor: transcript to atomic concepts
- VoiceNoteService: voice note records and status transitions
- IngestionPipeline: voice note to linked notes
- DailyNoteService: one note per day
- ImportService: web pages, YouTube transcripts and Readwise highlights as notes
- GraphEngine: facade wiring everything together
"""

from zettelgraph.services.concept_extractor import ConceptExtractor
from zettelgraph.services.daily_notes import DailyNoteService
from zettelgraph.services.graph_engine import GraphEngine
from zettelgraph.services.importer import ImportService
from zettelgraph.services.ingestion_pipeline import IngestionPipeline, compose_note_content
from zettelgraph.services.link_resolver import LinkResolver
from zettelgraph.services.node_repository import NodeRepository
from zettelgraph.services.similarity_linker import SimilarityLinker, similarity_label
from zettelgraph.services.voice_notes import VoiceNoteService

__all__ = [
    "ConceptExtractor",
    "DailyNoteService",
    "GraphEngine",
    "ImportService",
    "IngestionPipeline",
    "LinkResolver",
    "NodeRepository",
    "SimilarityLinker",
    "VoiceNoteService",
    "compose_note_content",
    "similarity_label",
]
