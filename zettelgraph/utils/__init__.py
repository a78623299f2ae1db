"""Utility modules for ZettelGraph."""

from zettelgraph.utils.exceptions import (
    ConfigurationError,
    ConsistencyError,
    EmbeddingError,
    ExternalServiceError,
    ExtractionError,
    GraphStoreError,
    ImportSourceError,
    LLMError,
    NotFoundError,
    SearchIndexError,
    StoreError,
    TranscriptionError,
    ValidationError,
    ZettelGraphError,
)
from zettelgraph.utils.id_generator import (
    generate_edge_id,
    generate_node_id,
    generate_voice_note_id,
)
from zettelgraph.utils.logger import get_logger, setup_logging

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    # ID Generators
    "generate_node_id",
    "generate_edge_id",
    "generate_voice_note_id",
    # Exceptions
    "ZettelGraphError",
    "StoreError",
    "GraphStoreError",
    "ImportSourceError",
    "ValidationError",
    "NotFoundError",
    "ConfigurationError",
    "ConsistencyError",
    "ExternalServiceError",
    "TranscriptionError",
    "ExtractionError",
    "EmbeddingError",
    "SearchIndexError",
    "LLMError",
]
