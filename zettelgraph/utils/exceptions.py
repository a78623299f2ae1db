"""
Custom exception hierarchy for ZettelGraph.

Provides structured error types for better error handling and debugging.
All exceptions inherit from ZettelGraphError for easy catching.
"""


class ZettelGraphError(Exception):
    """
    Base exception for all ZettelGraph errors.
    All custom exceptions should inherit from this class.
    """

    def __init__(self, message: str, context: dict | None = None):
        """
        Initialize ZettelGraph error.
        Args:
            message: Error message
            context: Optional context dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class StoreError(ZettelGraphError):
    """
    Base exception for store operations.
    Used for errors related to data storage operations.
    """

    pass


class GraphStoreError(StoreError):
    """
    Graph store operation errors.
    Raised when node, edge or voice note persistence fails.
    """

    pass


class ValidationError(ZettelGraphError):
    """
    Validation errors.
    Raised for malformed arguments: missing required fields, self-loop edges,
    illegal voice note status transitions.
    """

    pass


class NotFoundError(ZettelGraphError):
    """
    Resource not found errors.
    Raised when a node, edge or voice note doesn't exist or belongs to another owner.
    """

    pass


class ConfigurationError(ZettelGraphError):
    """
    Configuration errors.
    Raised when configuration is invalid or missing required values.
    """

    pass


class ConsistencyError(ZettelGraphError):
    """
    Graph consistency errors.
    Raised (or logged) when a dangling edge is detected at read time.
    """

    pass


class ExternalServiceError(ZettelGraphError):
    """
    Base exception for external AI collaborators and content sources.
    The ingestion pipeline records these on the voice note before re-raising.
    """

    pass


class TranscriptionError(ExternalServiceError):
    """Audio transcription failed."""

    pass


class ExtractionError(ExternalServiceError):
    """Concept extraction from a transcript failed."""

    pass


class EmbeddingError(ExternalServiceError):
    """
    Embedding generation errors.
    Raised when embedding generation fails.
    """

    pass


class SearchIndexError(ExternalServiceError):
    """
    Nearest-neighbor index errors.
    Raised when upserting into or querying the similarity index fails.
    """

    pass


class LLMError(ExternalServiceError):
    """
    LLM operation errors.
    Raised when LLM operations fail (API errors, timeouts, etc.).
    """

    pass


class ImportSourceError(ExternalServiceError):
    """Fetching content from a web page, YouTube or Readwise failed."""

    pass
