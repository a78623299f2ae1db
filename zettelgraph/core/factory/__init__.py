"""
Factory modules for creating ZettelGraph components.

Provides modular factories for LLM, Embedder, Transcriber, Graph Store,
nearest-neighbor index and external content sources.
"""

from zettelgraph.core.factory.embedder_factory import EmbedderFactory
from zettelgraph.core.factory.graph_factory import GraphStoreFactory
from zettelgraph.core.factory.importer_factory import ImporterFactory
from zettelgraph.core.factory.llm_factory import LLMFactory
from zettelgraph.core.factory.transcriber_factory import TranscriberFactory
from zettelgraph.core.factory.vector_factory import VectorStoreFactory

__all__ = [
    "LLMFactory",
    "EmbedderFactory",
    "GraphStoreFactory",
    "TranscriberFactory",
    "VectorStoreFactory",
    "ImporterFactory",
]
