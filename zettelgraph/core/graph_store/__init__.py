"""
Graph store implementations for ZettelGraph.

Provides abstract base and concrete implementations for node, edge and
voice note storage.

Available backends:
- SQLiteGraphStore: Local, file-backed storage (default)
- Neo4jGraphStore: Production-grade graph database
"""

from zettelgraph.core.graph_store.base import GraphStore
from zettelgraph.core.graph_store.neo4j_store import Neo4jGraphStore
from zettelgraph.core.graph_store.sqlite_store import SQLiteGraphStore

__all__ = [
    "GraphStore",
    "Neo4jGraphStore",
    "SQLiteGraphStore",
]
