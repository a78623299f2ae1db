"""
Shared test fixtures for graph store tests.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from zettelgraph.core.graph_store.neo4j_store import Neo4jGraphStore


def create_mock_session():
    """Create a properly configured mock session for async context manager."""
    mock_session = AsyncMock()
    mock_session_context = MagicMock()
    mock_session_context.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session_context.__aexit__ = AsyncMock(return_value=None)
    return mock_session, mock_session_context


@pytest.fixture
def neo4j_store():
    """Create Neo4j store for testing."""
    return Neo4jGraphStore(
        uri="bolt://localhost:7687",
        username="neo4j",
        password="password",
        database="neo4j",
    )


@pytest.fixture
def mocked_neo4j(neo4j_store):
    """Neo4j store with a mocked driver; yields (store, session)."""
    session, session_context = create_mock_session()
    neo4j_store.driver = MagicMock()
    neo4j_store.driver.session.return_value = session_context
    neo4j_store.driver.close = AsyncMock()
    return neo4j_store, session
