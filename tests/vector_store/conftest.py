"""
Shared fixtures for nearest-neighbor index tests.
"""

from unittest.mock import AsyncMock

import pytest

from zettelgraph.core.vector_store.qdrant import QdrantNodeIndex


@pytest.fixture
def qdrant_index():
    """Qdrant index with a mocked async client."""
    index = QdrantNodeIndex(url="http://localhost:6333", collection_name="test_nodes")
    index.client = AsyncMock()
    return index
