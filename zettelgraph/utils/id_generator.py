"""
ID generation utilities for ZettelGraph.

Provides consistent ID generation for all entity types:
- Nodes: node_xxx
- Edges: edge_xxx
- Voice notes: voice_xxx
"""

from uuid import uuid4


def generate_node_id() -> str:
    """
    Generate unique Node ID.

    Returns:
        ID in format "node_xxx" where xxx is 12 hex characters
    """
    return f"node_{uuid4().hex[:12]}"


def generate_edge_id() -> str:
    """
    Generate unique Edge ID.

    Returns:
        ID in format "edge_xxx" where xxx is 12 hex characters
    """
    return f"edge_{uuid4().hex[:12]}"


def generate_voice_note_id() -> str:
    """
    Generate unique VoiceNote ID.

    Returns:
        ID in format "voice_xxx" where xxx is 12 hex characters
    """
    return f"voice_{uuid4().hex[:12]}"
