"""ZettelGraph: a personal knowledge graph with voice note ingestion."""

__version__ = "0.1.0"
