"""
Graph Engine - integrates all components behind one facade.

Brings together:
- Graph store and nearest-neighbor index
- Embedder, LLM and transcription providers
- Repository, link resolution, similarity linking and daily notes
- The voice note ingestion pipeline
- Web, YouTube and Readwise importers
"""

import random

from zettelgraph.config import Config
from zettelgraph.core.audio.base import AudioSource
from zettelgraph.core.audio.local import LocalAudioSource
from zettelgraph.core.content.parser import ContentParser
from zettelgraph.core.embeddings.base import Embedder
from zettelgraph.core.factory import (
    EmbedderFactory,
    GraphStoreFactory,
    ImporterFactory,
    LLMFactory,
    TranscriberFactory,
    VectorStoreFactory,
)
from zettelgraph.core.graph_store.base import GraphStore
from zettelgraph.core.importers.base import HighlightSource, VideoTranscriptSource, WebPageSource
from zettelgraph.core.llm.base import LLMProvider
from zettelgraph.core.tokenizer.tokenizer import Tokenizer
from zettelgraph.core.transcription.base import Transcriber
from zettelgraph.core.vector_store.base import NearestNeighborIndex
from zettelgraph.models.edge import Backlink, Edge, NoteBacklink
from zettelgraph.models.imported import ReadwiseImportResult
from zettelgraph.models.ingestion import IngestionResult
from zettelgraph.models.node import Node, NodeCreate, NodeKind, NodeUpdate
from zettelgraph.models.voice_note import VoiceNote
from zettelgraph.services.concept_extractor import ConceptExtractor
from zettelgraph.services.daily_notes import DailyNoteService
from zettelgraph.services.importer import ImportService
from zettelgraph.services.ingestion_pipeline import IngestionPipeline
from zettelgraph.services.link_resolver import LinkResolver
from zettelgraph.services.node_repository import NodeRepository
from zettelgraph.services.similarity_linker import SimilarityLinker
from zettelgraph.services.voice_notes import VoiceNoteService
from zettelgraph.utils.exceptions import ConfigurationError
from zettelgraph.utils.logger import get_logger

logger = get_logger(__name__)


class GraphEngine:
    """
    Knowledge graph engine.

    Features:
    - Node and edge CRUD with cascade delete
    - Wiki-link title resolution and backlinks
    - Embedding-based similarity links
    - Daily notes
    - Voice note ingestion into linked atomic notes
    - Notes imported from web pages, YouTube and Readwise
    """

    def __init__(
        self,
        graph_store: GraphStore,
        index: NearestNeighborIndex,
        embedder: Embedder,
        llm: LLMProvider,
        config: Config,
        transcriber: Transcriber | None = None,
        audio_source: AudioSource | None = None,
        parser: ContentParser | None = None,
        rng: random.Random | None = None,
        web_source: WebPageSource | None = None,
        video_source: VideoTranscriptSource | None = None,
        highlight_source: HighlightSource | None = None,
    ):
        """
        Initialize Graph Engine.

        Args:
            graph_store: Node, edge and voice note persistence
            index: Nearest-neighbor index over node embeddings
            embedder: Embedding provider
            llm: LLM provider for concept extraction
            config: Configuration object
            transcriber: Speech-to-text provider; voice note processing is
                unavailable without one
            audio_source: Audio loader (defaults to the configured directory)
            parser: Content parser (defaults to wiki-link span rendering)
            rng: Random source for ingestion layout
            web_source: Web page fetcher (defaults to httpx)
            video_source: YouTube transcript fetcher
            highlight_source: Readwise exporter; created only when a token
                is configured
        """
        self.config = config
        self.graph_store = graph_store
        self.index = index
        self.embedder = embedder
        self.llm = llm
        self.transcriber = transcriber
        self.audio_source = audio_source or LocalAudioSource(config.audio.storage_dir)
        self.parser = parser or ContentParser()

        self.repository = NodeRepository(graph_store, index, self.parser)
        self.resolver = LinkResolver(self.repository, self.parser)
        self.linker = SimilarityLinker(
            self.repository, embedder, index, default_k=config.linking.neighbors
        )
        self.daily_notes = DailyNoteService(self.repository, self.resolver)
        self.voice_notes = VoiceNoteService(graph_store)
        self.extractor = ConceptExtractor(
            llm,
            tokenizer=Tokenizer(config.tokenizer),
            config=config.ingestion,
            max_tokens=config.llm.max_tokens,
            temperature=config.llm.temperature,
        )

        self.pipeline: IngestionPipeline | None = None
        if transcriber is not None:
            self.pipeline = IngestionPipeline(
                voice_notes=self.voice_notes,
                repository=self.repository,
                linker=self.linker,
                extractor=self.extractor,
                transcriber=transcriber,
                audio_source=self.audio_source,
                config=config.ingestion,
                rng=rng,
                audio_filename=config.transcription.filename,
            )

        if highlight_source is None and config.importer.readwise_token:
            highlight_source = ImporterFactory.create_highlights(config.importer)
        self.importer = ImportService(
            self.repository,
            web=web_source or ImporterFactory.create_web(config.importer),
            video=video_source or ImporterFactory.create_video(config.importer),
            highlights=highlight_source,
            config=config.importer,
        )

    @classmethod
    def from_config(cls, config: Config) -> "GraphEngine":
        """
        Build an engine with every component created from configuration.

        Transcription is left disabled (with a warning) when no API key is set.
        """
        logger.info(
            f"Configuration: LLM={config.llm.provider}/{config.llm.model}, "
            f"Embedder={config.embedder.provider}/{config.embedder.model}, "
            f"Graph={config.graph_backend}, Index={config.vector_backend}"
        )

        graph_store = GraphStoreFactory.create(config)
        index = VectorStoreFactory.create(config, graph_store)
        embedder = EmbedderFactory.create(config.embedder)
        llm = LLMFactory.create(config.llm)

        transcriber = None
        if config.transcription.api_key:
            transcriber = TranscriberFactory.create(config.transcription)
        else:
            logger.warning("No transcription API key configured; voice notes cannot be processed")

        if not config.importer.readwise_token:
            logger.info("No Readwise token configured; Readwise import disabled")

        return cls(
            graph_store=graph_store,
            index=index,
            embedder=embedder,
            llm=llm,
            config=config,
            transcriber=transcriber,
        )

    async def initialize(self) -> None:
        """Initialize stores."""
        logger.info("Initializing Graph Engine")

        await self.graph_store.initialize()
        logger.info("Graph store initialized")

        await self.index.initialize()
        logger.info("Nearest-neighbor index initialized")

        logger.info("Graph Engine ready")

    # ═══════════════════════════════════════════════════════════
    # NODES AND EDGES
    # ═══════════════════════════════════════════════════════════

    async def create_node(self, owner_id: str, data: NodeCreate | dict) -> Node:
        return await self.repository.create_node(owner_id, data)

    async def get_node(self, node_id: str, owner_id: str | None = None) -> Node:
        return await self.repository.get_node(node_id, owner_id)

    async def update_node(
        self, node_id: str, changes: NodeUpdate | dict, owner_id: str | None = None
    ) -> Node:
        return await self.repository.update_node(node_id, changes, owner_id)

    async def delete_node(self, node_id: str, owner_id: str | None = None) -> None:
        await self.repository.delete_node(node_id, owner_id)

    async def list_nodes_by_owner(self, owner_id: str) -> list[Node]:
        return await self.repository.list_nodes_by_owner(owner_id)

    async def list_nodes_by_kind(self, kind: NodeKind, owner_id: str | None = None) -> list[Node]:
        return await self.repository.list_nodes_by_kind(kind, owner_id)

    async def list_nodes_by_source(self, source_id: str, owner_id: str | None = None) -> list[Node]:
        return await self.repository.list_nodes_by_source(source_id, owner_id)

    async def list_notes(self, owner_id: str, limit: int | None = None) -> list[Node]:
        return await self.repository.list_notes(owner_id, limit)

    async def update_embedding(self, node_id: str, embedding: list[float]) -> Node:
        return await self.repository.update_embedding(node_id, embedding)

    async def create_edge(self, source: str, target: str, label: str | None = None) -> Edge:
        return await self.repository.create_edge(source, target, label)

    async def get_edge(self, edge_id: str, owner_id: str | None = None) -> Edge:
        return await self.repository.get_edge(edge_id, owner_id)

    async def delete_edge(self, edge_id: str, owner_id: str | None = None) -> None:
        await self.repository.delete_edge(edge_id, owner_id)

    async def list_edges(
        self,
        source: str | None = None,
        target: str | None = None,
        owner_id: str | None = None,
    ) -> list[Edge]:
        return await self.repository.list_edges(source, target, owner_id)

    async def render_node_html(self, node_id: str, owner_id: str | None = None) -> str:
        """Node content as editor HTML, upgrading legacy plain text."""
        node = await self.repository.get_node(node_id, owner_id)
        return self.parser.to_editor_html(node.content)

    # ═══════════════════════════════════════════════════════════
    # LINKS
    # ═══════════════════════════════════════════════════════════

    async def find_node_by_title(self, title: str, owner_id: str | None = None) -> Node | None:
        return await self.resolver.find_node_by_title(title, owner_id)

    async def resolve_or_create(self, title: str, owner_id: str) -> str:
        return await self.resolver.resolve_or_create(title, owner_id)

    async def get_backlinks(self, node_id: str, strict: bool = False) -> list[Backlink]:
        return await self.resolver.get_backlinks(node_id, strict)

    async def get_textual_backlinks(
        self, title: str, owner_id: str | None = None
    ) -> list[NoteBacklink]:
        return await self.resolver.get_textual_backlinks(title, owner_id)

    async def link_by_similarity(
        self,
        node_id: str,
        text: str,
        k: int | None = None,
        exclude_ids: set[str] | None = None,
    ) -> list[Edge]:
        return await self.linker.link_by_similarity(node_id, text, k, exclude_ids)

    # ═══════════════════════════════════════════════════════════
    # DAILY NOTES
    # ═══════════════════════════════════════════════════════════

    async def find_daily_note(self, date_string: str, owner_id: str) -> Node | None:
        return await self.daily_notes.find_daily_note(date_string, owner_id)

    async def create_daily_note(self, date_string: str, owner_id: str) -> Node:
        return await self.daily_notes.create_daily_note(date_string, owner_id)

    async def get_or_create_daily_note(self, date_string: str, owner_id: str) -> Node:
        return await self.daily_notes.get_or_create_daily_note(date_string, owner_id)

    # ═══════════════════════════════════════════════════════════
    # VOICE NOTES
    # ═══════════════════════════════════════════════════════════

    async def create_voice_note(
        self, owner_id: str, audio_ref: str, duration_seconds: float = 0.0
    ) -> VoiceNote:
        return await self.voice_notes.create(owner_id, audio_ref, duration_seconds)

    async def get_voice_note(self, voice_note_id: str, owner_id: str | None = None) -> VoiceNote:
        return await self.voice_notes.get(voice_note_id, owner_id)

    async def list_voice_notes(self, owner_id: str, limit: int = 20) -> list[VoiceNote]:
        return await self.voice_notes.list(owner_id, limit)

    async def get_nodes_by_voice_note(self, voice_note_id: str, owner_id: str) -> list[Node]:
        return await self.repository.get_nodes_by_voice_note(voice_note_id, owner_id)

    async def process_voice_note(
        self, voice_note_id: str, owner_id: str | None = None
    ) -> IngestionResult:
        """
        Run the ingestion pipeline for a voice note.

        Raises:
            ConfigurationError: If no transcriber is configured
        """
        return await self._require_pipeline().process(voice_note_id, owner_id)

    async def process_voice_notes(
        self, voice_note_ids: list[str], owner_id: str | None = None
    ) -> list[IngestionResult | BaseException]:
        return await self._require_pipeline().process_many(voice_note_ids, owner_id)

    # ═══════════════════════════════════════════════════════════
    # IMPORTS
    # ═══════════════════════════════════════════════════════════

    async def import_url(self, url: str, owner_id: str, x: float = 0.0, y: float = 0.0) -> Node:
        return await self.importer.import_url(url, owner_id, x, y)

    async def import_youtube(
        self, url: str, owner_id: str, x: float = 0.0, y: float = 0.0
    ) -> Node:
        return await self.importer.import_youtube(url, owner_id, x, y)

    async def import_readwise(
        self,
        owner_id: str,
        updated_after: str | None = None,
        x: float = 0.0,
        y: float = 0.0,
    ) -> ReadwiseImportResult:
        return await self.importer.import_readwise(owner_id, updated_after, x, y)

    def _require_pipeline(self) -> IngestionPipeline:
        if self.pipeline is None:
            raise ConfigurationError("Transcription provider not configured")
        return self.pipeline

    async def close(self) -> None:
        """Close all connections."""
        await self.graph_store.close()
        await self.index.close()
        await self.embedder.close()
        await self.llm.close()
        if self.transcriber is not None:
            await self.transcriber.close()
        await self.importer.close()
