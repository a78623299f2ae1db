"""
ZettelGraph FastAPI Application

A REST API server for the ZettelGraph knowledge graph engine.
Provides endpoints for nodes, edges, wiki-link resolution, daily notes,
voice note ingestion and imports from web pages, YouTube and Readwise.
The caller's owner ID arrives in the X-Owner-Id header.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Header, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from zettelgraph.config import Config
from zettelgraph.models.edge import Edge
from zettelgraph.models.imported import ReadwiseImportResult
from zettelgraph.models.ingestion import IngestionResult
from zettelgraph.models.node import Node, NodeCreate, NodeKind, NodeUpdate
from zettelgraph.models.voice_note import VoiceNote
from zettelgraph.services.graph_engine import GraphEngine
from zettelgraph.utils.exceptions import (
    ConfigurationError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
    ZettelGraphError,
)
from zettelgraph.utils.logger import get_logger, setup_logging

# Global engine instance
engine: GraphEngine | None = None
logger = get_logger(__name__)


# Pydantic models for API
class NodeResponse(BaseModel):
    """Node as returned by the API (embedding vector omitted)."""

    id: str
    owner_id: str
    kind: str
    content: str
    x: float
    y: float
    width: float
    height: float
    source_kind: str
    source_id: str | None = None
    source_url: str | None = None
    parent_node_id: str | None = None
    message_ref: str | None = None
    conversation_ref: str | None = None
    outgoing_links: list[str]
    has_embedding: bool
    created_at: str
    updated_at: str

    @classmethod
    def from_node(cls, node: Node) -> "NodeResponse":
        return cls(
            id=node.id,
            owner_id=node.owner_id,
            kind=node.kind.value,
            content=node.content,
            x=node.position.x,
            y=node.position.y,
            width=node.size.width,
            height=node.size.height,
            source_kind=node.source_kind.value,
            source_id=node.source_id,
            source_url=node.source_url,
            parent_node_id=node.parent_node_id,
            message_ref=node.message_ref,
            conversation_ref=node.conversation_ref,
            outgoing_links=node.outgoing_links,
            has_embedding=node.has_embedding,
            created_at=node.created_at.isoformat(),
            updated_at=node.updated_at.isoformat(),
        )


class CreateEdgeRequest(BaseModel):
    """Request model for creating an edge."""

    source: str
    target: str
    label: str | None = None


class BacklinkResponse(BaseModel):
    """Node linking to another, with the linking edge or title."""

    node: NodeResponse
    edge_id: str | None = None
    edge_label: str | None = None
    title: str | None = None


class ResolveTitleRequest(BaseModel):
    """Request model for resolving a wiki-link title."""

    title: str = Field(..., description="Wiki-link title to resolve or create")


class SimilarLinksRequest(BaseModel):
    """Request model for similarity linking."""

    text: str | None = Field(default=None, description="Text to embed (defaults to node content)")
    k: int | None = Field(default=None, ge=1, le=50)


class CreateVoiceNoteRequest(BaseModel):
    """Request model for registering an uploaded voice note."""

    audio_ref: str = Field(..., description="Reference to the stored audio")
    duration_seconds: float = Field(default=0.0, ge=0)


class ImportUrlRequest(BaseModel):
    """Request model for importing a web page or YouTube video."""

    url: str = Field(..., description="Page or video URL")
    x: float = Field(default=0.0, description="Canvas x position")
    y: float = Field(default=0.0, description="Canvas y position")


class ImportReadwiseRequest(BaseModel):
    """Request model for a Readwise export."""

    updated_after: str | None = Field(
        default=None, description="Only books updated after this ISO timestamp"
    )
    x: float = Field(default=0.0)
    y: float = Field(default=0.0)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    engine_initialized: bool
    graph_store: str
    vector_index: str
    embedding_model: str
    transcription_enabled: bool


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    global engine

    # Load configuration from environment or use defaults
    config = Config.from_env()

    setup_logging(
        level=config.logging.level,
        log_to_file=config.logging.log_to_file,
        log_dir=config.logging.log_dir,
        file_rotation=config.logging.file_rotation,
        file_retention=config.logging.file_retention,
        compression=config.logging.compression,
        serialize=config.logging.serialize,
    )

    logger.info("Starting ZettelGraph server")

    engine = GraphEngine.from_config(config)
    await engine.initialize()
    logger.info("ZettelGraph engine initialized")

    yield

    # Cleanup
    logger.info("Shutting down ZettelGraph server")
    await engine.close()
    engine = None
    logger.info("Cleanup complete")


# Create FastAPI app
app = FastAPI(
    title="ZettelGraph API",
    description="Personal knowledge graph with wiki-links and voice note ingestion",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _require_engine() -> GraphEngine:
    if not engine:
        raise HTTPException(status_code=503, detail="Engine not initialized")
    return engine


def _http_error(error: Exception, action: str) -> HTTPException:
    """Map an engine error onto an HTTP status."""
    if isinstance(error, HTTPException):
        return error
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=error.message)
    if isinstance(error, ValidationError):
        return HTTPException(status_code=422, detail=error.message)
    if isinstance(error, ExternalServiceError):
        logger.error(f"Upstream failure while {action}", extra={"error": error.message})
        return HTTPException(status_code=502, detail=error.message)
    if isinstance(error, ConfigurationError):
        logger.error(f"Configuration error while {action}", extra={"error": error.message})
        return HTTPException(status_code=500, detail=error.message)

    logger.error(f"Error {action}", extra={"error": str(error), "error_type": type(error).__name__})
    detail = error.message if isinstance(error, ZettelGraphError) else str(error)
    return HTTPException(status_code=500, detail=detail)


# Health check endpoint
@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    config = engine.config if engine else Config()
    return HealthResponse(
        status="healthy" if engine else "initializing",
        engine_initialized=engine is not None,
        graph_store=config.graph_backend,
        vector_index=config.vector_backend,
        embedding_model=f"{config.embedder.model} ({config.embedder.provider})",
        transcription_enabled=bool(engine and engine.pipeline),
    )


# Node endpoints
@app.post("/nodes", response_model=NodeResponse, status_code=201)
async def create_node(request: NodeCreate, owner_id: str = Header(..., alias="X-Owner-Id")):
    """Create a node. Wiki-links in the content are indexed as outgoing links."""
    current = _require_engine()
    try:
        node = await current.create_node(owner_id, request)
        return NodeResponse.from_node(node)
    except Exception as e:
        raise _http_error(e, "creating node") from e


@app.get("/nodes", response_model=list[NodeResponse])
async def list_nodes(
    owner_id: str = Header(..., alias="X-Owner-Id"),
    kind: NodeKind | None = Query(default=None),
    source_id: str | None = Query(default=None),
):
    """List the caller's nodes, optionally by kind or originating voice note."""
    current = _require_engine()
    try:
        if source_id:
            nodes = await current.list_nodes_by_source(source_id, owner_id)
            if kind:
                nodes = [node for node in nodes if node.kind == kind]
        elif kind:
            nodes = await current.list_nodes_by_kind(kind, owner_id)
        else:
            nodes = await current.list_nodes_by_owner(owner_id)
        return [NodeResponse.from_node(node) for node in nodes]
    except Exception as e:
        raise _http_error(e, "listing nodes") from e


@app.get("/nodes/{node_id}", response_model=NodeResponse)
async def get_node(node_id: str, owner_id: str = Header(..., alias="X-Owner-Id")):
    """Retrieve a node by ID."""
    current = _require_engine()
    try:
        return NodeResponse.from_node(await current.get_node(node_id, owner_id))
    except Exception as e:
        raise _http_error(e, "getting node") from e


@app.patch("/nodes/{node_id}", response_model=NodeResponse)
async def update_node(
    node_id: str, request: NodeUpdate, owner_id: str = Header(..., alias="X-Owner-Id")
):
    """Merge the provided fields into a node."""
    current = _require_engine()
    try:
        node = await current.update_node(node_id, request, owner_id)
        return NodeResponse.from_node(node)
    except Exception as e:
        raise _http_error(e, "updating node") from e


@app.delete("/nodes/{node_id}", status_code=204)
async def delete_node(node_id: str, owner_id: str = Header(..., alias="X-Owner-Id")):
    """Delete a node together with every edge touching it."""
    current = _require_engine()
    try:
        await current.delete_node(node_id, owner_id)
        return Response(status_code=204)
    except Exception as e:
        raise _http_error(e, "deleting node") from e


@app.get("/nodes/{node_id}/backlinks", response_model=list[BacklinkResponse])
async def get_backlinks(node_id: str, owner_id: str = Header(..., alias="X-Owner-Id")):
    """Nodes linking to this node through explicit edges."""
    current = _require_engine()
    try:
        await current.get_node(node_id, owner_id)
        backlinks = await current.get_backlinks(node_id)
        return [
            BacklinkResponse(
                node=NodeResponse.from_node(backlink.node),
                edge_id=backlink.edge_id,
                edge_label=backlink.edge_label,
            )
            for backlink in backlinks
        ]
    except Exception as e:
        raise _http_error(e, "getting backlinks") from e


@app.get("/nodes/{node_id}/html")
async def get_node_html(node_id: str, owner_id: str = Header(..., alias="X-Owner-Id")):
    """Node content as editor HTML."""
    current = _require_engine()
    try:
        return {"node_id": node_id, "html": await current.render_node_html(node_id, owner_id)}
    except Exception as e:
        raise _http_error(e, "rendering node") from e


@app.post("/nodes/{node_id}/similar-links", response_model=list[Edge])
async def link_similar(
    node_id: str, request: SimilarLinksRequest, owner_id: str = Header(..., alias="X-Owner-Id")
):
    """Embed a node and link it to its most similar notes."""
    current = _require_engine()
    try:
        node = await current.get_node(node_id, owner_id)
        return await current.link_by_similarity(node_id, request.text or node.content, request.k)
    except Exception as e:
        raise _http_error(e, "linking by similarity") from e


# Edge endpoints
@app.post("/edges", response_model=Edge, status_code=201)
async def create_edge(request: CreateEdgeRequest, owner_id: str = Header(..., alias="X-Owner-Id")):
    """Create a directed edge between two of the caller's nodes."""
    current = _require_engine()
    try:
        await current.get_node(request.source, owner_id)
        await current.get_node(request.target, owner_id)
        return await current.create_edge(request.source, request.target, request.label)
    except Exception as e:
        raise _http_error(e, "creating edge") from e


@app.get("/edges", response_model=list[Edge])
async def list_edges(
    source: str | None = Query(default=None),
    target: str | None = Query(default=None),
    owner_id: str = Header(..., alias="X-Owner-Id"),
):
    """List the caller's edges by source and/or target node."""
    current = _require_engine()
    try:
        return await current.list_edges(source, target, owner_id)
    except Exception as e:
        raise _http_error(e, "listing edges") from e


@app.get("/edges/{edge_id}", response_model=Edge)
async def get_edge(edge_id: str, owner_id: str = Header(..., alias="X-Owner-Id")):
    """Get one of the caller's edges."""
    current = _require_engine()
    try:
        return await current.get_edge(edge_id, owner_id)
    except Exception as e:
        raise _http_error(e, "getting edge") from e


@app.delete("/edges/{edge_id}", status_code=204)
async def delete_edge(edge_id: str, owner_id: str = Header(..., alias="X-Owner-Id")):
    """Delete one of the caller's edges."""
    current = _require_engine()
    try:
        await current.delete_edge(edge_id, owner_id)
        return Response(status_code=204)
    except Exception as e:
        raise _http_error(e, "deleting edge") from e


# Note endpoints
@app.get("/notes", response_model=list[NodeResponse])
async def list_notes(
    owner_id: str = Header(..., alias="X-Owner-Id"),
    limit: int | None = Query(default=None, ge=1, le=1000),
):
    """The caller's notes, most recently updated first."""
    current = _require_engine()
    try:
        return [NodeResponse.from_node(node) for node in await current.list_notes(owner_id, limit)]
    except Exception as e:
        raise _http_error(e, "listing notes") from e


@app.get("/notes/by-title", response_model=NodeResponse)
async def find_note_by_title(title: str = Query(...), owner_id: str = Header(..., alias="X-Owner-Id")):
    """Find the note with a given title (oldest first when titles repeat)."""
    current = _require_engine()
    try:
        node = await current.find_node_by_title(title, owner_id)
        if node is None:
            raise HTTPException(status_code=404, detail="Note not found")
        return NodeResponse.from_node(node)
    except Exception as e:
        raise _http_error(e, "finding note by title") from e


@app.post("/notes/resolve")
async def resolve_note(request: ResolveTitleRequest, owner_id: str = Header(..., alias="X-Owner-Id")):
    """Resolve a wiki-link title to a note ID, creating a stub note if needed."""
    current = _require_engine()
    try:
        return {"node_id": await current.resolve_or_create(request.title, owner_id)}
    except Exception as e:
        raise _http_error(e, "resolving title") from e


@app.get("/notes/backlinks", response_model=list[BacklinkResponse])
async def get_textual_backlinks(
    title: str = Query(...), owner_id: str = Header(..., alias="X-Owner-Id")
):
    """Notes referencing a title through [[wiki-links]]."""
    current = _require_engine()
    try:
        backlinks = await current.get_textual_backlinks(title, owner_id)
        return [
            BacklinkResponse(node=NodeResponse.from_node(backlink.node), title=backlink.title)
            for backlink in backlinks
        ]
    except Exception as e:
        raise _http_error(e, "getting textual backlinks") from e


# Daily note endpoints
@app.get("/daily-notes/{date_string}", response_model=NodeResponse)
async def find_daily_note(date_string: str, owner_id: str = Header(..., alias="X-Owner-Id")):
    """The daily note for a YYYY-MM-DD date."""
    current = _require_engine()
    try:
        node = await current.find_daily_note(date_string, owner_id)
        if node is None:
            raise HTTPException(status_code=404, detail="Daily note not found")
        return NodeResponse.from_node(node)
    except Exception as e:
        raise _http_error(e, "finding daily note") from e


@app.post("/daily-notes/{date_string}", response_model=NodeResponse)
async def get_or_create_daily_note(date_string: str, owner_id: str = Header(..., alias="X-Owner-Id")):
    """Get the daily note for a date, creating it from the template if missing."""
    current = _require_engine()
    try:
        return NodeResponse.from_node(await current.get_or_create_daily_note(date_string, owner_id))
    except Exception as e:
        raise _http_error(e, "creating daily note") from e


# Voice note endpoints
@app.post("/voice-notes", response_model=VoiceNote, status_code=201)
async def create_voice_note(
    request: CreateVoiceNoteRequest, owner_id: str = Header(..., alias="X-Owner-Id")
):
    """Register an uploaded recording."""
    current = _require_engine()
    try:
        return await current.create_voice_note(owner_id, request.audio_ref, request.duration_seconds)
    except Exception as e:
        raise _http_error(e, "creating voice note") from e


@app.get("/voice-notes", response_model=list[VoiceNote])
async def list_voice_notes(
    owner_id: str = Header(..., alias="X-Owner-Id"),
    limit: int = Query(default=20, ge=1, le=100),
):
    """The caller's voice notes, newest first."""
    current = _require_engine()
    try:
        return await current.list_voice_notes(owner_id, limit)
    except Exception as e:
        raise _http_error(e, "listing voice notes") from e


@app.get("/voice-notes/{voice_note_id}", response_model=VoiceNote)
async def get_voice_note(voice_note_id: str, owner_id: str = Header(..., alias="X-Owner-Id")):
    """Retrieve a voice note and its processing status."""
    current = _require_engine()
    try:
        return await current.get_voice_note(voice_note_id, owner_id)
    except Exception as e:
        raise _http_error(e, "getting voice note") from e


@app.post("/voice-notes/{voice_note_id}/process", response_model=IngestionResult)
async def process_voice_note(voice_note_id: str, owner_id: str = Header(..., alias="X-Owner-Id")):
    """
    Run the ingestion pipeline: transcribe, extract concepts, create linked notes.

    The voice note's status reflects the outcome even when this request fails.
    """
    current = _require_engine()
    try:
        return await current.process_voice_note(voice_note_id, owner_id)
    except Exception as e:
        raise _http_error(e, "processing voice note") from e


@app.get("/voice-notes/{voice_note_id}/nodes", response_model=list[NodeResponse])
async def get_voice_note_nodes(voice_note_id: str, owner_id: str = Header(..., alias="X-Owner-Id")):
    """Notes created from a voice note."""
    current = _require_engine()
    try:
        await current.get_voice_note(voice_note_id, owner_id)
        nodes = await current.get_nodes_by_voice_note(voice_note_id, owner_id)
        return [NodeResponse.from_node(node) for node in nodes]
    except Exception as e:
        raise _http_error(e, "listing voice note nodes") from e


# Import endpoints
@app.post("/import/url", response_model=NodeResponse, status_code=201)
async def import_url(request: ImportUrlRequest, owner_id: str = Header(..., alias="X-Owner-Id")):
    """Import a web page as a note."""
    current = _require_engine()
    try:
        node = await current.import_url(request.url, owner_id, request.x, request.y)
        return NodeResponse.from_node(node)
    except Exception as e:
        raise _http_error(e, "importing URL") from e


@app.post("/import/youtube", response_model=NodeResponse, status_code=201)
async def import_youtube(request: ImportUrlRequest, owner_id: str = Header(..., alias="X-Owner-Id")):
    """Import a YouTube video transcript as a note."""
    current = _require_engine()
    try:
        node = await current.import_youtube(request.url, owner_id, request.x, request.y)
        return NodeResponse.from_node(node)
    except Exception as e:
        raise _http_error(e, "importing YouTube video") from e


@app.post("/import/readwise", response_model=ReadwiseImportResult, status_code=201)
async def import_readwise(
    request: ImportReadwiseRequest, owner_id: str = Header(..., alias="X-Owner-Id")
):
    """Import Readwise books and highlights, one note per book."""
    current = _require_engine()
    try:
        return await current.import_readwise(
            owner_id, request.updated_after, request.x, request.y
        )
    except Exception as e:
        raise _http_error(e, "importing from Readwise") from e
