"""
Shared fixtures for ZettelGraph tests.

Every fixture runs against a transient in-memory SQLite graph and
deterministic stand-ins for the AI collaborators, so no network access
or model server is needed.
"""

import hashlib
import random
from collections.abc import AsyncGenerator

import pytest

from zettelgraph.config import Config
from zettelgraph.core.audio.base import AudioSource
from zettelgraph.core.embeddings.base import Embedder
from zettelgraph.core.graph_store.sqlite_store import SQLiteGraphStore
from zettelgraph.core.importers.base import HighlightSource, VideoTranscriptSource, WebPageSource
from zettelgraph.core.llm.base import LLMProvider
from zettelgraph.core.transcription.base import Transcriber
from zettelgraph.core.vector_store.scan import StoreScanIndex
from zettelgraph.models.concept import Concept, ConceptExtraction
from zettelgraph.models.imported import ImportedDocument
from zettelgraph.models.node import SourceKind
from zettelgraph.services.graph_engine import GraphEngine
from zettelgraph.services.link_resolver import LinkResolver
from zettelgraph.services.node_repository import NodeRepository

OWNER = "owner-1"
OTHER_OWNER = "owner-2"


class HashingEmbedder(Embedder):
    """Bag-of-words embedder: texts sharing words get similar vectors."""

    def __init__(self, dimension: int = 32):
        self.dimension = dimension
        self.calls: list[str] = []
        self.error: Exception | None = None

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.error:
            raise self.error

        vector = [0.0] * self.dimension
        for word in text.lower().split():
            digest = hashlib.md5(word.strip(".,!?").encode()).digest()
            vector[digest[0] % self.dimension] += 1.0
        if not any(vector):
            vector[0] = 1.0
        return vector

    async def close(self) -> None:
        pass


class ScriptedLLM(LLMProvider):
    """Returns a fixed extraction and records every prompt."""

    def __init__(self, extraction: ConceptExtraction | None = None):
        self.extraction = extraction or ConceptExtraction()
        self.prompts: list[str] = []
        self.systems: list[str | None] = []
        self.error: Exception | None = None

    async def complete(
        self, prompt, system=None, response_format=None, max_tokens=2000, temperature=0.0
    ):
        self.prompts.append(prompt)
        self.systems.append(system)
        if self.error:
            raise self.error
        return self.extraction

    async def close(self) -> None:
        pass


class ScriptedTranscriber(Transcriber):
    """Returns a fixed transcript or raises the configured error."""

    def __init__(self, text: str = "A short thought about gardening."):
        self.text = text
        self.error: Exception | None = None
        self.calls: list[tuple[bytes, str | None]] = []

    async def transcribe(self, audio: bytes, filename: str | None = None) -> str:
        self.calls.append((audio, filename))
        if self.error:
            raise self.error
        return self.text

    async def close(self) -> None:
        pass


class MemoryAudioSource(AudioSource):
    """Audio bytes keyed by reference."""

    def __init__(self, default: bytes = b"RIFF....WAVE"):
        self.default = default
        self.fetched: list[str] = []

    async def fetch(self, audio_ref: str) -> bytes:
        self.fetched.append(audio_ref)
        return self.default


class ScriptedDocumentSource(WebPageSource, VideoTranscriptSource):
    """Builds a document from the requested URL, or raises the configured error."""

    def __init__(self, source_kind: SourceKind):
        self.source_kind = source_kind
        self.error: Exception | None = None
        self.fetched: list[str] = []
        self.closed = False

    async def fetch(self, url: str) -> ImportedDocument:
        self.fetched.append(url)
        if self.error:
            raise self.error
        title = f"Imported {self.source_kind.value}"
        return ImportedDocument(
            title=title,
            content=f"# {title}\n\nBody of the page.\n\n---\nSource: {url}",
            source_kind=self.source_kind,
            source_url=url,
        )

    async def close(self) -> None:
        self.closed = True


class ScriptedHighlightSource(HighlightSource):
    """Returns a fixed list of book documents."""

    def __init__(self, documents: list[ImportedDocument] | None = None):
        self.documents = documents or []
        self.error: Exception | None = None
        self.calls: list[str | None] = []
        self.closed = False

    async def export(self, updated_after: str | None = None) -> list[ImportedDocument]:
        self.calls.append(updated_after)
        if self.error:
            raise self.error
        return list(self.documents)

    async def close(self) -> None:
        self.closed = True


def make_book(title: str, highlights: int = 1, url: str | None = None) -> ImportedDocument:
    """Readwise book document with the given highlight count."""
    return ImportedDocument(
        title=title,
        content=f"# {title}\n\n## Highlights\n\n> A highlight.",
        source_kind=SourceKind.READWISE,
        source_url=url or f"https://readwise.io/bookreview/{title.lower().replace(' ', '-')}",
        metadata={"highlight_count": highlights},
    )


def make_extraction(*titles: str, summary: str = "A summary.") -> ConceptExtraction:
    """Extraction with one concept per title."""
    return ConceptExtraction(
        concepts=[
            Concept(title=title, content=f"{title} explained in one sentence.", tags=["test"])
            for title in titles
        ],
        summary=summary,
    )


# Fixtures


@pytest.fixture
async def graph_store() -> AsyncGenerator[SQLiteGraphStore, None]:
    """Initialized in-memory SQLite graph store."""
    store = SQLiteGraphStore(db_path=":memory:")
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def index(graph_store):
    return StoreScanIndex(graph_store)


@pytest.fixture
def repository(graph_store, index):
    return NodeRepository(graph_store, index)


@pytest.fixture
def resolver(repository):
    return LinkResolver(repository)


@pytest.fixture
def embedder():
    return HashingEmbedder()


@pytest.fixture
def build_extraction():
    """Factory for scripted concept extractions."""
    return make_extraction


@pytest.fixture
def llm():
    return ScriptedLLM(make_extraction("Composting kitchen scraps"))


@pytest.fixture
def transcriber():
    return ScriptedTranscriber()


@pytest.fixture
def audio_source():
    return MemoryAudioSource()


@pytest.fixture
def web_source():
    return ScriptedDocumentSource(SourceKind.WEB)


@pytest.fixture
def video_source():
    return ScriptedDocumentSource(SourceKind.YOUTUBE)


@pytest.fixture
def highlight_source():
    return ScriptedHighlightSource([make_book("Deep Work", 3), make_book("Walden", 2)])


@pytest.fixture
def build_book():
    """Factory for Readwise book documents."""
    return make_book


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def engine(
    graph_store,
    index,
    embedder,
    llm,
    transcriber,
    audio_source,
    config,
    web_source,
    video_source,
    highlight_source,
):
    """Graph engine wired to the in-memory store and scripted collaborators."""
    return GraphEngine(
        graph_store=graph_store,
        index=index,
        embedder=embedder,
        llm=llm,
        config=config,
        transcriber=transcriber,
        audio_source=audio_source,
        rng=random.Random(7),
        web_source=web_source,
        video_source=video_source,
        highlight_source=highlight_source,
    )
