"""
Configuration for ZettelGraph.

Supports loading from:
1. Environment variables (highest priority)
2. YAML config file
3. Default values (fallback)
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class LLMConfig(BaseModel):
    """LLM provider configuration (concept extraction)."""

    provider: str = "ollama"  # ollama, openai
    model: str = "llama3.1:8b"
    base_url: str | None = None  # provider default when unset
    api_key: str | None = None
    temperature: float = 0.0
    max_tokens: int = 2000
    timeout: float = 120.0


class EmbedderConfig(BaseModel):
    """Embedder configuration."""

    provider: str = "ollama"  # ollama, openai
    model: str = "nomic-embed-text"
    base_url: str | None = None  # provider default when unset
    api_key: str | None = None
    timeout: float = 120.0
    # Optional: embedding dimension (fallback to auto-detect)
    dimension: int | None = None


class TranscriptionConfig(BaseModel):
    """Speech-to-text provider configuration."""

    provider: str = "openai"
    model: str = "whisper-1"
    base_url: str | None = None
    api_key: str | None = None
    timeout: float = 120.0
    filename: str = "audio.webm"


class ImportConfig(BaseModel):
    """External content import configuration."""

    timeout: float = 30.0
    user_agent: str = "ZettelGraph/0.1 (+https://github.com/zettelgraph)"
    max_text_chars: int = 100_000
    # Imported notes are laid out left to right from the requested position
    grid_spacing: float = 350.0
    readwise_token: str | None = None
    readwise_base_url: str = "https://readwise.io/api/v2"


class LinkingConfig(BaseModel):
    """Similarity linking configuration."""

    neighbors: int = Field(default=3, ge=1)


class IngestionConfig(BaseModel):
    """Voice note ingestion pipeline configuration."""

    context_note_limit: int = 20
    context_excerpt_chars: int = 100
    grid_spacing: float = 350.0
    origin_min: float = 100.0
    origin_jitter: float = 200.0
    max_transcript_tokens: int = 8000
    # When False, notes created earlier in the same run are excluded from linking
    link_within_batch: bool = True


class TokenizerConfig(BaseModel):
    """Token counting configuration."""

    provider: str = "tiktoken"  # tiktoken, approximate
    model: str = "cl100k_base"
    chars_per_token: float = 4.0


class AudioConfig(BaseModel):
    """Audio source configuration."""

    storage_dir: str = "data/audio"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    log_to_file: bool = True
    log_dir: str = "logs"
    file_rotation: str = "10 MB"
    file_retention: str = "7 days"
    compression: str = "zip"
    serialize: bool = True


class SQLiteConfig(BaseModel):
    """SQLite graph store configuration."""

    db_path: str = "data/zettelgraph.db"


class QdrantConfig(BaseModel):
    """Qdrant nearest-neighbor index configuration."""

    url: str = "http://localhost:6333"
    collection_name: str = "nodes"
    use_grpc: bool = False
    hnsw_m: int = 16
    hnsw_ef_construct: int = 100
    on_disk: bool = False
    timeout: int = 30


class Neo4jConfig(BaseModel):
    """Neo4j graph database configuration."""

    uri: str = "bolt://localhost:7687"
    username: str = "neo4j"
    password: str = "password"
    database: str = "neo4j"


class Config(BaseModel):
    """Main configuration."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    embedder: EmbedderConfig = Field(default_factory=EmbedderConfig)
    transcription: TranscriptionConfig = Field(default_factory=TranscriptionConfig)
    linking: LinkingConfig = Field(default_factory=LinkingConfig)
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
    tokenizer: TokenizerConfig = Field(default_factory=TokenizerConfig)
    audio: AudioConfig = Field(default_factory=AudioConfig)
    importer: ImportConfig = Field(default_factory=ImportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    sqlite: SQLiteConfig = Field(default_factory=SQLiteConfig)
    qdrant: QdrantConfig = Field(default_factory=QdrantConfig)
    neo4j: Neo4jConfig = Field(default_factory=Neo4jConfig)

    # Graph store backend: sqlite, neo4j
    graph_backend: str = "sqlite"
    # Nearest-neighbor backend: scan (brute force over the graph store), qdrant
    vector_backend: str = "scan"

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Config":
        """
        Load configuration from environment variables.

        Priority: .env file -> system environment variables -> defaults

        Args:
            env_file: Optional path to .env file (default: .env in project root)

        Returns:
            Config instance

        Environment variables:
            ZETTEL_LLM_PROVIDER / _MODEL / _BASE_URL / _API_KEY
            ZETTEL_EMBEDDER_PROVIDER / _MODEL / _BASE_URL / _API_KEY / _DIMENSION
            ZETTEL_TRANSCRIPTION_MODEL / _BASE_URL / _API_KEY
            ZETTEL_LINK_NEIGHBORS: Edges created per similarity link
            ZETTEL_INGEST_LINK_WITHIN_BATCH: Link notes created in the same run
            ZETTEL_AUDIO_DIR: Directory holding uploaded audio
            ZETTEL_IMPORT_TIMEOUT: Timeout for web, YouTube and Readwise requests
            ZETTEL_READWISE_TOKEN: Readwise access token; Readwise import is off without it
            ZETTEL_GRAPH_BACKEND: Graph backend (sqlite, neo4j)
            ZETTEL_VECTOR_BACKEND: Nearest-neighbor backend (scan, qdrant)
            ZETTEL_SQLITE_PATH: SQLite database file
            ZETTEL_NEO4J_URI / _USERNAME / _PASSWORD / _DATABASE
            ZETTEL_QDRANT_URL / _COLLECTION
            ZETTEL_LOG_LEVEL / ZETTEL_LOG_TO_FILE / ZETTEL_LOG_DIR
        """
        # Load .env file if provided or exists
        if env_file:
            load_dotenv(env_file)
        elif Path(".env").exists():
            load_dotenv()

        def get_env(key: str, default: Any = None) -> Any:
            """Get environment variable with type conversion."""
            value = os.getenv(key)
            if value is None or value == "":
                return default
            # Convert boolean strings
            if isinstance(default, bool):
                return str(value).lower() in ("true", "1", "yes")
            # Convert numeric strings
            if isinstance(default, int):
                return int(value)
            if isinstance(default, float):
                return float(value)
            return value

        return cls(
            llm=LLMConfig(
                provider=get_env("ZETTEL_LLM_PROVIDER", "ollama"),
                model=get_env("ZETTEL_LLM_MODEL", "llama3.1:8b"),
                base_url=get_env("ZETTEL_LLM_BASE_URL"),
                api_key=get_env("ZETTEL_LLM_API_KEY"),
                temperature=get_env("ZETTEL_LLM_TEMPERATURE", 0.0),
                max_tokens=get_env("ZETTEL_LLM_MAX_TOKENS", 2000),
                timeout=get_env("ZETTEL_LLM_TIMEOUT", 120.0),
            ),
            embedder=EmbedderConfig(
                provider=get_env("ZETTEL_EMBEDDER_PROVIDER", "ollama"),
                model=get_env("ZETTEL_EMBEDDER_MODEL", "nomic-embed-text"),
                base_url=get_env("ZETTEL_EMBEDDER_BASE_URL"),
                api_key=get_env("ZETTEL_EMBEDDER_API_KEY"),
                timeout=get_env("ZETTEL_EMBEDDER_TIMEOUT", 120.0),
                dimension=(
                    int(get_env("ZETTEL_EMBEDDER_DIMENSION"))
                    if get_env("ZETTEL_EMBEDDER_DIMENSION")
                    else None
                ),
            ),
            transcription=TranscriptionConfig(
                model=get_env("ZETTEL_TRANSCRIPTION_MODEL", "whisper-1"),
                base_url=get_env("ZETTEL_TRANSCRIPTION_BASE_URL"),
                api_key=get_env("ZETTEL_TRANSCRIPTION_API_KEY", get_env("OPENAI_API_KEY")),
                timeout=get_env("ZETTEL_TRANSCRIPTION_TIMEOUT", 120.0),
            ),
            linking=LinkingConfig(
                neighbors=get_env("ZETTEL_LINK_NEIGHBORS", 3),
            ),
            ingestion=IngestionConfig(
                link_within_batch=get_env("ZETTEL_INGEST_LINK_WITHIN_BATCH", True),
                max_transcript_tokens=get_env("ZETTEL_INGEST_MAX_TRANSCRIPT_TOKENS", 8000),
            ),
            audio=AudioConfig(
                storage_dir=get_env("ZETTEL_AUDIO_DIR", "data/audio"),
            ),
            importer=ImportConfig(
                timeout=get_env("ZETTEL_IMPORT_TIMEOUT", 30.0),
                readwise_token=get_env("ZETTEL_READWISE_TOKEN", get_env("READWISE_ACCESS_TOKEN")),
            ),
            graph_backend=get_env("ZETTEL_GRAPH_BACKEND", "sqlite"),
            vector_backend=get_env("ZETTEL_VECTOR_BACKEND", "scan"),
            sqlite=SQLiteConfig(
                db_path=get_env("ZETTEL_SQLITE_PATH", "data/zettelgraph.db"),
            ),
            neo4j=Neo4jConfig(
                uri=get_env("ZETTEL_NEO4J_URI", "bolt://localhost:7687"),
                username=get_env("ZETTEL_NEO4J_USERNAME", "neo4j"),
                password=get_env("ZETTEL_NEO4J_PASSWORD", "password"),
                database=get_env("ZETTEL_NEO4J_DATABASE", "neo4j"),
            ),
            qdrant=QdrantConfig(
                url=get_env("ZETTEL_QDRANT_URL", "http://localhost:6333"),
                collection_name=get_env("ZETTEL_QDRANT_COLLECTION", "nodes"),
                use_grpc=get_env("ZETTEL_QDRANT_USE_GRPC", False),
                on_disk=get_env("ZETTEL_QDRANT_ON_DISK", False),
            ),
            logging=LoggingConfig(
                level=get_env("ZETTEL_LOG_LEVEL", "INFO"),
                log_to_file=get_env("ZETTEL_LOG_TO_FILE", True),
                log_dir=get_env("ZETTEL_LOG_DIR", "logs"),
                file_rotation=get_env("ZETTEL_LOG_FILE_ROTATION", "10 MB"),
                file_retention=get_env("ZETTEL_LOG_FILE_RETENTION", "7 days"),
                compression=get_env("ZETTEL_LOG_COMPRESSION", "zip"),
                serialize=get_env("ZETTEL_LOG_SERIALIZE", True),
            ),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            yaml.YAMLError: If YAML is invalid
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    @classmethod
    def from_env_or_yaml(
        cls, yaml_path: str | Path | None = None, env_file: str | Path | None = None
    ) -> "Config":
        """
        Load configuration with priority: env vars > YAML > defaults.

        Args:
            yaml_path: Optional path to YAML config
            env_file: Optional path to .env file

        Returns:
            Config instance
        """
        config_dict: dict[str, Any] = {}
        if yaml_path and Path(yaml_path).exists():
            with open(yaml_path) as f:
                config_dict = yaml.safe_load(f) or {}

        env_config = cls.from_env(env_file=env_file)

        # Env sections that differ from defaults override YAML
        default = cls()
        final_dict = {**config_dict}
        for section in (
            "llm",
            "embedder",
            "transcription",
            "linking",
            "ingestion",
            "audio",
            "importer",
            "sqlite",
            "neo4j",
            "qdrant",
            "logging",
        ):
            env_section = getattr(env_config, section)
            if env_section != getattr(default, section):
                final_dict[section] = env_section.model_dump()

        for field_name in ("graph_backend", "vector_backend"):
            if getattr(env_config, field_name) != getattr(default, field_name):
                final_dict[field_name] = getattr(env_config, field_name)

        return cls(**final_dict) if final_dict else env_config


# Default config instance
default_config = Config()
