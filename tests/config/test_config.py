"""
Tests for configuration management.

Tests config loading from:
1. Defaults
2. Environment variables
3. YAML files
4. Combined (env overrides YAML)
"""

import os

import pytest
import yaml

from zettelgraph.config import Config, LinkingConfig, LLMConfig

ENV_KEYS = [
    "ZETTEL_LLM_PROVIDER",
    "ZETTEL_LLM_MODEL",
    "ZETTEL_LLM_API_KEY",
    "ZETTEL_EMBEDDER_DIMENSION",
    "ZETTEL_TRANSCRIPTION_API_KEY",
    "OPENAI_API_KEY",
    "ZETTEL_LINK_NEIGHBORS",
    "ZETTEL_INGEST_LINK_WITHIN_BATCH",
    "ZETTEL_GRAPH_BACKEND",
    "ZETTEL_VECTOR_BACKEND",
    "ZETTEL_SQLITE_PATH",
    "ZETTEL_LOG_TO_FILE",
    "ZETTEL_IMPORT_TIMEOUT",
    "ZETTEL_READWISE_TOKEN",
    "READWISE_ACCESS_TOKEN",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from the caller's environment and any local .env file."""
    saved = os.environ.copy()
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    # load_dotenv writes straight to os.environ
    os.environ.clear()
    os.environ.update(saved)


class TestConfigDefaults:
    """Test default configuration values."""

    def test_default_config_creation(self):
        config = Config()

        assert config.llm.provider == "ollama"
        assert config.llm.model == "llama3.1:8b"
        assert config.llm.base_url is None
        assert config.embedder.dimension is None
        assert config.transcription.model == "whisper-1"
        assert config.linking.neighbors == 3
        assert config.ingestion.link_within_batch is True
        assert config.graph_backend == "sqlite"
        assert config.vector_backend == "scan"
        assert config.qdrant.collection_name == "nodes"

    def test_llm_config_creation(self):
        llm_config = LLMConfig(provider="openai", model="gpt-4o", api_key="sk-test")

        assert llm_config.provider == "openai"
        assert llm_config.api_key == "sk-test"

    def test_neighbors_must_be_positive(self):
        with pytest.raises(ValueError):
            LinkingConfig(neighbors=0)


class TestConfigFromEnv:
    """Test loading configuration from environment variables."""

    def test_from_env_defaults(self):
        config = Config.from_env()

        assert config == Config()

    def test_from_env_overrides(self, monkeypatch):
        monkeypatch.setenv("ZETTEL_LLM_PROVIDER", "openai")
        monkeypatch.setenv("ZETTEL_LLM_API_KEY", "sk-env")
        monkeypatch.setenv("ZETTEL_EMBEDDER_DIMENSION", "768")
        monkeypatch.setenv("ZETTEL_LINK_NEIGHBORS", "5")
        monkeypatch.setenv("ZETTEL_INGEST_LINK_WITHIN_BATCH", "false")
        monkeypatch.setenv("ZETTEL_GRAPH_BACKEND", "neo4j")
        monkeypatch.setenv("ZETTEL_LOG_TO_FILE", "0")

        config = Config.from_env()

        assert config.llm.provider == "openai"
        assert config.llm.api_key == "sk-env"
        assert config.embedder.dimension == 768
        assert config.linking.neighbors == 5
        assert config.ingestion.link_within_batch is False
        assert config.graph_backend == "neo4j"
        assert config.logging.log_to_file is False

    def test_transcription_key_falls_back_to_openai_key(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-shared")

        assert Config.from_env().transcription.api_key == "sk-shared"

    def test_transcription_key_prefers_dedicated_variable(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-shared")
        monkeypatch.setenv("ZETTEL_TRANSCRIPTION_API_KEY", "sk-whisper")

        assert Config.from_env().transcription.api_key == "sk-whisper"

    def test_readwise_token_falls_back_to_access_token(self, monkeypatch):
        monkeypatch.setenv("READWISE_ACCESS_TOKEN", "rw-shared")

        assert Config.from_env().importer.readwise_token == "rw-shared"

    def test_import_settings(self, monkeypatch):
        monkeypatch.setenv("READWISE_ACCESS_TOKEN", "rw-shared")
        monkeypatch.setenv("ZETTEL_READWISE_TOKEN", "rw-zettel")
        monkeypatch.setenv("ZETTEL_IMPORT_TIMEOUT", "5")

        config = Config.from_env()

        assert config.importer.readwise_token == "rw-zettel"
        assert config.importer.timeout == 5.0

    def test_from_env_file(self, tmp_path):
        env_file = tmp_path / "custom.env"
        env_file.write_text("ZETTEL_SQLITE_PATH=/tmp/notes.db\n")

        config = Config.from_env(env_file=env_file)

        assert config.sqlite.db_path == "/tmp/notes.db"


class TestConfigFromYaml:
    """Test loading configuration from YAML."""

    def test_from_yaml(self, tmp_path):
        yaml_path = tmp_path / "config.yaml"
        yaml_path.write_text(
            yaml.safe_dump(
                {
                    "llm": {"provider": "openai", "model": "gpt-4o-mini"},
                    "linking": {"neighbors": 4},
                    "vector_backend": "qdrant",
                }
            )
        )

        config = Config.from_yaml(yaml_path)

        assert config.llm.model == "gpt-4o-mini"
        assert config.linking.neighbors == 4
        assert config.vector_backend == "qdrant"
        assert config.embedder.model == "nomic-embed-text"

    def test_from_yaml_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config.from_yaml(tmp_path / "missing.yaml")

    def test_empty_yaml_gives_defaults(self, tmp_path):
        yaml_path = tmp_path / "empty.yaml"
        yaml_path.write_text("")

        assert Config.from_yaml(yaml_path) == Config()


class TestConfigCombined:
    """Test env overriding YAML."""

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        yaml_path = tmp_path / "config.yaml"
        yaml_path.write_text(
            yaml.safe_dump({"graph_backend": "neo4j", "linking": {"neighbors": 4}})
        )
        monkeypatch.setenv("ZETTEL_LINK_NEIGHBORS", "6")

        config = Config.from_env_or_yaml(yaml_path=yaml_path)

        assert config.linking.neighbors == 6
        assert config.graph_backend == "neo4j"

    def test_yaml_used_when_env_unset(self, tmp_path):
        yaml_path = tmp_path / "config.yaml"
        yaml_path.write_text(yaml.safe_dump({"sqlite": {"db_path": "notes.db"}}))

        config = Config.from_env_or_yaml(yaml_path=yaml_path)

        assert config.sqlite.db_path == "notes.db"
