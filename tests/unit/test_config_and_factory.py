"""Unit tests for configuration loading and the cache factory."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from docstore_cache.config.loader import load_config
from docstore_cache.config.settings import Settings
from docstore_cache.factory import build_cache, build_document_store
from docstore_cache.providers.cache.document_store_cache import DocumentStoreCacheProvider
from docstore_cache.providers.document_store.elasticsearch_store import ElasticsearchDocumentStore
from docstore_cache.providers.document_store.memory_store import InMemoryDocumentStore
from docstore_cache.utils.errors import ConfigurationError
from docstore_cache.utils.serialization import PickleSerializer


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("DOCSTORE_CACHE_"):
            monkeypatch.delenv(name)


def _settings(**overrides: object) -> Settings:
    return Settings(_env_file=None, **overrides)


def _write_yaml(tmp_path: Path, text: str) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return str(path)


# ======================================================================
# Settings
# ======================================================================


class TestSettings:
    def test_defaults(self) -> None:
        settings = _settings()
        assert settings.store_backend == "elasticsearch"
        assert settings.elasticsearch_url == "http://localhost:9200"
        assert settings.index == ""
        assert settings.schema_name == "cache-item"
        assert settings.serializer == "json"

    def test_reads_prefixed_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DOCSTORE_CACHE_INDEX", "app-cache")
        monkeypatch.setenv("DOCSTORE_CACHE_STORE_BACKEND", "memory")
        settings = _settings()
        assert settings.index == "app-cache"
        assert settings.store_backend == "memory"

    def test_rejects_unknown_backend(self) -> None:
        with pytest.raises(ValueError):
            _settings(store_backend="redis")

    def test_rejects_non_positive_timeout(self) -> None:
        with pytest.raises(ValueError):
            _settings(request_timeout=0)


# ======================================================================
# load_config
# ======================================================================


class TestLoadConfig:
    def test_missing_file_yields_settings_defaults(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "absent.yaml"), _settings())
        assert config == {
            "store": {
                "backend": "elasticsearch",
                "url": "http://localhost:9200",
                "timeout": 10.0,
                "max_size": 10_000,
            },
            "cache": {"index": "", "schema": "cache-item", "serializer": "json"},
            "logging": {"level": "INFO"},
        }

    def test_yaml_overrides_defaults(self, tmp_path: Path) -> None:
        path = _write_yaml(
            tmp_path,
            "store:\n  backend: memory\ncache:\n  index: yaml-cache\n  extra: kept\n",
        )
        config = load_config(path, _settings())
        assert config["store"]["backend"] == "memory"
        assert config["store"]["url"] == "http://localhost:9200"
        assert config["cache"]["index"] == "yaml-cache"
        assert config["cache"]["extra"] == "kept"

    def test_explicit_settings_override_yaml(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = _write_yaml(tmp_path, "cache:\n  index: yaml-cache\n  schema: from-yaml\n")
        monkeypatch.setenv("DOCSTORE_CACHE_INDEX", "env-cache")

        config = load_config(path, _settings())

        assert config["cache"]["index"] == "env-cache"
        assert config["cache"]["schema"] == "from-yaml"

    def test_empty_yaml_is_allowed(self, tmp_path: Path) -> None:
        config = load_config(_write_yaml(tmp_path, ""), _settings(index="x"))
        assert config["cache"]["index"] == "x"

    def test_malformed_yaml_raises(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path, "cache: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(path, _settings())

    def test_non_mapping_yaml_raises(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path, "- just\n- a list\n")
        with pytest.raises(ConfigurationError, match="must contain a mapping, got list"):
            load_config(path, _settings())


# ======================================================================
# Factory
# ======================================================================


class TestBuildDocumentStore:
    def test_memory_backend(self) -> None:
        store = build_document_store({"backend": "memory", "max_size": 5})
        assert isinstance(store, InMemoryDocumentStore)

    def test_elasticsearch_backend(self) -> None:
        store = build_document_store({"backend": "elasticsearch", "url": "http://es.test:9200"})
        try:
            assert isinstance(store, ElasticsearchDocumentStore)
        finally:
            store.close()

    def test_unknown_backend_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown document store backend 'mongo'"):
            build_document_store({"backend": "mongo"})


class TestBuildCache:
    def test_memory_cache_round_trip(self, tmp_path: Path) -> None:
        cache = build_cache(
            _settings(store_backend="memory", index="app-cache"),
            config_path=str(tmp_path / "absent.yaml"),
        )

        assert isinstance(cache, DocumentStoreCacheProvider)
        assert cache.index_name == "app-cache"
        assert cache.save("greeting", {"text": "hello"}) is True
        assert cache.fetch("greeting") == {"text": "hello"}

    def test_options_come_from_yaml(self, tmp_path: Path) -> None:
        path = _write_yaml(
            tmp_path,
            "store:\n  backend: memory\ncache:\n  index: yaml-cache\n"
            "  schema: sessions\n  serializer: pickle\n",
        )
        cache = build_cache(_settings(), config_path=path)

        assert cache.index_name == "yaml-cache"
        assert cache.schema_name == "sessions"
        assert isinstance(cache.serializer, PickleSerializer)

    def test_missing_index_raises_before_any_request(self, tmp_path: Path) -> None:
        store = InMemoryDocumentStore()
        with pytest.raises(ConfigurationError, match='"index" option'):
            build_cache(_settings(), config_path=str(tmp_path / "absent.yaml"), client=store)
        assert store.get_collection("cache").exists() is False

    def test_injected_client_is_used(self, tmp_path: Path) -> None:
        store = InMemoryDocumentStore()
        cache = build_cache(
            _settings(index="app-cache"), config_path=str(tmp_path / "absent.yaml"), client=store
        )

        cache.save("k", 1)

        assert store.get_collection("app-cache").exists() is True
