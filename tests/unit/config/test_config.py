"""
distcache — Configuration Tests
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from distcache.config import (
    CacheBackend,
    CacheConfig,
    configure_logging,
    get_config,
    load_config,
    reload_config,
)
from distcache.config.loader import LOG_FORMAT
from distcache.errors import ConfigurationError


class TestCacheConfig:
    def test_defaults(self) -> None:
        config = CacheConfig()

        assert config.backend == CacheBackend.MEMORY
        assert config.namespace == ""
        assert config.redis_url is None

    def test_redis_requires_url(self) -> None:
        with pytest.raises(ValueError):
            CacheConfig(backend=CacheBackend.REDIS)

    def test_pool_size_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            CacheConfig(redis_max_connections=0)


class TestLoader:
    def test_memory_from_env(self, mock_env_memory: None) -> None:
        config = load_config(reload=True)

        assert config.cache.backend == CacheBackend.MEMORY
        assert config.cache.namespace == "test"
        assert config.environment == "test"

    def test_redis_auto_detected_from_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CACHE_BACKEND", raising=False)
        monkeypatch.setenv("REDIS_URL", "redis://cache:6379/1")

        config = load_config(reload=True)

        assert config.cache.backend == CacheBackend.REDIS
        assert config.cache.redis_url == "redis://cache:6379/1"

    def test_redis_without_url_is_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("REDIS_URL", raising=False)
        monkeypatch.setenv("CACHE_BACKEND", "redis")

        with pytest.raises(ConfigurationError):
            load_config(reload=True)

    def test_malformed_number(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REDIS_MAX_CONNECTIONS", "many")

        with pytest.raises(ConfigurationError):
            load_config(reload=True)

    def test_env_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("REDIS_URL", raising=False)
        monkeypatch.delenv("CACHE_BACKEND", raising=False)
        # load_dotenv writes into os.environ; monkeypatch restores the old value
        monkeypatch.setenv("CACHE_NAMESPACE", "before")
        env_file = tmp_path / ".env"
        env_file.write_text("CACHE_NAMESPACE=from_file\n")

        config = reload_config(env_file=str(env_file))

        assert config.cache.namespace == "from_file"

    def test_singleton(self, mock_env_memory: None) -> None:
        first = get_config()

        assert get_config() is first
        assert reload_config() is not first


class TestLogging:
    def test_configure_logging_uses_configured_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        load_config(reload=True)

        with patch("distcache.config.loader.logging.basicConfig") as basic_config:
            configure_logging()

        basic_config.assert_called_once_with(level="WARNING", format=LOG_FORMAT)

    def test_configure_logging_explicit_level(self) -> None:
        with patch("distcache.config.loader.logging.basicConfig") as basic_config:
            configure_logging("debug")

        basic_config.assert_called_once_with(level="DEBUG", format=LOG_FORMAT)
