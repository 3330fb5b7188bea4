from __future__ import annotations

from cli.config import DEFAULT_TIMEOUT, load_config
from datastore.metric_store import build_default_store
from services.metrics import build_default_service
from settings import DEFAULT_PORT, get_settings


def _clear_caches() -> None:
    for cache in (get_settings, build_default_store, build_default_service):
        cache.cache_clear()


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    db_path = tmp_path / "db"

    monkeypatch.setenv("METRICAL_HOST", "0.0.0.0")
    monkeypatch.setenv("METRICAL_PORT", "9100")
    monkeypatch.setenv("METRICAL_DB_PATH", str(db_path))
    monkeypatch.setenv("LOG_LEVEL", "debug")
    _clear_caches()

    try:
        settings = get_settings()
        service = build_default_service()

        assert settings.host == "0.0.0.0"
        assert settings.port == 9100
        assert settings.log_level == "DEBUG"
        assert service.store.persistence_path == db_path
        assert db_path.is_dir()
    finally:
        _clear_caches()


def test_invalid_port_and_blank_db_path_fall_back(monkeypatch) -> None:
    monkeypatch.setenv("METRICAL_PORT", "not-a-port")
    monkeypatch.setenv("METRICAL_DB_PATH", "   ")
    _clear_caches()

    try:
        settings = get_settings()
        assert settings.port == DEFAULT_PORT
        assert settings.db_path is None
        assert build_default_store().persistence_path is None
    finally:
        _clear_caches()


def test_cli_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("METRICAL_BASE_URL", "http://example:4340/")
    monkeypatch.setenv("METRICAL_HTTP_TIMEOUT", "-3")

    config = load_config()

    assert config.base_url == "http://example:4340"
    assert config.timeout == DEFAULT_TIMEOUT
