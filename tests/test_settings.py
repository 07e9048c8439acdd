import logging

from routepick.config.settings import AppSettings, get_logging_config, get_settings
from routepick.core.logging import build_logging_config, configure_logging


def test_packaged_defaults_load():
    settings = get_settings()

    assert settings.geocoding.fallback_precision == 5
    assert settings.routing.retry.max_attempts == 1
    assert settings.routing.timeout_seconds > 0
    assert [v.code for v in settings.delivery.vehicles] == ["moto", "car", "van"]
    assert "root" in get_logging_config()


def test_env_overrides_service_urls(monkeypatch):
    monkeypatch.setenv("ROUTEPICK_ROUTING_URL", "http://localhost:5000")
    monkeypatch.setenv("ROUTEPICK_GEOCODING_URL", "http://localhost:8080/reverse")
    monkeypatch.setenv("ROUTEPICK_LOG_LEVEL", "DEBUG")
    get_settings.cache_clear()
    try:
        settings = get_settings()
        assert settings.routing.base_url == "http://localhost:5000"
        assert settings.geocoding.base_url == "http://localhost:8080/reverse"
        assert settings.app.log_level == "DEBUG"
    finally:
        monkeypatch.undo()
        get_settings.cache_clear()


def test_external_config_file_replaces_defaults(monkeypatch, tmp_path):
    config = tmp_path / "routepick.yaml"
    config.write_text(
        "routing:\n  base_url: http://osrm.internal\n  profile: bike\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("ROUTEPICK_CONFIG_PATH", str(config))
    get_settings.cache_clear()
    try:
        settings = get_settings()
        assert settings.routing.profile == "bike"
        assert settings.delivery.vehicles == []
    finally:
        monkeypatch.undo()
        get_settings.cache_clear()


def test_logging_config_applies_per_logger_levels():
    app = AppSettings(log_level="debug", logger_levels={"routepick.session": "warning", "httpx": "ERROR"})

    config = build_logging_config(app)

    assert config["root"]["level"] == "DEBUG"
    assert config["handlers"]["console"]["level"] == "DEBUG"
    assert config["loggers"]["routepick.session"]["level"] == "WARNING"
    assert config["loggers"]["httpx"]["level"] == "ERROR"
    # The packaged config itself is left untouched.
    assert "routepick.session" not in get_logging_config()["loggers"]


def test_configure_logging_uses_packaged_logger_levels():
    configure_logging()

    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("routepick.session").level == logging.INFO
