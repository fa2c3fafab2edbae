import logging

from sboxlab.config import LOGGER_NAME, Settings, configure_logging, load_settings


def test_settings_defaults():
    settings = Settings()
    assert settings.matrix_max_attempts == 100
    assert settings.random_seed is None


def test_load_settings_reads_environment(monkeypatch):
    monkeypatch.setenv("SBOXLAB_SEED", "7")
    monkeypatch.setenv("SBOXLAB_MATRIX_MAX_ATTEMPTS", "12")
    monkeypatch.setenv("SBOXLAB_LOG_LEVEL", "debug")
    load_settings.cache_clear()
    try:
        settings = load_settings()
        assert settings.random_seed == 7
        assert settings.matrix_max_attempts == 12
        assert settings.log_level == "DEBUG"
    finally:
        load_settings.cache_clear()


def test_configure_logging_sets_level():
    logger = configure_logging(Settings(log_level="WARNING"))
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.WARNING
