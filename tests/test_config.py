import pytest

from airport_reviews.core import config


def setup_function(function):
    config.get_settings.cache_clear()


def teardown_function(function):
    config.get_settings.cache_clear()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("PORT", "CSV_FETCH_TIMEOUT", "CSV_CHUNK_SIZE", "CSV_ENCODING", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "load_dotenv", lambda: None)


def test_get_settings_reads_env(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("CSV_FETCH_TIMEOUT", "5")
    monkeypatch.setenv("CSV_CHUNK_SIZE", "1024")
    monkeypatch.setenv("CSV_ENCODING", "latin-1")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = config.get_settings()

    assert settings.port == 8080
    assert settings.fetch_timeout == 5
    assert settings.chunk_size == 1024
    assert settings.csv_encoding == "latin-1"
    assert settings.log_level == "DEBUG"


def test_get_settings_defaults():
    settings = config.get_settings()

    assert settings.port == 3000
    assert settings.fetch_timeout == 30
    assert settings.chunk_size == 64 * 1024
    assert settings.csv_encoding == "utf-8-sig"
    assert settings.log_level == "INFO"


def test_get_settings_warns_on_invalid_numbers(monkeypatch, caplog):
    monkeypatch.setenv("PORT", "not-a-port")
    monkeypatch.setenv("CSV_CHUNK_SIZE", "-1")

    with caplog.at_level("WARNING"):
        settings = config.get_settings()

    messages = " ".join(caplog.messages)
    assert "PORT" in messages
    assert "CSV_CHUNK_SIZE must be positive" in messages
    assert settings.port == 3000
    assert settings.chunk_size == 64 * 1024


def test_get_settings_is_cached(monkeypatch):
    first = config.get_settings()
    monkeypatch.setenv("PORT", "9999")
    assert config.get_settings() is first
