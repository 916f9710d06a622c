"""Tests for chancery.config."""

import os
from pathlib import Path

import pytest

from chancery.config import ChanceryConfig

_VARS = [
    "CHANCERY_DATA_DIR",
    "CHANCERY_REMOTE_URL",
    "CHANCERY_REMOTE_TOKEN",
    "CHANCERY_REMOTE_TIMEOUT",
    "CHANCERY_SAVE_DELAY",
    "CHANCERY_PUSH_CONCURRENCY",
    "CHANCERY_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)
    # keep any .env in the working directory out of the way
    monkeypatch.chdir(tmp_path)
    yield
    # load_dotenv writes straight to os.environ
    for name in _VARS:
        os.environ.pop(name, None)


def test_defaults():
    config = ChanceryConfig.from_env()
    assert config == ChanceryConfig()
    assert config.data_dir == Path("data")
    assert config.remote_url == ""
    assert config.save_delay == 0.5
    assert config.push_concurrency == 4
    assert config.log_level == "INFO"


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("CHANCERY_DATA_DIR", "/srv/chancery")
    monkeypatch.setenv("CHANCERY_REMOTE_URL", " https://sync.example.com ")
    monkeypatch.setenv("CHANCERY_REMOTE_TOKEN", "secret")
    monkeypatch.setenv("CHANCERY_REMOTE_TIMEOUT", "5")
    monkeypatch.setenv("CHANCERY_SAVE_DELAY", "0.25")
    monkeypatch.setenv("CHANCERY_PUSH_CONCURRENCY", "8")
    monkeypatch.setenv("CHANCERY_LOG_LEVEL", "debug")

    config = ChanceryConfig.from_env()

    assert config.data_dir == Path("/srv/chancery")
    assert config.remote_url == "https://sync.example.com"
    assert config.remote_token == "secret"
    assert config.remote_timeout == 5.0
    assert config.save_delay == 0.25
    assert config.push_concurrency == 8
    assert config.log_level == "DEBUG"


def test_env_file(tmp_path):
    env_file = tmp_path / "custom.env"
    env_file.write_text("CHANCERY_REMOTE_URL=https://from-file.example.com\n")
    config = ChanceryConfig.from_env(env_file)
    assert config.remote_url == "https://from-file.example.com"


def test_environment_beats_env_file(monkeypatch, tmp_path):
    env_file = tmp_path / "custom.env"
    env_file.write_text("CHANCERY_SAVE_DELAY=9\n")
    monkeypatch.setenv("CHANCERY_SAVE_DELAY", "1")
    assert ChanceryConfig.from_env(env_file).save_delay == 1.0


@pytest.mark.parametrize(
    "name, value",
    [("CHANCERY_SAVE_DELAY", "soon"), ("CHANCERY_PUSH_CONCURRENCY", "2.5")],
)
def test_bad_numbers_raise(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        ChanceryConfig.from_env()


def test_frozen():
    with pytest.raises(AttributeError):
        ChanceryConfig().save_delay = 1  # type: ignore[misc]
