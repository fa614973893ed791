import logging
import os

import pytest

from cipherapi.config import Settings, load_env_file, parse_addr
from cipherapi.errors import ConfigurationError, ErrorKind

ENV_VARS = ["CIPHERAPI_ADDR", "CIPHERAPI_KEY_SIZE", "CIPHERAPI_LOG_LEVEL", "CIPHERAPI_ENV_FILE"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.mark.parametrize("addr,expected", [
    (":4000", ("0.0.0.0", 4000)),
    ("127.0.0.1:8080", ("127.0.0.1", 8080)),
    ("localhost:1", ("localhost", 1)),
    ("[::1]:9000", ("::1", 9000)),
])
def test_parse_addr(addr, expected):
    assert parse_addr(addr) == expected


@pytest.mark.parametrize("addr", ["4000", "localhost", ":http", ":0", ":70000", ""])
def test_parse_addr_rejects_bad_addresses(addr):
    with pytest.raises(ConfigurationError) as exc:
        parse_addr(addr)
    assert exc.value.kind is ErrorKind.INVALID_SETTING


def test_settings_defaults():
    settings = Settings.from_env()
    assert settings == Settings(host="0.0.0.0", port=4000, key_size=32, log_level="INFO")
    assert settings.addr == "0.0.0.0:4000"


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("CIPHERAPI_ADDR", "127.0.0.1:5000")
    monkeypatch.setenv("CIPHERAPI_KEY_SIZE", "16")
    monkeypatch.setenv("CIPHERAPI_LOG_LEVEL", "debug")
    settings = Settings.from_env()
    assert (settings.host, settings.port) == ("127.0.0.1", 5000)
    assert settings.key_size == 16
    assert settings.log_level == "DEBUG"


def test_addr_flag_overrides_environment(monkeypatch):
    monkeypatch.setenv("CIPHERAPI_ADDR", "127.0.0.1:5000")
    assert Settings.from_env(":6000").port == 6000


def test_settings_rejects_bad_key_size(monkeypatch):
    monkeypatch.setenv("CIPHERAPI_KEY_SIZE", "thirty-two")
    with pytest.raises(ConfigurationError):
        Settings.from_env()


def test_settings_rejects_unknown_log_level(monkeypatch):
    monkeypatch.setenv("CIPHERAPI_LOG_LEVEL", "LOUD")
    with pytest.raises(ConfigurationError):
        Settings.from_env()


def test_missing_env_file_is_not_fatal(tmp_path, caplog):
    caplog.set_level(logging.INFO)
    assert load_env_file(str(tmp_path / "missing.env")) is False
    assert any("No .env file found" in r.getMessage() for r in caplog.records)


def test_env_file_is_loaded(tmp_path, monkeypatch):
    # Registered with monkeypatch so the value load_dotenv sets is removed afterwards.
    monkeypatch.setenv("CIPHERAPI_KEY_SIZE", "placeholder")
    monkeypatch.delenv("CIPHERAPI_KEY_SIZE")

    env_file = tmp_path / "service.env"
    env_file.write_text("CIPHERAPI_KEY_SIZE=24\n")
    monkeypatch.setenv("CIPHERAPI_ENV_FILE", str(env_file))

    assert load_env_file() is True
    assert os.environ["CIPHERAPI_KEY_SIZE"] == "24"
    assert Settings.from_env().key_size == 24
