from pathlib import Path

import pytest
from pydantic import ValidationError

from flashdeck.application.config import AppConfig, resolve_config


def _write_toml(home: Path, text: str) -> None:
    cfg = home / ".config/flashdeck/config.toml"
    cfg.parent.mkdir(parents=True, exist_ok=True)
    cfg.write_text(text, encoding="utf-8")


def test_defaults(mock_home):
    config = resolve_config()

    assert config.data_file == mock_home / ".config/flashdeck/decks.json"
    assert config.log_dir == mock_home / ".config/flashdeck/logs"
    assert config.due_limit is None
    assert config.server_port == 8787


def test_env_overrides_default(monkeypatch):
    monkeypatch.setenv("FLASHDECK_DUE_LIMIT", "5")
    assert resolve_config().due_limit == 5


def test_toml_file_is_read(mock_home):
    _write_toml(mock_home, 'due_limit = 3\nserver_host = "0.0.0.0"\n')

    config = resolve_config()

    assert config.due_limit == 3
    assert config.server_host == "0.0.0.0"


def test_env_beats_toml(mock_home, monkeypatch):
    _write_toml(mock_home, "due_limit = 3\n")
    monkeypatch.setenv("FLASHDECK_DUE_LIMIT", "9")
    assert resolve_config().due_limit == 9


def test_cli_overrides_win_and_none_is_ignored(monkeypatch, tmp_path):
    monkeypatch.setenv("FLASHDECK_DUE_LIMIT", "9")

    config = resolve_config({"due_limit": 2, "data_file": None})

    assert config.due_limit == 2
    assert config.data_file.name == "decks.json"


def test_data_file_expands_user(mock_home):
    config = resolve_config({"data_file": "~/cards.json"})
    assert config.data_file == mock_home / "cards.json"


def test_due_limit_must_be_positive():
    with pytest.raises(ValidationError):
        AppConfig(due_limit=0)


def test_verbose_from_env_and_toml(mock_home, monkeypatch):
    assert resolve_config().verbose == 0

    _write_toml(mock_home, "verbose = 2\n")
    assert resolve_config().verbose == 2

    monkeypatch.setenv("FLASHDECK_VERBOSE", "1")
    assert resolve_config().verbose == 1
