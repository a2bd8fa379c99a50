"""Tests for configuration loading."""

from pathlib import Path

import pytest

from cmdwire.config import DEFAULT_MENTION_FORMATS, Config
from cmdwire.exceptions import ConfigurationError


def _write_settings(tmp_path, text):
    (tmp_path / "settings.yaml").write_text(text)
    return Config(config_dir=tmp_path)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    # setenv+delenv records the variables so values loaded from .env
    # are removed again after each test
    for name in ("CMDWIRE_PREFIX", "CMDWIRE_BOT_ID"):
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)


def test_defaults_without_settings_file(tmp_path):
    config = Config(config_dir=tmp_path)
    assert config.settings == {}
    assert config.bot_name == "cmdwire"
    assert config.command_prefix == ""
    assert config.mention_formats == DEFAULT_MENTION_FORMATS
    assert config.case_insensitive_commands is False
    assert config.bot_username == "cmdwire"
    assert config.logging_level == "INFO"
    assert config.logging_max_file_size_mb == 10
    assert config.logging_backup_count == 5


def test_values_from_yaml(tmp_path):
    config = _write_settings(tmp_path, """
bot_name: Helper
bot_description: helps out
command_prefix: "!"
mention_formats: ["@{username}"]
case_insensitive_commands: true
bot_user_id: 99
log_dir: /tmp/cmdwire-logs
logging:
  level: debug
  subsystem_levels:
    dispatch: WARNING
""")
    assert config.bot_name == "Helper"
    assert config.bot_description == "helps out"
    assert config.command_prefix == "!"
    assert config.mention_formats == ["@{username}"]
    assert config.case_insensitive_commands is True
    assert config.bot_user_id == "99"
    assert config.bot_username == "Helper"
    assert config.log_dir == Path("/tmp/cmdwire-logs")
    assert config.logging_level == "debug"
    assert config.logging_subsystem_levels == {"dispatch": "WARNING"}


def test_env_prefix_takes_precedence(tmp_path, monkeypatch):
    monkeypatch.setenv("CMDWIRE_PREFIX", "?")
    config = _write_settings(tmp_path, 'command_prefix: "!"\n')
    assert config.command_prefix == "?"


def test_dotenv_file_loaded(tmp_path):
    (tmp_path / ".env").write_text("CMDWIRE_BOT_ID=1234\n")
    config = Config(config_dir=tmp_path)
    assert config.bot_user_id == "1234"


def test_invalid_mention_formats_type_falls_back(tmp_path):
    config = _write_settings(tmp_path, "mention_formats: nope\n")
    assert config.mention_formats == DEFAULT_MENTION_FORMATS


def test_validate_accepts_defaults(tmp_path):
    Config(config_dir=tmp_path).validate()


def test_validate_rejects_non_string_prefix(tmp_path):
    config = _write_settings(tmp_path, "command_prefix: 5\n")
    with pytest.raises(ConfigurationError) as exc_info:
        config.validate()
    assert exc_info.value.setting_name == "command_prefix"


def test_validate_rejects_mention_without_placeholder(tmp_path):
    config = _write_settings(tmp_path, 'mention_formats: ["<@bot>"]\n')
    with pytest.raises(ConfigurationError) as exc_info:
        config.validate()
    assert exc_info.value.setting_name == "mention_formats"
