"""
Tests for BotConfigManager (config/bot_config.py)
Requires: pytest
"""

import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
from config.bot_config import BotConfig, BotConfigManager


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("BOT_CONFIG_PATH", "BOT_DEBUG", "HEALTHCHECK_PORT", "TELEGRAM_TOKEN", "MY_TOKEN"):
        monkeypatch.delenv(name, raising=False)


def test_load_from_yaml(tmp_path):
    path = tmp_path / "bot.yaml"
    path.write_text(
        "bot:\n"
        "  token_env: MY_TOKEN\n"
        "  username: notes_bot\n"
        "  parse_mode: HTML\n"
        "  announce_commands: false\n"
        "replies:\n"
        "  unknown_user: Who?\n"
        "  already_known: Hi again\n"
        "server:\n"
        "  healthcheck_port: 9000\n"
        "  metrics_enabled: false\n",
        encoding="utf-8",
    )
    config = BotConfigManager(str(path)).config
    assert config.token_env == "MY_TOKEN"
    assert config.bot_username == "notes_bot"
    assert config.parse_mode == "HTML"
    assert config.announce_commands is False
    assert config.unknown_user_reply == "Who?"
    assert config.already_known_reply == "Hi again"
    assert config.healthcheck_port == 9000
    assert config.metrics_enabled is False
    assert config.debug is False


def test_missing_file_gives_defaults(tmp_path):
    assert BotConfigManager(str(tmp_path / "absent.yaml")).config == BotConfig()


def test_broken_yaml_gives_defaults(tmp_path):
    path = tmp_path / "bot.yaml"
    path.write_text("bot: [unclosed\n", encoding="utf-8")
    assert BotConfigManager(str(path)).config == BotConfig()


def test_environment_overrides(tmp_path, monkeypatch):
    path = tmp_path / "bot.yaml"
    path.write_text("bot:\n  debug: false\nserver:\n  healthcheck_port: 9000\n", encoding="utf-8")
    monkeypatch.setenv("BOT_DEBUG", "yes")
    monkeypatch.setenv("HEALTHCHECK_PORT", "9100")
    config = BotConfigManager(str(path)).config
    assert config.debug is True
    assert config.healthcheck_port == 9100


def test_config_path_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "custom.yaml"
    path.write_text("replies:\n  unknown_user: Nope\n", encoding="utf-8")
    monkeypatch.setenv("BOT_CONFIG_PATH", str(path))
    manager = BotConfigManager()
    assert manager.config_path == str(path)
    assert manager.config.unknown_user_reply == "Nope"


def test_token_comes_from_named_env_var(tmp_path, monkeypatch):
    path = tmp_path / "bot.yaml"
    path.write_text("bot:\n  token_env: MY_TOKEN\n", encoding="utf-8")
    manager = BotConfigManager(str(path))
    assert manager.get_token() is None
    monkeypatch.setenv("MY_TOKEN", "123:abc")
    assert manager.get_token() == "123:abc"


def test_shipped_config_loads():
    config = BotConfigManager().config
    assert config.token_env == "TELEGRAM_TOKEN"
    assert config.unknown_user_reply


if __name__ == "__main__":
    import pytest
    pytest.main([__file__])
