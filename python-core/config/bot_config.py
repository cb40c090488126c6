"""
bot_config.py - configuration of the Telegram router bot
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import structlog
import yaml

logger = structlog.get_logger("context_router.config")

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class BotConfig:
    """Bot settings; the token itself only ever comes from the environment"""
    token_env: str = "TELEGRAM_TOKEN"
    bot_username: Optional[str] = None
    parse_mode: Optional[str] = "Markdown"
    unknown_user_reply: Optional[str] = None
    already_known_reply: Optional[str] = None
    announce_commands: bool = True
    debug: bool = False
    healthcheck_port: int = 8082
    metrics_enabled: bool = True


class BotConfigManager:
    """Loads BotConfig from YAML, environment variables take precedence"""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or os.getenv("BOT_CONFIG_PATH") or self._get_default_config_path()
        self.config = self._load_config()

    def _get_default_config_path(self) -> str:
        current_dir = Path(__file__).parent
        return str(current_dir / "bot.yaml")

    def _load_config(self) -> BotConfig:
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.info("config_file_missing", path=self.config_path)
            config_data = {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("config_file_unreadable", path=self.config_path, error=str(e))
            config_data = {}

        bot_data = config_data.get('bot', {}) or {}
        replies = config_data.get('replies', {}) or {}
        server = config_data.get('server', {}) or {}

        config = BotConfig(
            token_env=bot_data.get('token_env', 'TELEGRAM_TOKEN'),
            bot_username=bot_data.get('username'),
            parse_mode=bot_data.get('parse_mode', 'Markdown'),
            unknown_user_reply=replies.get('unknown_user'),
            already_known_reply=replies.get('already_known'),
            announce_commands=bool(bot_data.get('announce_commands', True)),
            debug=bool(bot_data.get('debug', False)),
            healthcheck_port=int(server.get('healthcheck_port', 8082)),
            metrics_enabled=bool(server.get('metrics_enabled', True)),
        )

        if os.getenv("BOT_DEBUG") is not None:
            config.debug = os.getenv("BOT_DEBUG", "").strip().lower() in _TRUE_VALUES
        if os.getenv("HEALTHCHECK_PORT"):
            config.healthcheck_port = int(os.environ["HEALTHCHECK_PORT"])
        return config

    def get_token(self) -> Optional[str]:
        return os.getenv(self.config.token_env)
