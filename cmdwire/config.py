"""Configuration management for cmdwire.

Loads YAML settings (settings.yaml) and environment variables (.env)
into a Config object. Property getters provide safe access with
defaults for the bot identity, prefix handling, and logging.

Key classes:
    Config: Central configuration manager.

Key functions:
    get_config: Singleton accessor for the global Config instance.
"""

import os
from pathlib import Path
from typing import List, Optional

import structlog
import yaml
from dotenv import load_dotenv

from .exceptions import ConfigurationError

logger = structlog.get_logger("cmdwire")

DEFAULT_MENTION_FORMATS = ["<@{user_id}>", "<@!{user_id}>"]


class Config:
    """Central configuration manager for cmdwire.

    Loads settings.yaml and .env from the config directory. Read-only
    after __init__.

    Args:
        config_dir: Path to the config directory. Defaults to
            ``<repo_root>/config/``.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        if config_dir is None:
            config_dir = Path(__file__).parent.parent / "config"
        self.config_dir = Path(config_dir)

        env_file = self.config_dir / ".env"
        if env_file.exists():
            load_dotenv(env_file)

        self.settings = self._load_yaml("settings.yaml")

    def _load_yaml(self, filename: str) -> dict:
        """Load a YAML configuration file."""
        filepath = self.config_dir / filename
        if filepath.exists():
            with open(filepath, "r") as f:
                return yaml.safe_load(f) or {}
        return {}

    def validate(self):
        """Validate settings at startup.

        Raises:
            ConfigurationError: If the prefix or mention formats cannot
                be used to recognise commands.
        """
        prefix = self.settings.get("command_prefix", "")
        if prefix is not None and not isinstance(prefix, str):
            raise ConfigurationError(
                "command_prefix must be a string", setting_name="command_prefix"
            )
        formats = self.mention_formats
        for fmt in formats:
            if "{user_id}" not in fmt and "{username}" not in fmt:
                raise ConfigurationError(
                    f"mention format {fmt!r} has no {{user_id}} or {{username}} field",
                    setting_name="mention_formats",
                )
        if not self.command_prefix and not formats:
            logger.warning(
                "no_explicit_prefix",
                msg="Only the @<username> display prefix will be recognised",
            )

    @property
    def bot_name(self) -> str:
        """Name shown in the help menu header."""
        return self.settings.get("bot_name", "cmdwire")

    @property
    def bot_description(self) -> str:
        """Description shown in the help menu."""
        return self.settings.get("bot_description", "a command-driven chat bot")

    @property
    def command_prefix(self) -> str:
        """Configured invocation prefix. Env var CMDWIRE_PREFIX takes precedence."""
        return os.environ.get("CMDWIRE_PREFIX") or self.settings.get("command_prefix") or ""

    @property
    def mention_formats(self) -> List[str]:
        """Format strings used to derive mention prefixes from the bot identity."""
        formats = self.settings.get("mention_formats", DEFAULT_MENTION_FORMATS)
        if not isinstance(formats, list):
            logger.error("mention_formats_invalid_type", type=type(formats).__name__)
            return list(DEFAULT_MENTION_FORMATS)
        return [str(fmt) for fmt in formats]

    @property
    def case_insensitive_commands(self) -> bool:
        """Resolve command names ignoring case (default False)."""
        return bool(self.settings.get("case_insensitive_commands", False))

    @property
    def bot_user_id(self) -> str:
        """Account id used by the console gateway. Env var CMDWIRE_BOT_ID wins."""
        return os.environ.get("CMDWIRE_BOT_ID") or str(self.settings.get("bot_user_id", "0"))

    @property
    def bot_username(self) -> str:
        """Username used by the console gateway (default: bot_name)."""
        return self.settings.get("bot_username") or self.bot_name

    @property
    def log_dir(self) -> Path:
        """Get log directory path."""
        configured = self.settings.get("log_dir")
        if configured:
            return Path(configured).expanduser()
        return Path(__file__).parent.parent / "logs"

    @property
    def logging_level(self) -> str:
        """Global log level (default INFO). Controls console and combined file."""
        log_config = self.settings.get("logging", {})
        return log_config.get("level", "INFO")

    @property
    def logging_subsystem_levels(self) -> dict:
        """Per-subsystem log level overrides. E.g. {"dispatch": "DEBUG"}."""
        log_config = self.settings.get("logging", {})
        return log_config.get("subsystem_levels", {})

    @property
    def logging_max_file_size_mb(self) -> int:
        """Max size per log file in MB before rotation (default 10)."""
        log_config = self.settings.get("logging", {})
        return log_config.get("max_file_size_mb", 10)

    @property
    def logging_backup_count(self) -> int:
        """Number of rotated log files to keep (default 5)."""
        log_config = self.settings.get("logging", {})
        return log_config.get("backup_count", 5)


_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config
