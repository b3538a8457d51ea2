"""
Configuration management for the Fantasy Lineup Engine.
Handles loading, validation, and access to application settings.
"""

import os
import re
import yaml
from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from pathlib import Path


DEFAULT_BASE_URL = "https://fantasysports.yahooapis.com/fantasy/v2"
MAX_BATCH_SIZE = 25
ACCESS_TOKEN_ENV = "YAHOO_ACCESS_TOKEN"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class YahooAPIConfig:
    """Yahoo Fantasy API connection settings."""
    access_token: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    user_agent: str = "FantasyLineupEngine/1.0"


@dataclass
class LoggingConfig:
    """Logging configuration settings."""
    level: str = "INFO"
    file: str = "fantasy_lineup.log"
    max_size_mb: int = 10
    backup_count: int = 5


@dataclass
class BotConfig:
    """Main application configuration settings."""
    league_key: str
    team_key: str
    week: Optional[int] = None
    projected: bool = False
    batch_size: int = MAX_BATCH_SIZE
    run_daily_at: str = "09:00"
    yahoo_api: YahooAPIConfig = field(default_factory=YahooAPIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def parse_config(config_data: Dict[str, Any]) -> BotConfig:
    """Build and validate a BotConfig from a parsed YAML mapping."""
    if not isinstance(config_data, dict):
        raise ValueError("Configuration must be a mapping")

    for required in ('league_key', 'team_key'):
        if not config_data.get(required):
            raise ValueError(f"Missing required setting: {required}")

    yahoo_data = config_data.get('yahoo_api') or {}
    yahoo_api_config = YahooAPIConfig(
        access_token=os.environ.get(ACCESS_TOKEN_ENV) or yahoo_data.get('access_token'),
        base_url=str(yahoo_data.get('base_url', DEFAULT_BASE_URL)).rstrip('/'),
        timeout=float(yahoo_data.get('timeout', 30.0)),
        user_agent=yahoo_data.get('user_agent', "FantasyLineupEngine/1.0")
    )

    logging_data = config_data.get('logging') or {}
    logging_config = LoggingConfig(
        level=str(logging_data.get('level', 'INFO')).upper(),
        file=logging_data.get('file', 'fantasy_lineup.log'),
        max_size_mb=int(logging_data.get('max_size_mb', 10)),
        backup_count=int(logging_data.get('backup_count', 5))
    )
    if logging_config.level not in LOG_LEVELS:
        raise ValueError(f"Unknown logging level: {logging_config.level}")

    batch_size = int(config_data.get('batch_size', MAX_BATCH_SIZE))
    if not 1 <= batch_size <= MAX_BATCH_SIZE:
        raise ValueError(f"batch_size must be between 1 and {MAX_BATCH_SIZE}")

    run_daily_at = str(config_data.get('run_daily_at', '09:00'))
    if not re.fullmatch(r"([01]\d|2[0-3]):[0-5]\d", run_daily_at):
        raise ValueError(f"run_daily_at must look like HH:MM, got {run_daily_at!r}")

    week = config_data.get('week')
    return BotConfig(
        league_key=str(config_data['league_key']),
        team_key=str(config_data['team_key']),
        week=int(week) if week is not None else None,
        projected=bool(config_data.get('projected', False)),
        batch_size=batch_size,
        run_daily_at=run_daily_at,
        yahoo_api=yahoo_api_config,
        logging=logging_config
    )


class ConfigManager:
    """Manages application configuration loading and validation."""

    def __init__(self, config_path: str = "config.yaml"):
        self.config_path = Path(config_path)
        self._config: Optional[BotConfig] = None

    def load_config(self) -> BotConfig:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r') as file:
            config_data = yaml.safe_load(file) or {}

        self._config = parse_config(config_data)
        return self._config

    def get_config(self) -> BotConfig:
        """Get the current configuration, loading if necessary."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def reload_config(self) -> BotConfig:
        """Reload configuration from file."""
        self._config = None
        return self.get_config()

