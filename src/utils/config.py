"""
Configuration management for the web crawler system.
"""

import re
import yaml
import logging
from datetime import timedelta
from pathlib import Path
from typing import Dict, List, Any, Optional, Pattern
from dataclasses import dataclass, field, fields, replace


@dataclass
class CrawlerConfig:
    """Configuration for crawler behavior."""
    start_pages: List[str]
    max_depth: int = 10
    timeout_seconds: float = 30.0
    popular_word_count: int = 10
    parallelism: int = 4
    ignored_urls: List[str] = field(default_factory=list)
    ignored_words: List[str] = field(default_factory=list)
    user_agent: str = "WordCountCrawler/1.0"
    request_timeout: int = 30
    result_path: Optional[str] = None
    profile_output_path: Optional[str] = None

    @property
    def timeout(self) -> timedelta:
        return timedelta(seconds=self.timeout_seconds)

    @property
    def ignored_url_patterns(self) -> List[Pattern]:
        return [re.compile(pattern) for pattern in self.ignored_urls]

    @property
    def ignored_word_patterns(self) -> List[Pattern]:
        return [re.compile(pattern) for pattern in self.ignored_words]


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"
    file: str = "logs/crawler.log"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    json: bool = False


@dataclass
class MonitoringConfig:
    """Configuration for monitoring."""
    prometheus_port: int = 8000
    metrics_enabled: bool = False


@dataclass
class Config:
    """Main configuration class."""
    crawler: CrawlerConfig
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)

    def with_crawler_overrides(self, **overrides) -> 'Config':
        """Return a copy with non-None crawler fields overridden, revalidated."""
        overrides = {k: v for k, v in overrides.items() if v is not None}
        config = replace(self, crawler=replace(self.crawler, **overrides))
        validate_config(config)
        return config


def _section(cls, data: Optional[Dict[str, Any]], name: str):
    data = data or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration section '{name}' must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown keys in '{name}' section: {', '.join(sorted(unknown))}")
    return cls(**data)


def parse_config(config_data: Dict[str, Any]) -> Config:
    """Build and validate a Config from already-loaded YAML data."""
    if not isinstance(config_data, dict) or 'crawler' not in config_data:
        raise ValueError("Configuration must contain a 'crawler' section")

    try:
        config = Config(
            crawler=_section(CrawlerConfig, config_data['crawler'], 'crawler'),
            logging=_section(LoggingConfig, config_data.get('logging'), 'logging'),
            monitoring=_section(MonitoringConfig, config_data.get('monitoring'), 'monitoring')
        )
    except TypeError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    validate_config(config)
    return config


def validate_config(config: Config):
    """Validate configuration values."""
    crawler = config.crawler

    # Validate seed URLs
    if not crawler.start_pages:
        raise ValueError("At least one start page must be provided")

    # Validate numeric values
    if crawler.max_depth < 0:
        raise ValueError("max_depth must be non-negative")

    if crawler.timeout_seconds < 0:
        raise ValueError("timeout_seconds must be non-negative")

    if crawler.popular_word_count < 0:
        raise ValueError("popular_word_count must be non-negative")

    if crawler.parallelism < 1:
        raise ValueError("parallelism must be at least 1")

    # Validate patterns
    for pattern in crawler.ignored_urls + crawler.ignored_words:
        try:
            re.compile(pattern)
        except re.error as e:
            raise ValueError(f"Invalid ignore pattern {pattern!r}: {e}") from e

    if not isinstance(logging.getLevelName(config.logging.level.upper()), int):
        raise ValueError(f"Unknown log level: {config.logging.level}")


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_path: str = "config.yaml"):
        self.config_path = Path(config_path)
        self._config: Optional[Config] = None

    def load_config(self) -> Config:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r', encoding='utf-8') as file:
            config_data = yaml.safe_load(file)

        self._config = parse_config(config_data)
        logging.getLogger(__name__).info("Configuration validation passed")
        return self._config

    @property
    def config(self) -> Config:
        """Get the loaded configuration."""
        if not self._config:
            raise ValueError("Configuration not loaded. Call load_config() first.")
        return self._config


# Global config manager instance
config_manager = ConfigManager()


def get_config() -> Config:
    """Get the global configuration instance."""
    return config_manager.config


def load_config(config_path: str = "config.yaml") -> Config:
    """Load configuration from file."""
    global config_manager
    config_manager = ConfigManager(config_path)
    return config_manager.load_config()
