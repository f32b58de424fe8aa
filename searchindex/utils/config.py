"""
Configuration management for the search index.
"""

import yaml
import logging
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field


class ConfigurationError(ValueError):
    """Raised when a component is constructed with an invalid setting."""
    pass


@dataclass
class EngineConfig:
    """Configuration for index building, crawling and searching."""
    threads: int = 5
    max_links: int = 30
    redirects: int = 3
    exact: bool = False


@dataclass
class FetcherConfig:
    """Configuration for the HTML fetcher."""
    user_agent: str = "SearchIndex/1.0"
    request_timeout: int = 30


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"
    file: str = "logs/searchindex.log"
    format: str = "%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s"
    json: bool = False


@dataclass
class MonitoringConfig:
    """Configuration for monitoring."""
    prometheus_port: int = 8000
    metrics_enabled: bool = False


@dataclass
class Config:
    """Main configuration class."""
    engine: EngineConfig = field(default_factory=EngineConfig)
    fetcher: FetcherConfig = field(default_factory=FetcherConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)

    @classmethod
    def default(cls) -> 'Config':
        """Configuration used when no file is given."""
        return cls()

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'Config':
        """Build a configuration from parsed YAML, defaulting missing sections."""
        data = data or {}
        try:
            return cls(
                engine=EngineConfig(**(data.get('engine') or {})),
                fetcher=FetcherConfig(**(data.get('fetcher') or {})),
                logging=LoggingConfig(**(data.get('logging') or {})),
                monitoring=MonitoringConfig(**(data.get('monitoring') or {}))
            )
        except TypeError as e:
            raise ConfigurationError(f"Unknown configuration key: {e}") from e


def validate_config(config: Config):
    """Validate configuration values."""
    if config.engine.threads < 1:
        raise ConfigurationError("threads must be at least 1")

    if config.engine.max_links < 1:
        raise ConfigurationError("max_links must be at least 1")

    if config.engine.redirects < 0:
        raise ConfigurationError("redirects must be non-negative")

    if config.fetcher.request_timeout <= 0:
        raise ConfigurationError("request_timeout must be positive")

    if not isinstance(logging.getLevelName(config.logging.level.upper()), int):
        raise ConfigurationError(f"Unknown log level: {config.logging.level}")


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_path: Optional[str] = "config.yaml"):
        self.config_path = Path(config_path) if config_path else None
        self._config: Optional[Config] = None

    def load_config(self) -> Config:
        """Load configuration from YAML file, or defaults when there is none."""
        if self.config_path is None:
            self._config = Config.default()
        else:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

            with open(self.config_path, 'r') as file:
                config_data = yaml.safe_load(file)

            if config_data is not None and not isinstance(config_data, dict):
                raise ConfigurationError(f"Configuration root must be a mapping: {self.config_path}")

            self._config = Config.from_dict(config_data)

        validate_config(self._config)
        logging.getLogger(__name__).debug("Configuration validation passed")
        return self._config

    @property
    def config(self) -> Config:
        """Get the loaded configuration."""
        if not self._config:
            raise ConfigurationError("Configuration not loaded. Call load_config() first.")
        return self._config


# Global config manager instance
config_manager = ConfigManager(None)


def get_config() -> Config:
    """Get the global configuration instance."""
    return config_manager.config


def load_config(config_path: Optional[str] = "config.yaml") -> Config:
    """Load configuration from file."""
    global config_manager
    config_manager = ConfigManager(config_path)
    return config_manager.load_config()
