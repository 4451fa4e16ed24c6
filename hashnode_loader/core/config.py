"""Configuration management for hashnode-loader.

This module provides centralized configuration loading from multiple sources:
- YAML/TOML configuration files
- Environment variables (.env)
- Default values

It also defines the option dataclasses each loader is constructed from, and
validation to ensure configuration values are usable.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # type: ignore

import yaml
from dotenv import load_dotenv

DEFAULT_ENDPOINT = "https://gql.hashnode.com/"
LOADER_KINDS = ("posts", "series", "drafts", "search")


@dataclass
class BaseLoaderOptions:
    """Options shared by every loader."""

    publication_host: str
    token: Optional[str] = None
    endpoint: str = DEFAULT_ENDPOINT
    timeout_ms: int = 30000
    cache: bool = True
    cache_ttl: int = 300
    max_retries: int = 0
    fail_on_fetch_error: bool = False


@dataclass
class PostsLoaderOptions(BaseLoaderOptions):
    max_posts: Optional[int] = 1000
    include_drafts: bool = False
    filter_by_tags: List[str] = field(default_factory=list)
    include_comments: bool = False
    include_co_authors: bool = False
    include_table_of_contents: bool = False
    max_comments_per_post: int = 25


@dataclass
class SeriesLoaderOptions(BaseLoaderOptions):
    include_posts: bool = False
    max_series: Optional[int] = None


@dataclass
class SearchLoaderOptions(BaseLoaderOptions):
    search_terms: List[str] = field(default_factory=list)
    max_results: Optional[int] = 50


@dataclass
class DraftsLoaderOptions(BaseLoaderOptions):
    max_drafts: int = 50
    include_draft_by_id: Optional[str] = None


OPTIONS_BY_KIND = {
    "posts": PostsLoaderOptions,
    "series": SeriesLoaderOptions,
    "search": SearchLoaderOptions,
    "drafts": DraftsLoaderOptions,
}


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _as_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    """Coerce ``value`` to int; missing or empty values give ``default``."""
    if value is None or value == "":
        return default
    return int(value)


def _as_list(value: Any) -> List[str]:
    if value is None or value == "":
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [str(part) for part in value]


@dataclass
class ValidationResult:
    """Result of configuration validation."""

    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add an error message."""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def __str__(self) -> str:
        """Format validation result as string."""
        lines = []
        if self.errors:
            lines.append("Errors:")
            lines.extend(f"  - {e}" for e in self.errors)
        if self.warnings:
            lines.append("Warnings:")
            lines.extend(f"  - {w}" for w in self.warnings)
        if not lines:
            return "Configuration is valid."
        return "\n".join(lines)


class Config:
    """Configuration manager for hashnode-loader."""

    def __init__(self, config_file: Optional[str] = None, load_env: bool = True):
        """
        Initialize configuration.

        Args:
            config_file: Path to YAML or TOML config file (optional)
            load_env: Read a ``.env`` file from the working directory
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self._config: Dict[str, Any] = {}
        self._config_file = config_file

        env_path = Path(".env")
        if load_env and env_path.exists():
            load_dotenv(env_path)
            self.logger.info("Loaded environment variables from .env")

        if config_file:
            self._load_config_file(config_file)
        else:
            self._auto_load_config()

        self._load_defaults()

    def _load_config_file(self, config_file: str) -> None:
        """Load configuration from YAML or TOML file."""
        config_path = Path(config_file)

        if not config_path.exists():
            self.logger.warning(f"Config file not found: {config_file}")
            return

        try:
            with open(config_path, "rb") as f:
                if config_file.endswith((".yaml", ".yml")):
                    self._config = yaml.safe_load(f) or {}
                    self.logger.info(f"Loaded YAML config from {config_file}")
                elif config_file.endswith(".toml"):
                    self._config = tomllib.load(f)
                    self.logger.info(f"Loaded TOML config from {config_file}")
                else:
                    self.logger.error(f"Unsupported config format: {config_file}")
        except Exception as e:
            self.logger.error(f"Failed to load config file {config_file}: {e}")

    def _auto_load_config(self) -> None:
        """Automatically find and load config file."""
        config_dir = Path("config")

        candidates = [
            config_dir / "hashnode.yaml",
            config_dir / "hashnode.yml",
            config_dir / "hashnode.toml",
            Path("hashnode.yaml"),
            Path("hashnode.yml"),
            Path("hashnode.toml"),
        ]

        for candidate in candidates:
            if candidate.exists():
                self._load_config_file(str(candidate))
                return

        self.logger.debug("No config file found, using defaults and environment variables")

    def _load_defaults(self) -> None:
        """Load default configuration values."""
        defaults = {
            "hashnode": {
                "publication_host": "",
                "token": "",
                "endpoint": DEFAULT_ENDPOINT,
                "timeout_ms": 30000,
            },
            "cache": {"enabled": True, "ttl_seconds": 300},
            "loaders": {
                "max_posts": 1000,
                "max_results": 50,
                "max_drafts": 50,
                "search_terms": [],
                "max_retries": 0,
            },
            "logging": {"level": "INFO", "file": "", "json": False},
        }

        # Loaded config takes precedence
        for key, value in defaults.items():
            if key not in self._config:
                self._config[key] = value
            elif isinstance(value, dict):
                self._config[key] = {**value, **(self._config.get(key) or {})}

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value.

        Supports dot notation for nested keys: "hashnode.token". An
        environment variable named after the key ("HASHNODE_TOKEN") wins
        over the file.

        Args:
            key: Configuration key (supports dot notation)
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        env_key = key.upper().replace(".", "_")
        env_value = os.getenv(env_key)
        if env_value is not None:
            return env_value

        value: Any = self._config
        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value at runtime.

        Args:
            key: Configuration key (supports dot notation)
            value: Value to set
        """
        keys = key.split(".")
        config = self._config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value
        self.logger.debug(f"Set config {key} = {value}")

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get entire configuration section."""
        return self._config.get(section, {})

    def to_dict(self) -> Dict[str, Any]:
        """Get all configuration as dictionary."""
        return self._config.copy()

    def reload(self, config_file: Optional[str] = None) -> None:
        """
        Reload configuration from file.

        Args:
            config_file: Path to config file (optional, uses original if not provided)
        """
        self._config = {}
        config_file = config_file or self._config_file
        if config_file:
            self._load_config_file(config_file)
        else:
            self._auto_load_config()
        self._load_defaults()
        self.logger.info("Configuration reloaded")

    def loader_options(self, kind: str, **overrides: Any) -> BaseLoaderOptions:
        """
        Build the option dataclass for one loader kind.

        Args:
            kind: One of "posts", "series", "drafts", "search"
            **overrides: Field values taking precedence over the configuration
                (None values are ignored)

        Returns:
            The populated options dataclass

        Raises:
            ValueError: If ``kind`` is unknown
        """
        if kind not in OPTIONS_BY_KIND:
            raise ValueError(f"Unknown loader kind: {kind}. Expected one of: {', '.join(LOADER_KINDS)}")

        values: Dict[str, Any] = {
            "publication_host": self.get("hashnode.publication_host", ""),
            "token": self.get("hashnode.token") or None,
            "endpoint": self.get("hashnode.endpoint", DEFAULT_ENDPOINT),
            "timeout_ms": _as_int(self.get("hashnode.timeout_ms"), 30000),
            "cache": _as_bool(self.get("cache.enabled", True)),
            "cache_ttl": _as_int(self.get("cache.ttl_seconds"), 300),
            "max_retries": _as_int(self.get("loaders.max_retries", 0)) or 0,
        }
        if kind == "posts":
            values["max_posts"] = _as_int(self.get("loaders.max_posts", 1000))
            values["filter_by_tags"] = _as_list(self.get("loaders.filter_by_tags", []))
            values["include_comments"] = _as_bool(self.get("loaders.include_comments", False))
            values["include_co_authors"] = _as_bool(self.get("loaders.include_co_authors", False))
            values["include_table_of_contents"] = _as_bool(
                self.get("loaders.include_table_of_contents", False)
            )
        elif kind == "series":
            values["include_posts"] = _as_bool(self.get("loaders.include_series_posts", False))
            values["max_series"] = _as_int(self.get("loaders.max_series"))
        elif kind == "search":
            values["search_terms"] = _as_list(self.get("loaders.search_terms", []))
            values["max_results"] = _as_int(self.get("loaders.max_results", 50))
        elif kind == "drafts":
            values["max_drafts"] = _as_int(self.get("loaders.max_drafts", 50)) or 50

        values.update({k: v for k, v in overrides.items() if v is not None})
        return OPTIONS_BY_KIND[kind](**values)

    def validate(self) -> ValidationResult:
        """
        Validate the configuration.

        Checks:
        - A publication host is configured
        - Numeric values are in range
        - The logging level is known

        Returns:
            ValidationResult with errors and warnings
        """
        result = ValidationResult(is_valid=True)

        log_level = str(self.get("logging.level", "INFO"))
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if log_level.upper() not in valid_levels:
            result.add_error(
                f"Invalid logging level '{log_level}'. Must be one of: {', '.join(valid_levels)}"
            )

        log_file = self.get("logging.file", "")
        if log_file:
            log_dir = Path(log_file).parent
            if not log_dir.exists():
                result.add_warning(f"Log directory does not exist: {log_dir}")

        if not self.get("hashnode.publication_host"):
            result.add_error("hashnode.publication_host is required")

        endpoint = str(self.get("hashnode.endpoint", DEFAULT_ENDPOINT))
        if not endpoint.startswith(("http://", "https://")):
            result.add_error("hashnode.endpoint must be an http(s) URL")

        for key, minimum in (
            ("hashnode.timeout_ms", 1),
            ("cache.ttl_seconds", 0),
            ("loaders.max_posts", 1),
            ("loaders.max_results", 1),
            ("loaders.max_drafts", 1),
            ("loaders.max_retries", 0),
        ):
            try:
                value = _as_int(self.get(key))
            except (TypeError, ValueError):
                result.add_error(f"{key} must be an integer")
                continue
            if value is not None and value < minimum:
                result.add_error(f"{key} must be >= {minimum}")

        if not self.get("hashnode.token"):
            result.add_warning("hashnode.token is not set; drafts cannot be loaded")

        if not result.is_valid:
            for error in result.errors:
                self.logger.error(f"Config validation error: {error}")
        for warning in result.warnings:
            self.logger.warning(f"Config validation warning: {warning}")

        return result

    def validate_and_raise(self) -> None:
        """
        Validate configuration and raise exception if invalid.

        Raises:
            ValueError: If configuration is invalid
        """
        result = self.validate()
        if not result.is_valid:
            raise ValueError(f"Invalid configuration:\n{result}")


_global_config: Optional[Config] = None


def get_config(config_file: Optional[str] = None) -> Config:
    """
    Get global configuration instance.

    Args:
        config_file: Path to config file (only used on first call)

    Returns:
        Config instance
    """
    global _global_config

    if _global_config is None:
        _global_config = Config(config_file)

    return _global_config


def reload_config(config_file: Optional[str] = None) -> None:
    """Reload global configuration."""
    global _global_config

    if _global_config is not None:
        _global_config.reload(config_file)
    else:
        _global_config = Config(config_file)
