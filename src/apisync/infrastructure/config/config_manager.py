"""Configuration manager for loading and validating .apisync.yml"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from apisync.domain.config import AppConfig, RetryPolicy, SourceSpec, SyncConfig

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".apisync.yml"


class ConfigurationError(Exception):
    """Configuration validation error."""

    pass


class ConfigManager:
    """Manages configuration from .apisync.yml and environment variables

    Loads configuration with validation using Pydantic models. Configuration priority:
    1. Default values (defined in Pydantic models)
    2. .apisync.yml file (searched from current directory)
    3. Environment variables (APISYNC_*)
    4. CLI arguments (handled by CLI layer)
    """

    # Environment variable -> (section paths, converter)
    # Retry overrides apply to both the sync batch policy and the one-off fetch policy
    ENV_OVERRIDES = {
        "APISYNC_OUTPUT_DIR": ((("sync", "output_dir"),), str),
        "APISYNC_MAX_ATTEMPTS": ((("sync", "retry", "max_attempts"), ("retry", "max_attempts")), int),
        "APISYNC_TIMEOUT": ((("sync", "retry", "timeout"), ("retry", "timeout")), float),
        "APISYNC_DELAY": ((("sync", "retry", "delay"), ("retry", "delay")), float),
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize config manager

        Args:
            config_path: Path to .apisync.yml (searches from current dir if None)

        Raises:
            ConfigurationError: If configuration validation fails
        """
        if isinstance(config_path, str):
            config_path = Path(config_path)
        self.config_path = config_path or self._find_config_file()
        try:
            self.config: AppConfig = self._load_config()
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field = ".".join(str(x) for x in error["loc"])
                msg = error["msg"]
                errors.append(f"  - {field}: {msg}")
            raise ConfigurationError(
                "Configuration validation failed:\n" + "\n".join(errors)
            ) from e

    def _find_config_file(self) -> Optional[Path]:
        """Find .apisync.yml starting from current directory

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            config_file = parent / CONFIG_FILE_NAME
            if config_file.exists():
                logger.info(f"Found config file: {config_file}")
                return config_file
        logger.debug(f"No {CONFIG_FILE_NAME} found, using defaults")
        return None

    def _load_config(self) -> AppConfig:
        """Load configuration from file and validate with Pydantic

        Returns:
            Validated AppConfig instance

        Raises:
            ValidationError: If configuration is invalid
            ConfigurationError: If the file cannot be read or parsed
        """
        config_dict = AppConfig().model_dump()

        if self.config_path and self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(f"Failed to load config from {self.config_path}: {e}") from e
            if not isinstance(file_config, dict):
                raise ConfigurationError(f"{self.config_path} must contain a mapping")
            config_dict = self._merge_config(config_dict, file_config)
            logger.info(f"Loaded configuration from {self.config_path}")

        config_dict = self._apply_env_overrides(config_dict)
        return AppConfig(**config_dict)

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries

        Lists (such as ``sources``) are replaced, not merged.

        Args:
            base: Base configuration
            override: Override configuration

        Returns:
            Merged configuration
        """
        result = copy.deepcopy(base)
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides

        Args:
            config: Configuration dictionary

        Returns:
            Configuration with env overrides applied

        Raises:
            ConfigurationError: If an override has the wrong type
        """
        for env_name, (paths, convert) in self.ENV_OVERRIDES.items():
            raw = os.getenv(env_name)
            if not raw:
                continue
            try:
                value = convert(raw)
            except ValueError as e:
                raise ConfigurationError(f"Invalid value for {env_name}: {raw!r}") from e
            for path in paths:
                section = config
                for key in path[:-1]:
                    section = section.setdefault(key, {})
                section[path[-1]] = value
                logger.debug(f"{env_name} overrides {'.'.join(path)}")
        return config

    def get_sources(self) -> List[SourceSpec]:
        """Get the ordered source registry"""
        return list(self.config.sources)

    def get_source(self, name: str) -> SourceSpec:
        """Get a source by name

        Raises:
            KeyError: If no source has this name
        """
        for source in self.config.sources:
            if source.name == name:
                return source
        available = ", ".join(s.name for s in self.config.sources)
        raise KeyError(f"Unknown source: {name}. Available sources: {available}")

    def get_sync_config(self) -> SyncConfig:
        """Get sync batch configuration"""
        return self.config.sync

    def get_retry_config(self) -> RetryPolicy:
        """Get retry policy for one-off fetches

        Returns:
            Retry policy model
        """
        return self.config.retry
