"""Configuration manager for loading and validating .axonflow.yml"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from axonflow.domain.config import AxonFlowConfig, CachePolicy, RetryPolicy
from axonflow.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".axonflow.yml"


class ConfigManager:
    """Manages configuration from .axonflow.yml and environment variables

    Configuration priority:
    1. Default values (defined in Pydantic models)
    2. .axonflow.yml file (searched upward from the current directory)
    3. Environment variables (AXONFLOW_*)
    """

    def __init__(self, config_path: Optional[Path] = None, search: bool = True):
        """Initialize config manager

        Args:
            config_path: Path to a YAML config file
            search: Look for .axonflow.yml from the current dir when no path is given

        Raises:
            ConfigurationError: If configuration validation fails
        """
        if isinstance(config_path, str):
            config_path = Path(config_path)
        self.config_path = config_path or (self._find_config_file() if search else None)
        try:
            self.config: AxonFlowConfig = self._load_config()
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field = ".".join(str(x) for x in error["loc"])
                errors.append(f"  - {field}: {error['msg']}")
            raise ConfigurationError("Configuration validation failed:\n" + "\n".join(errors)) from e

    def _find_config_file(self) -> Optional[Path]:
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            config_file = parent / CONFIG_FILE_NAME
            if config_file.exists():
                logger.info(f"Found config file: {config_file}")
                return config_file
        logger.debug(f"No {CONFIG_FILE_NAME} found, using defaults")
        return None

    def _load_config(self) -> AxonFlowConfig:
        config_dict: Dict[str, Any] = {}

        if self.config_path and self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
                if not isinstance(file_config, dict):
                    raise ValueError("top level must be a mapping")
                config_dict = dict(file_config)
                logger.info(f"Loaded configuration from {self.config_path}")
            except (OSError, ValueError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config from {self.config_path}: {e}")
                logger.info("Using default configuration")

        config_dict = self._apply_env_overrides(config_dict)
        return AxonFlowConfig(**config_dict)

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        if os.getenv("AXONFLOW_AGENT_URL"):
            config["agent_url"] = os.getenv("AXONFLOW_AGENT_URL")

        if os.getenv("AXONFLOW_CLIENT_ID"):
            config["client_id"] = os.getenv("AXONFLOW_CLIENT_ID")

        if os.getenv("AXONFLOW_MODE"):
            config["mode"] = os.getenv("AXONFLOW_MODE").lower()

        timeout = os.getenv("AXONFLOW_TIMEOUT_SECONDS")
        if timeout:
            try:
                config["timeout"] = float(timeout)
            except ValueError:
                logger.warning(f"Ignoring invalid AXONFLOW_TIMEOUT_SECONDS: {timeout!r}")

        if (os.getenv("AXONFLOW_DEBUG") or "").lower() == "true":
            config["debug"] = True

        return config

    def get_retry_policy(self) -> RetryPolicy:
        return self.config.retry

    def get_cache_policy(self) -> CachePolicy:
        return self.config.cache

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key (supports dot notation)

        Args:
            key: Configuration key (e.g., "retry.max_attempts" or "retry")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value = self.config.model_dump()
        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value
