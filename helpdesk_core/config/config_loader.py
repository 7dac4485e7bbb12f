"""
Configuration loader for the helpdesk demo-data tooling.
Supports multiple environments and configuration validation.
"""

import json
import os
import logging
from pathlib import Path
from typing import Dict, Any, Optional
from dotenv import load_dotenv

logger = logging.getLogger("helpdesk_core.config")


class ConfigError(Exception):
    """Raised when the configuration file is missing or malformed."""


class ConfigLoader:
    """Loads and validates configuration from JSON files."""

    required_sections = ("async_config", "provisioning", "reclaim", "environment")

    def __init__(self, config_file: str = "configs/config.json", environment: Optional[str] = None,
                 load_env_files: bool = True):
        """
        Initialize config loader.

        Args:
            config_file: Path to configuration file, relative to the project root or absolute
            environment: Environment name selecting envs/.env.<environment> ("dev", "staging", ...)
            load_env_files: Whether to read envs/.env files into the process environment
        """
        self.config_file = config_file
        self.config: Dict[str, Any] = {}
        self.environment = environment or "dev"
        self.base_path = Path(__file__).parent.parent.parent  # Go up to project root
        if load_env_files:
            self._load_environment_config()
        self._load_config()
        self._validate_config()

    def _load_environment_config(self):
        """Load environment-specific configuration"""
        # First load the main .env file to get HELPDESK_ENVIRONMENT
        main_env_path = self.base_path / 'envs' / '.env'
        if main_env_path.exists():
            load_dotenv(main_env_path, override=False)
            logger.debug("[OK] Loaded main env config from %s", main_env_path)

            env_from_file = os.getenv('HELPDESK_ENVIRONMENT')
            if env_from_file:
                self.environment = env_from_file
                logger.debug("[OK] Environment set to: %s", self.environment)

        env_file_path = self.base_path / 'envs' / f'.env.{self.environment}'
        if env_file_path.exists():
            load_dotenv(env_file_path, override=True)
            logger.debug("[OK] Loaded %s specific config from %s", self.environment, env_file_path)

    def _resolve(self, path: str) -> Path:
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return self.base_path / candidate

    def _load_config(self):
        """Load configuration from JSON file."""
        config_path = self._resolve(self.config_file)
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                self.config = json.load(f)
            logger.debug("Loaded configuration from: %s", config_path)
        except FileNotFoundError:
            raise ConfigError(f"Configuration file {config_path} not found")
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {config_path}: {e}")

    def _validate_config(self):
        """Validate required configuration sections."""
        for section in self.required_sections:
            if section not in self.config:
                raise ConfigError(f"Missing required configuration section: {section}")

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key_path: Dot-separated path (e.g., "async_config.concurrency.max_concurrent_api_calls")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default

    def get_provisioning_config(self) -> Dict[str, Any]:
        """Get provisioning (creation) configuration."""
        return self.config["provisioning"]

    def get_reclaim_config(self) -> Dict[str, Any]:
        """Get reclaim (cleanup) configuration."""
        return self.config["reclaim"]

    def is_debug_mode(self) -> bool:
        """Check if debug mode is enabled."""
        return self.get("environment.debug", False)

    def get_manifest_directory(self) -> str:
        """Directory where per-run manifests are written."""
        return str(self._resolve(self.get("provisioning.manifest_dir", "manifests")))

    def get_rate_limit(self) -> int:
        """Get rate limit from async config."""
        return self.get("async_config.rate_limiting.rate_limit_per_minute", 200)

    def get_concurrent_limits(self) -> Dict[str, int]:
        """Get concurrency limits from async config."""
        return self.get("async_config.concurrency", {
            "max_concurrent_api_calls": 5,
            "max_concurrent_creates": 1,
            "max_concurrent_deletes": 1,
        })

    def setup_logging(self):
        """Setup logging based on configuration."""
        log_level = self.get("environment.log_level", "INFO")
        debug = self.is_debug_mode()

        level = getattr(logging, str(log_level).upper(), logging.INFO)
        if debug:
            level = logging.DEBUG

        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s" if debug else "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            handlers=[logging.StreamHandler()]
        )

        if debug:
            logger.debug("Debug mode enabled")
            logger.debug("Rate limit: %s req/min", self.get_rate_limit())

    def summary_lines(self):
        """Configuration summary as printable lines."""
        lines = [
            "Configuration Summary:",
            f"  Environment: {self.get('environment.name', self.environment)}",
            f"  Rate Limit: {self.get_rate_limit()} req/min",
            f"  Debug Mode: {'enabled' if self.is_debug_mode() else 'disabled'}",
            "  Concurrency Limits:",
        ]
        for key, value in self.get_concurrent_limits().items():
            lines.append(f"    {key}: {value}")
        return lines
