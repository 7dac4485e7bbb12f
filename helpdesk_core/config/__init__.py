"""
Configuration management for the helpdesk demo-data tooling.
"""

from .config_loader import ConfigError, ConfigLoader

__all__ = ["ConfigError", "ConfigLoader"]
