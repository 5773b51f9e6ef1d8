"""Configuration management."""

from .settings import ConfigError, Settings, load_config

__all__ = ["Settings", "ConfigError", "load_config"]
