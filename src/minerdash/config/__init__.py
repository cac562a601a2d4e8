"""Configuration management for minerdash.

Loads and validates YAML-based configuration with Pydantic models.
Supports environment variable overrides for the daemon target and
the listen address.
"""

from minerdash.config.settings import MinerConfig, Settings, load_settings

__all__ = ["MinerConfig", "Settings", "load_settings"]
