"""
Configuration module for tracked providers.

Provides:
- YAML config loading with validation
- Provider definitions and run settings
- Environment variable substitution
"""

from .loader import ConfigLoader, TrackerConfig, TrackerSettings, load_config

__all__ = ["ConfigLoader", "TrackerConfig", "TrackerSettings", "load_config"]
