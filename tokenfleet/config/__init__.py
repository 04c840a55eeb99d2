"""
Configuration module.

Defaults, settings.yaml overrides, secrets from the environment and the
recipient address list.
"""
from .defaults import AppConfig, get_default_config
from .loader import ConfigLoader
from .validation import ConfigValidator, ValidationError

__all__ = [
    "AppConfig",
    "ConfigLoader",
    "ConfigValidator",
    "ValidationError",
    "get_default_config",
]
