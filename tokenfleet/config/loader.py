"""Configuration loader with 3-tier parameter precedence."""

import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from ..errors import ConfigurationError
from .defaults import (
    AppConfig,
    ChainParams,
    DeploymentParams,
    DistributionParams,
    ScheduleParams,
    get_default_config,
)

SETTINGS_FILENAME = "settings.yaml"
ADDRESSES_FILENAME = "addresses.txt"
PRIVATE_KEYS_ENV = "PRIVATE_KEYS"

_SECTIONS = {
    "chain": ChainParams,
    "deployment": DeploymentParams,
    "distribution": DistributionParams,
    "schedule": ScheduleParams,
}


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: AppConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path.cwd()

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_settings(self) -> dict[str, Any]:
        """Load settings.yaml overrides, empty when the file is absent."""
        settings_file = self.config_dir / SETTINGS_FILENAME

        if not settings_file.exists():
            return {}

        try:
            with open(settings_file) as f:
                settings = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {settings_file}: {e}",
                                     source=str(settings_file)) from e

        if not isinstance(settings, dict):
            raise ConfigurationError(f"{settings_file} must contain a mapping",
                                     source=str(settings_file))
        return settings

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Explicit overrides, e.g. from the command line (highest priority)
        2. settings.yaml in the config directory
        3. Global defaults (lowest priority)
        """
        config = _deep_merge(asdict(self.defaults), self.load_settings())

        if overrides:
            config = _deep_merge(config, overrides)

        return config

    def load_config(self, overrides: Optional[dict[str, Any]] = None) -> AppConfig:
        """Build the typed AppConfig from the merged configuration."""
        merged = self.merge_config(overrides)

        unknown = set(merged) - set(_SECTIONS)
        if unknown:
            raise ConfigurationError(f"Unknown configuration sections: {sorted(unknown)}")

        try:
            return AppConfig(**{
                name: params_cls(**merged[name]) for name, params_cls in _SECTIONS.items()
            })
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def load_private_keys(self, env_file: Optional[Path] = None) -> list[str]:
        """Read comma-separated private keys from PRIVATE_KEYS (.env aware)."""
        load_dotenv(env_file or self.config_dir / ".env")
        raw = os.getenv(PRIVATE_KEYS_ENV, "")
        keys = [k.strip() for k in raw.split(",") if k.strip()]

        if not keys:
            raise ConfigurationError(f"No private keys found in {PRIVATE_KEYS_ENV}",
                                     source=PRIVATE_KEYS_ENV)
        return keys

    def load_recipients(self, path: Optional[Path] = None) -> list[str]:
        """Read recipient addresses, one per line, skipping blank lines."""
        addresses_file = Path(path) if path else self.config_dir / ADDRESSES_FILENAME

        if not addresses_file.exists():
            raise ConfigurationError(f"Recipient file not found: {addresses_file}",
                                     source=str(addresses_file))

        with open(addresses_file, encoding="utf-8") as f:
            recipients = [line.strip() for line in f if line.strip()]

        if not recipients:
            raise ConfigurationError(f"Recipient file is empty: {addresses_file}",
                                     source=str(addresses_file))
        return recipients


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively overlay ``override`` onto a copy of ``base``."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        merged[key] = (
            _deep_merge(current, value)
            if isinstance(current, dict) and isinstance(value, dict)
            else value
        )
    return merged
