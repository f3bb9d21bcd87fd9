"""
YAML configuration loader.

Loads tracker settings and provider definitions with:
- Environment variable substitution
- Required-field validation
- Default values
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import structlog
import yaml

from changelog_tracker.adapters.base import ProviderConfig
from changelog_tracker.core.deduplicator import DedupPolicy
from changelog_tracker.core.http_client import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from changelog_tracker.core.models import MAX_RETAINED

logger = structlog.get_logger(__name__)


DEFAULT_CONFIG_FILE = "providers.yml"


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variables in text.

    Supports formats:
    - ${VAR_NAME} - required, warns and substitutes "" if missing
    - ${VAR_NAME:-default} - optional with default

    Args:
        text: Text with env var placeholders

    Returns:
        Text with substituted values
    """
    def replace(match):
        var_expr = match.group(1)
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)
        else:
            value = os.getenv(var_expr)
            if value is None:
                logger.warning("env_var_not_set", var=var_expr)
                return ""
            return value

    return re.sub(r"\$\{([^}]+)\}", replace, text)


@dataclass
class TrackerSettings:
    """Run-wide settings."""

    data_file: str = "data/updates.json"
    request_delay: float = 1.0  # seconds between provider fetches
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    dedup_policy: DedupPolicy = DedupPolicy.TITLE_AND_DATE
    max_retained: int = MAX_RETAINED
    concurrency: int = 1

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "TrackerSettings":
        """
        Create from dictionary, using defaults for missing values.

        Raises:
            ValueError: On an unknown dedup key or non-positive limits
        """
        data = data or {}
        try:
            policy = DedupPolicy(data.get("dedup_key", DedupPolicy.TITLE_AND_DATE.value))
        except ValueError:
            choices = ", ".join(p.value for p in DedupPolicy)
            raise ValueError(f"Invalid dedup_key '{data.get('dedup_key')}' (expected one of: {choices})") from None

        settings = cls(
            data_file=str(data.get("data_file") or cls.data_file),
            request_delay=float(data.get("request_delay", cls.request_delay)),
            timeout=float(data.get("timeout", cls.timeout)),
            user_agent=str(data.get("user_agent") or cls.user_agent),
            dedup_policy=policy,
            max_retained=int(data.get("max_retained", cls.max_retained)),
            concurrency=int(data.get("concurrency", cls.concurrency)),
        )

        if settings.max_retained < 1:
            raise ValueError(f"max_retained must be positive, got {settings.max_retained}")
        if settings.concurrency < 1:
            raise ValueError(f"concurrency must be positive, got {settings.concurrency}")
        if settings.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {settings.timeout}")

        return settings


@dataclass
class TrackerConfig:
    """Parsed configuration file."""
    settings: TrackerSettings = field(default_factory=TrackerSettings)
    providers: list[ProviderConfig] = field(default_factory=list)


class ConfigLoader:
    """
    Configuration loader for tracked providers.

    Loads YAML config files and validates against expected schema.
    """

    REQUIRED_PROVIDER_FIELDS = ["id", "name", "url"]

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_dir: Directory containing config files
                       (defaults to package config directory)
        """
        if config_dir:
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = Path(__file__).parent

    def load_file(self, filename: str) -> dict:
        """
        Load YAML config file.

        Args:
            filename: Config file name (relative to config_dir)

        Returns:
            Parsed config dict
        """
        filepath = self.config_dir / filename

        if not filepath.exists():
            raise FileNotFoundError(f"Config file not found: {filepath}")

        logger.info("loading_config", file=str(filepath))

        with open(filepath, "r", encoding="utf-8") as f:
            content = f.read()

        content = substitute_env_vars(content)
        config = yaml.safe_load(content)

        return config or {}

    def load(self, filename: str = DEFAULT_CONFIG_FILE) -> TrackerConfig:
        """
        Load settings and provider definitions.

        Providers with missing required fields are skipped with an error
        logged; the rest of the file still loads.

        Args:
            filename: Config file name

        Returns:
            TrackerConfig
        """
        config = self.load_file(filename)
        settings = TrackerSettings.from_dict(config.get("settings"))

        providers = []
        seen: set[str] = set()
        for provider_data in config.get("providers", []):
            try:
                provider = self._parse_provider(provider_data)
            except (ValueError, TypeError) as e:
                logger.error(
                    "provider_load_failed",
                    provider=provider_data.get("id", "unknown") if isinstance(provider_data, dict) else "unknown",
                    error=str(e),
                )
                continue

            if provider.id in seen:
                logger.error("provider_duplicate", provider=provider.id)
                continue

            seen.add(provider.id)
            providers.append(provider)
            logger.debug("provider_loaded", provider=provider.id, adapter=provider.adapter)

        return TrackerConfig(settings=settings, providers=providers)

    def _parse_provider(self, data: dict) -> ProviderConfig:
        """
        Parse provider definition into ProviderConfig.

        Raises:
            ValueError: If required fields are missing
        """
        if not isinstance(data, dict):
            raise TypeError(f"Provider entry must be a mapping, got {type(data).__name__}")

        for name in self.REQUIRED_PROVIDER_FIELDS:
            if not data.get(name):
                raise ValueError(f"Missing required field: {name}")

        return ProviderConfig.from_dict(data)


def load_config(config_path: Optional[str] = None) -> TrackerConfig:
    """
    Convenience function to load the tracker config.

    Args:
        config_path: Optional path to a providers.yml

    Returns:
        TrackerConfig
    """
    if config_path:
        path = Path(config_path)
        return ConfigLoader(str(path.parent)).load(path.name)
    return ConfigLoader().load()
