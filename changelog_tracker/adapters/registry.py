"""
Adapter and provider registries.

Adapter classes register themselves under a name with
``@register_adapter``. A ProviderRegistry pairs each configured provider
with an instance of its adapter and is handed to the orchestrator as
configuration.
"""

from typing import Iterator, Optional

import structlog

from .base import ProviderConfig, SourceAdapter

logger = structlog.get_logger(__name__)

# Adapter name -> adapter class
ADAPTERS: dict[str, type[SourceAdapter]] = {}


def register_adapter(name: str):
    """
    Decorator registering a SourceAdapter subclass under ``name``.
    """
    def decorator(cls: type[SourceAdapter]) -> type[SourceAdapter]:
        if not issubclass(cls, SourceAdapter):
            raise TypeError(f"Adapter must inherit from SourceAdapter, got {cls}")
        if name in ADAPTERS and ADAPTERS[name] is not cls:
            raise ValueError(f"Adapter name already registered: {name}")
        ADAPTERS[name] = cls
        return cls
    return decorator


def get_adapter_class(name: str) -> type[SourceAdapter]:
    """
    Look up a registered adapter class.

    Raises:
        ValueError: If no adapter is registered under ``name``
    """
    try:
        return ADAPTERS[name]
    except KeyError:
        known = ", ".join(sorted(ADAPTERS)) or "none"
        raise ValueError(f"Unknown adapter '{name}' (known: {known})") from None


class ProviderRegistry:
    """Ordered mapping of provider id -> (config, adapter)."""

    def __init__(self):
        self._entries: dict[str, tuple[ProviderConfig, SourceAdapter]] = {}

    def register(self, provider: ProviderConfig, adapter: Optional[SourceAdapter] = None) -> None:
        """
        Register a provider.

        Args:
            provider: Provider configuration
            adapter: Adapter instance (instantiated from provider.adapter if omitted)
        """
        if provider.id in self._entries:
            raise ValueError(f"Duplicate provider id: {provider.id}")

        if adapter is None:
            adapter = get_adapter_class(provider.adapter)()

        self._entries[provider.id] = (provider, adapter)
        logger.debug(
            "provider_registered",
            provider=provider.id,
            adapter=adapter.get_adapter_name(),
        )

    @classmethod
    def from_configs(cls, providers: list[ProviderConfig]) -> "ProviderRegistry":
        registry = cls()
        for provider in providers:
            registry.register(provider)
        return registry

    def get(self, provider_id: str) -> tuple[ProviderConfig, SourceAdapter]:
        return self._entries[provider_id]

    def only(self, provider_ids: list[str]) -> "ProviderRegistry":
        """
        Restrict to a subset of providers, keeping registration order.

        Raises:
            ValueError: If an id is not registered
        """
        unknown = [pid for pid in provider_ids if pid not in self._entries]
        if unknown:
            raise ValueError(f"Unknown provider(s): {', '.join(unknown)}")

        subset = ProviderRegistry()
        for pid, (provider, adapter) in self._entries.items():
            if pid in provider_ids:
                subset.register(provider, adapter)
        return subset

    @property
    def providers(self) -> list[ProviderConfig]:
        return [provider for provider, _ in self._entries.values()]

    def identities(self) -> list[tuple[str, str]]:
        """(id, name) pairs used to initialize documents."""
        return [(p.id, p.name) for p in self.providers]

    def __iter__(self) -> Iterator[tuple[ProviderConfig, SourceAdapter]]:
        return iter(list(self._entries.values()))

    def __contains__(self, provider_id: str) -> bool:
        return provider_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
