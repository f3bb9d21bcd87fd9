"""
Base class for source adapters.

Adapters implement the extraction phase - turning one provider's
changelog markup into Candidate records.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterator, Optional

import structlog
from bs4 import BeautifulSoup

from changelog_tracker.core.models import Candidate

logger = structlog.get_logger(__name__)


@dataclass
class ProviderConfig:
    """Configuration for a tracked provider."""

    id: str
    name: str
    adapter: str
    url: str  # changelog page to fetch
    base_url: str  # for resolving relative links

    # Sanitizer settings
    description_cap: int = 250
    min_title_length: int = 6
    min_description_words: int = 4
    fallback_description: str = ""

    # Stop after this many matching elements
    max_entries: int = 20

    # Extra adapter-specific settings
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        if not self.fallback_description:
            self.fallback_description = f"{self.name} update"

    @classmethod
    def from_dict(cls, data: dict) -> "ProviderConfig":
        """Create from dictionary (e.g., from YAML)."""
        url = data["url"]
        return cls(
            id=data["id"],
            name=data["name"],
            adapter=data.get("adapter", data["id"]),
            url=url,
            base_url=data.get("base_url", url),
            description_cap=int(data.get("description_cap", 250)),
            min_title_length=int(data.get("min_title_length", 6)),
            min_description_words=int(data.get("min_description_words", 4)),
            fallback_description=data.get("fallback_description", ""),
            max_entries=int(data.get("max_entries", 20)),
            metadata=data.get("metadata", {}),
        )


@dataclass
class ExtractionOutcome:
    """
    Result of running an adapter at the call site.

    ``error`` is set when the adapter raised; the candidates list is then
    empty. The error is reported, never re-raised.
    """
    candidates: list[Candidate] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SourceAdapter(ABC):
    """
    Abstract base class for source adapters.

    Each adapter encodes the structural assumptions of one provider's
    changelog page and yields candidates lazily in page order. Elements
    that do not have the expected shape are skipped; a page with no
    matching elements yields nothing.
    """

    def __init__(self):
        self.logger = logger.bind(adapter=self.__class__.__name__)

    @abstractmethod
    def extract(self, markup: str, provider: ProviderConfig) -> Iterator[Candidate]:
        """
        Extract candidates from provider markup.

        Args:
            markup: Raw HTML of the provider's changelog page
            provider: Provider configuration

        Yields:
            Candidate records in page order
        """

    def parse(self, markup: str) -> BeautifulSoup:
        """Parse markup once for a single extraction pass."""
        return BeautifulSoup(markup, "lxml")

    def get_adapter_name(self) -> str:
        """Return human-readable adapter name."""
        return self.__class__.__name__


def extract_candidates(
    adapter: SourceAdapter,
    markup: str,
    provider: ProviderConfig,
) -> ExtractionOutcome:
    """
    Run an adapter with failure isolation.

    Any exception raised while iterating the adapter is logged and turned
    into an empty outcome; partial output from a failed pass is discarded.

    Args:
        adapter: Adapter to run
        markup: Raw HTML
        provider: Provider configuration

    Returns:
        ExtractionOutcome
    """
    try:
        candidates = list(adapter.extract(markup, provider))
    except Exception as e:
        logger.error(
            "extraction_failed",
            provider=provider.id,
            adapter=adapter.get_adapter_name(),
            error=str(e),
        )
        return ExtractionOutcome(error=f"{type(e).__name__}: {e}")

    logger.info("extraction_complete", provider=provider.id, candidates=len(candidates))
    return ExtractionOutcome(candidates=candidates)


def element_text(element) -> str:
    """Visible text of an element with whitespace collapsed ("" for None)."""
    if element is None:
        return ""
    return " ".join(element.get_text(" ", strip=True).split())
