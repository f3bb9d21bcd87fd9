"""
Data models for the changelog tracker.

Candidate records come out of source adapters; Update records are what
gets persisted in a provider's history.
"""

from dataclasses import dataclass, field, asdict
from datetime import date, datetime, timezone
from typing import Optional, Union

import structlog

logger = structlog.get_logger(__name__)


# Retention cap per provider history
MAX_RETAINED = 100

# Hard cap for persisted titles
TITLE_MAX_LENGTH = 150


@dataclass
class Candidate:
    """
    Transient update record produced by a source adapter.

    ``date`` may still be a raw string awaiting normalization, an
    already-normalized ``datetime.date``, or None when the page had no
    date at all. ``url`` may be relative or missing.
    """
    title: str
    description: str = ""
    date: Union[str, date, None] = None
    url: Optional[str] = None


@dataclass(frozen=True)
class Update:
    """A validated, deduplicated update as stored in a history."""

    title: str
    description: str
    date: str  # ISO calendar date, YYYY-MM-DD
    url: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Update":
        """
        Build an update from its JSON form.

        Raises:
            ValueError: If the entry is not an object with a title and a date
        """
        if not isinstance(data, dict) or not data.get("title") or not data.get("date"):
            raise ValueError(f"Update entry needs a title and a date: {data!r:.80}")
        return cls(
            title=str(data["title"]),
            description=str(data.get("description") or ""),
            date=str(data["date"]),
            url=str(data.get("url") or ""),
        )


@dataclass
class ProviderHistory:
    """A provider and the ordered history of its updates (newest insertion first)."""

    id: str
    name: str
    updates: list[Update] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "updates": [u.to_dict() for u in self.updates],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProviderHistory":
        """
        Build a history from its JSON form.

        Malformed update entries are dropped one by one with a warning;
        the well-formed ones are kept in their stored order.

        Raises:
            ValueError: If the entry has no provider id
        """
        if not isinstance(data, dict) or not data.get("id"):
            raise ValueError(f"Provider entry needs an id: {data!r:.80}")

        provider_id = str(data["id"])
        raw_updates = data.get("updates") or []
        if not isinstance(raw_updates, list):
            logger.warning("stored_updates_not_a_list", provider=provider_id)
            raw_updates = []

        updates = []
        for raw in raw_updates:
            try:
                updates.append(Update.from_dict(raw))
            except ValueError as e:
                logger.warning("stored_update_skipped", provider=provider_id, error=str(e))

        return cls(
            id=provider_id,
            name=str(data.get("name") or provider_id),
            updates=updates,
        )


@dataclass
class TrackerDocument:
    """
    Whole persisted state: every provider history plus the run stamp.

    Serialized shape::

        {"competitors": [{"id", "name", "updates": [...]}], "lastUpdated": "..."}
    """

    providers: list[ProviderHistory] = field(default_factory=list)
    last_updated: Optional[datetime] = None

    @classmethod
    def empty(cls, providers: list[tuple[str, str]]) -> "TrackerDocument":
        """Create a document with an empty history for each (id, name) pair."""
        return cls(providers=[ProviderHistory(id=pid, name=name) for pid, name in providers])

    def get(self, provider_id: str) -> Optional[ProviderHistory]:
        for provider in self.providers:
            if provider.id == provider_id:
                return provider
        return None

    def ensure_provider(self, provider_id: str, name: str) -> ProviderHistory:
        """Return the provider's history, appending an empty one if missing."""
        provider = self.get(provider_id)
        if provider is None:
            provider = ProviderHistory(id=provider_id, name=name)
            self.providers.append(provider)
        return provider

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "competitors": [p.to_dict() for p in self.providers],
            "lastUpdated": format_timestamp(self.last_updated) if self.last_updated else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TrackerDocument":
        """
        Build a document from its JSON form.

        Provider entries without an id and an unparseable ``lastUpdated``
        are dropped with a warning instead of failing the whole document.

        Raises:
            ValueError: If the payload does not have the document shape
        """
        if not isinstance(data, dict) or not isinstance(data.get("competitors"), list):
            raise ValueError("Document must be an object with a 'competitors' list")

        providers = []
        for raw in data["competitors"]:
            try:
                providers.append(ProviderHistory.from_dict(raw))
            except ValueError as e:
                logger.warning("stored_provider_skipped", error=str(e))

        last_updated = None
        raw_stamp = data.get("lastUpdated")
        if raw_stamp:
            try:
                last_updated = parse_timestamp(raw_stamp)
            except ValueError:
                logger.warning("stored_timestamp_invalid", value=str(raw_stamp)[:40])

        return cls(providers=providers, last_updated=last_updated)


def format_timestamp(value: datetime) -> str:
    """Render an aware datetime as ISO-8601 UTC with millisecond precision and Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_timestamp(text: str) -> datetime:
    """Parse an ISO-8601 timestamp (``Z`` suffix accepted) into an aware datetime."""
    value = datetime.fromisoformat(str(text).replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value
