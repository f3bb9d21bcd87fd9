"""
Pure extraction-normalization-merge run.

``run_once`` takes an existing document, a reference instant and the
markup fetched for each provider, and returns the updated document plus
per-provider insert counts. It performs no I/O, so it can be exercised
without network or disk.
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Mapping, Optional

import structlog

from .adapters.base import ProviderConfig, extract_candidates
from .adapters.registry import ProviderRegistry
from .core.dates import normalize_date
from .core.deduplicator import DedupPolicy
from .core.merge import merge
from .core.models import MAX_RETAINED, Candidate, TrackerDocument, Update
from .core.sanitizer import sanitize

logger = structlog.get_logger(__name__)


@dataclass
class RunResult:
    """Outcome of one run over all providers."""
    document: TrackerDocument
    inserted: dict[str, int] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def total_inserted(self) -> int:
        return sum(self.inserted.values())


def prepare_updates(
    candidates: Iterable[Candidate],
    provider: ProviderConfig,
    reference: datetime,
) -> list[Update]:
    """
    Validate candidates and normalize their dates.

    Args:
        candidates: Raw adapter output
        provider: Provider configuration
        reference: Reference instant for date normalization

    Returns:
        Updates ready for merging, in adapter order
    """
    updates = []
    for candidate in candidates:
        cleaned = sanitize(candidate, provider)
        if cleaned is None:
            continue
        updates.append(
            Update(
                title=cleaned.title,
                description=cleaned.description,
                date=normalize_date(cleaned.date, reference),
                url=cleaned.url or provider.url,
            )
        )
    return updates


def run_once(
    document: TrackerDocument,
    reference: datetime,
    markup_by_provider: Mapping[str, Optional[str]],
    registry: ProviderRegistry,
    policy: DedupPolicy = DedupPolicy.TITLE_AND_DATE,
    max_retained: int = MAX_RETAINED,
    fetch_errors: Optional[Mapping[str, str]] = None,
) -> RunResult:
    """
    Merge freshly fetched markup into a document.

    Providers whose markup is missing (None or absent) contribute zero
    candidates. The input document is left untouched; the returned one
    has ``last_updated`` set to ``reference`` whatever happened.

    Args:
        document: Document as loaded from the store
        reference: Reference instant ("now") of this run
        markup_by_provider: Raw HTML per provider id
        registry: Providers and their adapters
        policy: Dedup key policy for the whole document
        max_retained: Retention cap per history
        fetch_errors: Transport errors per provider id, reported in the result

    Returns:
        RunResult with the new document and per-provider counts
    """
    updated = copy.deepcopy(document)
    result = RunResult(document=updated, errors=dict(fetch_errors or {}))

    for provider, adapter in registry:
        history = updated.ensure_provider(provider.id, provider.name)
        markup = markup_by_provider.get(provider.id)

        if markup is None:
            logger.info(
                "provider_skipped",
                provider=provider.id,
                reason=result.errors.get(provider.id, "no markup"),
            )
            result.inserted[provider.id] = 0
            continue

        outcome = extract_candidates(adapter, markup, provider)
        if not outcome.ok:
            result.errors[provider.id] = outcome.error

        updates = prepare_updates(outcome.candidates, provider, reference)
        merged = merge(history.updates, updates, policy=policy, max_retained=max_retained)
        history.updates = merged.history
        result.inserted[provider.id] = merged.inserted

        if merged.inserted:
            logger.info(
                "updates_added",
                provider=provider.id,
                inserted=merged.inserted,
                evicted=merged.evicted,
                total=len(history.updates),
            )
        else:
            logger.info("no_new_updates", provider=provider.id, candidates=len(updates))

    updated.last_updated = reference
    return result
