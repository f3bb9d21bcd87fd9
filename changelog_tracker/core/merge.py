"""
Merge of new updates into a bounded provider history.

New updates are inserted at the front in the order the adapter produced
them, skipping anything already present; the tail (oldest insertions) is
evicted once the history exceeds the retention cap.

Only the last ``max_retained`` distinct entries of a batch take part in a
merge, and entries the batch reports again are never evicted in favour of
untouched older ones. Together this keeps merging the same batch twice a
no-op whatever the batch size.
"""

from dataclasses import dataclass, field
from typing import Iterable

from .deduplicator import DedupPolicy, HistoryIndex, dedup_key
from .models import MAX_RETAINED, Update


@dataclass
class MergeResult:
    """Outcome of merging one batch into a history."""
    history: list[Update] = field(default_factory=list)
    inserted: int = 0
    evicted: int = 0


def distinct_window(
    updates: Iterable[Update],
    policy: DedupPolicy,
    size: int,
) -> list[Update]:
    """First occurrence of each key in batch order, limited to the last ``size`` keys."""
    seen = HistoryIndex([], policy)
    distinct = []
    for update in updates:
        if update in seen:
            continue
        seen.add(update)
        distinct.append(update)
    return distinct[-size:]


def merge(
    history: list[Update],
    updates: Iterable[Update],
    policy: DedupPolicy = DedupPolicy.TITLE_AND_DATE,
    max_retained: int = MAX_RETAINED,
) -> MergeResult:
    """
    Merge updates into a history.

    Duplicates inside one batch are inserted once. Batch entries earlier
    than the last ``max_retained`` distinct ones are ignored, since they
    could not survive the tail eviction. The input list is not modified.

    Args:
        history: Current history, newest insertion first
        updates: New updates in adapter order
        policy: Dedup key policy
        max_retained: Retention cap

    Returns:
        MergeResult with the new history and the insert count
    """
    if max_retained < 1:
        raise ValueError(f"max_retained must be positive, got {max_retained}")

    window = distinct_window(updates, policy, max_retained)
    index = HistoryIndex(history, policy)
    fresh = [update for update in window if update not in index]

    merged = list(reversed(fresh)) + list(history)

    overflow = len(merged) - max_retained
    if overflow > 0:
        reported = {dedup_key(update, policy) for update in window}
        kept = []
        # Walk from the oldest insertion, sparing entries in this batch
        for update in reversed(merged):
            if overflow > 0 and dedup_key(update, policy) not in reported:
                overflow -= 1
                continue
            kept.append(update)
        kept.reverse()
        # Histories with repeated keys can leave too many spared entries
        del kept[max_retained:]
        merged = kept

    return MergeResult(
        history=merged,
        inserted=len(fresh),
        evicted=len(history) + len(fresh) - len(merged),
    )
