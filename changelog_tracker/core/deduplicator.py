"""
Update deduplication against a provider history.

Two key policies are supported:
- TITLE_AND_DATE: normalized title plus canonical date (default)
- TITLE: normalized title only

One policy applies to the whole document. TITLE is strictly looser than
TITLE_AND_DATE, so histories written under the stricter key stay
matchable after moving to the looser one, but not the other way round.
"""

import re
from enum import Enum
from typing import Iterable, Union

import structlog

from .models import Candidate, Update

logger = structlog.get_logger(__name__)


class DedupPolicy(str, Enum):
    """Equality key used to decide whether an update already exists."""
    TITLE_AND_DATE = "title_date"
    TITLE = "title"


DedupKey = Union[str, tuple[str, str]]


def normalize_title_key(title: str) -> str:
    """Case-fold a title and collapse its whitespace."""
    return re.sub(r"\s+", " ", title or "").strip().casefold()


def dedup_key(record: Union[Update, Candidate], policy: DedupPolicy) -> DedupKey:
    """
    Build the equality key for an update or candidate.

    Args:
        record: Update, or Candidate whose date is already normalized
        policy: Key policy

    Returns:
        Title key, or (title key, ISO date) tuple
    """
    title = normalize_title_key(record.title)
    if policy is DedupPolicy.TITLE:
        return title
    return (title, str(record.date or ""))


def exists(
    history: Iterable[Update],
    candidate: Union[Update, Candidate],
    policy: DedupPolicy = DedupPolicy.TITLE_AND_DATE,
) -> bool:
    """
    Check whether a candidate is already present in a history.

    Args:
        history: Existing updates of one provider
        candidate: Record to look up
        policy: Key policy

    Returns:
        True if an entry with the same key exists
    """
    key = dedup_key(candidate, policy)
    return any(dedup_key(update, policy) == key for update in history)


class HistoryIndex:
    """
    Key index over a growing history.

    Gives the same answers as exists() but in constant time, which the
    merge engine relies on while inserting.
    """

    def __init__(self, history: Iterable[Update], policy: DedupPolicy = DedupPolicy.TITLE_AND_DATE):
        self.policy = policy
        self._keys: set = {dedup_key(u, policy) for u in history}

    def __contains__(self, record: Union[Update, Candidate]) -> bool:
        return dedup_key(record, self.policy) in self._keys

    def add(self, record: Union[Update, Candidate]) -> None:
        key = dedup_key(record, self.policy)
        self._keys.add(key)
        logger.debug("update_indexed", title=record.title[:50], date=str(record.date))

    def __len__(self) -> int:
        return len(self._keys)
