"""
Core layer - the extraction-normalization-merge machinery.

Components:
- models: Candidate, Update, ProviderHistory, TrackerDocument
- dates: absolute, partial and relative date normalization
- sanitizer: per-provider candidate validation
- deduplicator: dedup key policies and lookup
- merge: bounded, idempotent history merge
- http_client: rate-limited HTTP fetch with timeout
- store: locked, atomic JSON document store
"""

from .models import (
    Candidate,
    Update,
    ProviderHistory,
    TrackerDocument,
    MAX_RETAINED,
    TITLE_MAX_LENGTH,
)
from .dates import normalize_date, resolve_date
from .sanitizer import sanitize
from .deduplicator import DedupPolicy, exists
from .merge import merge, MergeResult
from .http_client import HttpClient, FetchError
from .store import JsonStore, StoreError, ConcurrentWriteError

__all__ = [
    "Candidate",
    "Update",
    "ProviderHistory",
    "TrackerDocument",
    "MAX_RETAINED",
    "TITLE_MAX_LENGTH",
    "normalize_date",
    "resolve_date",
    "sanitize",
    "DedupPolicy",
    "exists",
    "merge",
    "MergeResult",
    "HttpClient",
    "FetchError",
    "JsonStore",
    "StoreError",
    "ConcurrentWriteError",
]
