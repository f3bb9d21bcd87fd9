"""
Candidate validation and cleanup.

Applies per-provider field constraints before a candidate can become an
Update: minimum title length, length caps, fallback description and
absolute URLs.
"""

import re
from typing import TYPE_CHECKING, Optional
from urllib.parse import urljoin, urlparse

import structlog

from .models import Candidate, TITLE_MAX_LENGTH

if TYPE_CHECKING:
    from changelog_tracker.adapters.base import ProviderConfig

logger = structlog.get_logger(__name__)


def normalize_text(text: Optional[str]) -> str:
    """
    Collapse whitespace runs and strip the ends.

    Args:
        text: Raw text (may be None)

    Returns:
        Normalized text
    """
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def truncate(text: str, limit: int) -> str:
    """Cut text to at most ``limit`` characters."""
    return text[:limit].rstrip() if len(text) > limit else text


def is_informative(text: str, min_words: int) -> bool:
    """Check that a description has at least ``min_words`` words."""
    return len(text.split()) >= min_words


def resolve_url(url: Optional[str], provider: "ProviderConfig") -> str:
    """
    Make a candidate URL absolute.

    Absolute http(s) URLs pass through, relative ones are joined onto the
    provider base URL, and a missing URL becomes the provider page URL.
    """
    url = (url or "").strip()
    if not url:
        return provider.url

    if urlparse(url).scheme in ("http", "https"):
        return url

    return urljoin(provider.base_url, url)


def sanitize(candidate: Candidate, provider: "ProviderConfig") -> Optional[Candidate]:
    """
    Validate and clean a raw candidate.

    Args:
        candidate: Candidate straight from an adapter
        provider: Provider configuration with caps and fallbacks

    Returns:
        Cleaned Candidate, or None when it is rejected
    """
    title = normalize_text(candidate.title)
    if not title or len(title) < provider.min_title_length:
        logger.debug(
            "candidate_rejected",
            provider=provider.id,
            reason="short_title",
            title=title[:50],
        )
        return None

    description = normalize_text(candidate.description)
    if not is_informative(description, provider.min_description_words):
        description = provider.fallback_description

    return Candidate(
        title=truncate(title, TITLE_MAX_LENGTH),
        description=truncate(description, provider.description_cap),
        date=candidate.date,
        url=resolve_url(candidate.url, provider),
    )
