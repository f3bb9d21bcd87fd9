"""
Matomo changelog adapter.

The changelog page lists every release as a link under the post body,
e.g. ``<a href="/changelog/matomo-5-1-2/">Matomo 5.1.2 – 28th October 2025</a>``.
"""

import re
from typing import Iterator

from changelog_tracker.core.models import Candidate

from .base import ProviderConfig, SourceAdapter, element_text
from .registry import register_adapter


# "Matomo 5.1.2 – 28th October 2025" (en dash, em dash or hyphen)
RELEASE_PATTERN = re.compile(r"Matomo\s+([\d.]+)\s*[–—-]\s*(.+)", re.IGNORECASE)


@register_adapter("matomo")
class MatomoAdapter(SourceAdapter):
    """Release links whose href points at a /changelog/matomo-* page."""

    LINK_SELECTOR = '.entry-content a[href*="/changelog/matomo-"]'

    def extract(self, markup: str, provider: ProviderConfig) -> Iterator[Candidate]:
        soup = self.parse(markup)

        for i, link in enumerate(soup.select(self.LINK_SELECTOR)):
            if i >= provider.max_entries:
                break

            match = RELEASE_PATTERN.search(element_text(link))
            if not match:
                continue

            version = match.group(1).strip(".")
            if not version:
                continue

            yield Candidate(
                title=f"Matomo {version} Release",
                description=f"New version {version} of Matomo has been released",
                date=match.group(2).strip(),
                url=link.get("href"),
            )
