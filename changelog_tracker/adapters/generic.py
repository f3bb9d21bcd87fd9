"""
Generic changelog adapter.

For pages without a stable structure: tries common changelog selectors
in order and keeps the results of the first selector that produces
anything. Pages rendered client-side often produce nothing at all.
"""

import re
from typing import Iterator, Optional

from bs4 import Tag

from changelog_tracker.core.dates import MONTH_NAME_PATTERN
from changelog_tracker.core.models import Candidate

from .base import ProviderConfig, SourceAdapter, element_text
from .registry import register_adapter


FULL_DATE_PATTERN = re.compile(
    rf"\b{MONTH_NAME_PATTERN}\.?\s+\d{{1,2}}(?:st|nd|rd|th)?,?\s+\d{{4}}\b|\b\d{{4}}-\d{{2}}-\d{{2}}\b",
    re.IGNORECASE,
)
PARTIAL_DATE_PATTERN = re.compile(
    rf"\b{MONTH_NAME_PATTERN}\.?\s+\d{{1,2}}(?:st|nd|rd|th)?\b(?!,?\s*\d)",
    re.IGNORECASE,
)


@register_adapter("generic")
class GenericChangelogAdapter(SourceAdapter):
    """Selector cascade over common changelog markup."""

    SELECTORS = [
        "article",
        ".release",
        ".changelog-item",
        ".update-item",
        ".post",
        ".entry",
        '[class*="release"]',
        '[class*="changelog"]',
    ]
    TITLE_SELECTOR = 'h1, h2, h3, h4, .title, [class*="title"]'
    DESCRIPTION_SELECTOR = 'p, .description, [class*="description"]'
    DATE_SELECTOR = "time, .date, .release-date, .published"

    # Month + day without a year is accepted as a date
    ALLOW_PARTIAL_DATES = False

    def extract(self, markup: str, provider: ProviderConfig) -> Iterator[Candidate]:
        soup = self.parse(markup)

        for selector in self.SELECTORS:
            found = 0

            for i, elem in enumerate(soup.select(selector)):
                if i >= provider.max_entries:
                    break

                candidate = self._extract_block(elem, provider)
                if candidate is None:
                    continue

                found += 1
                yield candidate

            if found:
                self.logger.debug("selector_matched", provider=provider.id, selector=selector, found=found)
                return

    def _extract_block(self, elem: Tag, provider: ProviderConfig) -> Optional[Candidate]:
        title = element_text(elem.select_one(self.TITLE_SELECTOR))
        if len(title) < provider.min_title_length:
            return None

        link = elem if elem.name == "a" and elem.get("href") else elem.find("a", href=True)

        return Candidate(
            title=title,
            description=element_text(elem.select_one(self.DESCRIPTION_SELECTOR)),
            date=self.find_date(elem),
            url=link["href"] if link else None,
        )

    def find_date(self, elem: Tag) -> Optional[str]:
        """
        Find a date expression inside a block.

        Tries a <time datetime> attribute, then date-ish elements, then a
        date-looking token anywhere in the block text.

        Returns:
            Raw date text or None (normalized to "today" later)
        """
        date_elem = elem.select_one(self.DATE_SELECTOR)
        if date_elem is not None:
            value = date_elem.get("datetime") or element_text(date_elem)
            if value:
                return value

        text = element_text(elem)
        match = FULL_DATE_PATTERN.search(text)
        if match:
            return match.group(0)

        if self.ALLOW_PARTIAL_DATES:
            match = PARTIAL_DATE_PATTERN.search(text)
            if match:
                return match.group(0)

        return None
