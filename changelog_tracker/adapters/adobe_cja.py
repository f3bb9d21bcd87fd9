"""
Adobe Customer Journey Analytics release notes adapter.

Release notes are published as tables with four columns:
feature | description | rollout start | general availability.
"""

import re
from typing import Iterator, Optional

from changelog_tracker.core.models import Candidate

from .base import ProviderConfig, SourceAdapter, element_text
from .registry import register_adapter


ROW_CELLS = 4
HAS_DIGIT = re.compile(r"\d")


@register_adapter("adobe-cja")
class AdobeCjaAdapter(SourceAdapter):
    """Four-cell table rows, one release-note item per row."""

    def extract(self, markup: str, provider: ProviderConfig) -> Iterator[Candidate]:
        soup = self.parse(markup)
        emitted = 0

        for row in soup.find_all("tr"):
            if emitted >= provider.max_entries:
                break

            # Header rows use <th>
            if row.find("th") is not None:
                continue

            cells = row.find_all("td", recursive=False)
            if len(cells) != ROW_CELLS:
                continue

            feature, description, rollout, availability = (element_text(c) for c in cells)
            if len(feature) < provider.min_title_length:
                continue

            link = cells[0].find("a", href=True) or cells[1].find("a", href=True)

            yield Candidate(
                title=feature,
                description=description,
                date=self._pick_date(availability, rollout),
                url=link["href"] if link else None,
            )
            emitted += 1

    @staticmethod
    def _pick_date(availability: str, rollout: str) -> Optional[str]:
        """General availability date if given, else the rollout start."""
        for text in (availability, rollout):
            if HAS_DIGIT.search(text):
                return text
        return None
