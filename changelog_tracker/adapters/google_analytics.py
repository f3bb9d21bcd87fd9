"""
Google Analytics release notes adapter.

The release notes page is a flat run of headings: a date heading
("October 28, 2025") followed by sibling subheadings, one per feature,
until the next date heading. Each subheading becomes one candidate dated
by its date heading; a date heading without subheadings is a candidate
on its own.
"""

import re
from typing import Iterator, Optional

from bs4 import Tag

from changelog_tracker.core.models import Candidate

from .base import ProviderConfig, SourceAdapter, element_text
from .registry import register_adapter


FULL_DATE_PATTERN = re.compile(
    r"\b(January|February|March|April|May|June|July|August|September|October|November|December)"
    r"\s+\d{1,2},?\s+\d{4}\b",
    re.IGNORECASE,
)

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
DATE_HEADING_TAGS = ("h2", "h3")
BODY_TAGS = ("p", "ul", "ol", "div")


def heading_level(tag: Tag) -> int:
    return int(tag.name[1])


@register_adapter("google-analytics")
class GoogleAnalyticsAdapter(SourceAdapter):
    """Date headings with feature subheadings."""

    def extract(self, markup: str, provider: ProviderConfig) -> Iterator[Candidate]:
        soup = self.parse(markup)
        emitted = 0

        for heading in soup.find_all(DATE_HEADING_TAGS):
            heading_text = element_text(heading)
            match = FULL_DATE_PATTERN.search(heading_text)
            if not match:
                continue

            entries = list(self._subheading_entries(heading))
            if not entries:
                entries = [(heading_text, self._following_paragraph(heading))]

            for title, description in entries:
                if emitted >= provider.max_entries:
                    return
                if len(title) < provider.min_title_length:
                    continue

                yield Candidate(
                    title=title,
                    description=description,
                    date=match.group(0),
                    url=provider.url,
                )
                emitted += 1

    def _subheading_entries(self, date_heading: Tag) -> Iterator[tuple[str, str]]:
        """Walk siblings after a date heading, grouping body text under subheadings."""
        level = heading_level(date_heading)
        title: Optional[str] = None
        description = ""

        for sibling in date_heading.find_next_siblings():
            if sibling.name in HEADING_TAGS:
                text = element_text(sibling)
                if heading_level(sibling) <= level or FULL_DATE_PATTERN.search(text):
                    break
                if title:
                    yield title, description
                title, description = text, ""
            elif title and not description and sibling.name in BODY_TAGS:
                description = element_text(sibling)

        if title:
            yield title, description

    def _following_paragraph(self, heading: Tag) -> str:
        sibling = heading.find_next_sibling()
        if sibling is not None and sibling.name == "p":
            return element_text(sibling)
        return ""
