"""
Piwik PRO news adapter.

Reads the "news & releases" blog category: one article block per post
with a heading, a permalink, a <time> element and an excerpt.
"""

from typing import Iterator

from changelog_tracker.core.models import Candidate

from .base import ProviderConfig, SourceAdapter, element_text
from .registry import register_adapter


@register_adapter("piwik-pro")
class PiwikProAdapter(SourceAdapter):
    """Blog post blocks from the news-releases category."""

    ARTICLE_SELECTOR = "article.post, .post-item, article"
    TITLE_SELECTOR = "h2, h3, .post-title, .entry-title"
    DATE_SELECTOR = "time, .date, .post-date"
    EXCERPT_SELECTOR = ".excerpt, .post-excerpt, p"

    def extract(self, markup: str, provider: ProviderConfig) -> Iterator[Candidate]:
        soup = self.parse(markup)

        for i, article in enumerate(soup.select(self.ARTICLE_SELECTOR)):
            if i >= provider.max_entries:
                break

            title = element_text(article.select_one(self.TITLE_SELECTOR))
            if len(title) < provider.min_title_length:
                continue

            link = article.find("a", href=True)

            date_elem = article.select_one(self.DATE_SELECTOR)
            date_text = None
            if date_elem is not None:
                date_text = date_elem.get("datetime") or element_text(date_elem)

            yield Candidate(
                title=title,
                description=element_text(article.select_one(self.EXCERPT_SELECTOR)),
                date=date_text or None,
                url=link["href"] if link else None,
            )
