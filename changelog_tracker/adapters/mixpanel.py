"""
Mixpanel changelog adapter.

Changelog entries link to pages named after their publication date
(``/changelogs/2025-10-28-session-replay-heatmaps``); listing cards show
the date as month + day without a year.
"""

import re
from typing import Optional

from bs4 import Tag

from .generic import GenericChangelogAdapter
from .registry import register_adapter


HREF_DATE_PATTERN = re.compile(r"/changelogs?/(\d{4}-\d{2}-\d{2})")


@register_adapter("mixpanel")
class MixpanelAdapter(GenericChangelogAdapter):
    """Generic cascade with dated changelog links and year-less dates."""

    SELECTORS = ['a[href*="/changelogs/"]'] + GenericChangelogAdapter.SELECTORS
    ALLOW_PARTIAL_DATES = True

    def find_date(self, elem: Tag) -> Optional[str]:
        links = [elem] if elem.name == "a" else []
        links.extend(elem.find_all("a", href=True))

        for link in links:
            match = HREF_DATE_PATTERN.search(link.get("href") or "")
            if match:
                return match.group(1)

        return super().find_date(elem)
