"""
Amplitude releases adapter.

The releases page is mostly rendered client-side; the server HTML only
sometimes carries release cards, linked under /releases/<slug>.
"""

from .generic import GenericChangelogAdapter
from .registry import register_adapter


@register_adapter("amplitude")
class AmplitudeAdapter(GenericChangelogAdapter):
    """Release cards first, then the generic selector cascade."""

    SELECTORS = ['a[href*="/releases/"]'] + GenericChangelogAdapter.SELECTORS
