"""
Source adapters for provider changelog pages.

Adapters handle the extraction phase - turning a provider's page markup
into Candidate records. Importing this package registers every adapter.

Adapters:
- MatomoAdapter: release links on the changelog index
- PiwikProAdapter: blog post blocks
- GoogleAnalyticsAdapter: date headings with feature subheadings
- AdobeCjaAdapter: four-column release-notes tables
- GenericChangelogAdapter: selector cascade for unstructured pages
- AmplitudeAdapter, MixpanelAdapter: generic cascade variants
"""

from .base import ProviderConfig, SourceAdapter, ExtractionOutcome, extract_candidates
from .registry import ADAPTERS, ProviderRegistry, register_adapter, get_adapter_class
from .matomo import MatomoAdapter
from .piwik_pro import PiwikProAdapter
from .google_analytics import GoogleAnalyticsAdapter
from .adobe_cja import AdobeCjaAdapter
from .generic import GenericChangelogAdapter
from .amplitude import AmplitudeAdapter
from .mixpanel import MixpanelAdapter

__all__ = [
    "ProviderConfig",
    "SourceAdapter",
    "ExtractionOutcome",
    "extract_candidates",
    "ADAPTERS",
    "ProviderRegistry",
    "register_adapter",
    "get_adapter_class",
    "MatomoAdapter",
    "PiwikProAdapter",
    "GoogleAnalyticsAdapter",
    "AdobeCjaAdapter",
    "GenericChangelogAdapter",
    "AmplitudeAdapter",
    "MixpanelAdapter",
]
