"""
Changelog Tracker - competitor changelog scraping with bounded history.

Architecture:
- core/: Stable foundation (models, dates, sanitizer, dedup, merge, HTTP, store)
- adapters/: One extraction strategy per provider, plus a registry
- config/: YAML-driven provider definitions
- pipeline: Pure run over fetched markup
- orchestrator: Fetch, run and persist
- server: Read-only API over the stored document
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
