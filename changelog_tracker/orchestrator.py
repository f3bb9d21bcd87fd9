"""
Run orchestrator for the changelog tracker.

Coordinates:
- Document loading from the store
- Page fetching per provider (failure-isolated, politely spaced)
- The pure extraction/merge run
- Writing the document back exactly once
"""

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import structlog

from .adapters.registry import ProviderRegistry
from .adapters.base import ProviderConfig
from .config.loader import TrackerSettings
from .core.http_client import FetchError, HttpClient
from .core.store import JsonStore
from .pipeline import RunResult, run_once

logger = structlog.get_logger(__name__)


class UpdateTracker:
    """
    Orchestrator for one tracking run.

    Loads the document, fetches every provider page, merges the results
    and saves. A provider whose fetch fails contributes nothing; the
    document is saved with a fresh timestamp regardless.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        store: JsonStore,
        settings: Optional[TrackerSettings] = None,
        http_client: Optional[HttpClient] = None,
        markup_dir: Optional[str] = None,
    ):
        """
        Initialize tracker.

        Args:
            registry: Providers and adapters to run
            store: Document store
            settings: Run settings (defaults if omitted)
            http_client: HTTP client (created from settings if omitted)
            markup_dir: Read ``<provider_id>.html`` from here instead of fetching
        """
        self.registry = registry
        self.store = store
        self.settings = settings or TrackerSettings()
        self.http_client = http_client
        self.markup_dir = Path(markup_dir) if markup_dir else None

        # Statistics
        self.stats = {
            "providers_processed": 0,
            "fetch_errors": 0,
            "extraction_errors": 0,
            "updates_added": 0,
        }

    async def run(
        self,
        reference: Optional[datetime] = None,
        dry_run: bool = False,
    ) -> RunResult:
        """
        Run the tracker once.

        Args:
            reference: Reference instant (defaults to now, UTC)
            dry_run: Extract and merge in memory without saving

        Returns:
            RunResult of the run

        Raises:
            StoreError: If the document cannot be saved
        """
        reference = reference or datetime.now(timezone.utc)

        logger.info(
            "starting_run",
            providers=len(self.registry),
            dry_run=dry_run,
            dedup_key=self.settings.dedup_policy.value,
        )

        document = self.store.load(self.registry.identities())

        markup, fetch_errors = await self.fetch_all()

        result = run_once(
            document,
            reference,
            markup,
            self.registry,
            policy=self.settings.dedup_policy,
            max_retained=self.settings.max_retained,
            fetch_errors=fetch_errors,
        )

        self.stats["providers_processed"] = len(self.registry)
        self.stats["fetch_errors"] = len(fetch_errors)
        self.stats["extraction_errors"] = len(result.errors) - len(fetch_errors)
        self.stats["updates_added"] = result.total_inserted

        if dry_run:
            logger.info("dry_run_complete", inserted=result.inserted, **self.stats)
            return result

        self.store.save(result.document)

        logger.info("run_complete", inserted=result.inserted, **self.stats)
        return result

    async def fetch_all(self) -> tuple[dict[str, Optional[str]], dict[str, str]]:
        """
        Fetch markup for every provider.

        Returns:
            (markup per provider id, error message per failed provider id)
        """
        markup: dict[str, Optional[str]] = {}
        errors: dict[str, str] = {}

        if self.markup_dir is not None:
            for provider, _ in self.registry:
                markup[provider.id], error = self._read_local(provider)
                if error:
                    errors[provider.id] = error
            return markup, errors

        client = self.http_client or HttpClient(
            timeout=self.settings.timeout,
            user_agent=self.settings.user_agent,
        )

        async with client:
            semaphore = asyncio.Semaphore(self.settings.concurrency)

            async def fetch_one(provider: ProviderConfig) -> None:
                async with semaphore:
                    markup[provider.id], error = await self._fetch(client, provider)
                    if error:
                        errors[provider.id] = error
                    # Politeness delay between requests
                    if self.settings.request_delay > 0:
                        await asyncio.sleep(self.settings.request_delay)

            if self.settings.concurrency == 1:
                for provider, _ in self.registry:
                    await fetch_one(provider)
            else:
                await asyncio.gather(*(fetch_one(provider) for provider, _ in self.registry))

        return markup, errors

    async def _fetch(
        self,
        client: HttpClient,
        provider: ProviderConfig,
    ) -> tuple[Optional[str], Optional[str]]:
        logger.info("fetching_provider", provider=provider.id, url=provider.url)
        try:
            return await client.get_text(provider.url), None
        except FetchError as e:
            logger.error("fetch_failed", provider=provider.id, url=provider.url, error=e.reason)
            return None, e.reason
        except Exception as e:
            logger.error("fetch_failed", provider=provider.id, url=provider.url, error=str(e))
            return None, f"{type(e).__name__}: {e}"

    def _read_local(self, provider: ProviderConfig) -> tuple[Optional[str], Optional[str]]:
        path = self.markup_dir / f"{provider.id}.html"
        try:
            return path.read_text(encoding="utf-8"), None
        except OSError as e:
            logger.warning("markup_file_unreadable", provider=provider.id, path=str(path), error=str(e))
            return None, f"unreadable markup file: {path}"
