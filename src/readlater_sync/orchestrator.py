"""Runs providers one at a time, isolating each provider's failures."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Sequence

from readlater_sync.credentials.resolver import CredentialResolver
from readlater_sync.errors import CredentialResolutionError
from readlater_sync.models import SyncResult, SyncRun
from readlater_sync.providers.base import Provider

logger = logging.getLogger(__name__)

AUTHENTICATION_FAILED = "Authentication failed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncOrchestrator:
    """Drives the authenticate/fetch lifecycle across a provider set."""

    def __init__(
        self,
        resolver: CredentialResolver,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.resolver = resolver
        self.clock = clock

    def run_all(self, providers: Sequence[Provider]) -> SyncRun:
        """Attempt every provider in order and collect one result each.

        A provider that fails never stops the loop. Successful providers get
        their config's last_sync set to the current time.
        """
        run = SyncRun()
        if not providers:
            logger.info("No providers enabled, nothing to do")
            return run

        logger.info("Starting sync for %d providers", len(providers))
        for provider in providers:
            result = self._run_provider(provider, run)
            run.results.append(result)

        logger.info(
            "Fetched %d total articles from %d providers (%d failed)",
            len(run.articles),
            len(run.succeeded),
            len(run.failures),
        )
        return run

    def _run_provider(self, provider: Provider, run: SyncRun) -> SyncResult:
        name = provider.display_name
        start_time = time.monotonic()
        try:
            try:
                credentials = self.resolver.resolve_many(provider.config.credentials)
            except CredentialResolutionError as e:
                logger.error("Failed to resolve credentials for %s: %s", name, e)
                return SyncResult(provider_name=name, success=False, error=str(e))

            missing = provider.requires_credentials() - set(credentials)
            if missing:
                logger.warning("%s is missing credentials: %s", name, ", ".join(sorted(missing)))

            provider.use_credentials(credentials)

            logger.info("Authenticating with %s", name)
            if not provider.authenticate():
                logger.error("Failed to authenticate with %s", name)
                return SyncResult(provider_name=name, success=False, error=AUTHENTICATION_FAILED)

            logger.info("Fetching articles from %s", name)
            articles = provider.fetch_articles()
            run.articles.extend(articles)
            provider.config.last_sync = self.clock()

            elapsed = time.monotonic() - start_time
            logger.info("Fetched %d articles from %s in %.2fs", len(articles), name, elapsed)
            return SyncResult(provider_name=name, success=True, articles_added=len(articles))

        except Exception as e:
            logger.error("Error with %s: %s", name, e)
            return SyncResult(provider_name=name, success=False, error=str(e) or type(e).__name__)

        finally:
            _release(provider)


def _release(provider: Provider) -> None:
    try:
        provider.close()
    except Exception as e:
        logger.warning("Failed to release resources for %s: %s", provider.display_name, e)
