"""One complete sync run.

Pulls the working copy, runs every active provider, renders what they
fetched, writes it to the output note once, commits and pushes, and records
each successful provider's last sync time.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from readlater_sync.config import Config, record_last_sync
from readlater_sync.credentials.resolver import CredentialResolver
from readlater_sync.errors import ConfigurationError, PersistenceError
from readlater_sync.models import SyncRun
from readlater_sync.orchestrator import SyncOrchestrator
from readlater_sync.output import OutputReconciler
from readlater_sync.providers.catalog import ProviderCatalog, build_catalog
from readlater_sync.template import render_batch

logger = logging.getLogger(__name__)


def sync(
    config: Config,
    config_path: Path | str | None = None,
    provider_id: str | None = None,
    catalog: ProviderCatalog | None = None,
    resolver: CredentialResolver | None = None,
    reconciler: OutputReconciler | None = None,
) -> SyncRun:
    """Run the sync pipeline with the given configuration.

    Args:
        config: Loaded settings; successful providers get last_sync updated
        config_path: Settings file whose lastSync values are updated (None = don't save)
        provider_id: Run only this provider, enabled or not
        catalog, resolver, reconciler: Collaborators, built from config if omitted

    Raises:
        ConfigurationError: invalid vault or unknown provider, before anything runs
        PersistenceError: the output could not be written; `run` is attached
    """
    run_timestamp = datetime.now(timezone.utc)
    logger.info("Starting sync run at %s", run_timestamp.isoformat())

    if reconciler is None:
        reconciler = OutputReconciler.from_settings(config.vault_path, config.git_sync, config.backup)
    if catalog is None:
        catalog = build_catalog(config.providers, headless=config.headless)
    if resolver is None:
        resolver = CredentialResolver()

    if provider_id is not None:
        provider = catalog.lookup(provider_id)
        if provider is None:
            raise ConfigurationError(
                f"Unknown provider: {provider_id}. Valid providers: {catalog.list_all_ids()}"
            )
        providers = [provider]
    else:
        providers = catalog.active_providers()

    if not providers:
        logger.warning("No providers enabled")
        return SyncRun()

    reconciler.pull()

    previous = {
        provider_id: provider.last_sync for provider_id, provider in config.providers.items()
    }
    run = SyncOrchestrator(resolver).run_all(providers)

    if run.articles:
        content = render_batch(config.template, run.articles)
        try:
            reconciler.reconcile(
                config.output_file,
                content,
                append=config.append_mode,
                article_count=len(run.articles),
            )
        except PersistenceError as e:
            e.run = run
            e.content = content
            raise
        logger.info("Saved %d articles to %s", len(run.articles), config.output_file)
    else:
        logger.info("No articles fetched, skipping write")

    synced = {
        provider_id: provider
        for provider_id, provider in config.providers.items()
        if provider.last_sync != previous.get(provider_id)
    }
    if config_path is not None and synced:
        try:
            record_last_sync(config_path, synced)
        except (OSError, ConfigurationError) as e:
            logger.error("Failed to save last sync times to %s: %s", config_path, e)

    return run
