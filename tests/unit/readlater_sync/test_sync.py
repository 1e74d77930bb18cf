"""Tests for readlater_sync.sync module."""

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import Mock

import pytest
import yaml

from readlater_sync.config import Config
from readlater_sync.credentials.backends import EnvBackend
from readlater_sync.credentials.resolver import CredentialResolver
from readlater_sync.errors import ConfigurationError, PersistenceError
from readlater_sync.models import ArticleRecord, ProviderConfig
from readlater_sync.output import FileTarget, OutputReconciler
from readlater_sync.providers.base import Provider
from readlater_sync.providers.catalog import ProviderCatalog
from readlater_sync.sync import sync

ADDED = datetime(2024, 5, 1, tzinfo=timezone.utc)


class ListProvider(Provider):
    """Provider serving a fixed list of urls."""

    def __init__(self, name: str, urls: list[str], config: ProviderConfig):
        self.name = name
        self.display_name = name
        self.config = config
        self.credentials = {}
        self.urls = urls

    def authenticate(self) -> bool:
        return True

    def fetch_articles(self):
        return [
            ArticleRecord(url=url, source=self.display_name, added_date=ADDED, title=url.rsplit("/", 1)[-1])
            for url in self.urls
        ]


def make_catalog(config: Config) -> ProviderCatalog:
    catalog = ProviderCatalog(config.providers)
    catalog.register("alpha", lambda c: ListProvider("Alpha", ["https://a.example/1", "https://a.example/2"], c))
    catalog.register("beta", lambda c: ListProvider("Beta", ["https://b.example/1"], c))
    catalog.register("gamma", lambda c: ListProvider("Gamma", ["https://g.example/1"], c))
    return catalog


def make_config(**overrides) -> Config:
    settings = {
        "output_file": "Clippings.md",
        "template": "## {{title}} ({{source}})\n",
        "providers": {
            "alpha": ProviderConfig(enabled=True),
            "beta": ProviderConfig(enabled=True),
            "gamma": ProviderConfig(enabled=False),
        },
    }
    settings.update(overrides)
    return Config(**settings)


def run_sync(config: Config, tmp_path: Path, **kwargs):
    return sync(
        config,
        catalog=make_catalog(config),
        resolver=CredentialResolver(backends={"env": EnvBackend()}),
        reconciler=kwargs.pop("reconciler", OutputReconciler(FileTarget(tmp_path))),
        **kwargs,
    )


class TestSync:
    def test_appends_enabled_providers_once(self, tmp_path: Path) -> None:
        (tmp_path / "Clippings.md").write_text("## earlier")
        config = make_config()

        run = run_sync(config, tmp_path)

        assert [result.provider_name for result in run.results] == ["Alpha", "Beta"]
        assert len(run.articles) == 3
        assert (tmp_path / "Clippings.md").read_text() == (
            "## earlier\n\n"
            "## 1 (Alpha)\n\n"
            "## 2 (Alpha)\n\n"
            "## 1 (Beta)"
        )

    def test_replace_mode(self, tmp_path: Path) -> None:
        (tmp_path / "Clippings.md").write_text("## earlier")
        config = make_config(append_mode=False)

        run_sync(config, tmp_path)

        assert not (tmp_path / "Clippings.md").read_text().startswith("## earlier")

    def test_saves_last_sync(self, tmp_path: Path) -> None:
        config = make_config(output_file="Overridden.md")
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            "outputFile: Clippings.md\n"
            "providers:\n"
            "  alpha: {enabled: true}\n"
            "  beta: {enabled: true}\n"
            "  gamma: {enabled: false}\n"
        )

        run_sync(config, tmp_path, config_path=config_path)

        document = yaml.safe_load(config_path.read_text())
        saved = document["providers"]
        assert document["outputFile"] == "Clippings.md"
        assert "lastSync" in saved["alpha"]
        assert "lastSync" not in saved["gamma"]

    def test_single_provider_ignores_enabled(self, tmp_path: Path) -> None:
        run = run_sync(make_config(), tmp_path, provider_id="gamma")
        assert [result.provider_name for result in run.results] == ["Gamma"]

    def test_unknown_provider(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Unknown provider"):
            run_sync(make_config(), tmp_path, provider_id="pocket")

    def test_no_enabled_providers_writes_nothing(self, tmp_path: Path) -> None:
        reconciler = Mock(spec=OutputReconciler)
        config = make_config(providers={"alpha": ProviderConfig(enabled=False)})

        run = run_sync(config, tmp_path, reconciler=reconciler)

        assert run.nothing_to_do
        reconciler.pull.assert_not_called()
        reconciler.reconcile.assert_not_called()

    def test_write_failure_carries_run_and_content(self, tmp_path: Path) -> None:
        reconciler = Mock(spec=OutputReconciler)
        reconciler.reconcile.side_effect = PersistenceError("disk full")
        config = make_config()
        config_path = tmp_path / "config.yaml"

        with pytest.raises(PersistenceError) as exc_info:
            run_sync(config, tmp_path, reconciler=reconciler, config_path=config_path)

        assert len(exc_info.value.run.articles) == 3
        assert "## 1 (Beta)" in exc_info.value.content
        assert not config_path.exists()
