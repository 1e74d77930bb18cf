"""Tests for readlater_sync.orchestrator module."""

from datetime import datetime, timezone

from readlater_sync.credentials.resolver import CredentialResolver
from readlater_sync.credentials.backends import EnvBackend
from readlater_sync.models import ArticleRecord, ProviderConfig
from readlater_sync.orchestrator import AUTHENTICATION_FAILED, SyncOrchestrator
from readlater_sync.providers.base import Provider

NOW = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


class FakeProvider(Provider):
    required_credentials = frozenset({"username", "password"})

    def __init__(self, name, articles=0, auth=True, fetch_error=None, close_error=None, credentials=None):
        self.name = name
        self.display_name = name
        self.config = ProviderConfig(enabled=True, credentials=credentials or {})
        self.credentials = {}
        self.auth = auth
        self.fetch_error = fetch_error
        self.close_error = close_error
        self.articles = [
            ArticleRecord(url=f"https://example.com/{name}/{i}", source=name, added_date=NOW)
            for i in range(articles)
        ]
        self.calls = []

    def authenticate(self) -> bool:
        self.calls.append("authenticate")
        return self.auth

    def fetch_articles(self):
        self.calls.append("fetch")
        if self.fetch_error is not None:
            raise self.fetch_error
        return self.articles

    def close(self) -> None:
        self.calls.append("close")
        if self.close_error is not None:
            raise self.close_error


def make_orchestrator() -> SyncOrchestrator:
    return SyncOrchestrator(CredentialResolver(backends={"env": EnvBackend()}), clock=lambda: NOW)


class TestRunAll:
    def test_empty_provider_set(self) -> None:
        run = make_orchestrator().run_all([])
        assert run.results == []
        assert run.articles == []

    def test_one_result_per_provider_in_order(self) -> None:
        providers = [FakeProvider("a", 2), FakeProvider("b", 0), FakeProvider("c", 1)]

        run = make_orchestrator().run_all(providers)

        assert [result.provider_name for result in run.results] == ["a", "b", "c"]
        assert [result.articles_added for result in run.results] == [2, 0, 1]
        assert all(result.success for result in run.results)
        assert len(run.articles) == 3

    def test_failure_does_not_stop_later_providers(self) -> None:
        providers = [
            FakeProvider("a", 1),
            FakeProvider("b", fetch_error=RuntimeError("page changed")),
            FakeProvider("c", 2),
        ]

        run = make_orchestrator().run_all(providers)

        assert [result.success for result in run.results] == [True, False, True]
        assert run.results[1].error == "page changed"
        assert run.results[1].articles_added == 0
        assert [article.source for article in run.articles] == ["a", "c", "c"]

    def test_failed_authentication_never_fetches(self) -> None:
        provider = FakeProvider("a", 1, auth=False)

        run = make_orchestrator().run_all([provider])

        assert run.results[0].error == AUTHENTICATION_FAILED
        assert "fetch" not in provider.calls
        assert run.articles == []

    def test_every_provider_released(self) -> None:
        providers = [
            FakeProvider("a", 1),
            FakeProvider("b", auth=False),
            FakeProvider("c", fetch_error=RuntimeError("boom")),
        ]

        make_orchestrator().run_all(providers)

        assert all(provider.calls[-1] == "close" for provider in providers)

    def test_close_error_keeps_result(self) -> None:
        provider = FakeProvider("a", 1, close_error=RuntimeError("browser gone"))

        run = make_orchestrator().run_all([provider])

        assert run.results[0].success

    def test_credential_failure_is_provider_failure(self, monkeypatch) -> None:
        monkeypatch.delenv("READLATER_MISSING_PASS", raising=False)
        provider = FakeProvider(
            "a", 1, credentials={"username": "me", "password": "env://READLATER_MISSING_PASS"}
        )

        run = make_orchestrator().run_all([provider, FakeProvider("b", 1)])

        assert not run.results[0].success
        assert "password" in run.results[0].error
        assert "authenticate" not in provider.calls
        assert run.results[1].success

    def test_credentials_resolved_before_authenticate(self, monkeypatch) -> None:
        monkeypatch.setenv("READLATER_TEST_PASS", "pw")
        provider = FakeProvider(
            "a", credentials={"username": "me", "password": "env://READLATER_TEST_PASS"}
        )

        make_orchestrator().run_all([provider])

        assert provider.credentials == {"username": "me", "password": "pw"}

    def test_last_sync_only_on_success(self) -> None:
        ok = FakeProvider("a", 1)
        failed = FakeProvider("b", auth=False)

        make_orchestrator().run_all([ok, failed])

        assert ok.config.last_sync == NOW
        assert failed.config.last_sync is None

    def test_error_without_message_uses_type(self) -> None:
        run = make_orchestrator().run_all([FakeProvider("a", fetch_error=KeyError())])
        assert run.results[0].error == "KeyError"
