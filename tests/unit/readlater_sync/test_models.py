"""Tests for readlater_sync.models module."""

from datetime import datetime, timezone

import pytest

from readlater_sync.models import ArticleRecord, CredentialReference, SyncResult, SyncRun

ADDED = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


class TestCredentialReference:
    def test_known_backend(self) -> None:
        ref = CredentialReference(backend="env", pointer="WIRED_USER")
        assert ref.pointer == "WIRED_USER"

    def test_unknown_backend_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unknown credential backend"):
            CredentialReference(backend="keychain", pointer="x")


class TestArticleRecord:
    def test_requires_url(self) -> None:
        with pytest.raises(ValueError):
            ArticleRecord(url="", source="Wired.com", added_date=ADDED)

    def test_requires_source(self) -> None:
        with pytest.raises(ValueError):
            ArticleRecord(url="https://example.com", source="", added_date=ADDED)

    def test_empty_title_becomes_untitled(self) -> None:
        record = ArticleRecord(url="https://example.com", source="Medium", added_date=ADDED, title="")
        assert record.title == "Untitled"


class TestSyncRun:
    def test_empty_run_is_nothing_to_do(self) -> None:
        run = SyncRun()
        assert run.nothing_to_do
        assert not run.total_failure
        assert not run.partial_failure

    def test_partial_failure(self) -> None:
        run = SyncRun(results=[
            SyncResult("Wired.com", True, 2),
            SyncResult("Medium", False, error="Authentication failed"),
        ])
        assert run.partial_failure
        assert not run.total_failure
        assert [r.provider_name for r in run.failures] == ["Medium"]

    def test_total_failure(self) -> None:
        run = SyncRun(results=[SyncResult("Medium", False, error="boom")])
        assert run.total_failure

    def test_summary_lines(self) -> None:
        article = ArticleRecord(url="https://example.com/a", source="Wired.com", added_date=ADDED)
        run = SyncRun(
            results=[
                SyncResult("Wired.com", True, 1),
                SyncResult("Medium", False, error="Authentication failed"),
            ],
            articles=[article],
        )

        assert run.summary_lines() == [
            "Sync complete: 1 articles saved",
            "1 provider(s) failed",
            "Results:",
            "  ✓ Wired.com: 1 articles",
            "  ✗ Medium: 0 articles",
            "    Error: Authentication failed",
        ]

    def test_summary_without_articles(self) -> None:
        run = SyncRun(results=[SyncResult("Wired.com", True, 0)])
        assert run.summary_lines()[0] == "No articles found"
