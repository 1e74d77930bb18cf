"""Data models for the read-later sync pipeline."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

BACKENDS = ("env", "onepassword", "bitwarden", "plain")


@dataclass(frozen=True)
class CredentialReference:
    """Pointer to a secret held by one of the credential backends."""
    backend: str
    pointer: str

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown credential backend: {self.backend}")


CredentialValue = Union[str, CredentialReference]


@dataclass(frozen=True)
class ArticleRecord:
    """One saved article, stamped with its source at extraction time."""
    url: str
    source: str
    added_date: datetime
    title: str = "Untitled"
    author: Optional[str] = None
    publication_date: Optional[str] = None
    excerpt: Optional[str] = None
    tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("ArticleRecord requires a url")
        if not self.source:
            raise ValueError("ArticleRecord requires a source")
        if not self.title:
            object.__setattr__(self, "title", "Untitled")


@dataclass
class ProviderConfig:
    """Persisted per-provider settings."""
    enabled: bool = False
    credentials: dict[str, CredentialValue] = field(default_factory=dict)
    last_sync: Optional[datetime] = None


@dataclass
class SyncResult:
    """Outcome of one provider within a run."""
    provider_name: str
    success: bool
    articles_added: int = 0
    error: Optional[str] = None


@dataclass
class SyncRun:
    """Everything one orchestrator run produced."""
    results: list[SyncResult] = field(default_factory=list)
    articles: list[ArticleRecord] = field(default_factory=list)

    @property
    def failures(self) -> list[SyncResult]:
        return [result for result in self.results if not result.success]

    @property
    def succeeded(self) -> list[SyncResult]:
        return [result for result in self.results if result.success]

    @property
    def nothing_to_do(self) -> bool:
        return not self.results

    @property
    def partial_failure(self) -> bool:
        return bool(self.failures) and bool(self.succeeded)

    @property
    def total_failure(self) -> bool:
        return bool(self.results) and not self.succeeded

    def summary_lines(self) -> list[str]:
        """Human-readable run summary, one line per provider."""
        if self.articles:
            lines = [f"Sync complete: {len(self.articles)} articles saved"]
        else:
            lines = ["No articles found"]
        if self.failures:
            lines.append(f"{len(self.failures)} provider(s) failed")
        lines.append("Results:")
        for result in self.results:
            status = "✓" if result.success else "✗"
            lines.append(f"  {status} {result.provider_name}: {result.articles_added} articles")
            if result.error:
                lines.append(f"    Error: {result.error}")
        return lines
