"""Provider lifecycle: authenticate, fetch, extract.

A provider wraps one source module. Source modules are plain values that
describe a content source; the two provider kinds supply the lifecycle:

- InteractiveProvider drives a headless browser through the source's login
  flow and reads its saved-items page. The source module provides
  NAME, DISPLAY_NAME, LOGIN_URL, SAVED_URL, LANDMARK, login(page, credentials)
  and extract_articles(html).
- TokenProvider presents a pre-issued API key. The source module provides
  NAME, DISPLAY_NAME and fetch_articles(api_key, session).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from types import ModuleType
from typing import Any, Callable, Iterable, Mapping

import requests
from playwright.sync_api import Error as PlaywrightError

from common.utils import get_value
from readlater_sync.errors import AuthenticationFailure, ExtractionFailure
from readlater_sync.models import ArticleRecord, ProviderConfig
from readlater_sync.providers.browser import BrowserSession

logger = logging.getLogger(__name__)

LANDMARK_TIMEOUT_MS = 5000


def _tags(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(tag) for tag in value if tag)


def stamp_articles(
    raw_articles: Iterable[Any],
    source: str,
    added_date: datetime,
) -> list[ArticleRecord]:
    """Turn raw extracted items into records stamped with source and fetch time.

    Items without a url are skipped.
    """
    articles = []
    for raw in raw_articles:
        url = (get_value(raw, "url") or "").strip()
        if not url:
            logger.warning("Skipping %s item without url: %s", source, get_value(raw, "title"))
            continue
        articles.append(
            ArticleRecord(
                url=url,
                source=source,
                added_date=added_date,
                title=get_value(raw, "title") or "Untitled",
                author=get_value(raw, "author") or None,
                publication_date=get_value(raw, "publication_date", "publicationDate") or None,
                excerpt=get_value(raw, "excerpt") or None,
                tags=_tags(get_value(raw, "tags")),
            )
        )
    return articles


class Provider:
    """Base class for providers."""

    required_credentials: frozenset[str] = frozenset()

    def __init__(self, source: ModuleType, config: ProviderConfig):
        self.source = source
        self.config = config
        self.name: str = source.NAME
        self.display_name: str = source.DISPLAY_NAME
        self.credentials: dict[str, str] = {}

    def use_credentials(self, credentials: Mapping[str, str]) -> None:
        """Hand the provider its resolved secrets for this run."""
        self.credentials = dict(credentials)

    def authenticate(self) -> bool:
        raise NotImplementedError

    def fetch_articles(self) -> list[ArticleRecord]:
        raise NotImplementedError

    def requires_credentials(self) -> set[str]:
        return set(self.required_credentials)

    def supports_headless(self) -> bool:
        return True

    def close(self) -> None:
        """Release any resources still held. Called after every run."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class InteractiveProvider(Provider):
    """Browser-driven provider for sources that only offer a login page."""

    required_credentials = frozenset({"username", "password"})

    def __init__(
        self,
        source: ModuleType,
        config: ProviderConfig,
        headless: bool = True,
        session_factory: Callable[[bool], BrowserSession] = BrowserSession,
    ):
        super().__init__(source, config)
        self.headless = headless
        self._session_factory = session_factory
        self._session: BrowserSession | None = None
        self._authenticated = False

    def supports_headless(self) -> bool:
        return getattr(self.source, "SUPPORTS_HEADLESS", True)

    def authenticate(self) -> bool:
        if self.headless and not self.supports_headless():
            logger.warning(
                "%s login may not complete in a headless browser; set headless: false",
                self.display_name,
            )
        self.close()
        self._session = self._session_factory(self.headless)
        try:
            page = self._session.open()
            page.goto(self.source.LOGIN_URL)
            self.source.login(page, self.credentials)
            self._authenticated = self._is_authenticated(page)
        except Exception as e:
            logger.error("Authentication failed for %s: %s", self.display_name, e)
            self._authenticated = False

        if not self._authenticated:
            self.close()
        return self._authenticated

    def _is_authenticated(self, page) -> bool:
        """Check for the saved-items landmark that only logged-in users see."""
        try:
            page.goto(self.source.SAVED_URL)
            page.wait_for_selector(self.source.LANDMARK, timeout=LANDMARK_TIMEOUT_MS)
            return True
        except PlaywrightError as e:
            logger.info("Saved items landmark not found for %s: %s", self.display_name, e)
            return False

    def fetch_articles(self) -> list[ArticleRecord]:
        if not self._authenticated or self._session is None or not self._session.is_open:
            raise AuthenticationFailure(f"{self.display_name}: not authenticated")

        try:
            page = self._session.page
            page.goto(self.source.SAVED_URL)
            html = page.content()
            try:
                raw_articles = self.source.extract_articles(html)
            except Exception as e:
                raise ExtractionFailure(f"{self.display_name}: {e}") from e
            return stamp_articles(raw_articles, self.display_name, datetime.now(timezone.utc))
        finally:
            self.close()

    def close(self) -> None:
        session, self._session = self._session, None
        self._authenticated = False
        if session is not None:
            session.close()


class TokenProvider(Provider):
    """API-driven provider authenticated by a pre-issued key."""

    required_credentials = frozenset({"apiKey"})

    def __init__(
        self,
        source: ModuleType,
        config: ProviderConfig,
        session: requests.Session | None = None,
    ):
        super().__init__(source, config)
        self._http = session

    def authenticate(self) -> bool:
        return bool(self.credentials.get("apiKey"))

    def fetch_articles(self) -> list[ArticleRecord]:
        api_key = self.credentials.get("apiKey")
        if not api_key:
            raise AuthenticationFailure(f"{self.display_name}: no apiKey supplied")

        http = self._http or requests.Session()
        try:
            raw_articles = self.source.fetch_articles(api_key, http)
        except (requests.RequestException, ValueError) as e:
            raise ExtractionFailure(f"{self.display_name}: {e}") from e
        finally:
            if self._http is None:
                http.close()
        return stamp_articles(raw_articles, self.display_name, datetime.now(timezone.utc))
