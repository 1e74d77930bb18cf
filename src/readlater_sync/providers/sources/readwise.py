"""Readwise Reader "later" list, read through the Reader API."""

import logging
from typing import Any, Iterable

import requests

logger = logging.getLogger(__name__)

NAME = "readwise"
DISPLAY_NAME = "Readwise Reader"
API_URL = "https://readwise.io/api/v3/list/"
LOCATION = "later"
REQUEST_TIMEOUT = 30
USER_AGENT = "readlater-sync/1.0"


def _tag_names(tags: Any) -> list[str]:
    if not tags:
        return []
    if isinstance(tags, dict):
        return [str(tag.get("name") or key) if isinstance(tag, dict) else str(key)
                for key, tag in tags.items()]
    return [str(tag) for tag in tags]


def _to_raw_article(document: dict) -> dict:
    published = document.get("published_date")
    return {
        "title": document.get("title"),
        "url": document.get("source_url") or document.get("url"),
        "author": document.get("author"),
        "publication_date": str(published) if published not in (None, "") else None,
        "excerpt": document.get("summary"),
        "tags": _tag_names(document.get("tags")),
    }


def _documents(api_key: str, session: requests.Session) -> Iterable[dict]:
    params = {"location": LOCATION}
    while True:
        response = session.get(
            API_URL,
            params=params,
            timeout=REQUEST_TIMEOUT,
            headers={
                "Authorization": f"Token {api_key}",
                "User-Agent": USER_AGENT,
            },
        )
        response.raise_for_status()
        payload = response.json()

        yield from payload.get("results", [])

        cursor = payload.get("nextPageCursor")
        if not cursor:
            return
        params = {"location": LOCATION, "pageCursor": cursor}


def fetch_articles(api_key: str, session: requests.Session) -> list[dict]:
    """Fetch every top-level document saved for later."""
    articles = []
    for document in _documents(api_key, session):
        # Highlights and notes are child documents of the article they belong to.
        if document.get("parent_id"):
            continue
        articles.append(_to_raw_article(document))
    logger.info("Found %d documents in Readwise %s list", len(articles), LOCATION)
    return articles
