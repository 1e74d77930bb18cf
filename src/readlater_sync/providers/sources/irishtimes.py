"""Irish Times saved articles."""

from typing import Mapping

from readlater_sync.providers.sources.saved_page import (
    SavedPageLayout,
    extract_saved_items,
    has_class,
    single_step_login,
)

NAME = "irishtimes"
DISPLAY_NAME = "Irish Times"
BASE_URL = "https://www.irishtimes.com"
LOGIN_URL = "https://www.irishtimes.com/login"
SAVED_URL = "https://www.irishtimes.com/myaccount/saved-articles"
LANDMARK = ".article-item, .saved-article"

LAYOUT = SavedPageLayout(
    item=f"//*[{has_class('article-item')} or {has_class('saved-article')}]",
    link=".//a[@href]",
    title=f".//*[self::h3 or self::h2 or {has_class('article-title')}]",
    excerpt=f".//*[{has_class('article-excerpt')} or {has_class('intro')}]",
    author=f".//*[{has_class('article-author')} or {has_class('author')}]",
)


def login(page, credentials: Mapping[str, str]) -> None:
    single_step_login(page, credentials)


def extract_articles(html: str) -> list[dict]:
    return extract_saved_items(html, LAYOUT, BASE_URL)
