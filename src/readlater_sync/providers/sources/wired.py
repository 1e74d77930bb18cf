"""Wired.com saved stories."""

from typing import Mapping

from readlater_sync.providers.sources.saved_page import (
    SavedPageLayout,
    extract_saved_items,
    has_class,
    two_step_login,
)

NAME = "wired"
DISPLAY_NAME = "Wired.com"
BASE_URL = "https://www.wired.com"
LOGIN_URL = "https://www.wired.com/account/sign-in"
SAVED_URL = "https://www.wired.com/saved-stories"
LANDMARK = ".saved-story"

LAYOUT = SavedPageLayout(
    item=f"//*[{has_class('saved-story')}]",
    link=".//a[@href]",
    title=f".//*[self::h3 or self::h2 or {has_class('title')}]",
    excerpt=f".//*[{has_class('excerpt')} or {has_class('dek')}]",
    author=f".//*[{has_class('author')} or @data-testid='author']",
)


def login(page, credentials: Mapping[str, str]) -> None:
    two_step_login(page, credentials)


def extract_articles(html: str) -> list[dict]:
    return extract_saved_items(html, LAYOUT, BASE_URL)
