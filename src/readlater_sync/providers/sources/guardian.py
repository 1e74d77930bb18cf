"""The Guardian saved articles."""

from typing import Mapping

from readlater_sync.providers.sources.saved_page import (
    SavedPageLayout,
    extract_saved_items,
    has_class,
    single_step_login,
)

NAME = "guardian"
DISPLAY_NAME = "The Guardian"
BASE_URL = "https://www.theguardian.com"
LOGIN_URL = "https://profile.theguardian.com/signin"
SAVED_URL = "https://www.theguardian.com/saved-articles"
LANDMARK = ".fc-item"

LAYOUT = SavedPageLayout(
    item=f"//*[{has_class('fc-item')}]",
    link=f".//a[{has_class('fc-item__link')}]",
    title=f".//*[{has_class('fc-item__title')}]",
    excerpt=f".//*[{has_class('fc-item__standfirst')}]",
    author=f".//*[{has_class('fc-item__byline')}]",
)


def login(page, credentials: Mapping[str, str]) -> None:
    single_step_login(page, credentials)


def extract_articles(html: str) -> list[dict]:
    return extract_saved_items(html, LAYOUT, BASE_URL)
