"""Harvard Business Review library."""

from typing import Mapping

from readlater_sync.providers.sources.saved_page import (
    SavedPageLayout,
    extract_saved_items,
    has_class,
    single_step_login,
)

NAME = "hbr"
DISPLAY_NAME = "Harvard Business Review"
BASE_URL = "https://hbr.org"
LOGIN_URL = "https://hbr.org/sign-in"
SAVED_URL = "https://hbr.org/my-library"
LANDMARK = ".article-item"

LAYOUT = SavedPageLayout(
    item=f"//*[{has_class('article-item')}]",
    link=".//a[@href]",
    title=f".//*[self::h3 or {has_class('article-title')}]",
    excerpt=f".//*[{has_class('article-dek')} or {has_class('dek')}]",
    author=f".//*[{has_class('article-author')} or {has_class('author')}]",
)


def login(page, credentials: Mapping[str, str]) -> None:
    single_step_login(
        page,
        credentials,
        username_input='input[name="username"]',
        password_input='input[name="password"]',
    )


def extract_articles(html: str) -> list[dict]:
    return extract_saved_items(html, LAYOUT, BASE_URL)
