"""Medium reading list.

Medium signs users in with an emailed magic link, so the login step only
submits the address; a session that is already signed in passes the
landmark check regardless.
"""

from typing import Mapping

from readlater_sync.providers.sources.saved_page import (
    EMAIL_INPUT,
    FORM_TIMEOUT_MS,
    SUBMIT_BUTTON,
    SavedPageLayout,
    extract_saved_items,
    has_class,
)

NAME = "medium"
DISPLAY_NAME = "Medium"
BASE_URL = "https://medium.com"
LOGIN_URL = "https://medium.com/m/signin"
SAVED_URL = "https://medium.com/m/lists/reading-list"
LANDMARK = "article"
SUPPORTS_HEADLESS = False

MAGIC_LINK_WAIT_MS = 2000

LAYOUT = SavedPageLayout(
    item="//article",
    link=".//a[@data-post-id]",
    title=".//*[self::h2 or self::h3]",
    excerpt=f".//h3/following-sibling::*[1][self::div] | .//*[{has_class('subtitle')}]",
    author=f".//*[@data-testid='authorName'] | .//*[{has_class('author')}]//a",
)


def login(page, credentials: Mapping[str, str]) -> None:
    page.wait_for_selector(EMAIL_INPUT, timeout=FORM_TIMEOUT_MS)
    page.fill(EMAIL_INPUT, credentials.get("username", ""))
    page.click(SUBMIT_BUTTON)
    page.wait_for_timeout(MAGIC_LINK_WAIT_MS)


def extract_articles(html: str) -> list[dict]:
    return extract_saved_items(html, LAYOUT, BASE_URL)
