"""Shared login and saved-items page logic for browser-driven sources."""

import logging
import re
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import urljoin

from lxml import html as lxml_html
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

logger = logging.getLogger(__name__)

FORM_TIMEOUT_MS = 10000
NAVIGATION_TIMEOUT_MS = 15000

EMAIL_INPUT = 'input[type="email"]'
PASSWORD_INPUT = 'input[type="password"]'
SUBMIT_BUTTON = 'button[type="submit"]'


def has_class(name: str) -> str:
    """XPath predicate matching elements carrying a CSS class."""
    return f"contains(concat(' ', normalize-space(@class), ' '), ' {name} ')"


@dataclass(frozen=True)
class SavedPageLayout:
    """XPath expressions locating saved items and their fields.

    `item` is evaluated against the document; the others against each item.
    """
    item: str
    link: str
    title: str
    excerpt: Optional[str] = None
    author: Optional[str] = None


def _first_text(element, xpath: Optional[str]) -> Optional[str]:
    if not xpath:
        return None
    for match in element.xpath(xpath):
        text = re.sub(r"\s+", " ", match.text_content()).strip()
        if text:
            return text
    return None


def extract_saved_items(html: str, layout: SavedPageLayout, base_url: str) -> list[dict]:
    """Map a saved-items page to raw article dicts.

    Relative links are resolved against `base_url`. Items without a link are
    dropped; an empty page yields an empty list.
    """
    if not html or not html.strip():
        return []

    tree = lxml_html.fromstring(html)
    articles = []
    for element in tree.xpath(layout.item):
        links = element.xpath(layout.link)
        href = (links[0].get("href") or "").strip() if links else ""
        if not href:
            logger.debug("Skipping saved item without link")
            continue

        articles.append({
            "title": _first_text(element, layout.title) or "Untitled",
            "url": urljoin(base_url, href),
            "excerpt": _first_text(element, layout.excerpt),
            "author": _first_text(element, layout.author),
        })

    return articles


def wait_for_navigation(page, timeout: int = NAVIGATION_TIMEOUT_MS) -> None:
    """Wait for the post-login redirect to settle; a slow redirect is not an error."""
    try:
        page.wait_for_load_state("networkidle", timeout=timeout)
    except PlaywrightTimeoutError:
        logger.debug("Navigation did not settle within %dms", timeout)


def single_step_login(
    page,
    credentials: Mapping[str, str],
    username_input: str = EMAIL_INPUT,
    password_input: str = PASSWORD_INPUT,
) -> None:
    """Login form with username and password on the same page."""
    page.wait_for_selector(username_input, timeout=FORM_TIMEOUT_MS)
    page.fill(username_input, credentials.get("username", ""))
    page.fill(password_input, credentials.get("password", ""))
    page.click(SUBMIT_BUTTON)
    wait_for_navigation(page)


def two_step_login(page, credentials: Mapping[str, str]) -> None:
    """Login flow asking for the email first and the password on a second screen."""
    page.wait_for_selector(EMAIL_INPUT, timeout=FORM_TIMEOUT_MS)
    page.fill(EMAIL_INPUT, credentials.get("username", ""))
    page.click(SUBMIT_BUTTON)

    page.wait_for_selector(PASSWORD_INPUT, timeout=FORM_TIMEOUT_MS)
    page.fill(PASSWORD_INPUT, credentials.get("password", ""))
    page.click(SUBMIT_BUTTON)
    wait_for_navigation(page)
