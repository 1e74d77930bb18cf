"""Scoped headless browser sessions for interactive providers."""

from __future__ import annotations

import logging

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

logger = logging.getLogger(__name__)


class BrowserSession:
    """One Chromium browser and page, owned by a single provider run.

    Usable as a context manager, or opened and closed explicitly when the
    session has to span authenticate() and fetch_articles().
    """

    def __init__(self, headless: bool = True):
        self.headless = headless
        self._playwright = None
        self.browser = None
        self.page = None

    @property
    def is_open(self) -> bool:
        return self.page is not None

    def open(self):
        """Launch the browser and return a fresh page."""
        if self.page is not None:
            return self.page
        self._playwright = sync_playwright().start()
        try:
            self.browser = self._playwright.chromium.launch(headless=self.headless)
            self.page = self.browser.new_page()
        except Exception:
            self.close()
            raise
        return self.page

    def close(self) -> None:
        """Release page, browser and driver. Safe to call more than once."""
        page, browser, driver = self.page, self.browser, self._playwright
        self.page = None
        self.browser = None
        self._playwright = None
        try:
            if page is not None:
                page.close()
        except PlaywrightError as e:
            logger.debug("Failed to close page: %s", e)
        finally:
            try:
                if browser is not None:
                    browser.close()
            except PlaywrightError as e:
                logger.debug("Failed to close browser: %s", e)
            finally:
                if driver is not None:
                    driver.stop()

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
