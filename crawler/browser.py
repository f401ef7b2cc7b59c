import os
import logging
from dotenv import load_dotenv
from playwright.async_api import async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .errors import PageLoadError, SessionError
from .extract import CARD_SELECTOR, parse_listing

load_dotenv()
HEADLESS = os.getenv("CRAWL_HEADLESS", "true").lower() not in ("0", "false", "no")

NAVIGATION_TIMEOUT_MS = 30000
LISTING_TIMEOUT_MS = 10000

logger = logging.getLogger("crawler")


class PlaywrightSession:
    """
    Headless Chromium session that loads catalogue listing pages.

    Used as an async context manager: entering launches the browser and
    opens a single page that is reused for every listing; exiting closes
    the browser and stops Playwright, whether the crawl succeeded or not.
    """

    def __init__(self, headless=HEADLESS):
        self.headless = headless
        self._playwright = None
        self._browser = None
        self._page = None

    async def __aenter__(self):
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless
            )
            self._page = await self._browser.new_page()
        except Exception as e:
            await self.close()
            raise SessionError(f"Could not start browser session: {e}") from e
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        """Close the browser and stop Playwright. Safe to call twice."""
        try:
            if self._browser is not None:
                await self._browser.close()
        except PlaywrightError as e:
            logger.warning(f"Error closing browser: {e}")
        finally:
            self._browser = None
            self._page = None
            if self._playwright is not None:
                try:
                    await self._playwright.stop()
                except PlaywrightError as e:
                    logger.warning(f"Error stopping Playwright: {e}")
                finally:
                    self._playwright = None

    async def fetch_listing(self, url):
        """
        Navigate to a listing page and parse its cards.

        Raises:
            PageLoadError: navigation failed, or it or the card wait timed out
        """
        if self._page is None:
            raise SessionError("Browser session is not open")
        try:
            await self._page.goto(
                url, wait_until="domcontentloaded", timeout=NAVIGATION_TIMEOUT_MS
            )
            await self._page.wait_for_selector(
                CARD_SELECTOR, timeout=LISTING_TIMEOUT_MS
            )
            html = await self._page.content()
        except PlaywrightTimeoutError as e:
            raise PageLoadError(f"Timed out loading {url}: {e}", url=url) from e
        except PlaywrightError as e:
            raise PageLoadError(f"Failed to load {url}: {e}", url=url) from e
        return parse_listing(html, url)
