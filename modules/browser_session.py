"""
Browser Session

Owns the single Playwright browser, context and page used for a run and
exposes them as a navigation/evaluation capability that returns typed
results instead of raising:

    goto(url)          -> Ok(response status) | NavigationError
    evaluate(script)   -> Ok(value)           | EvaluationError
    content()          -> Ok(html)            | EvaluationError

Only a dead browser is raised (FatalError); it ends the run.
"""

import asyncio
from typing import Optional

from fake_useragent import UserAgent
from loguru import logger
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    TimeoutError as PlaywrightTimeoutError,
)

from config.settings import (
    HEADLESS_BROWSER,
    NAVIGATION_TIMEOUT,
    SETTLE_DELAY,
    USE_RANDOM_USER_AGENT,
    WAIT_UNTIL,
)
from modules.errors import FatalError
from modules.page_results import EvaluationError, NavigationError, Ok, PageResult

DEFAULT_USER_AGENT = 'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36'

OUTER_HTML_SCRIPT = '() => document.documentElement.outerHTML'


def _first_line(error: Exception) -> str:
    lines = str(error).strip().splitlines()
    return lines[0] if lines else error.__class__.__name__


def get_user_agent() -> str:
    """Get user agent string."""
    if USE_RANDOM_USER_AGENT:
        try:
            return UserAgent().random
        except Exception as e:
            logger.debug(f"Random user agent unavailable ({e}), using default")
    return DEFAULT_USER_AGENT


class BrowserSession:
    """
    One headless Chromium page shared by every fetch of a run.

    Usage:
        async with BrowserSession() as session:
            result = await session.goto("https://www.gscs.ca/BET")
            html = await session.content()
    """

    def __init__(
        self,
        headless: bool = HEADLESS_BROWSER,
        timeout_ms: int = NAVIGATION_TIMEOUT,
        settle_ms: int = SETTLE_DELAY,
        wait_until: str = WAIT_UNTIL,
    ):
        """
        Initialize browser session.

        Args:
            headless: Run Chromium without a window
            timeout_ms: Navigation timeout per fetch (milliseconds)
            settle_ms: Extra wait after load for dynamic content (milliseconds)
            wait_until: Playwright load state to wait for
        """
        self.headless = headless
        self.timeout_ms = timeout_ms
        self.settle_ms = settle_ms
        self.wait_until = wait_until

        self.playwright = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self.current_url: str = ''

        self.opened = False
        self.closed = False

    async def open(self):
        """Launch the browser and open the page."""
        if self.opened:
            logger.warning("Browser session already open")
            return

        logger.info("Launching headless browser...")

        try:
            self.playwright = await async_playwright().start()
            self.browser = await self.playwright.chromium.launch(
                headless=self.headless,
                args=[
                    '--disable-blink-features=AutomationControlled',
                    '--disable-dev-shm-usage',
                    '--no-sandbox',
                    '--disable-setuid-sandbox',
                ]
            )
            self.context = await self.browser.new_context(
                viewport={'width': 1280, 'height': 720},
                user_agent=get_user_agent(),
            )
            self.page = await self.context.new_page()
            self.page.set_default_navigation_timeout(self.timeout_ms)
            self.opened = True
            logger.success("Browser session ready")

        except PlaywrightError as e:
            logger.error(f"Failed to launch browser: {e}")
            await self.close()
            raise FatalError(f"Could not start browser session: {e}") from e

    def _ensure_alive(self, cause: Exception):
        """Raise FatalError if the failure took the browser down with it."""
        if self.browser is None or not self.browser.is_connected() or self.page is None or self.page.is_closed():
            raise FatalError(f"Browser session died: {cause}") from cause

    async def goto(self, url: str, timeout_ms: Optional[int] = None) -> PageResult:
        """
        Navigate the page to url.

        Args:
            url: URL to load
            timeout_ms: Override of the session navigation timeout

        Returns:
            Ok(status or None) or NavigationError
        """
        if not self.opened or self.closed:
            raise FatalError("Browser session is not open")

        timeout = timeout_ms or self.timeout_ms

        try:
            logger.debug(f"Navigating to {url} (timeout: {timeout}ms)")
            response = await self.page.goto(url, wait_until=self.wait_until, timeout=timeout)

            if self.settle_ms > 0:
                await self.page.wait_for_timeout(self.settle_ms)

        except PlaywrightTimeoutError as e:
            return NavigationError(url=url, message=_first_line(e), timed_out=True)
        except PlaywrightError as e:
            self._ensure_alive(e)
            return NavigationError(url=url, message=_first_line(e))

        self.current_url = self.page.url or url
        status = response.status if response is not None else None
        if status is not None and status >= 400:
            return NavigationError(url=url, message=f"HTTP {status}")

        return Ok(status)

    async def evaluate(self, script: str, timeout_ms: Optional[int] = None) -> PageResult:
        """
        Run a read-only query against the loaded document.

        Args:
            script: JavaScript function source, e.g. "() => document.title"
            timeout_ms: Upper bound for the evaluation (milliseconds)

        Returns:
            Ok(value) or EvaluationError
        """
        if not self.opened or self.closed:
            raise FatalError("Browser session is not open")

        timeout = (timeout_ms or self.timeout_ms) / 1000

        try:
            value = await asyncio.wait_for(self.page.evaluate(script), timeout=timeout)
        except asyncio.TimeoutError:
            return EvaluationError(url=self.current_url, message=f"Evaluation timed out after {timeout:.0f}s")
        except PlaywrightError as e:
            self._ensure_alive(e)
            return EvaluationError(url=self.current_url, message=_first_line(e))

        return Ok(value)

    async def content(self) -> PageResult:
        """Serialized HTML of the loaded document."""
        return await self.evaluate(OUTER_HTML_SCRIPT)

    async def close(self):
        """Close the browser and stop Playwright."""
        if self.closed:
            return

        self.closed = True

        if self.browser is not None:
            try:
                await self.browser.close()
            except PlaywrightError as e:
                logger.error(f"Error closing browser: {e}")

        if self.playwright is not None:
            try:
                await self.playwright.stop()
            except PlaywrightError as e:
                logger.error(f"Error stopping playwright: {e}")

        logger.info("Browser session closed")

    async def __aenter__(self):
        """Context manager support."""
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager support."""
        await self.close()
