"""
Page creation and per-page operations.

PageFactory turns a READY browser into an isolated, fully configured page:
fixed viewport, user agent, static headers, playwright-stealth evasions plus
an extra init script, resource blocking and default timeouts. PageHandle
wraps the page for the duration of one extraction and races every browser
call against a timer.
"""

import asyncio
import logging
from typing import Any, Optional

from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright_stealth import Stealth

from ..browser_config import BrowserConfig
from ..errors import EvaluationTimeout, NavigationTimeout, SelectorWaitTimeout
from .timeouts import race_with_timeout

logger = logging.getLogger(__name__)

_stealth = Stealth()


# Applied on top of playwright-stealth; hides the most common automation signals
STEALTH_INIT_SCRIPT = """
    Object.defineProperty(navigator, 'webdriver', {
        get: () => undefined,
        configurable: true
    });

    if (!window.chrome) {
        window.chrome = {};
    }
    if (!window.chrome.runtime) {
        window.chrome.runtime = {};
    }

    Object.defineProperty(navigator, 'languages', {
        get: () => ['en-US', 'en'],
        configurable: true
    });

    Object.defineProperty(navigator, 'plugins', {
        get: () => [
            { name: 'Chrome PDF Plugin', filename: 'internal-pdf-viewer' },
            { name: 'Chrome PDF Viewer', filename: 'internal-pdf-viewer' },
            { name: 'Native Client', filename: 'internal-nacl-plugin' }
        ],
        configurable: true
    });

    try {
        const originalQuery = window.navigator.permissions.query;
        window.navigator.permissions.query = (parameters) => (
            parameters.name === 'notifications' ?
                Promise.resolve({ state: Notification.permission }) :
                originalQuery(parameters)
        );
    } catch (e) {}
"""

# Scrolls to the bottom in fixed steps so lazy-loaded content renders
AUTO_SCROLL_SCRIPT = """
    async ({ step, interval }) => {
        await new Promise((resolve) => {
            let totalHeight = 0;
            const timer = setInterval(() => {
                const scrollHeight = document.body ? document.body.scrollHeight : 0;
                window.scrollBy(0, step);
                totalHeight += step;
                if (totalHeight >= scrollHeight) {
                    clearInterval(timer);
                    resolve();
                }
            }, interval);
        });
    }
"""


class PageHandle:
    """
    A single navigable page owned by one extraction.

    Always close it, on every exit path:

        page = await factory.create_page(browser)
        try:
            await page.navigate(url)
            data = await page.evaluate(SCRIPT, args)
        finally:
            await page.close()
    """

    def __init__(
        self,
        page,
        context=None,
        navigation_timeout_ms: int = 30000,
        evaluation_timeout_ms: int = 30000,
        wait_until: str = "networkidle",
    ):
        self._page = page
        self._context = context
        self.navigation_timeout_ms = navigation_timeout_ms
        self.evaluation_timeout_ms = evaluation_timeout_ms
        self.wait_until = wait_until
        self._closed = False

    @property
    def page(self):
        """Underlying Playwright page."""
        return self._page

    @property
    def url(self) -> str:
        return self._page.url

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def navigate(self, url: str, wait_until: Optional[str] = None) -> None:
        """
        Navigate to a URL, failing with NavigationTimeout if it takes too long.

        Args:
            url: Target URL
            wait_until: Load state override (defaults to the page's setting)
        """
        timeout_ms = self.navigation_timeout_ms
        logger.info(f"Navigating to {url}")
        try:
            await race_with_timeout(
                self._page.goto(url, wait_until=wait_until or self.wait_until, timeout=timeout_ms),
                timeout_ms,
                lambda: NavigationTimeout(
                    f"Navigation timeout of {timeout_ms} ms exceeded for {url}", timeout_ms
                ),
            )
        except PlaywrightTimeoutError as e:
            raise NavigationTimeout(
                f"Navigation timeout of {timeout_ms} ms exceeded for {url}", timeout_ms
            ) from e

    async def wait_for_selector(self, selector: str, timeout_ms: int = 5000) -> bool:
        """
        Wait for a selector to appear. Never raises.

        Returns:
            True if the selector appeared, False otherwise
        """
        try:
            await race_with_timeout(
                self._page.wait_for_selector(selector, timeout=timeout_ms),
                timeout_ms,
                lambda: SelectorWaitTimeout(f"Selector wait for {selector!r} timed out", timeout_ms),
            )
            return True
        except Exception as e:
            logger.warning(f"Selector {selector!r} not found, continuing: {e}")
            return False

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        """
        Run a script in the page and return its JSON result.

        Raises:
            EvaluationTimeout: If the script does not settle in time
        """
        timeout_ms = self.evaluation_timeout_ms
        try:
            return await race_with_timeout(
                self._page.evaluate(script, arg),
                timeout_ms,
                lambda: EvaluationTimeout(
                    f"Script evaluation timeout of {timeout_ms} ms exceeded", timeout_ms
                ),
            )
        except PlaywrightTimeoutError as e:
            raise EvaluationTimeout(
                f"Script evaluation timeout of {timeout_ms} ms exceeded", timeout_ms
            ) from e

    async def auto_scroll(self, step_px: int = 100, interval_ms: int = 100) -> None:
        """Scroll to the bottom of the page in steps to trigger lazy loading."""
        await self.evaluate(AUTO_SCROLL_SCRIPT, {"step": step_px, "interval": interval_ms})

    async def settle(self, delay_ms: int) -> None:
        """Give late scripts time to run."""
        if delay_ms > 0:
            await asyncio.sleep(delay_ms / 1000)

    async def close(self) -> None:
        """Close the page and its context. Safe to call repeatedly; never raises."""
        if self._closed:
            return
        self._closed = True
        try:
            await self._page.close()
        except Exception as e:
            logger.warning(f"Error closing page: {e}")
        if self._context is not None:
            try:
                await self._context.close()
            except Exception as e:
                logger.warning(f"Error closing browser context: {e}")


class PageFactory:
    """Builds configured pages on a browser session."""

    def __init__(self, config: Optional[BrowserConfig] = None, evaluation_timeout_ms: Optional[int] = None):
        self.config = config or BrowserConfig()
        self.evaluation_timeout_ms = evaluation_timeout_ms or self.config.timeout

    async def create_page(self, session) -> PageHandle:
        """
        Create an isolated page on a browser.

        Args:
            session: Playwright Browser from SessionManager.ensure_session()

        Returns:
            Configured PageHandle

        Raises:
            Exception: The engine's own error if the browser cannot open a page
        """
        context = await session.new_context(
            viewport=self.config.viewport.as_dict(),
            user_agent=self.config.get_user_agent(),
            extra_http_headers=dict(self.config.extra_headers),
            locale="en-US",
            ignore_https_errors=True,
        )

        try:
            if self.config.stealth_mode:
                await context.add_init_script(STEALTH_INIT_SCRIPT)

            page = await context.new_page()

            if self.config.stealth_mode:
                await _stealth.apply_stealth_async(page)

            if self.config.block_resources:
                await page.route("**/*", self._route_request)

            page.on("pageerror", lambda err: logger.debug(f"Page script error: {err}"))
            page.on("crash", lambda _: logger.error("Page crashed"))

            page.set_default_timeout(self.config.timeout)
            page.set_default_navigation_timeout(self.config.timeout)
        except Exception:
            try:
                await context.close()
            except Exception as close_error:
                logger.warning(f"Error closing browser context: {close_error}")
            raise

        return PageHandle(
            page,
            context=context,
            navigation_timeout_ms=self.config.timeout,
            evaluation_timeout_ms=self.evaluation_timeout_ms,
            wait_until=self.config.wait_until,
        )

    async def _route_request(self, route) -> None:
        if route.request.resource_type in self.config.block_resources:
            await route.abort()
        else:
            await route.continue_()
