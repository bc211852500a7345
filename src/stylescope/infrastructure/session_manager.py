"""
Browser Session Management.

Owns the lifecycle of a single Playwright browser: lazy launch with
anti-detection flags, health tracking through the browser's disconnect
event, relaunch after a failure, and idempotent teardown.

Sessions are never shared between extraction requests; each request builds
its own manager so a disconnect cannot leak into a sibling request.
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional

from playwright.async_api import async_playwright

from ..browser_config import BrowserConfig
from ..errors import SessionLaunchFailure

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Lifecycle states of a browser session."""
    UNCONNECTED = "unconnected"
    LAUNCHING = "launching"
    READY = "ready"
    UNHEALTHY = "unhealthy"
    CLOSED = "closed"


class SessionManager:
    """
    Lazily launched, health-tracked browser session.

    Usage:
        async with SessionManager(config) as sessions:
            browser = await sessions.ensure_session()
            context = await browser.new_context()
    """

    def __init__(self, config: Optional[BrowserConfig] = None):
        """
        Initialize session manager.

        Args:
            config: Browser settings, including the proxy for this session
        """
        self.config = config or BrowserConfig()
        self._playwright = None
        self._browser = None
        self._state = SessionState.UNCONNECTED
        self._launch_count = 0

    async def __aenter__(self) -> "SessionManager":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_healthy(self) -> bool:
        """Health flag: true only while the session is READY."""
        return self._state == SessionState.READY

    @property
    def is_connected(self) -> bool:
        """Whether the session is READY and the browser still reports connected."""
        if not self.is_healthy or self._browser is None:
            return False
        try:
            return bool(self._browser.is_connected())
        except Exception:
            return False

    @property
    def launch_count(self) -> int:
        """Number of launches attempted by this manager."""
        return self._launch_count

    async def ensure_session(self):
        """
        Return a READY browser, launching or relaunching it if needed.

        Returns:
            Playwright Browser

        Raises:
            SessionLaunchFailure: If the browser process cannot be started
        """
        if self._browser is not None and self.is_healthy:
            return self._browser

        if self._state in (SessionState.UNHEALTHY, SessionState.CLOSED) or self._browser is not None:
            logger.info(f"Relaunching browser session (state={self._state.value})")
            await self._teardown()

        return await self._launch()

    def _launch_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {
            "headless": self.config.headless,
            "timeout": self.config.timeout,
        }
        # Launch flags are Chromium command-line switches
        if self.config.browser_type == "chromium":
            args = self.config.get_launch_args()
            if args:
                options["args"] = args
            if self.config.stealth_mode:
                options["ignore_default_args"] = ["--enable-automation"]
        if self.config.proxy is not None:
            options["proxy"] = self.config.proxy.playwright_proxy
        return options

    async def _launch(self):
        self._state = SessionState.LAUNCHING
        self._launch_count += 1
        proxy_note = f", proxy={self.config.proxy}" if self.config.proxy else ""
        logger.info(
            f"Launching {self.config.browser_type} browser "
            f"(headless={self.config.headless}{proxy_note})"
        )

        try:
            if self._playwright is None:
                self._playwright = await async_playwright().start()
            launcher = getattr(self._playwright, self.config.browser_type)
            browser = await launcher.launch(**self._launch_options())
        except Exception as e:
            logger.error(f"Failed to launch browser: {e}")
            await self._stop_playwright()
            self._state = SessionState.UNHEALTHY
            raise SessionLaunchFailure(f"Browser launch failed: {e}") from e

        browser.on("disconnected", self._on_disconnected)
        self._browser = browser
        self._state = SessionState.READY
        logger.info("Browser launched successfully")
        return browser

    def _on_disconnected(self, *_args) -> None:
        if self._state == SessionState.READY:
            self._state = SessionState.UNHEALTHY
            logger.warning("Browser disconnected; session marked unhealthy")

    async def _teardown(self) -> None:
        browser, self._browser = self._browser, None
        if browser is not None:
            try:
                await browser.close()
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")
        await self._stop_playwright()

    async def _stop_playwright(self) -> None:
        playwright, self._playwright = self._playwright, None
        if playwright is not None:
            try:
                await playwright.stop()
            except Exception as e:
                logger.warning(f"Error stopping playwright: {e}")

    async def close(self) -> None:
        """Close the browser. Safe to call repeatedly; never raises."""
        if self._state == SessionState.CLOSED and self._browser is None:
            return
        await self._teardown()
        self._state = SessionState.CLOSED
        logger.debug("Browser session closed")
