"""
Extraction service.

The public entry points, one per mode:

    service = ExtractionService(Config.from_env())
    tree = await service.extract_style_tree(url, tags=["div"], properties=["color"])
    theme = await service.extract_theme(url)

Each request gets its own browser session (never shared), acquires a page
with bounded retries and proxy rotation, navigates, lets the page settle,
runs one extraction and always releases the page and session afterwards.
Failures surface as ExtractionError with a classified type.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, Optional, Tuple, TypeVar, Union
from urllib.parse import urlparse

from .browser_config import BrowserConfig
from .config import Config
from .errors import (
    ConnectionLoss,
    ExtractionError,
    InvalidInput,
    PageCreationFailure,
    TimeoutFailure,
    classify_error,
)
from .extraction.style_tree import StyleTreeExtractor
from .extraction.theme import ThemeAggregator
from .infrastructure.page_factory import PageFactory, PageHandle
from .infrastructure.proxy_rotation import ProxyRotator, create_proxy_rotator
from .infrastructure.session_manager import SessionManager
from .models import ALL_TAGS, ExtractionConfig, StyleNode, ThemeReport

logger = logging.getLogger(__name__)

T = TypeVar("T")

SessionFactory = Callable[[BrowserConfig], SessionManager]


def validate_url(url: Any) -> str:
    """
    Normalize and validate a target URL.

    A bare host ("example.com/page") is assumed to be https.

    Raises:
        InvalidInput: If the URL is missing or not an http(s) URL
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidInput("A URL is required")

    url = url.strip()
    if "://" not in url:
        url = f"https://{url}"

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise InvalidInput(f"Unsupported URL scheme: {parsed.scheme!r}")
    if not parsed.netloc or not parsed.hostname:
        raise InvalidInput(f"Invalid URL: {url!r}")
    return url


class ExtractionService:
    """Runs style tree and theme extractions against live pages."""

    def __init__(
        self,
        config: Optional[Config] = None,
        proxy_rotator: Optional[ProxyRotator] = None,
        session_factory: SessionFactory = SessionManager,
        page_factory: Optional[PageFactory] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Initialize the service.

        Args:
            config: Request settings (defaults to Config())
            proxy_rotator: Shared rotator; built from config proxies if omitted
            session_factory: Builds a SessionManager from a BrowserConfig
            page_factory: Page builder; built from config if omitted
            sleep: Backoff sleeper (injectable for tests)
        """
        self.config = config or Config()
        self.browser_config = self.config.to_browser_config()
        if proxy_rotator is None:
            proxy_rotator = create_proxy_rotator(self.config.proxy_urls, self.config.proxy_file)
        self.proxy_rotator = proxy_rotator
        self.page_factory = page_factory or PageFactory(
            self.browser_config,
            evaluation_timeout_ms=self.config.evaluation_timeout_ms,
        )
        self._session_factory = session_factory
        self._sleep = sleep

    async def extract_style_tree(
        self,
        url: str,
        tags: Union[str, Iterable[str]] = ALL_TAGS,
        properties: Optional[Iterable[str]] = None,
    ) -> StyleNode:
        """
        Extract the pruned style tree of a page.

        Args:
            url: Page to extract
            tags: "all" or the tag names whose styles are extracted
            properties: CSS properties to read (defaults to background properties)

        Returns:
            Root StyleNode

        Raises:
            InvalidInput: Before any browser work, if the request is malformed
            ExtractionError: On any other failure, with a classified type
        """
        url = validate_url(url)
        extractor = StyleTreeExtractor(ExtractionConfig.create(tags, properties), root=self.config.tree_root)
        return await self._run(url, "Style tree extraction", extractor.extract)

    async def extract_theme(self, url: str) -> ThemeReport:
        """
        Extract the aggregated theme of a page.

        Raises:
            InvalidInput: Before any browser work, if the URL is malformed
            ExtractionError: On any other failure, with a classified type
        """
        url = validate_url(url)
        return await self._run(url, "Theme extraction", ThemeAggregator().extract)

    def _new_session(self) -> SessionManager:
        proxy = self.proxy_rotator.get_next()
        return self._session_factory(self.browser_config.with_proxy(proxy))

    async def acquire_page(self) -> Tuple[SessionManager, PageHandle]:
        """
        Launch a session and open a page, with bounded retries.

        Every failed attempt closes its session; the next attempt starts a
        fresh session on the next proxy after a fixed backoff.

        Returns:
            (session, page); the caller must close both

        Raises:
            PageCreationFailure: When every attempt has failed
        """
        max_attempts = self.config.max_page_attempts
        last_error: Optional[BaseException] = None

        for attempt in range(1, max_attempts + 1):
            session = self._new_session()
            try:
                browser = await session.ensure_session()
                page = await self.page_factory.create_page(browser)
            except Exception as e:
                last_error = e
                logger.warning(f"Page creation attempt {attempt}/{max_attempts} failed: {e}")
                await session.close()
                if attempt < max_attempts:
                    await self._sleep(self.config.retry_backoff_seconds)
                continue

            if attempt > 1:
                logger.info(f"Page created on attempt {attempt}/{max_attempts}")
            return session, page

        raise PageCreationFailure(
            f"Failed to create page after {max_attempts} attempts: {last_error}"
        ) from last_error

    async def _run(
        self,
        url: str,
        label: str,
        operation: Callable[[PageHandle], Awaitable[T]],
    ) -> T:
        session: Optional[SessionManager] = None
        page: Optional[PageHandle] = None
        try:
            session, page = await self.acquire_page()
            await self._guard(session, page.navigate(url), "navigating")
            await self._prepare(session, page)
            result = await self._guard(session, operation(page), "extracting")
            logger.info(f"{label} complete for {url}")
            return result
        except ExtractionError:
            raise
        except Exception as e:
            classified = classify_error(e)
            logger.error(f"{label} failed for {url} [{classified.type.value}]: {e}")
            raise ExtractionError(classified) from e
        finally:
            if page is not None:
                await page.close()
            if session is not None:
                await session.close()

    async def _prepare(self, session: SessionManager, page: PageHandle) -> None:
        """Selector wait, lazy-load scroll and settle delay; none of them are fatal."""
        if self.config.wait_for_selector:
            await page.wait_for_selector(self.config.wait_for_selector, self.config.selector_timeout_ms)

        if self.config.auto_scroll:
            try:
                await self._guard(
                    session,
                    page.auto_scroll(self.config.scroll_step_px, self.config.scroll_interval_ms),
                    "scrolling",
                )
            except TimeoutFailure as e:
                logger.warning(f"Auto-scroll did not finish, continuing: {e}")

        await page.settle(self.config.settle_delay_ms)

    @staticmethod
    async def _guard(session: SessionManager, awaitable: Awaitable[T], phase: str) -> T:
        """Re-raise browser failures as ConnectionLoss once the session has disconnected."""
        try:
            return await awaitable
        except (TimeoutFailure, ConnectionLoss):
            raise
        except Exception as e:
            if not session.is_healthy:
                raise ConnectionLoss(f"Connection closed while {phase}: {e}") from e
            raise


def extract_style_tree_sync(
    url: str,
    tags: Union[str, Iterable[str]] = ALL_TAGS,
    properties: Optional[Iterable[str]] = None,
    config: Optional[Config] = None,
) -> StyleNode:
    """
    Synchronous wrapper for a single style tree extraction.

    Convenience function for non-async contexts.
    """
    return asyncio.run(ExtractionService(config).extract_style_tree(url, tags, properties))


def extract_theme_sync(url: str, config: Optional[Config] = None) -> ThemeReport:
    """Synchronous wrapper for a single theme extraction."""
    return asyncio.run(ExtractionService(config).extract_theme(url))
