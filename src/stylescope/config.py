from dotenv import load_dotenv
from dataclasses import dataclass, field
from typing import List, Literal, Optional
import os

from .browser_config import BrowserConfig, Viewport

load_dotenv()  # Loads variables from .env file


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """
    Manages application settings loaded from environment variables.
    """
    LOG_LEVEL = os.getenv("STYLESCOPE_LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("STYLESCOPE_LOG_FILE")


settings = Settings()


@dataclass
class Config:
    """Configuration for extraction requests."""
    headless: bool = True
    timeout_ms: int = 30000
    evaluation_timeout_ms: int = 30000
    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = "networkidle"
    user_agent: Optional[str] = None
    viewport_width: int = 1920
    viewport_height: int = 1080
    stealth_mode: bool = True

    # Session/page acquisition
    max_page_attempts: int = 2
    retry_backoff_seconds: float = 1.0
    proxy_urls: List[str] = field(default_factory=list)
    proxy_file: Optional[str] = None

    # Post-navigation settling
    wait_for_selector: Optional[str] = None
    selector_timeout_ms: int = 5000
    auto_scroll: bool = True
    scroll_step_px: int = 100
    scroll_interval_ms: int = 100
    settle_delay_ms: int = 2000

    # Style tree root: "body" or "html"
    tree_root: Literal["body", "html"] = "body"

    log_level: str = "INFO"

    def __post_init__(self):
        if self.max_page_attempts < 1:
            raise ValueError("max_page_attempts must be at least 1")
        if self.retry_backoff_seconds < 0:
            raise ValueError("retry_backoff_seconds cannot be negative")
        if self.tree_root not in ("body", "html"):
            raise ValueError(f"tree_root must be 'body' or 'html', got {self.tree_root!r}")

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables.

        Variables are prefixed with STYLESCOPE_, e.g. STYLESCOPE_TIMEOUT_MS=45000

        Returns:
            Config: Configuration instance with values from environment
        """
        proxy_urls = os.getenv("STYLESCOPE_PROXY_URLS", "")
        timeout_ms = int(os.getenv("STYLESCOPE_TIMEOUT_MS", "30000"))
        return cls(
            headless=_env_bool("STYLESCOPE_HEADLESS", True),
            timeout_ms=timeout_ms,
            evaluation_timeout_ms=int(os.getenv("STYLESCOPE_EVALUATION_TIMEOUT_MS", str(timeout_ms))),
            wait_until=os.getenv("STYLESCOPE_WAIT_UNTIL", "networkidle"),
            user_agent=os.getenv("STYLESCOPE_USER_AGENT") or None,
            viewport_width=int(os.getenv("STYLESCOPE_VIEWPORT_WIDTH", "1920")),
            viewport_height=int(os.getenv("STYLESCOPE_VIEWPORT_HEIGHT", "1080")),
            stealth_mode=_env_bool("STYLESCOPE_STEALTH", True),
            max_page_attempts=int(os.getenv("STYLESCOPE_MAX_PAGE_ATTEMPTS", "2")),
            retry_backoff_seconds=float(os.getenv("STYLESCOPE_RETRY_BACKOFF_SECONDS", "1.0")),
            proxy_urls=[u.strip() for u in proxy_urls.split(",") if u.strip()],
            proxy_file=os.getenv("STYLESCOPE_PROXY_FILE") or None,
            wait_for_selector=os.getenv("STYLESCOPE_WAIT_FOR_SELECTOR") or None,
            selector_timeout_ms=int(os.getenv("STYLESCOPE_SELECTOR_TIMEOUT_MS", "5000")),
            auto_scroll=_env_bool("STYLESCOPE_AUTO_SCROLL", True),
            settle_delay_ms=int(os.getenv("STYLESCOPE_SETTLE_DELAY_MS", "2000")),
            tree_root=os.getenv("STYLESCOPE_TREE_ROOT", "body"),
            log_level=os.getenv("STYLESCOPE_LOG_LEVEL", "INFO"),
        )

    def to_browser_config(self) -> BrowserConfig:
        """Session and page settings derived from this config (without proxy)."""
        return BrowserConfig(
            headless=self.headless,
            stealth_mode=self.stealth_mode,
            timeout=self.timeout_ms,
            wait_until=self.wait_until,
            viewport=Viewport(width=self.viewport_width, height=self.viewport_height),
            user_agent=self.user_agent,
        )
