"""
Browser configuration for Playwright-based style extraction.

This module provides a validated Pydantic configuration model for every
session and page setting, and pre-configured instances for common use cases.
"""
import random
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .infrastructure.proxy_rotation import ProxyConfig


# User agent pool for rotation
USER_AGENTS = [
    # Chrome on Windows
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
    # Chrome on Mac
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
]

DEFAULT_USER_AGENT = USER_AGENTS[0]

# Chromium flags that reduce automation signals and keep headless stable in containers
STEALTH_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
    "--disable-blink-features=AutomationControlled",
    "--disable-features=VizDisplayCompositor",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
]

DEFAULT_HEADERS = {
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate, br",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,image/apng,*/*;q=0.8",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}

# Computed styles depend on stylesheets, so they may never be blocked
UNBLOCKABLE_RESOURCES = frozenset({"stylesheet", "document"})


def get_random_user_agent() -> str:
    """Get a random user agent from the pool."""
    return random.choice(USER_AGENTS)


class Viewport(BaseModel):
    """Fixed page viewport."""

    width: int = Field(default=1920, ge=320, le=7680)
    height: int = Field(default=1080, ge=240, le=4320)

    def as_dict(self) -> Dict[str, int]:
        return {"width": self.width, "height": self.height}


class BrowserConfig(BaseModel):
    """
    Configuration for one browser session and the pages it creates.

    All fields are validated by Pydantic to ensure type safety and valid values.
    """

    headless: bool = Field(
        default=True,
        description="Run browser in headless mode (no visible UI)"
    )

    browser_type: Literal["chromium", "firefox", "webkit"] = Field(
        default="chromium",
        description="Browser engine to launch"
    )

    stealth_mode: bool = Field(
        default=True,
        description="Launch with anti-detection flags and inject the stealth init script"
    )

    timeout: int = Field(
        default=30000,
        description="Launch, navigation and script evaluation timeout in milliseconds",
        ge=1000,
        le=300000
    )

    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = Field(
        default="networkidle",
        description="When to consider navigation complete"
    )

    viewport: Viewport = Field(
        default_factory=Viewport,
        description="Viewport applied to every page"
    )

    user_agent: Optional[str] = Field(
        default=None,
        description="Override user agent. If None and rotate_user_agent=True, a random one is used."
    )

    rotate_user_agent: bool = Field(
        default=False,
        description="Pick a random user agent for each new page"
    )

    proxy: Optional[ProxyConfig] = Field(
        default=None,
        description="Proxy the browser routes all traffic through"
    )

    extra_headers: Dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_HEADERS),
        description="Static HTTP headers sent with every request"
    )

    block_resources: List[str] = Field(
        default_factory=lambda: ["image", "font", "media"],
        description="Resource types to abort (stylesheets can never be blocked)"
    )

    launch_args: List[str] = Field(
        default_factory=list,
        description="Additional browser launch arguments"
    )

    class Config:
        """Pydantic model configuration."""
        frozen = False
        validate_assignment = True
        arbitrary_types_allowed = True

    @field_validator("block_resources")
    @classmethod
    def _keep_stylesheets(cls, value: List[str]) -> List[str]:
        normalized = [v.strip().lower() for v in value if v.strip()]
        forbidden = UNBLOCKABLE_RESOURCES.intersection(normalized)
        if forbidden:
            raise ValueError(
                f"Resource types {sorted(forbidden)} cannot be blocked; "
                "computed style extraction depends on them"
            )
        return normalized

    def get_user_agent(self) -> str:
        """Get the user agent to use for this config."""
        if self.user_agent:
            return self.user_agent
        if self.rotate_user_agent:
            return get_random_user_agent()
        return DEFAULT_USER_AGENT

    def get_launch_args(self) -> List[str]:
        """Launch arguments, stealth flags first, de-duplicated."""
        args = list(STEALTH_LAUNCH_ARGS) if self.stealth_mode else []
        for arg in self.launch_args:
            if arg not in args:
                args.append(arg)
        return args

    def with_proxy(self, proxy: Optional[ProxyConfig]) -> "BrowserConfig":
        """Copy of this config routed through another proxy."""
        return self.model_copy(update={"proxy": proxy})


# --- Pre-configured Instances for Common Use Cases ---

DEFAULT_CONFIG = BrowserConfig()
"""
Default configuration: headless Chromium with stealth flags, 30s timeouts,
images/fonts/media blocked.
"""

STEALTH_CONFIG = BrowserConfig(
    headless=True,
    stealth_mode=True,
    wait_until="networkidle",
    timeout=45000,
    rotate_user_agent=True,
    launch_args=[
        "--disable-http2",  # Bypass HTTP/2 fingerprinting
        "--disable-features=IsolateOrigins,site-per-process",
        "--no-default-browser-check",
    ],
)
"""
Stealth configuration for sites with aggressive anti-bot protection.

Uses longer timeouts and rotates the user agent per page.
"""
