"""
Infrastructure Package.

Browser session lifecycle, page creation, proxy rotation and timeout races.
"""

# proxy_rotation must load before session_manager: browser_config depends on it
from .proxy_rotation import (
    ProxyConfig,
    ProxyRotator,
    ProxyType,
    load_proxies_from_file,
    create_proxy_rotator,
)
from .timeouts import race_with_timeout
from .session_manager import (
    SessionManager,
    SessionState,
)
from .page_factory import (
    PageFactory,
    PageHandle,
    STEALTH_INIT_SCRIPT,
    AUTO_SCROLL_SCRIPT,
)

__all__ = [
    # Proxy Rotation
    "ProxyConfig",
    "ProxyRotator",
    "ProxyType",
    "load_proxies_from_file",
    "create_proxy_rotator",
    # Timeouts
    "race_with_timeout",
    # Sessions
    "SessionManager",
    "SessionState",
    # Pages
    "PageFactory",
    "PageHandle",
    "STEALTH_INIT_SCRIPT",
    "AUTO_SCROLL_SCRIPT",
]
