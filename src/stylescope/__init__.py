"""StyleScope: computed-style and theme extraction from rendered web pages."""

__version__ = "0.1.0"

# Infrastructure first: browser_config imports from it
from stylescope.infrastructure import (
    ProxyConfig,
    ProxyRotator,
    SessionManager,
    SessionState,
    PageFactory,
    PageHandle,
)
from stylescope.browser_config import BrowserConfig
from stylescope.config import Config, settings
from stylescope.errors import (
    ErrorType,
    ClassifiedError,
    StyleScopeError,
    InvalidInput,
    SessionLaunchFailure,
    PageCreationFailure,
    TimeoutFailure,
    NavigationTimeout,
    EvaluationTimeout,
    SelectorWaitTimeout,
    ConnectionLoss,
    ExtractionError,
    classify_error,
)
from stylescope.models import (
    ExtractionConfig,
    StyleNode,
    StyleTreeResult,
    ElementDimension,
    ZoneStyles,
    FrequencyStyles,
    ThemeReport,
)
from stylescope.extraction import StyleTreeExtractor, ThemeAggregator
from stylescope.service import ExtractionService

__all__ = [
    # Service
    "ExtractionService",
    "StyleTreeExtractor",
    "ThemeAggregator",
    # Infrastructure
    "ProxyConfig",
    "ProxyRotator",
    "SessionManager",
    "SessionState",
    "PageFactory",
    "PageHandle",
    # Configuration
    "BrowserConfig",
    "Config",
    "settings",
    # Errors
    "ErrorType",
    "ClassifiedError",
    "StyleScopeError",
    "InvalidInput",
    "SessionLaunchFailure",
    "PageCreationFailure",
    "TimeoutFailure",
    "NavigationTimeout",
    "EvaluationTimeout",
    "SelectorWaitTimeout",
    "ConnectionLoss",
    "ExtractionError",
    "classify_error",
    # Models
    "ExtractionConfig",
    "StyleNode",
    "StyleTreeResult",
    "ElementDimension",
    "ZoneStyles",
    "FrequencyStyles",
    "ThemeReport",
]
