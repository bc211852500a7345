"""Tests for configuration loading and validation."""

import pytest

from stylescope.browser_config import (
    DEFAULT_CONFIG,
    DEFAULT_USER_AGENT,
    STEALTH_CONFIG,
    STEALTH_LAUNCH_ARGS,
    USER_AGENTS,
    BrowserConfig,
)
from stylescope.config import Config
from stylescope.infrastructure.proxy_rotation import ProxyConfig


class TestConfig:
    """Test cases for Config."""

    def test_defaults(self):
        config = Config()
        assert config.headless is True
        assert config.timeout_ms == 30000
        assert config.max_page_attempts == 2
        assert config.retry_backoff_seconds == 1.0
        assert config.settle_delay_ms == 2000
        assert config.tree_root == "body"

    def test_invalid_attempts(self):
        with pytest.raises(ValueError):
            Config(max_page_attempts=0)

    def test_invalid_root(self):
        with pytest.raises(ValueError):
            Config(tree_root="main")

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("STYLESCOPE_HEADLESS", "false")
        monkeypatch.setenv("STYLESCOPE_TIMEOUT_MS", "45000")
        monkeypatch.setenv("STYLESCOPE_PROXY_URLS", "http://a.example:1, http://b.example:2")
        monkeypatch.setenv("STYLESCOPE_MAX_PAGE_ATTEMPTS", "3")
        monkeypatch.setenv("STYLESCOPE_TREE_ROOT", "html")
        monkeypatch.delenv("STYLESCOPE_EVALUATION_TIMEOUT_MS", raising=False)

        config = Config.from_env()

        assert config.headless is False
        assert config.timeout_ms == 45000
        assert config.evaluation_timeout_ms == 45000
        assert config.proxy_urls == ["http://a.example:1", "http://b.example:2"]
        assert config.max_page_attempts == 3
        assert config.tree_root == "html"

    def test_to_browser_config(self):
        config = Config(headless=False, timeout_ms=60000, viewport_width=1280, viewport_height=720)
        browser_config = config.to_browser_config()

        assert browser_config.headless is False
        assert browser_config.timeout == 60000
        assert browser_config.viewport.as_dict() == {"width": 1280, "height": 720}
        assert browser_config.proxy is None


class TestBrowserConfig:
    """Test cases for BrowserConfig."""

    def test_presets(self):
        assert DEFAULT_CONFIG.headless is True
        assert DEFAULT_CONFIG.block_resources == ["image", "font", "media"]
        assert STEALTH_CONFIG.rotate_user_agent is True
        assert STEALTH_CONFIG.timeout == 45000

    def test_timeout_bounds(self):
        with pytest.raises(ValueError):
            BrowserConfig(timeout=10)

    def test_user_agent(self):
        assert BrowserConfig().get_user_agent() == DEFAULT_USER_AGENT
        assert BrowserConfig(user_agent="Custom").get_user_agent() == "Custom"
        assert BrowserConfig(rotate_user_agent=True).get_user_agent() in USER_AGENTS

    def test_launch_args_deduplicated(self):
        config = BrowserConfig(launch_args=["--no-sandbox", "--mute-audio"])
        args = config.get_launch_args()

        assert args[:len(STEALTH_LAUNCH_ARGS)] == STEALTH_LAUNCH_ARGS
        assert args.count("--no-sandbox") == 1
        assert args[-1] == "--mute-audio"

    def test_launch_args_without_stealth(self):
        assert BrowserConfig(stealth_mode=False).get_launch_args() == []

    def test_block_resources_normalized(self):
        config = BrowserConfig(block_resources=[" Image ", "FONT"])
        assert config.block_resources == ["image", "font"]

    def test_document_cannot_be_blocked(self):
        with pytest.raises(ValueError):
            BrowserConfig(block_resources=["document"])

    def test_with_proxy_copies(self):
        proxy = ProxyConfig.from_url("http://proxy.local:8000")
        base = BrowserConfig()

        routed = base.with_proxy(proxy)

        assert routed.proxy == proxy
        assert base.proxy is None
