"""
tests/test_config.py

Environment-driven settings, test-mode limits and option clamping.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from cafe_crawler.config import TestModeConfig, get_crawler_settings, load_test_mode_config
from cafe_crawler.crawling.config.models import CrawlerOptions
from cafe_crawler.crawling.config.options import resolve_crawler_options


@pytest.fixture()
def fresh_settings() -> Iterator[None]:
    get_crawler_settings.cache_clear()
    yield
    get_crawler_settings.cache_clear()


class TestLoadTestModeConfig:
    def test_disabled_by_default(self) -> None:
        assert load_test_mode_config({}) == TestModeConfig()
        assert load_test_mode_config({"CRAWLER_TEST_MODE": "false"}).enabled is False

    @pytest.mark.parametrize("raw", ["true", "1", "YES", " on "])
    def test_enabled_with_default_caps(self, raw: str) -> None:
        config = load_test_mode_config({"CRAWLER_TEST_MODE": raw})

        assert config == TestModeConfig(enabled=True, max_products=3, max_requests=10, max_categories=1)

    def test_overrides_are_floored_at_one(self) -> None:
        config = load_test_mode_config(
            {
                "CRAWLER_TEST_MODE": "true",
                "CRAWLER_MAX_PRODUCTS": "0",
                "CRAWLER_MAX_REQUESTS": "25",
                "CRAWLER_MAX_CATEGORIES": "-4",
            }
        )

        assert config.max_products == 1
        assert config.max_requests == 25
        assert config.max_categories == 1

    def test_unparseable_override_uses_default(self) -> None:
        config = load_test_mode_config({"CRAWLER_TEST_MODE": "true", "CRAWLER_MAX_REQUESTS": "lots"})

        assert config.max_requests == 10


class TestResolveCrawlerOptions:
    OPTIONS = CrawlerOptions(
        max_concurrency=10,
        max_requests_per_crawl=300,
        request_handler_timeout_secs=90,
        max_pagination_pages=50,
        max_load_more_clicks=20,
    )

    def test_normal_mode_keeps_site_options(self) -> None:
        assert resolve_crawler_options(self.OPTIONS, TestModeConfig()) == self.OPTIONS

    def test_test_mode_clamps_limits(self) -> None:
        resolved = resolve_crawler_options(
            self.OPTIONS,
            TestModeConfig(enabled=True, max_products=3, max_requests=10, max_categories=1),
        )

        assert resolved.max_concurrency == 2
        assert resolved.max_requests_per_crawl == 10
        assert resolved.request_handler_timeout_secs == 30
        assert resolved.max_pagination_pages == 1
        assert resolved.max_load_more_clicks == 1

    def test_site_limits_below_the_caps_are_kept(self) -> None:
        options = CrawlerOptions(max_concurrency=1, max_requests_per_crawl=5, request_handler_timeout_secs=20)

        resolved = resolve_crawler_options(options, TestModeConfig(enabled=True, max_requests=10))

        assert resolved.max_concurrency == 1
        assert resolved.max_requests_per_crawl == 5
        assert resolved.request_handler_timeout_secs == 20

    def test_navigation_timeout_override(self) -> None:
        resolved = resolve_crawler_options(self.OPTIONS, TestModeConfig(), navigation_timeout_ms=12_000)

        assert resolved.navigation_timeout_ms == 12_000


class TestCrawlerSettings:
    def test_fast_mode_shortens_navigation_timeout(
        self,
        monkeypatch: pytest.MonkeyPatch,
        fresh_settings: None,
    ) -> None:
        monkeypatch.setenv("CRAWLER_FAST_MODE", "true")
        monkeypatch.delenv("CRAWLER_NAVIGATION_TIMEOUT_MS", raising=False)

        settings = get_crawler_settings()

        assert settings.fast_mode is True
        assert settings.navigation_timeout_ms == 10_000

    def test_explicit_values(self, monkeypatch: pytest.MonkeyPatch, fresh_settings: None) -> None:
        monkeypatch.setenv("CRAWLER_FAST_MODE", "false")
        monkeypatch.setenv("CRAWLER_NAVIGATION_TIMEOUT_MS", "200")
        monkeypatch.setenv("VITE_CONVEX_URL", "https://menu-backend.example")
        monkeypatch.setenv("CONVEX_UPLOAD_SECRET", "s3cret")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = get_crawler_settings()

        assert settings.navigation_timeout_ms == 1_000
        assert settings.upload_url == "https://menu-backend.example"
        assert settings.upload_secret == "s3cret"
        assert settings.log_level == "DEBUG"

    def test_settings_are_cached(self, fresh_settings: None) -> None:
        assert get_crawler_settings() is get_crawler_settings()
