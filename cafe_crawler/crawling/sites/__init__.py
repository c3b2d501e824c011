"""
Site definitions for the supported café brands.
"""

from __future__ import annotations

from typing import Any

from cafe_crawler.crawling.config.models import SiteDefinition
from cafe_crawler.crawling.registry import CrawlerRegistry
from cafe_crawler.crawling.sites.coffeebean import COFFEEBEAN
from cafe_crawler.crawling.sites.compose import COMPOSE
from cafe_crawler.crawling.sites.ediya import EDIYA
from cafe_crawler.crawling.sites.gongcha import GONGCHA
from cafe_crawler.crawling.sites.hollys import HOLLYS
from cafe_crawler.crawling.sites.mammoth import MAMMOTH
from cafe_crawler.crawling.sites.mega import MEGA
from cafe_crawler.crawling.sites.paik import PAIK
from cafe_crawler.crawling.sites.paulbassett import PAULBASSETT
from cafe_crawler.crawling.sites.starbucks import STARBUCKS
from cafe_crawler.crawling.sites.twosome import TWOSOME

SITE_DEFINITIONS: tuple[SiteDefinition, ...] = (
    STARBUCKS,
    EDIYA,
    MEGA,
    PAIK,
    COMPOSE,
    GONGCHA,
    COFFEEBEAN,
    TWOSOME,
    HOLLYS,
    MAMMOTH,
    PAULBASSETT,
)

BRAND_NAMES: dict[str, str] = {
    definition.brand: definition.config.display_name or definition.brand
    for definition in SITE_DEFINITIONS
}


def register_default_sites(registry: CrawlerRegistry) -> CrawlerRegistry:
    for definition in SITE_DEFINITIONS:
        registry.register_definition(definition)
    return registry


def build_default_registry(**crawler_kwargs: Any) -> CrawlerRegistry:
    """
    Return a registry holding every bundled site, with `crawler_kwargs`
    forwarded to each crawler it builds.
    """

    return register_default_sites(CrawlerRegistry(**crawler_kwargs))


__all__ = [
    "BRAND_NAMES",
    "SITE_DEFINITIONS",
    "build_default_registry",
    "register_default_sites",
]
