"""Shared data models for rss_generator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

SCOPE_DESCENDANT = "descendant"
SCOPE_NEXT_SIBLING = "next_sibling"

Item = Dict[str, Any]


@dataclass(frozen=True)
class FieldRule:
    """How to derive one item field from a matched listing element."""

    selector: str
    attribute: str = "text"
    multiple: bool = False
    prefix: Optional[str] = None
    transform: Optional[str] = None
    scope: str = SCOPE_DESCENDANT
    sibling_tag: str = "p"


@dataclass(frozen=True)
class ScrapingConfig:
    item_selector: str
    fields: Dict[str, FieldRule]


@dataclass(frozen=True)
class RssConfig:
    """Channel metadata for a generated feed."""

    title: str
    description: str = ""
    site_url: Optional[str] = None
    image_url: Optional[str] = None
    copyright: Optional[str] = None
    language: str = "ja"
    ttl: int = 60
    categories: List[str] = field(default_factory=list)
    namespace_prefix: str = "qiita"
    namespace_uri: str = "https://qiita.com/"


@dataclass(frozen=True)
class SiteConfig:
    """Configuration for a single scraped site."""

    key: str
    name: str
    url: str
    output_file: str
    scraping: ScrapingConfig
    rss: RssConfig
    description: str = ""
