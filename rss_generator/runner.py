"""High-level orchestration for the rss_generator application."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import parse_sites_config
from .extractor import scrape_site
from .fetcher import DEFAULT_TIMEOUT, USER_AGENT
from .models import Item, SiteConfig
from .renderers import build_feed, build_index_html, resolve_base_url
from .transforms import Clock, utcnow
from .writer import write_if_changed

logger = logging.getLogger(__name__)

INDEX_FILE = "index.html"


@dataclass
class RunConfig:
    """Runtime options for executing the application."""

    sites_file: str
    output_dir: str = "dist"
    base_url: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = USER_AGENT
    only: Optional[List[str]] = None
    save_items_path: Optional[str] = None


@dataclass
class RunResult:
    """Site keys grouped by what happened to their feed."""

    index_path: str
    written: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


def _select_sites(
    sites: Dict[str, SiteConfig], only: Optional[List[str]]
) -> List[SiteConfig]:
    if not only:
        return list(sites.values())
    unknown = [key for key in only if key not in sites]
    if unknown:
        raise ValueError(f"Unknown site key(s): {', '.join(unknown)}")
    return [site for key, site in sites.items() if key in only]


def _json_default(value: Any) -> str:
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _save_items_to_file(path: str, items_by_site: Dict[str, List[Item]]) -> None:
    location = Path(path)
    if location.parent and not location.parent.exists():
        location.parent.mkdir(parents=True, exist_ok=True)

    location.write_text(
        json.dumps(items_by_site, indent=2, ensure_ascii=False, default=_json_default),
        encoding="utf-8",
    )
    logger.info("Saved items for %d sites to %s", len(items_by_site), location)


def write_index(
    sites: List[SiteConfig], output_dir: Path, clock: Clock = utcnow
) -> Path:
    index_path = output_dir / INDEX_FILE
    index_path.write_text(build_index_html(sites, clock=clock), encoding="utf-8")
    logger.info("Index page generated at %s", index_path)
    return index_path


def execute(config: RunConfig, session=None, clock: Clock = utcnow) -> RunResult:
    """Run every configured site through scrape, render and write."""
    sites = parse_sites_config(config.sites_file)
    selected = _select_sites(sites, config.only)

    output_dir = Path(config.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    base_url = resolve_base_url(config.base_url)
    logger.info("Publishing feeds under %s", base_url)

    result = RunResult(index_path=str(output_dir / INDEX_FILE))
    items_by_site: Dict[str, List[Item]] = {}

    for site in selected:
        logger.info("=== Processing %s ===", site.key)
        items = scrape_site(
            site,
            timeout=config.timeout,
            user_agent=config.user_agent,
            session=session,
            clock=clock,
        )
        items_by_site[site.key] = items

        if not items:
            logger.info("No items found for %s, skipping RSS generation", site.key)
            result.skipped.append(site.key)
            continue

        try:
            xml = build_feed(site, items, base_url, clock=clock)
        except Exception:
            logger.exception("Failed to render feed for %s", site.key)
            result.skipped.append(site.key)
            continue

        if write_if_changed(output_dir / site.output_file, xml):
            result.written.append(site.key)
        else:
            result.unchanged.append(site.key)

    if config.save_items_path:
        _save_items_to_file(config.save_items_path, items_by_site)

    write_index(list(sites.values()), output_dir, clock=clock)
    logger.info(
        "RSS generation completed: %d written, %d unchanged, %d skipped",
        len(result.written),
        len(result.unchanged),
        len(result.skipped),
    )
    return result
