"""Rendering helpers for RSS feeds and the index page."""

from __future__ import annotations

import logging
import os
from datetime import date, datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, Iterable, List, Optional

from .models import Item, SiteConfig
from .templating import as_datetime, get_environment
from .transforms import Clock, utcnow

logger = logging.getLogger(__name__)

BASE_URL_ENV = "GITHUB_PAGES_URL"
DEFAULT_BASE_URL = "https://marchmd03.github.io/rss-generator"
GENERATOR = "Generic RSS Generator"
EDITOR = "RSS Generator"
DEFAULT_AUTHOR = "Qiita"
JST = timezone(timedelta(hours=9), "JST")


def resolve_base_url(configured: Optional[str] = None) -> str:
    """Return the public URL feeds are served from, without a trailing slash."""
    base_url = os.environ.get(BASE_URL_ENV) or configured or DEFAULT_BASE_URL
    return base_url.rstrip("/")


def _likes_value(likes: Any) -> int:
    if isinstance(likes, bool):
        return 0
    if isinstance(likes, int):
        return likes
    if isinstance(likes, str) and likes.strip().isdigit():
        return int(likes.strip())
    return 0


def _coerce_date(value: Any, now: datetime) -> date:
    """Accept dates from transforms as well as raw ISO 8601 or RFC 822 strings."""
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            pass
        try:
            return parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            pass
        logger.debug("Unparseable pubDate %r, using current time", value)
    return now


def compose_description(item: Item) -> str:
    description = f"{item.get('description') or item.get('title') or ''}"
    author = item.get("author")
    if author:
        description += f" by {author}"
    tags = item.get("tags")
    if isinstance(tags, list) and tags:
        description += f" | タグ: {', '.join(tags)}"
    likes = _likes_value(item.get("likes"))
    if likes > 0:
        description += f" | {likes} いいね"
    return description


def _tags_value(tags: Any) -> str:
    if isinstance(tags, (list, tuple)):
        return ",".join(str(tag) for tag in tags)
    return str(tags) if tags else ""


def _feed_entry(item: Item, now) -> Dict[str, Any]:
    return {
        "title": item["title"],
        "link": item["link"],
        "description": compose_description(item),
        "author": item.get("author") or DEFAULT_AUTHOR,
        "date": as_datetime(_coerce_date(item.get("pubDate"), now)),
        "likes": _likes_value(item.get("likes")),
        "author_link": item.get("authorLink") or "",
        "tags": _tags_value(item.get("tags")),
    }


def build_feed(
    site: SiteConfig,
    items: Iterable[Item],
    base_url: str,
    clock: Clock = utcnow,
) -> str:
    """Render ``items`` as an RSS 2.0 document for ``site``."""
    now = clock()
    rss = site.rss
    channel = {
        "title": rss.title,
        "description": rss.description,
        "link": rss.site_url or site.url,
        "feed_url": f"{base_url}/{site.output_file}",
        "image_url": rss.image_url,
        "copyright": rss.copyright,
        "language": rss.language or "ja",
        "ttl": rss.ttl or 60,
        "categories": rss.categories,
        "generator": GENERATOR,
        "editor": EDITOR,
        "pub_date": now,
    }
    entries = [_feed_entry(item, now) for item in items]
    logger.debug("Rendering feed for %s with %d items", site.name, len(entries))

    template = get_environment().get_template("feed.xml.j2")
    return template.render(
        channel=channel,
        entries=entries,
        ns_prefix=rss.namespace_prefix,
        ns_uri=rss.namespace_uri,
    )


def build_index_html(sites: Iterable[SiteConfig], clock: Clock = utcnow) -> str:
    """Render the static page listing every configured feed."""
    feeds: List[Dict[str, str]] = [
        {
            "name": site.name,
            "description": site.description,
            "file": site.output_file,
            "url": site.url,
        }
        for site in sites
    ]
    updated = as_datetime(clock()).astimezone(JST).strftime("%Y/%m/%d %H:%M:%S")
    template = get_environment().get_template("index.html.j2")
    return template.render(feeds=feeds, updated=updated)
