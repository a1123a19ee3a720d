"""Selector-driven extraction of listing items from HTML pages."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

import requests
from bs4 import BeautifulSoup
from bs4.element import Tag

from .config import REQUIRED_FIELDS
from .fetcher import DEFAULT_TIMEOUT, USER_AGENT, FetchError, fetch_page
from .models import SCOPE_NEXT_SIBLING, FieldRule, Item, SiteConfig
from .transforms import Clock, apply_transform, utcnow

logger = logging.getLogger(__name__)


def _text(matches: List[Tag], rule: FieldRule) -> str:
    return "".join(match.get_text() for match in matches).strip()


def _attribute_value(matches: List[Tag], name: str) -> Optional[str]:
    if not matches:
        return None
    value = matches[0].get(name)
    if isinstance(value, list):
        return " ".join(value)
    return value


def _href(matches: List[Tag], rule: FieldRule) -> Optional[str]:
    value = _attribute_value(matches, "href")
    if rule.prefix and value and not value.startswith("http"):
        value = rule.prefix + value
    return value


def _generic_attribute(matches: List[Tag], rule: FieldRule) -> Optional[str]:
    return _attribute_value(matches, rule.attribute)


ATTRIBUTE_EXTRACTORS: Dict[str, Callable[[List[Tag], FieldRule], Any]] = {
    "text": _text,
    "href": _href,
}


def select_matches(element: Tag, rule: FieldRule) -> List[Tag]:
    """Resolve the elements a rule refers to, relative to one listing element."""
    if rule.scope == SCOPE_NEXT_SIBLING:
        sibling = element.find_next_sibling()
        if sibling is None or sibling.name != rule.sibling_tag:
            return []
        return sibling.select(rule.selector) if rule.selector else [sibling]
    return element.select(rule.selector)


def extract_field(element: Tag, rule: FieldRule, clock: Clock = utcnow) -> Any:
    matches = select_matches(element, rule)
    if rule.multiple:
        value: Any = [match.get_text().strip() for match in matches]
    else:
        extractor = ATTRIBUTE_EXTRACTORS.get(rule.attribute, _generic_attribute)
        value = extractor(matches, rule)

    if rule.transform:
        value = apply_transform(value, rule.transform, clock)
    return value


def extract_items(html: str, site: SiteConfig, clock: Clock = utcnow) -> List[Item]:
    """Return the valid items found in ``html`` in document order."""
    soup = BeautifulSoup(html, "html.parser")
    items: List[Item] = []

    for element in soup.select(site.scraping.item_selector):
        item: Item = {
            name: extract_field(element, rule, clock)
            for name, rule in site.scraping.fields.items()
        }
        if not all(item.get(name) for name in REQUIRED_FIELDS):
            logger.debug("Skipping element without title or link on %s", site.name)
            continue
        items.append(item)

    return items


def scrape_site(
    site: SiteConfig,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = USER_AGENT,
    session: Optional[requests.Session] = None,
    clock: Clock = utcnow,
) -> List[Item]:
    """Fetch and extract one site; failures are logged and yield no items."""
    logger.info("Scraping %s...", site.name)
    try:
        html = fetch_page(
            site.url, timeout=timeout, user_agent=user_agent, session=session
        )
        items = extract_items(html, site, clock=clock)
    except FetchError as exc:
        logger.error("Error scraping %s: %s", site.name, exc)
        return []
    except Exception:
        logger.exception("Unexpected error while scraping %s", site.name)
        return []

    logger.info("Found %d items for %s", len(items), site.name)
    return items
