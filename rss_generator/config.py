"""Configuration loading for scraped sites and the application."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
from xml.etree import ElementTree as ET

from .fetcher import DEFAULT_TIMEOUT, USER_AGENT
from .models import (
    SCOPE_DESCENDANT,
    SCOPE_NEXT_SIBLING,
    FieldRule,
    RssConfig,
    ScrapingConfig,
    SiteConfig,
)
from .transforms import TRANSFORMS

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "link")

_SIBLING_SELECTOR_RE = re.compile(r"^\+\s*([A-Za-z][\w-]*)\s*(.*)$")
_SCOPE_ALIASES = {
    "descendant": SCOPE_DESCENDANT,
    "nextSibling": SCOPE_NEXT_SIBLING,
    "next_sibling": SCOPE_NEXT_SIBLING,
}


class ConfigError(ValueError):
    """Raised when the sites configuration is invalid."""


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class AppConfig:
    sites_file: str
    env_file: Optional[str] = None
    output_dir: str = "dist"
    base_url: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = USER_AGENT
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _require(mapping: Mapping[str, Any], key: str, where: str) -> Any:
    value = mapping.get(key)
    if value in (None, "", {}, []):
        raise ConfigError(f"{where}: missing required '{key}'")
    return value


def parse_field_rule(name: str, raw: Mapping[str, Any], where: str) -> FieldRule:
    """Build a FieldRule, resolving sibling selectors and validating names."""
    where = f"{where}.fields.{name}"
    if not isinstance(raw, Mapping):
        raise ConfigError(f"{where}: field rule must be an object")

    selector = str(raw.get("selector") or "").strip()
    scope = _SCOPE_ALIASES.get(raw.get("scope", "descendant"))
    if scope is None:
        raise ConfigError(f"{where}: unknown scope {raw.get('scope')!r}")
    sibling_tag = str(raw.get("siblingTag") or "p")

    match = _SIBLING_SELECTOR_RE.match(selector)
    if match:
        scope = SCOPE_NEXT_SIBLING
        sibling_tag, selector = match.group(1), match.group(2).strip()
    elif not selector:
        raise ConfigError(f"{where}: missing required 'selector'")

    attribute = raw.get("attribute", "text")
    if not isinstance(attribute, str) or not attribute.strip():
        raise ConfigError(f"{where}: attribute must be a non-empty string")

    transform = raw.get("transform") or None
    if transform is not None and transform not in TRANSFORMS:
        raise ConfigError(
            f"{where}: unknown transform {transform!r} "
            f"(expected one of {', '.join(sorted(TRANSFORMS))})"
        )

    return FieldRule(
        selector=selector,
        attribute=attribute.strip(),
        multiple=bool(raw.get("multiple", False)),
        prefix=raw.get("prefix") or None,
        transform=transform,
        scope=scope,
        sibling_tag=sibling_tag,
    )


def parse_rss_config(raw: Mapping[str, Any], fallback_title: str) -> RssConfig:
    ttl = raw.get("ttl") or 60
    categories = raw.get("categories") or []
    if isinstance(categories, str):
        categories = [categories]
    return RssConfig(
        title=raw.get("title") or fallback_title,
        description=raw.get("description") or "",
        site_url=raw.get("site_url") or raw.get("siteUrl"),
        image_url=raw.get("image_url") or raw.get("imageUrl"),
        copyright=raw.get("copyright"),
        language=raw.get("language") or "ja",
        ttl=int(ttl),
        categories=[str(category) for category in categories],
        namespace_prefix=raw.get("namespacePrefix") or "qiita",
        namespace_uri=raw.get("namespaceUri") or "https://qiita.com/",
    )


def parse_site_config(key: str, raw: Mapping[str, Any]) -> SiteConfig:
    where = f"site '{key}'"
    if not isinstance(raw, Mapping):
        raise ConfigError(f"{where}: site definition must be an object")

    name = _require(raw, "name", where)
    scraping_raw = _require(raw, "scraping", where)
    item_selector = _require(scraping_raw, "itemSelector", f"{where}.scraping")
    fields_raw = _require(scraping_raw, "fields", f"{where}.scraping")

    fields = {
        field_name: parse_field_rule(field_name, rule, where)
        for field_name, rule in fields_raw.items()
    }
    missing = [name_ for name_ in REQUIRED_FIELDS if name_ not in fields]
    if missing:
        raise ConfigError(f"{where}: fields must define {', '.join(missing)}")

    return SiteConfig(
        key=key,
        name=name,
        url=_require(raw, "url", where),
        description=raw.get("description") or "",
        output_file=_require(raw, "outputFile", where),
        scraping=ScrapingConfig(item_selector=item_selector, fields=fields),
        rss=parse_rss_config(raw.get("rssConfig") or {}, fallback_title=name),
    )


def parse_sites_config(path: str) -> Dict[str, SiteConfig]:
    """Parse the JSON sites document and return site definitions by key."""
    logger.info("Loading site configuration from %s", path)
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Sites configuration is not valid JSON: {path}") from exc

    if not isinstance(payload, dict):
        raise ConfigError("Sites configuration must be a JSON object keyed by site.")

    sites = {key: parse_site_config(key, raw) for key, raw in payload.items()}
    for site in sites.values():
        logger.debug(
            "Registered site '%s' (%s -> %s)", site.key, site.url, site.output_file
        )
    logger.info("Loaded %d sites from configuration", len(sites))
    return sites


def _resolve_path(config_path: Path, value: str) -> str:
    """Anchor ``value`` at the directory holding ``config_path``."""
    return str((config_path.parent / Path(value)).resolve())


def parse_env_config(path: Optional[str]) -> Dict[str, str]:
    """Read ``<variable name="...">`` entries, e.g. ``GITHUB_PAGES_URL``."""
    if not path:
        return {}

    logger.info("Loading environment overrides from %s", path)
    try:
        root = ET.parse(path).getroot()
    except (ET.ParseError, OSError) as exc:
        logger.warning("Cannot read environment overrides %s: %s", path, exc)
        raise

    env_vars = {
        var.attrib["name"]: var.text.strip()
        for var in root.iter("variable")
        if var.attrib.get("name") and var.text and var.text.strip()
    }
    logger.debug("Environment overrides: %s", ", ".join(sorted(env_vars)) or "none")
    return env_vars


def parse_app_config(path: str) -> AppConfig:
    """Parse the main application configuration XML."""
    config_path = Path(path).resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    logger.info("Loading application configuration from %s", config_path)
    tree = ET.parse(config_path)
    root = tree.getroot()

    sites_node = root.find("sites")
    if sites_node is None or not sites_node.text:
        raise ValueError("Config missing <sites> path")
    sites_file = _resolve_path(config_path, sites_node.text.strip())

    env_node = root.find("env")
    env_file = (
        _resolve_path(config_path, env_node.text.strip())
        if env_node is not None and env_node.text
        else None
    )

    output_dir = _resolve_path(
        config_path, root.findtext("output-dir", "dist").strip()
    )
    base_url = (root.findtext("base-url") or "").strip() or None
    timeout = float(root.findtext("timeout", str(DEFAULT_TIMEOUT)))
    user_agent = (root.findtext("user-agent") or "").strip() or USER_AGENT

    log_node = root.find("logging")
    logging_config = LoggingConfig()
    if log_node is not None:
        logging_config.level = log_node.findtext("level", "INFO")
        log_file = log_node.findtext("file")
        if log_file:
            logging_config.file = _resolve_path(config_path, log_file)

    return AppConfig(
        sites_file=sites_file,
        env_file=env_file,
        output_dir=output_dir,
        base_url=base_url,
        timeout=timeout,
        user_agent=user_agent,
        logging=logging_config,
    )
