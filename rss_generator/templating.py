"""Jinja2 environment for rss_generator templates."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from email.utils import format_datetime
from importlib import resources

from jinja2 import Environment, FileSystemLoader, select_autoescape

_ENV: Environment | None = None


def as_datetime(value: date | datetime) -> datetime:
    """Promote dates to midnight UTC and naive datetimes to UTC."""
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _rfc822(value: date | datetime) -> str:
    """Format a date for RSS ``pubDate``/``lastBuildDate`` elements."""
    return format_datetime(as_datetime(value).astimezone(timezone.utc), usegmt=True)


def get_environment() -> Environment:
    """Return a cached Jinja environment configured for package templates."""
    global _ENV
    if _ENV is None:
        template_dir = resources.files(__package__) / "templates"
        loader = FileSystemLoader(str(template_dir))
        _ENV = Environment(
            loader=loader,
            autoescape=select_autoescape(["html", "xml", "xml.j2", "html.j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        _ENV.filters["rfc822"] = _rfc822
    return _ENV
