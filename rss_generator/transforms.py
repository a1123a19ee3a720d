"""Named conversions applied to raw scraped values."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Union

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_QIITA_DATE_RE = re.compile(r"(\d{4})年(\d{1,2})月(\d{1,2})日")
_LIKES_RE = re.compile(r"\+(\d+)")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_qiita_date(value: Any, clock: Clock = utcnow) -> Union[date, datetime]:
    """Parse a date such as ``2023年12月01日`` out of free text.

    Falls back to ``clock()`` when the text holds no recognisable date.
    """
    if value:
        match = _QIITA_DATE_RE.search(str(value))
        if match:
            year, month, day = (int(group) for group in match.groups())
            try:
                return date(year, month, day)
            except ValueError:
                logger.debug("Ignoring impossible date in %r", value)
    return clock()


def extract_likes(value: Any, clock: Clock = utcnow) -> int:
    """Return the number following a ``+`` sign, e.g. ``いいね +290`` -> 290."""
    if not value:
        return 0
    match = _LIKES_RE.search(str(value))
    return int(match.group(1)) if match else 0


def create_description(value: Any, clock: Clock = utcnow) -> str:
    return f"{value}" if value else ""


TRANSFORMS: Dict[str, Callable[[Any, Clock], Any]] = {
    "parseQiitaDate": parse_qiita_date,
    "extractLikes": extract_likes,
    "createDescription": create_description,
}


def apply_transform(value: Any, name: str, clock: Clock = utcnow) -> Any:
    """Run ``value`` through the transform registered as ``name``.

    Unregistered names return the value unchanged.
    """
    transform = TRANSFORMS.get(name)
    if transform is None:
        return value
    return transform(value, clock)
