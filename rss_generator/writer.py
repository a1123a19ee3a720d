"""Write generated feeds only when their content actually changed."""

from __future__ import annotations

import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)

# Timestamps regenerated on every run; everything else counts as a change.
_VOLATILE_RE = re.compile(r"<pubDate>.*?</pubDate>|<lastBuildDate>.*?</lastBuildDate>")


def strip_volatile(xml: str) -> str:
    return _VOLATILE_RE.sub("", xml)


def write_if_changed(path: str | Path, content: str) -> bool:
    """Write ``content`` to ``path`` unless only volatile dates differ.

    Returns True when the file was written.
    """
    location = Path(path)
    if location.exists():
        previous = location.read_text(encoding="utf-8")
        if strip_volatile(previous) == strip_volatile(content):
            logger.info("No change detected for %s, skipping overwrite.", location)
            return False

    if location.parent and not location.parent.exists():
        location.parent.mkdir(parents=True, exist_ok=True)
    location.write_text(content, encoding="utf-8")
    logger.info("RSS saved to %s", location)
    return True
