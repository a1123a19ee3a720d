"""Command-line interface for the rss_generator application."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import pprint
from pathlib import Path
from typing import List, Optional

from .config import parse_app_config, parse_env_config
from .runner import RunConfig, execute

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Scrape configured sites and publish their listings as RSS feeds."
    )
    parser.add_argument(
        "--config",
        default="config/config.xml",
        help="Path to the main configuration XML file.",
    )

    # Overrides for logging/debugging
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g. DEBUG, INFO, WARNING). Overrides config.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Optional path to a log file. Overrides config.",
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory receiving the feeds and index.html. Overrides config.",
    )
    parser.add_argument(
        "--site",
        dest="sites",
        action="append",
        metavar="KEY",
        help="Only process the given site key. May be repeated.",
    )
    parser.add_argument(
        "--save-items",
        metavar="PATH",
        help="Write the extracted items to PATH as JSON, useful for tuning selectors.",
    )

    return parser


def configure_logging(level_name: str, log_file: Optional[str] = None) -> None:
    """Route generator logs to stderr and, optionally, a log file.

    Any handlers already on the root logger are replaced so repeated runs in
    one process do not duplicate output.
    """
    level = level_name.upper()
    log_level = logging.getLevelName(level)
    if not isinstance(log_level, int):
        raise ValueError(f"Unsupported log level: {level_name}")

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(log_level)
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    logger.debug(
        "Feed generator logging at %s%s",
        level,
        f", also writing to {log_file}" if log_file else "",
    )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_config = parse_app_config(args.config)

        if app_config.env_file:
            env_vars = parse_env_config(app_config.env_file)
            os.environ.update(env_vars)

        # CLI overrides config
        log_level = args.log_level or app_config.logging.level
        log_file = args.log_file or app_config.logging.file

        configure_logging(log_level, log_file)

        config = RunConfig(
            sites_file=app_config.sites_file,
            output_dir=args.output_dir or app_config.output_dir,
            base_url=app_config.base_url,
            timeout=app_config.timeout,
            user_agent=app_config.user_agent,
            only=args.sites,
            save_items_path=args.save_items,
        )
        logger.info(
            "Active Configuration:\n%s", pprint.pformat(dataclasses.asdict(config))
        )

        result = execute(config)
    except ValueError as exc:
        parser.error(str(exc))
    except (RuntimeError, OSError) as exc:
        logger.error("%s", exc)
        return 1
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error during execution.")
        return 1

    logger.info(
        "Done: %d feeds written, %d unchanged, %d without items; index at %s",
        len(result.written),
        len(result.unchanged),
        len(result.skipped),
        result.index_path,
    )
    return 0
