"""Core pipeline: fetch the show page, extract episodes, render the feed."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional, TextIO, Tuple

from . import config, feed
from .extractors import create_extractor
from .models import GeneratedFeed

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def apply_log_level(level: str, log_file: Optional[str] = None) -> None:
    """Apply logging level to root logger and configure handlers.

    Args:
        level: Log level string (e.g., 'DEBUG', 'INFO', 'WARNING')
        log_file: Optional path to log file. If provided, logs will be written to both
                  console and file.

    Raises:
        ValueError: If log level is invalid
        OSError: If log file cannot be created or written to
    """
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    root_logger = logging.getLogger()

    if not root_logger.handlers:
        # stderr keeps stdout free for the feed document
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(console_handler)
        root_logger.setLevel(numeric_level)
    else:
        root_logger.setLevel(numeric_level)
        for handler in root_logger.handlers:
            handler.setLevel(numeric_level)

    if log_file:
        file_handler_exists = any(
            isinstance(h, logging.FileHandler) and h.baseFilename == os.path.abspath(log_file)
            for h in root_logger.handlers
        )

        if not file_handler_exists:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
            file_handler.setLevel(numeric_level)
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root_logger.addHandler(file_handler)


def generate_feed(cfg: config.Config) -> GeneratedFeed:
    """Run one full scrape and return the rendered feed.

    Everything happens on the calling thread unless ``cfg.workers`` asks
    for parallel player JSON fetches.

    Raises:
        TransportError: If the show page cannot be fetched
        EmptyResultError: If no episode could be extracted
        SerializationError: If the feed cannot be rendered
    """
    extractor = create_extractor(cfg)
    result = extractor.fetch_episodes()
    document = feed.render_feed(feed.show_info_from_config(cfg), result.episodes)
    return GeneratedFeed(
        document=document,
        episode_count=len(result.episodes),
        skipped=result.skipped,
        endpoint=cfg.endpoint,
    )


def write_document(document: str, output: Optional[str], stream: Optional[TextIO] = None) -> None:
    """Write the feed to ``output``, or to ``stream``/stdout when no file is set."""
    if output is None or output == "-":
        target = stream or sys.stdout
        target.write(document)
        target.flush()
        return
    os.makedirs(os.path.dirname(output) or ".", exist_ok=True)
    with open(output, "w", encoding="utf-8") as handle:
        handle.write(document)
    logger.info("Feed written to %s", output)


def format_summary(episode_count: int, skipped: int, strategy: str) -> str:
    return f"Done: {episode_count} episode(s) published, {skipped} skipped (strategy={strategy})"


def run_pipeline(cfg: config.Config) -> Tuple[int, str]:
    """Generate the feed once and write it where the config says.

    Returns:
        Tuple of (episode_count, summary_message)
    """
    generated = generate_feed(cfg)
    write_document(generated.document, cfg.output)
    summary = format_summary(generated.episode_count, generated.skipped, cfg.strategy)
    return generated.episode_count, summary
