"""One-shot feed generation for cron jobs and process managers.

Each run scrapes the show page once, writes the feed and reports the
outcome as a `ServiceResult`. Failures are classified so a supervisor can
tell an unreachable site from a show page whose markup changed:

    exit 0  feed written
    exit 2  configuration could not be loaded
    exit 3  show page unreachable (TransportError)
    exit 4  no episode could be extracted (EmptyResultError)
    exit 5  feed could not be rendered or written

Example:
    >>> from fanatic import service
    >>> result = service.run_from_config_file("fanatic.yaml")
    >>> if result.failure == service.FAILURE_EMPTY:
    ...     print("markup changed?", result.skipped, "cards skipped")

For scheduled usage:
    # crontab
    0 * * * * python -m fanatic.service --config /etc/fanatic.yaml
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from . import __version__, config, workflow
from .exceptions import EmptyResultError, SerializationError, TransportError

logger = logging.getLogger(__name__)

FAILURE_CONFIG = "config"
FAILURE_TRANSPORT = "transport"
FAILURE_EMPTY = "empty"
FAILURE_OUTPUT = "output"

EXIT_CODES = {
    None: 0,
    FAILURE_CONFIG: 2,
    FAILURE_TRANSPORT: 3,
    FAILURE_EMPTY: 4,
    FAILURE_OUTPUT: 5,
}


@dataclass(frozen=True)
class ServiceResult:
    """Outcome of one feed generation.

    Attributes:
        strategy: Extraction strategy that ran ("" if config loading failed)
        episode_count: Episodes written to the feed
        skipped: Episode elements dropped during extraction
        output: Feed destination, None for stdout
        failure: One of the FAILURE_* kinds, None on success
        error: Error message when ``failure`` is set
        status_code: HTTP status of the failed show page fetch, if a response arrived
    """

    strategy: str = ""
    episode_count: int = 0
    skipped: int = 0
    output: Optional[str] = None
    failure: Optional[str] = None
    error: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def success(self) -> bool:
        return self.failure is None

    @property
    def exit_code(self) -> int:
        return EXIT_CODES[self.failure]

    @property
    def summary(self) -> str:
        if self.success:
            return workflow.format_summary(self.episode_count, self.skipped, self.strategy)
        return f"Failed ({self.failure}): {self.error}"


def run(cfg: config.Config) -> ServiceResult:
    """Generate the feed once and write it to ``cfg.output``.

    Transport, extraction, rendering and write failures are returned as a
    classified result. Anything else is a bug and propagates.
    """
    base = {"strategy": cfg.strategy, "output": cfg.output}
    try:
        workflow.apply_log_level(cfg.log_level, cfg.log_file)
    except OSError as exc:
        return ServiceResult(**base, failure=FAILURE_CONFIG, error=f"Cannot open log file: {exc}")

    try:
        generated = workflow.generate_feed(cfg)
    except TransportError as exc:
        logger.error("Show page unreachable: %s", exc)
        return ServiceResult(
            **base, failure=FAILURE_TRANSPORT, error=str(exc), status_code=exc.status_code
        )
    except EmptyResultError as exc:
        logger.error("No episodes extracted from %s (%d skipped)", cfg.endpoint, exc.skipped)
        return ServiceResult(**base, skipped=exc.skipped, failure=FAILURE_EMPTY, error=str(exc))
    except SerializationError as exc:
        logger.error("Feed rendering failed: %s", exc)
        return ServiceResult(**base, failure=FAILURE_OUTPUT, error=str(exc))

    counts = {"episode_count": generated.episode_count, "skipped": generated.skipped}
    try:
        workflow.write_document(generated.document, cfg.output)
    except OSError as exc:
        logger.error("Failed to write feed to %s: %s", cfg.output, exc)
        return ServiceResult(**base, **counts, failure=FAILURE_OUTPUT, error=str(exc))

    return ServiceResult(**base, **counts)


def run_from_config_file(
    config_path: str | Path, output: Optional[str] = None
) -> ServiceResult:
    """Load a JSON/YAML configuration file and run once.

    Args:
        config_path: Configuration file
        output: Overrides the file's ``output`` when given
    """
    try:
        config_dict = config.load_config_file(str(config_path))
        if output is not None:
            config_dict["output"] = output
        cfg = config.Config(**config_dict)
    # pydantic's ValidationError is a ValueError
    except ValueError as exc:
        error_msg = f"Failed to load configuration file: {exc}"
        logger.error(error_msg)
        return ServiceResult(failure=FAILURE_CONFIG, error=error_msg)

    return run(cfg)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for ``python -m fanatic.service --config FILE``.

    Returns:
        Exit code from `EXIT_CODES`
    """
    parser = argparse.ArgumentParser(
        prog="fanatic.service",
        description="Generate the feed once from a configuration file",
    )
    parser.add_argument("--config", required=True, help="Path to configuration file (JSON or YAML)")
    parser.add_argument("-o", "--output", default=None, help="Override the configured output file")
    parser.add_argument("--version", action="version", version=f"fanatic {__version__}")
    args = parser.parse_args(argv)

    result = run_from_config_file(args.config, output=args.output)
    print(result.summary, file=sys.stderr)
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
