"""Command-line interface for fanatic."""

from __future__ import annotations

import argparse
import logging
from typing import Any, Callable, cast, Dict, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

from pydantic import ValidationError

from . import __version__, config, server, workflow
from .exceptions import FanaticError

_LOGGER = logging.getLogger(__name__)

# CLI dest -> Config field, for every option that feeds the Config model
_CONFIG_FIELDS = (
    "endpoint",
    "strategy",
    "output",
    "user_agent",
    "timeout",
    "workers",
    "serve",
    "host",
    "port",
    "refresh_interval",
    "log_level",
    "log_file",
    "show_title",
    "show_description",
    "show_language",
    "show_copyright",
    "show_link",
    "legacy_mp3_url_template",
)


def _validate_endpoint(endpoint: Optional[str], errors: List[str]) -> None:
    """Validate the show page URL.

    Args:
        endpoint: Endpoint URL string (None means use the default)
        errors: List to append validation errors to
    """
    if endpoint is None:
        return
    value = endpoint.strip()
    if not value:
        errors.append("--endpoint cannot be empty")
        return

    parsed_obj = urlparse(value)
    if parsed_obj.scheme not in ("http", "https"):
        errors.append(f"--endpoint must be http or https: {value}")
    if not parsed_obj.netloc:
        errors.append(f"--endpoint must have a valid hostname: {value}")


def validate_args(args: argparse.Namespace) -> None:
    """Validate parsed CLI arguments and raise ValueError when invalid."""
    errors: List[str] = []

    _validate_endpoint(args.endpoint, errors)

    if args.timeout is not None and args.timeout <= 0:
        errors.append(f"--timeout must be positive, got: {args.timeout}")

    if args.workers is not None and args.workers < 1:
        errors.append(f"--workers must be at least 1, got: {args.workers}")

    if args.port is not None and not 0 <= args.port <= config.MAX_PORT:
        errors.append(f"--port must be between 0 and {config.MAX_PORT}, got: {args.port}")

    if args.refresh_interval is not None and args.refresh_interval <= 0:
        errors.append(f"--refresh-interval must be positive, got: {args.refresh_interval}")

    if args.serve and args.output:
        errors.append("--output cannot be combined with --serve")

    if errors:
        raise ValueError("Invalid input parameters:\n  " + "\n  ".join(errors))


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Add scrape and output arguments to parser."""
    parser.add_argument("--config", default=None, help="Path to configuration file (JSON or YAML)")
    parser.add_argument(
        "--endpoint",
        default=None,
        help=f"Show page to scrape (default: {config.DEFAULT_ENDPOINT})",
    )
    parser.add_argument(
        "--strategy",
        choices=config.VALID_STRATEGIES,
        default=None,
        help=f"Episode extraction strategy (default: {config.DEFAULT_STRATEGY})",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write the feed to this file instead of standard output",
    )
    parser.add_argument("--user-agent", default=None, help="User-Agent header")
    parser.add_argument(
        "--timeout",
        type=int,
        default=None,
        help=f"Request timeout in seconds (default: {config.DEFAULT_TIMEOUT_SECONDS})",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Concurrent player JSON fetches (default: 1, sequential)",
    )
    parser.add_argument("--version", action="store_true", help="Show program version and exit")
    parser.add_argument(
        "--log-file",
        default=None,
        help="Path to log file (logs will be written to both console and file)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        help=f"Logging level (default: {config.DEFAULT_LOG_LEVEL})",
    )


def _add_server_arguments(parser: argparse.ArgumentParser) -> None:
    """Add serve-mode arguments to parser."""
    group = parser.add_argument_group("Server")
    group.add_argument(
        "--serve",
        action="store_true",
        default=None,
        help="Serve the feed over HTTP and refresh it periodically",
    )
    group.add_argument(
        "--host", default=None, help=f"Bind address (default: {config.DEFAULT_HOST})"
    )
    group.add_argument(
        "--port",
        type=int,
        default=None,
        help=f"Listen port (default: $PORT or {config.DEFAULT_PORT})",
    )
    group.add_argument(
        "--refresh-interval",
        type=int,
        default=None,
        help=(
            "Seconds between feed refreshes "
            f"(default: {config.DEFAULT_REFRESH_INTERVAL_SECONDS})"
        ),
    )


def _add_feed_metadata_arguments(parser: argparse.ArgumentParser) -> None:
    """Add channel metadata arguments to parser."""
    group = parser.add_argument_group("Feed metadata")
    group.add_argument("--show-title", default=None, help="Channel title")
    group.add_argument("--show-description", default=None, help="Channel description")
    group.add_argument("--show-language", default=None, help="Channel language code")
    group.add_argument("--show-copyright", default=None, help="Channel copyright")
    group.add_argument("--show-link", default=None, help="Channel link (default: endpoint)")
    group.add_argument(
        "--legacy-mp3-url-template",
        default=None,
        help="MP3 URL template for the legacy strategy ({number} and {date} as YYMMDD)",
    )


def _load_and_merge_config(
    parser: argparse.ArgumentParser, config_path: str, argv: Optional[Sequence[str]]
) -> argparse.Namespace:
    """Load configuration file and merge with CLI arguments.

    Values from the file become parser defaults, so explicit flags win.

    Raises:
        ValueError: If the file is invalid or contains unknown keys
    """
    config_data = config.load_config_file(config_path)
    unknown_keys = [key for key in config_data.keys() if key not in _CONFIG_FIELDS]
    if unknown_keys:
        raise ValueError("Unknown config option(s): " + ", ".join(sorted(unknown_keys)))

    try:
        config_model = config.Config.model_validate(config_data)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc

    normalized = config_model.model_dump(by_alias=True)
    parser.set_defaults(**{key: normalized[key] for key in config_data})
    return parser.parse_args(argv)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments, optionally merging configuration file defaults."""
    parser = argparse.ArgumentParser(
        prog="fanatic",
        description="Scrape a radio show page and publish its episodes as a podcast feed.",
    )

    _add_common_arguments(parser)
    _add_server_arguments(parser)
    _add_feed_metadata_arguments(parser)

    initial_args, _ = parser.parse_known_args(argv)

    if initial_args.version:
        print(f"fanatic {__version__}")
        raise SystemExit(0)

    if initial_args.config:
        args = _load_and_merge_config(parser, initial_args.config, argv)
    else:
        args = parser.parse_args(argv)

    validate_args(args)
    return args


def _build_config(args: argparse.Namespace) -> config.Config:
    """Materialize a Config object from already-validated CLI arguments.

    Options left unset fall through to the Config defaults.
    """
    payload: Dict[str, Any] = {
        name: getattr(args, name) for name in _CONFIG_FIELDS if getattr(args, name) is not None
    }
    return cast(config.Config, config.Config.model_validate(payload))


def _log_configuration(cfg: config.Config, logger: logging.Logger) -> None:
    """Log the effective configuration at DEBUG level."""
    logger.debug("Configuration:")
    logger.debug(f"  endpoint: {cfg.endpoint}")
    logger.debug(f"  strategy: {cfg.strategy}")
    logger.debug(f"  output: {cfg.output or 'stdout'}")
    logger.debug(f"  timeout: {cfg.timeout}s")
    logger.debug(f"  workers: {cfg.workers}")
    if cfg.serve:
        logger.debug(f"  listen: {cfg.host}:{cfg.port}")
        logger.debug(f"  refresh interval: {cfg.refresh_interval}s")


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    apply_log_level_fn: Optional[Callable[[str, Optional[str]], None]] = None,
    run_pipeline_fn: Optional[Callable[[config.Config], Tuple[int, str]]] = None,
    serve_fn: Optional[Callable[[config.Config], None]] = None,
    logger: Optional[logging.Logger] = None,
) -> int:
    """Entry point for the CLI; returns an exit status code."""
    log = logger or _LOGGER
    if apply_log_level_fn is None:
        apply_log_level_fn = workflow.apply_log_level
    if run_pipeline_fn is None:
        run_pipeline_fn = workflow.run_pipeline
    if serve_fn is None:
        serve_fn = server.serve

    try:
        args = parse_args(argv)
    except ValueError as exc:
        log.error(f"Error: {exc}")
        return 1

    try:
        cfg = _build_config(args)
    except ValidationError as exc:
        log.error(f"Invalid configuration: {exc}")
        return 1

    apply_log_level_fn(cfg.log_level, cfg.log_file)
    _log_configuration(cfg, log)

    if cfg.serve:
        serve_fn(cfg)
        return 0

    try:
        _, summary = run_pipeline_fn(cfg)
    except FanaticError as exc:
        log.error(f"Error: {exc}")
        return 1
    except OSError as exc:
        log.error(f"Failed to write feed: {exc}")
        return 1

    log.info(summary)
    return 0


if __name__ == "__main__":  # pragma: no cover - script entry
    raise SystemExit(main())
