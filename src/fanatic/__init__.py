"""fanatic - publish a podcast feed for a radio show that has none.

The show page is scraped for episode metadata, each episode is normalized
(duration, identifier, publish date, audio URL) and the result is written
as a podcast RSS document, either once or continuously over HTTP.

Programmatic API Example:
    >>> import fanatic
    >>>
    >>> cfg = fanatic.Config(strategy="player_json")
    >>> generated = fanatic.generate_feed(cfg)
    >>> print(generated.document)

CLI Usage:
    $ fanatic > rollins.xml
    $ fanatic --serve --port 8080

Service Mode (for cron/systemd):
    $ python -m fanatic.service --config fanatic.yaml
"""

from __future__ import annotations

from .config import Config, load_config_file
from .workflow import generate_feed, run_pipeline

__all__ = [
    "Config",
    "generate_feed",
    "load_config_file",
    "run_pipeline",
    "__version__",
]
# Note: 'cli', 'server' and 'service' are available via __getattr__ for lazy loading
__version__ = "1.0.0"

_import_cache: dict[str, object] = {}

_LAZY_MODULES = ("cli", "server", "service")


def __getattr__(name: str):
    if name in _import_cache:
        return _import_cache[name]

    if name in _LAZY_MODULES:
        import importlib

        module = importlib.import_module(f"{__name__}.{name}")
        _import_cache[name] = module
        return module
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
