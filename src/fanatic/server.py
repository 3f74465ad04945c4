"""HTTP serving mode: a landing page plus a periodically refreshed feed.

The feed is regenerated on a background thread. Each generation publishes
a new immutable `FeedSnapshot`; request handlers read whichever snapshot
is current, so a reader never sees a half-written document.
"""

from __future__ import annotations

import html
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from string import Template
from typing import Callable, Optional, Type
from urllib.parse import urlsplit

from . import config, config_constants, workflow
from .models import GeneratedFeed

logger = logging.getLogger(__name__)

FEED_PATH = config_constants.FEED_PATH
LANDING_PATH = config_constants.LANDING_PATH

LANDING_PAGE = Template(
    """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>fanatic!</title>
    <style type="text/css">
     body{font:0.8em sans-serif;margin:40px;}
     h1{font-size:1.2em;}
     h1 span{color:#ddd;}
     h1:hover span {color:black;}
     a:link,a:visited{border-bottom:1px solid #ccc;color:inherit;text-decoration:none;}
     a:hover,a:active{background:#ff0;}
     ul{margin:2em 0;padding:0;}
     ul li{line-height:1.2rem;list-style-type:none;}
     footer{bottom:40px;color:#ccc;position:absolute;}
    </style>
</head>
<body>
    <h1>fanatic!</h1>
    <p>providing an <a href="$feed_path">RSS feed</a> for $show_title from the
    <a href="$endpoint">show page</a> (because they don't)</p>
    <footer>n.b. none of the shows are hosted here. be cool</footer>
</body>
</html>
"""
)


def render_landing_page(cfg: config.Config) -> str:
    """Render the static landing page for the configured show."""
    return LANDING_PAGE.substitute(
        feed_path=FEED_PATH,
        show_title=html.escape(cfg.show_title),
        endpoint=html.escape(cfg.endpoint, quote=True),
    )


@dataclass(frozen=True)
class FeedSnapshot:
    """One published state of the feed.

    Attributes:
        document: Last successfully generated document, None until the
            first success.
        error: Message of the most recent failed generation, None when the
            latest generation succeeded.
        version: Incremented on every publish, successful or not.
        generated_at: When ``document`` was generated.
        episode_count: Episodes in ``document``.
    """

    document: Optional[str] = None
    error: Optional[str] = None
    version: int = 0
    generated_at: Optional[datetime] = None
    episode_count: int = 0


class FeedCache:
    """Holds the current `FeedSnapshot` and swaps it as a whole."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot = FeedSnapshot()

    @property
    def snapshot(self) -> FeedSnapshot:
        return self._snapshot

    def publish(self, generated: GeneratedFeed) -> FeedSnapshot:
        """Replace the document with a freshly generated one."""
        with self._lock:
            self._snapshot = FeedSnapshot(
                document=generated.document,
                error=None,
                version=self._snapshot.version + 1,
                generated_at=datetime.now(timezone.utc),
                episode_count=generated.episode_count,
            )
            return self._snapshot

    def record_failure(self, error: str) -> FeedSnapshot:
        """Record a failed generation, keeping the last good document."""
        with self._lock:
            previous = self._snapshot
            self._snapshot = FeedSnapshot(
                document=previous.document,
                error=error,
                version=previous.version + 1,
                generated_at=previous.generated_at,
                episode_count=previous.episode_count,
            )
            return self._snapshot


class FeedRefresher:
    """Regenerates the feed every ``interval`` seconds on a daemon thread."""

    def __init__(
        self,
        cache: FeedCache,
        generate: Callable[[], GeneratedFeed],
        interval: float,
    ) -> None:
        self.cache = cache
        self.interval = interval
        self._generate = generate
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def refresh_once(self) -> FeedSnapshot:
        """Generate the feed now and publish the outcome."""
        logger.info("Fetching feed...")
        try:
            generated = self._generate()
        except Exception as exc:
            # The refresher thread must survive any failure; the next tick retries
            logger.error("Error fetching feed: %s", exc)
            return self.cache.record_failure(str(exc))
        snapshot = self.cache.publish(generated)
        logger.info(
            "Published feed version %d with %d episode(s)",
            snapshot.version,
            snapshot.episode_count,
        )
        return snapshot

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="feed-refresher", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.refresh_once()


class FeedRequestHandler(BaseHTTPRequestHandler):
    """Serves the landing page and the cached feed document."""

    cache: FeedCache
    landing_page: str = ""

    def do_GET(self) -> None:  # noqa: N802 - http.server API
        path = urlsplit(self.path).path
        if path == FEED_PATH:
            self._serve_feed()
        elif path == LANDING_PATH:
            self._send(200, "text/html; charset=utf-8", self.landing_page)
        else:
            self._send(404, "text/html; charset=utf-8", "Not Found!")

    def _serve_feed(self) -> None:
        snapshot = self.cache.snapshot
        if snapshot.document is None:
            message = snapshot.error or "feed has not been generated yet"
            self._send(200, "text/plain; charset=utf-8", f"error!\n{message}")
            return
        self._send(200, "text/xml", snapshot.document)

    def _send(self, status: int, content_type: str, body: str) -> None:
        payload = body.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format: str, *args) -> None:  # noqa: A002 - http.server API
        logger.debug("%s - %s", self.address_string(), format % args)


def build_handler(cache: FeedCache, landing_page: str) -> Type[FeedRequestHandler]:
    """Bind a handler class to a cache and landing page."""
    return type(
        "BoundFeedRequestHandler",
        (FeedRequestHandler,),
        {"cache": cache, "landing_page": landing_page},
    )


def create_server(cfg: config.Config, cache: FeedCache) -> ThreadingHTTPServer:
    """Create (but do not start) the HTTP server for ``cfg.host``/``cfg.port``."""
    handler = build_handler(cache, render_landing_page(cfg))
    return ThreadingHTTPServer((cfg.host, cfg.port), handler)


def serve(
    cfg: config.Config,
    *,
    generate: Optional[Callable[[], GeneratedFeed]] = None,
) -> None:
    """Generate the feed, then serve it and refresh it until interrupted."""
    cache = FeedCache()
    refresher = FeedRefresher(
        cache,
        generate or (lambda: workflow.generate_feed(cfg)),
        cfg.refresh_interval,
    )
    refresher.refresh_once()
    refresher.start()

    httpd = create_server(cfg, cache)
    logger.info("listening on %s:%s", cfg.host, httpd.server_address[1])
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        refresher.stop(timeout=1)
        httpd.server_close()
