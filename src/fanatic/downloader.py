"""HTTP session management and the fetch primitive used by the pipeline."""

from __future__ import annotations

import atexit
import logging
import threading
from typing import cast, List

import requests
from bs4 import UnicodeDammit
from requests.utils import requote_uri

from .exceptions import TransportError

logger = logging.getLogger(__name__)

# Track if we've suppressed urllib3 logs (lazy initialization)
_urllib3_logs_suppressed = False

_THREAD_LOCAL = threading.local()
_SESSION_REGISTRY: List[requests.Session] = []
_SESSION_REGISTRY_LOCK = threading.Lock()


def _suppress_urllib3_debug_logs() -> None:
    """Keep urllib3 connection chatter out of DEBUG output.

    Called lazily on first use so the root logger is already configured.
    """
    global _urllib3_logs_suppressed
    if _urllib3_logs_suppressed:
        return

    root_logger = logging.getLogger()
    root_level = root_logger.level if root_logger.level else logging.INFO
    if root_level <= logging.DEBUG:
        for logger_name in ("urllib3", "urllib3.connectionpool", "urllib3.connection"):
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    _urllib3_logs_suppressed = True


def normalize_url(url: str) -> str:
    """Normalize URLs while preserving already-encoded segments."""
    normalized = requote_uri(url)
    if normalized != url:
        logger.debug("Normalized URL %s -> %s", url, normalized)
    return cast(str, normalized)


def _get_thread_request_session() -> requests.Session:
    _suppress_urllib3_debug_logs()

    session = getattr(_THREAD_LOCAL, "session", None)
    if session is None:
        session = requests.Session()
        setattr(_THREAD_LOCAL, "session", session)
        with _SESSION_REGISTRY_LOCK:
            _SESSION_REGISTRY.append(session)
        logger.debug("Created new thread-local HTTP session %s", hex(id(session)))
    return session


def _close_all_sessions() -> None:
    with _SESSION_REGISTRY_LOCK:
        for session in _SESSION_REGISTRY:
            try:
                session.close()
            # Best-effort cleanup; ignore shutdown errors
            except Exception:  # pragma: no cover  # nosec B110
                pass
        _SESSION_REGISTRY.clear()


atexit.register(_close_all_sessions)


def _decode_body(resp: requests.Response) -> str:
    """Decode a response body, honouring a charset declared in the document.

    requests falls back to ISO-8859-1 for text/* without a charset
    parameter, which garbles UTF-8 pages. When the header declares no
    charset, the <meta charset> tag (or byte sniffing) decides instead.
    """
    content_type = resp.headers.get("Content-Type", "").lower()
    if not content_type.startswith("text/") or "charset=" in content_type:
        return resp.text
    dammit = UnicodeDammit(resp.content, is_html=True)
    if dammit.unicode_markup is None:
        return resp.text
    logger.debug("Decoded %s as %s", resp.url, dammit.original_encoding)
    return dammit.unicode_markup


def fetch_text(url: str, user_agent: str, timeout: int) -> str:
    """GET a URL and return the decoded body.

    No retries are attempted; a failed fetch is reported once.

    Args:
        url: URL to fetch
        user_agent: User-Agent header value
        timeout: Request timeout in seconds

    Returns:
        Response body as text

    Raises:
        TransportError: On connection failure or any non-2xx status. The
            status code and reason are attached when a response arrived.
    """
    normalized_url = normalize_url(url)
    headers = {"User-Agent": user_agent}
    session = _get_thread_request_session()
    logger.debug("GET %s (timeout=%s)", normalized_url, timeout)
    try:
        resp = session.get(normalized_url, headers=headers, timeout=timeout)
    except requests.RequestException as exc:
        raise TransportError(f"request failed: {exc}", url=url) from exc

    try:
        if not 200 <= resp.status_code < 300:
            raise TransportError(
                f"status code error: {resp.status_code} {resp.reason}",
                url=url,
                status_code=resp.status_code,
                reason=resp.reason,
            )
        logger.debug(
            "GET %s succeeded with status %s (%s bytes)",
            normalized_url,
            resp.status_code,
            len(resp.content),
        )
        return _decode_body(resp)
    finally:
        resp.close()
