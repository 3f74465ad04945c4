"""Field normalization helpers shared by the extraction strategies.

Covers the duration formats the show page has used over time, the
fallback episode identifier, the publish-date correction and the legacy
MP3 URL scheme.
"""

from __future__ import annotations

import hashlib
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from . import config_constants
from .exceptions import ParseError

logger = logging.getLogger(__name__)

FALLBACK_DURATION = config_constants.FALLBACK_DURATION
PUBLISH_DATE_SKEW = config_constants.PUBLISH_DATE_SKEW
PUBLISH_DATE_FORMAT = config_constants.PUBLISH_DATE_FORMAT
LEGACY_MP3_DATE_FORMAT = config_constants.LEGACY_MP3_DATE_FORMAT

# Longer units first so "ms" is not read as "m" followed by garbage
_DURATION_UNITS = {
    "ns": timedelta(microseconds=0.001),
    "us": timedelta(microseconds=1),
    "µs": timedelta(microseconds=1),
    "μs": timedelta(microseconds=1),
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
}
_DURATION_PART_RE = re.compile(r"([0-9]+(?:\.[0-9]*)?|\.[0-9]+)(ns|us|µs|μs|ms|s|m|h)")
_TEXT_DURATION_STRIP_RE = re.compile(r"[\s,]+")
_PUBLISH_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}Z")
# Characters outside the XML 1.0 Char production
_XML_INVALID_RE = re.compile("[^\u0009\u000a\u000d\u0020-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")
XML_REPLACEMENT_CHAR = "\ufffd"


def parse_duration_literal(literal: str) -> timedelta:
    """Parse a compact duration literal such as ``"2h2m"`` or ``"90s"``.

    The literal is a sequence of decimal numbers each followed by a unit
    (``ns``, ``us``, ``ms``, ``s``, ``m``, ``h``), with an optional leading
    sign. ``"0"`` is accepted on its own.

    Raises:
        ValueError: If the literal does not follow that grammar.
    """
    text = literal
    sign = 1
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(f"invalid duration {literal!r}")

    total = timedelta(0)
    pos = 0
    while pos < len(text):
        match = _DURATION_PART_RE.match(text, pos)
        if match is None:
            raise ValueError(f"invalid duration {literal!r}")
        try:
            total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        except OverflowError as exc:
            raise ValueError(f"duration out of range {literal!r}") from exc
        pos = match.end()
    return sign * total


def parse_duration_text(text: Optional[str]) -> timedelta:
    """Convert a human duration such as ``"2hr, 2min"`` into a timedelta.

    Unparsable text degrades to `FALLBACK_DURATION` (two minutes) rather
    than failing the episode.
    """
    compact = _TEXT_DURATION_STRIP_RE.sub("", text or "")
    compact = compact.replace("hr", "h").replace("min", "m")
    try:
        return parse_duration_literal(compact)
    except ValueError:
        logger.debug("Unparsable duration %r, using fallback %s", text, FALLBACK_DURATION)
        return FALLBACK_DURATION


def duration_from_seconds(seconds: Optional[int]) -> timedelta:
    """Convert a count of seconds into a timedelta.

    Raises:
        ParseError: If ``seconds`` is None (malformed upstream value) or
            negative. There is no fallback on this path.
    """
    if seconds is None:
        raise ParseError("duration is not an integer number of seconds")
    if seconds < 0:
        raise ParseError(f"duration must not be negative, got {seconds}")
    try:
        return timedelta(seconds=seconds)
    except OverflowError as exc:
        raise ParseError(f"duration out of range, got {seconds}") from exc


def sanitize_xml_text(value: str) -> str:
    """Replace characters that cannot appear in an XML document with U+FFFD.

    Control characters other than tab, newline and carriage return would
    make the serializer reject the whole feed, not just one item.
    """
    return _XML_INVALID_RE.sub(XML_REPLACEMENT_CHAR, value)


def synthesize_uuid(title: str, mp3_url: str) -> str:
    """Derive a stable identifier from an episode's title and MP3 URL.

    This is a deterministic fingerprint, not an RFC 4122 UUID: the same
    pair always yields the same hex string, and nothing guarantees global
    uniqueness.
    """
    composite = f"{title}-{mp3_url}"
    # Deterministic fingerprint (not security sensitive)
    return hashlib.sha1(composite.encode("utf-8"), usedforsecurity=False).hexdigest()


def reconcile_pub_date(value: Optional[str]) -> datetime:
    """Parse an upstream ``YYYY-MM-DDTHH:MM:SSZ`` timestamp and undo its skew.

    The show page stamps every episode one day after it aired, so the
    parsed UTC time is moved back by `PUBLISH_DATE_SKEW`.

    Raises:
        ParseError: If the value is missing or not in the expected format.
    """
    if not value:
        raise ParseError("publish date is missing")
    # strptime alone would accept unpadded fields such as "2021-6-5T1:0:0Z"
    if not _PUBLISH_DATE_RE.fullmatch(value):
        raise ParseError(f"invalid publish date {value!r}")
    try:
        parsed = datetime.strptime(value, PUBLISH_DATE_FORMAT)
        return parsed.replace(tzinfo=timezone.utc) - PUBLISH_DATE_SKEW
    except ValueError as exc:
        raise ParseError(f"invalid publish date {value!r}") from exc
    except OverflowError as exc:
        raise ParseError(f"publish date out of range {value!r}") from exc


def parse_episode_number(value: Optional[str]) -> int:
    """Parse the episode number shown on a legacy episode card.

    Raises:
        ParseError: If the value is missing or not a positive integer.
    """
    text = (value or "").strip().lstrip("#")
    if not text.isdigit():
        raise ParseError(f"invalid episode number {value!r}")
    number = int(text)
    if number <= 0:
        raise ParseError(f"invalid episode number {value!r}")
    return number


def resolve_legacy_mp3_url(number: int, pub_date: datetime, template: str) -> str:
    """Build the download URL of a legacy episode.

    Args:
        number: Episode number from the card
        pub_date: Corrected publish date
        template: URL template with ``{number}`` and ``{date}`` fields

    Returns:
        URL with the date rendered as YYMMDD. Reachability is not checked.
    """
    return template.format(number=number, date=pub_date.strftime(LEGACY_MP3_DATE_FORMAT))


def format_duration(duration: timedelta) -> str:
    """Render a duration as ``H:MM:SS`` for the itunes:duration element."""
    total = max(0, int(duration.total_seconds()))
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours}:{minutes:02d}:{seconds:02d}"
