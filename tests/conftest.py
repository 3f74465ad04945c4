"""Shared fixtures and test utilities for fanatic tests.

This module contains:
- Test constants
- Builders for show page markup and player JSON payloads
- Helpers for creating test objects
- A feed parser used to read generated documents back
"""

import json
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Dict, List, Optional

import pytest
from defusedxml.ElementTree import fromstring as safe_fromstring

from fanatic import config, models
from fanatic.exceptions import TransportError

# Test constants
TEST_BASE_URL = "https://www.kcrw.com"
TEST_ENDPOINT = f"{TEST_BASE_URL}/music/shows/henry-rollins"
TEST_PLAYER_URL_TEMPLATE = f"{TEST_BASE_URL}/api/player/{{idx}}.json"
TEST_MP3_URL_TEMPLATE = "https://media.example.com/rollins/{idx}.mp3"
TEST_LEGACY_TEMPLATE = "https://media.example.com/legacy/hr-{number}-{date}.mp3"
TEST_SHOW_TITLE = "Test Show"
TEST_EPISODE_TITLE = "Episode Title"
TEST_USER_AGENT = "test-agent"
TEST_UPSTREAM_DATE = "2021-06-15T10:00:00Z"
TEST_CORRECTED_DATE = datetime(2021, 6, 14, 10, 0, 0, tzinfo=timezone.utc)
ITUNES_NS = "http://www.itunes.com/dtds/podcast-1.0.dtd"


def create_test_config(**overrides):
    """Create test Config object with defaults.

    Args:
        **overrides: Fields to override from defaults

    Returns:
        config.Config object with test defaults
    """
    defaults = {
        "endpoint": TEST_ENDPOINT,
        "strategy": "player_json",
        "user_agent": TEST_USER_AGENT,
        "timeout": 5,
        "workers": 1,
        "port": 0,
        "log_level": "INFO",
        "show_title": TEST_SHOW_TITLE,
        "legacy_mp3_url_template": TEST_LEGACY_TEMPLATE,
    }
    defaults.update(overrides)
    return config.Config(**defaults)


def create_test_episode(**overrides):
    """Create test Episode with defaults."""
    defaults = {
        "title": TEST_EPISODE_TITLE,
        "link": f"{TEST_ENDPOINT}/episode-1",
        "mp3": TEST_MP3_URL_TEMPLATE.format(idx=1),
        "uuid": "0f6b3a5e-1d1e-4c59-9d47-5e6b6f1f0c01",
        "pub_date": TEST_CORRECTED_DATE,
        "duration": timedelta(hours=2, minutes=2),
    }
    defaults.update(overrides)
    return models.Episode(**defaults)


def player_json_url(idx: int) -> str:
    return TEST_PLAYER_URL_TEMPLATE.format(idx=idx)


def build_player_json(idx: int = 1, **overrides) -> str:
    """Build a player JSON document as the show page serves it.

    Pass a key with value None to drop it from the payload.
    """
    payload = {
        "uuid": f"uuid-{idx}",
        "url": f"{TEST_ENDPOINT}/episode-{idx}",
        "title": f"Episode {idx}",
        "media": [{"url": TEST_MP3_URL_TEMPLATE.format(idx=idx), "format": "mp3"}],
        "duration": 7200,
        "date": TEST_UPSTREAM_DATE,
    }
    payload.update(overrides)
    payload = {key: value for key, value in payload.items() if value is not None}
    return json.dumps(payload)


def build_player_page(json_urls: List[Optional[str]], extra: str = "") -> str:
    """Build a show page with one player card per entry.

    A None entry produces a player button without the JSON attribute.
    """
    cards = []
    for url in json_urls:
        attribute = f' data-player-json="{url}"' if url is not None else ""
        cards.append(
            '<div class="four-col hub-row no-border">'
            f'<button class="audio"{attribute}>Play</button>'
            "</div>"
        )
    return f"<html><body>{extra}{''.join(cards)}</body></html>"


def build_legacy_card(
    number="1",
    title=None,
    date=TEST_UPSTREAM_DATE,
    duration="2hr, 2min",
    href=None,
) -> str:
    """Build one legacy episode card.

    Pass None to omit number, date or duration; title=False omits the heading.
    """
    parts = ['<div class="four-col hub-row no-border">']
    if title is not False:
        title_text = title if title is not None else f"Episode {number}"
        link = href if href is not None else f"/music/shows/henry-rollins/episode-{number}"
        parts.append(f'<h3><a href="{link}">{title_text}</a></h3>')
    if number is not None:
        parts.append(f'<span class="episode-number">{number}</span>')
    if date is not None:
        parts.append(f'<time datetime="{date}">June 15, 2021</time>')
    if duration is not None:
        parts.append(f'<span class="duration">{duration}</span>')
    parts.append("</div>")
    return "".join(parts)


def build_legacy_page(cards: List[str]) -> str:
    return f"<html><body><main>{''.join(cards)}</main></body></html>"


def make_fetcher(responses: Dict[str, object]):
    """Return a fetch_text replacement serving canned bodies by URL.

    A value that is an exception instance is raised instead of returned.
    Unknown URLs raise TransportError with a 404 status.
    """

    def fetch_text(url, user_agent, timeout):
        if url not in responses:
            raise TransportError(
                "status code error: 404 Not Found", url=url, status_code=404, reason="Not Found"
            )
        value = responses[url]
        if isinstance(value, Exception):
            raise value
        return value

    return fetch_text


def parse_feed_items(document: str) -> List[Dict[str, object]]:
    """Parse a generated RSS document back into plain item dictionaries."""
    root = safe_fromstring(document.encode("utf-8"))
    channel = root.find("channel")
    items = []
    for item in channel.findall("item"):
        enclosure = item.find("enclosure")
        duration = item.find(f"{{{ITUNES_NS}}}duration")
        link = item.find("link")
        items.append(
            {
                "title": item.findtext("title"),
                "guid": item.findtext("guid"),
                "link": link.text if link is not None else None,
                "enclosure_url": enclosure.get("url") if enclosure is not None else None,
                "enclosure_type": enclosure.get("type") if enclosure is not None else None,
                "pub_date": parsedate_to_datetime(item.findtext("pubDate")),
                "duration": duration.text if duration is not None else None,
            }
        )
    return items


def parse_feed_channel(document: str) -> Dict[str, Optional[str]]:
    """Parse the channel-level fields of a generated RSS document."""
    root = safe_fromstring(document.encode("utf-8"))
    channel = root.find("channel")
    return {
        "title": channel.findtext("title"),
        "link": channel.findtext("link"),
        "description": channel.findtext("description"),
        "language": channel.findtext("language"),
        "copyright": channel.findtext("copyright"),
    }


def pytest_collection_modifyitems(config, items):
    """Mark everything collected from tests/unit with the unit marker.

    Integration modules set ``pytestmark`` themselves, so ``-m unit`` and
    ``-m integration`` each select their own directory.
    """
    for item in items:
        if "unit" in item.path.parts and not item.get_closest_marker("integration"):
            item.add_marker(pytest.mark.unit)
