"""Current strategy: read each episode from its player JSON document.

Every player button on the show page points at a JSON document describing
the episode (title, uuid, page URL, media URLs, duration in seconds, air
date). One extra request is made per episode.
"""

from __future__ import annotations

import json
import logging
from typing import List
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from .. import config_constants, normalize
from ..exceptions import ParseError
from ..models import Episode
from ..payload import get_int, get_str
from .base import EpisodeExtractor

logger = logging.getLogger(__name__)

MP3_PATH = "media.0.url"


class PlayerJSONExtractor(EpisodeExtractor):
    """Extract episodes by following each player button's JSON link."""

    name = "player_json"

    def select_elements(self, soup: BeautifulSoup) -> List[Tag]:
        return soup.select(config_constants.PLAYER_BUTTON_SELECTOR)

    def build_episode(self, element: Tag) -> Episode:
        json_url = element.get(config_constants.PLAYER_JSON_ATTRIBUTE)
        if not isinstance(json_url, str) or not json_url.strip():
            raise ParseError(f"player button has no {config_constants.PLAYER_JSON_ATTRIBUTE}")

        body = self.fetch(urljoin(self.endpoint, json_url.strip()))
        try:
            payload = json.loads(body)
        except json.JSONDecodeError as exc:
            raise ParseError(f"invalid player JSON from {json_url}: {exc}") from exc
        if not isinstance(payload, dict):
            raise ParseError(f"player JSON from {json_url} is not an object")

        return self.episode_from_payload(payload)

    def episode_from_payload(self, payload: dict) -> Episode:
        """Build an episode from a decoded player JSON document."""
        title = normalize.sanitize_xml_text(get_str(payload, "title"))
        if not title:
            raise ParseError("player JSON has no title")
        mp3 = normalize.sanitize_xml_text(get_str(payload, MP3_PATH))
        if not mp3:
            raise ParseError(f"player JSON for {title!r} has no {MP3_PATH}")

        duration = normalize.duration_from_seconds(get_int(payload, "duration"))
        pub_date = normalize.reconcile_pub_date(get_str(payload, "date"))
        uuid = normalize.sanitize_xml_text(get_str(payload, "uuid"))
        uuid = uuid or normalize.synthesize_uuid(title, mp3)

        return Episode(
            title=title,
            link=normalize.sanitize_xml_text(get_str(payload, "url")),
            mp3=mp3,
            uuid=uuid,
            pub_date=pub_date,
            duration=duration,
        )
