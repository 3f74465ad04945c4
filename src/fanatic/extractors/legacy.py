"""Legacy strategy: scrape every field from the episode card markup.

Older versions of the show page carried the title, episode number, air
date and a free-text duration on each card, but no audio link. The MP3
URL is rebuilt from the episode number and date.
"""

from __future__ import annotations

import logging
from typing import List
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from .. import config_constants, normalize
from ..exceptions import ParseError
from ..models import Episode
from .base import EpisodeExtractor

logger = logging.getLogger(__name__)


class LegacyHTMLExtractor(EpisodeExtractor):
    """Extract episodes from the fields printed on each episode card."""

    name = "legacy"

    def __init__(
        self,
        endpoint: str,
        mp3_url_template: str = config_constants.DEFAULT_LEGACY_MP3_URL_TEMPLATE,
        **kwargs,
    ) -> None:
        super().__init__(endpoint, **kwargs)
        self.mp3_url_template = mp3_url_template

    def select_elements(self, soup: BeautifulSoup) -> List[Tag]:
        return soup.select(config_constants.EPISODE_CARD_SELECTOR)

    def build_episode(self, element: Tag) -> Episode:
        anchor = element.select_one(config_constants.LEGACY_TITLE_SELECTOR)
        title = anchor.get_text(strip=True) if anchor is not None else ""
        title = normalize.sanitize_xml_text(title)
        if not title:
            raise ParseError("episode card has no title")
        href = anchor.get("href") if anchor is not None else None
        link = urljoin(self.endpoint, href) if isinstance(href, str) and href else ""
        link = normalize.sanitize_xml_text(link)

        number = normalize.parse_episode_number(
            _text_of(element, config_constants.LEGACY_EPISODE_NUMBER_SELECTOR)
        )
        pub_date = normalize.reconcile_pub_date(_date_of(element))
        duration = normalize.parse_duration_text(
            _text_of(element, config_constants.LEGACY_DURATION_SELECTOR)
        )
        mp3 = normalize.resolve_legacy_mp3_url(number, pub_date, self.mp3_url_template)

        return Episode(
            title=title,
            link=link,
            mp3=mp3,
            uuid=normalize.synthesize_uuid(title, mp3),
            pub_date=pub_date,
            duration=duration,
        )


def _text_of(element: Tag, selector: str) -> str:
    found = element.select_one(selector)
    return found.get_text(strip=True) if found is not None else ""


def _date_of(element: Tag) -> str:
    """Prefer the machine-readable datetime attribute over the visible text."""
    found = element.select_one(config_constants.LEGACY_DATE_SELECTOR)
    if found is None:
        return ""
    value = found.get("datetime")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return found.get_text(strip=True)
