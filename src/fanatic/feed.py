"""Feed assembly: turn extracted episodes into a podcast RSS document."""

from __future__ import annotations

import logging
from typing import Sequence

from feedgen.feed import FeedGenerator

from . import config, config_constants
from .exceptions import SerializationError
from .models import Episode, ShowInfo
from .normalize import format_duration

logger = logging.getLogger(__name__)

ENCLOSURE_MIME_TYPE = config_constants.ENCLOSURE_MIME_TYPE
# The show page does not expose file sizes
ENCLOSURE_LENGTH = "0"


def show_info_from_config(cfg: config.Config) -> ShowInfo:
    """Collect the channel metadata configured for the show."""
    return ShowInfo(
        title=cfg.show_title,
        description=cfg.show_description,
        language=cfg.show_language,
        copyright=cfg.show_copyright,
        link=cfg.show_link or cfg.endpoint,
    )


def build_feed(show: ShowInfo, episodes: Sequence[Episode]) -> FeedGenerator:
    """Build a feed generator holding the show and one entry per episode.

    Entries keep the order of ``episodes``.
    """
    fg = FeedGenerator()
    fg.load_extension("podcast")
    fg.title(show.title)
    fg.link(href=show.link, rel="alternate")
    fg.description(show.description)
    fg.language(show.language)
    fg.copyright(show.copyright)

    for episode in episodes:
        # feedgen prepends by default; order=append keeps page order
        fe = fg.add_entry(order="append")
        fe.title(episode.title)
        fe.guid(episode.uuid, permalink=False)
        if episode.link:
            fe.link(href=episode.link)
        fe.enclosure(episode.mp3, ENCLOSURE_LENGTH, ENCLOSURE_MIME_TYPE)
        fe.pubDate(episode.pub_date)
        fe.podcast.itunes_duration(format_duration(episode.duration))
    return fg


def render_feed(show: ShowInfo, episodes: Sequence[Episode]) -> str:
    """Serialize the show and its episodes as a UTF-8 RSS document.

    Raises:
        SerializationError: If feedgen rejects the data or cannot render it.
            No partial document is returned.
    """
    try:
        fg = build_feed(show, episodes)
        document = fg.rss_str(pretty=True)
    except (ValueError, TypeError) as exc:
        raise SerializationError(f"Failed to render feed: {exc}") from exc
    logger.debug("Rendered feed with %d item(s) (%d bytes)", len(episodes), len(document))
    return document.decode("utf-8")
