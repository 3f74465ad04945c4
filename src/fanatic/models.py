"""Data models for scraped episodes and the published show."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional


@dataclass(frozen=True)
class Episode:
    """One normalized show installment, ready to become a feed item.

    Attributes:
        title: Display title, taken verbatim from the page or player JSON.
        link: Episode page URL. Empty when the source does not provide one.
        mp3: Direct download URL of the audio file.
        uuid: Authoritative identifier, or a synthesized fingerprint of
            title and MP3 URL when none is available.
        pub_date: Timezone-aware UTC publication time, already corrected
            for the upstream one-day skew.
        duration: Length of the audio.

    Example:
        >>> Episode(
        ...     title="Episode 742",
        ...     link="https://www.kcrw.com/music/shows/henry-rollins/742",
        ...     mp3="https://od-media.kcrw.com/742.mp3",
        ...     uuid="7b9f...",
        ...     pub_date=datetime(2021, 6, 14, 10, tzinfo=UTC),
        ...     duration=timedelta(hours=2),
        ... )
    """

    title: str
    link: str
    mp3: str
    uuid: str
    pub_date: datetime
    duration: timedelta


@dataclass(frozen=True)
class ShowInfo:
    """Channel-level metadata written at the top of the feed."""

    title: str
    description: str
    language: str
    copyright: str
    link: str


@dataclass
class ExtractionResult:
    """Outcome of one extraction pass over the show page.

    Attributes:
        episodes: Episodes that were built successfully, in page order.
        skipped: Number of episode cards that could not be turned into an
            episode and were dropped.
    """

    episodes: List[Episode] = field(default_factory=list)
    skipped: int = 0

    @property
    def total(self) -> int:
        return len(self.episodes) + self.skipped


@dataclass(frozen=True)
class GeneratedFeed:
    """A rendered feed document plus the counts that produced it."""

    document: str
    episode_count: int
    skipped: int = 0
    endpoint: Optional[str] = None
