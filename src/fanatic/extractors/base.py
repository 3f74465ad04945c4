"""Extraction strategy base class.

Each strategy turns the show page into episodes its own way. The shared
part is the batch policy: a card that cannot be turned into an episode
is skipped and counted, and only an empty batch is an error.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from .. import config_constants, downloader
from ..exceptions import EmptyResultError, ParseError, TransportError
from ..models import Episode, ExtractionResult

logger = logging.getLogger(__name__)

HTML_PARSER = "html.parser"


def collect_episodes(outcomes: Iterable[Optional[Episode]]) -> ExtractionResult:
    """Fold per-card outcomes into episodes plus a skipped count.

    Args:
        outcomes: One entry per card, None for a card that was skipped

    Returns:
        ExtractionResult keeping the input order of successful episodes
    """
    result = ExtractionResult()
    for outcome in outcomes:
        if outcome is None:
            result.skipped += 1
        else:
            result.episodes.append(outcome)
    return result


class EpisodeExtractor(ABC):
    """Base class for show page extraction strategies.

    Subclasses choose which elements represent an episode
    (`select_elements`) and how one element becomes an `Episode`
    (`build_episode`). `build_episode` signals a bad element by raising
    ParseError or TransportError.
    """

    name = ""

    def __init__(
        self,
        endpoint: str,
        user_agent: str = config_constants.DEFAULT_USER_AGENT,
        timeout: int = config_constants.DEFAULT_TIMEOUT_SECONDS,
        workers: int = config_constants.DEFAULT_WORKERS,
    ) -> None:
        self.endpoint = endpoint
        self.user_agent = user_agent
        self.timeout = timeout
        self.workers = max(1, workers)

    def fetch(self, url: str) -> str:
        """Fetch ``url`` with this extractor's HTTP settings."""
        return downloader.fetch_text(url, self.user_agent, self.timeout)

    def fetch_episodes(self) -> ExtractionResult:
        """Fetch the show page and extract every episode on it.

        Raises:
            TransportError: If the show page itself cannot be fetched
            EmptyResultError: If no episode could be extracted
        """
        logger.debug("Fetching show page %s using %s strategy", self.endpoint, self.name)
        page = self.fetch(self.endpoint)
        result = self.extract(page)
        if not result.episodes:
            raise EmptyResultError(endpoint=self.endpoint, skipped=result.skipped)
        logger.info(
            "Extracted %d episode(s) from %s (%d skipped)",
            len(result.episodes),
            self.endpoint,
            result.skipped,
        )
        return result

    def extract(self, page: str) -> ExtractionResult:
        """Extract episodes from already fetched page markup.

        The returned result may be empty; `fetch_episodes` is the one that
        turns an empty batch into an error.
        """
        soup = BeautifulSoup(page, HTML_PARSER)
        elements = self.select_elements(soup)
        logger.debug("Found %d candidate episode element(s)", len(elements))
        if self.workers > 1 and len(elements) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                outcomes = list(pool.map(self._try_build_episode, elements))
        else:
            outcomes = [self._try_build_episode(element) for element in elements]
        return collect_episodes(outcomes)

    def _try_build_episode(self, element: Tag) -> Optional[Episode]:
        try:
            return self.build_episode(element)
        except (ParseError, TransportError) as exc:
            logger.debug("Skipping episode element: %s", exc)
            return None

    @abstractmethod
    def select_elements(self, soup: BeautifulSoup) -> List[Tag]:
        """Return the elements that each describe one episode."""

    @abstractmethod
    def build_episode(self, element: Tag) -> Episode:
        """Build one episode from its element.

        Raises:
            ParseError: If the element or its payload lacks a required field
            TransportError: If a secondary fetch for this element fails
        """
