"""Episode extraction strategies for the show page."""

from .base import collect_episodes, EpisodeExtractor
from .factory import create_extractor
from .legacy import LegacyHTMLExtractor
from .player_json import PlayerJSONExtractor

__all__ = [
    "EpisodeExtractor",
    "LegacyHTMLExtractor",
    "PlayerJSONExtractor",
    "collect_episodes",
    "create_extractor",
]
