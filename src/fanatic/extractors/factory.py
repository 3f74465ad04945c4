"""Factory for creating extraction strategies."""

from __future__ import annotations

from typing import Union

from .. import config
from .base import EpisodeExtractor
from .legacy import LegacyHTMLExtractor
from .player_json import PlayerJSONExtractor


def create_extractor(cfg_or_strategy: Union[config.Config, str], **kwargs) -> EpisodeExtractor:
    """Create the extraction strategy selected by configuration.

    Args:
        cfg_or_strategy: Either a Config object or a strategy name
            ("player_json" or "legacy")
        **kwargs: Constructor arguments when a strategy name is given
            (``endpoint`` is required, the rest default)

    Returns:
        EpisodeExtractor instance

    Raises:
        ValueError: If the strategy is not supported
        TypeError: If kwargs are combined with a Config object

    Example:
        >>> extractor = create_extractor(Config(strategy="legacy"))
        >>> extractor = create_extractor("player_json", endpoint="https://example.com/show")
    """
    if isinstance(cfg_or_strategy, config.Config):
        if kwargs:
            raise TypeError("Cannot combine a Config object with extractor keyword arguments")
        cfg = cfg_or_strategy
        common = {
            "user_agent": cfg.user_agent,
            "timeout": cfg.timeout,
            "workers": cfg.workers,
        }
        if cfg.strategy == "legacy":
            return LegacyHTMLExtractor(
                cfg.endpoint, mp3_url_template=cfg.legacy_mp3_url_template, **common
            )
        return PlayerJSONExtractor(cfg.endpoint, **common)

    strategy = str(cfg_or_strategy).strip().lower().replace("-", "_")
    if strategy == "legacy":
        return LegacyHTMLExtractor(**kwargs)
    if strategy == "player_json":
        return PlayerJSONExtractor(**kwargs)
    raise ValueError(
        f"Unsupported extraction strategy: {cfg_or_strategy}. "
        f"Supported strategies: {', '.join(config.VALID_STRATEGIES)}"
    )
