"""Configuration constants for fanatic.

Defaults for the scrape target, the show-level feed metadata and the
serving layer live here and are re-exported from config.py.
"""

from datetime import timedelta

# Scrape target
DEFAULT_ENDPOINT = "https://www.kcrw.com/music/shows/henry-rollins"
DEFAULT_STRATEGY = "player_json"
VALID_STRATEGIES = ("player_json", "legacy")

# HTTP
DEFAULT_TIMEOUT_SECONDS = 20
MIN_TIMEOUT_SECONDS = 1
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/119.0 Safari/537.36"
)
DEFAULT_WORKERS = 1

# Show-level feed metadata
DEFAULT_SHOW_TITLE = "Henry Rollins - KCRW"
DEFAULT_SHOW_DESCRIPTION = "Henry Rollins hosts a mix of all kinds, from all over and all time."
DEFAULT_SHOW_LANGUAGE = "EN"
DEFAULT_SHOW_COPYRIGHT = "KCRW"
ENCLOSURE_MIME_TYPE = "audio/mpeg"

# Page structure: one card per episode
EPISODE_CARD_SELECTOR = "div.four-col.hub-row.no-border"
PLAYER_BUTTON_SELECTOR = f"{EPISODE_CARD_SELECTOR} button.audio"
PLAYER_JSON_ATTRIBUTE = "data-player-json"
LEGACY_TITLE_SELECTOR = "h3 a"
LEGACY_EPISODE_NUMBER_SELECTOR = ".episode-number"
LEGACY_DATE_SELECTOR = "time"
LEGACY_DURATION_SELECTOR = ".duration"
DEFAULT_LEGACY_MP3_URL_TEMPLATE = (
    "https://od-media.kcrw.com/kcrw/audio/website/music/hr/KCRW-henry_rollins-{number}-{date}.mp3"
)
LEGACY_MP3_DATE_FORMAT = "%y%m%d"

# Upstream publishes every episode one day late. Observed empirically on the
# show page and never confirmed by KCRW; keep as a constant, not a setting.
PUBLISH_DATE_SKEW = timedelta(days=1)
PUBLISH_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
FALLBACK_DURATION = timedelta(minutes=2)

# Serving
DEFAULT_HOST = "0.0.0.0"  # nosec B104
DEFAULT_PORT = 8080
DEFAULT_REFRESH_INTERVAL_SECONDS = 3600
MIN_REFRESH_INTERVAL_SECONDS = 1
FEED_PATH = "/rss.xml"
LANDING_PATH = "/"

# Logging
DEFAULT_LOG_LEVEL = "INFO"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
