"""iTunes Search API client for finding podcast feeds.

A thin wrapper: one GET with query-string parameters, JSON decoded into
flat result rows. No state and no retries.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import requests

from ..errors import FetchError

logger = logging.getLogger(__name__)

# iTunes Search API endpoint
ITUNES_SEARCH_URL = "https://itunes.apple.com/search"

# Largest page the API will return
MAX_LIMIT = 200

# Media types
ALL = "all"
PODCAST = "podcast"
MOVIE = "movie"
MUSIC = "music"
MUSIC_VIDEO = "musicVideo"
AUDIOBOOK = "audiobook"
SHORT_FILM = "shortFilm"
TV_SHOW = "tvShow"
SOFTWARE = "software"
EBOOK = "ebook"

# Entities
PODCAST_AUTHOR = "podcastAuthor"
MUSIC_TRACK = "musicTrack"
MUSIC_ARTIST = "musicArtist"
ALBUM = "album"
MIX = "mix"
SONG = "song"
AUDIOBOOK_AUTHOR = "audiobookAuthor"
SHORT_FILM_ARTIST = "shortFilmArtist"
TV_EPISODE = "tvEpisode"
TV_SEASON = "tvSeason"
IPAD_SOFTWARE = "iPadSoftware"
MAC_SOFTWARE = "macSoftware"
ALL_TRACK = "allTrack"


class SearchParams:
    """Builder for iTunes query-string parameters.

    Example:
        params = SearchParams().add_term("python").add_media(PODCAST).limit(25)
    """

    def __init__(self):
        self._values: List[Tuple[str, str]] = []

    def _set(self, key: str, value: str) -> "SearchParams":
        self._values = [(k, v) for k, v in self._values if k != key]
        self._values.append((key, value))
        return self

    def add_term(self, term: str) -> "SearchParams":
        self._values.append(("term", term))
        return self

    def country(self, country: str) -> "SearchParams":
        return self._set("country", country)

    def add_entity(self, entity: str) -> "SearchParams":
        self._values.append(("entity", entity))
        return self

    def add_media(self, media: str) -> "SearchParams":
        self._values.append(("media", media))
        return self

    def limit(self, n: int) -> "SearchParams":
        """Set the number of results, clamped to 1..200."""
        return self._set("limit", str(max(1, min(n, MAX_LIMIT))))

    def items(self) -> List[Tuple[str, str]]:
        return list(self._values)


@dataclass
class PodcastResult:
    """A podcast found in the iTunes directory."""

    name: str
    artist_name: str = ""
    genres: List[str] = field(default_factory=list)
    artwork_url: str = ""
    user_rating_count: int = 0
    average_user_rating: float = 0.0
    description: str = ""
    feed_url: str = ""


@dataclass
class ItunesResult:
    """Decoded response of a search: the count and the raw result rows."""

    result_count: int = 0
    results: List[Dict[str, Any]] = field(default_factory=list)


class ItunesSearchClient:
    """Client for the iTunes Search API."""

    def __init__(self, timeout: float = 10.0, session: Optional[requests.Session] = None):
        """Initialize the client.

        Args:
            timeout: Request timeout in seconds
            session: Optional requests session to reuse
        """
        self.timeout = timeout
        self._session = session or requests.Session()

    def search(self, params: SearchParams) -> ItunesResult:
        """Run a search with arbitrary parameters.

        Raises:
            FetchError: If the request fails or the body is not JSON
        """
        try:
            response = self._session.get(
                ITUNES_SEARCH_URL, params=params.items(), timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise FetchError(f"searching itunes: {e}") from e

        return ItunesResult(
            result_count=data.get("resultCount", 0),
            results=data.get("results", []),
        )

    def search_podcasts(
        self, term: str, limit: int = MAX_LIMIT, country: Optional[str] = None
    ) -> List[PodcastResult]:
        """Search for podcasts by name or keyword.

        Results without a feed URL are skipped since they cannot be subscribed to.
        """
        params = SearchParams().add_term(term).add_media(PODCAST).limit(limit)
        if country:
            params.country(country)

        logger.info(f"Searching iTunes podcasts for: {term}")
        result = self.search(params)

        podcasts = []
        for item in result.results:
            feed_url = item.get("feedUrl")
            if not feed_url:
                continue
            podcasts.append(
                PodcastResult(
                    name=item.get("collectionName", item.get("trackName", "Unknown")),
                    artist_name=item.get("artistName", ""),
                    genres=item.get("genres", []),
                    artwork_url=item.get("artworkUrl600") or item.get("artworkUrl100") or "",
                    user_rating_count=item.get("userRatingCount", 0),
                    average_user_rating=item.get("averageUserRating", 0.0),
                    description=item.get("description", ""),
                    feed_url=feed_url,
                )
            )
        return podcasts


def search_podcasts(term: str, limit: int = MAX_LIMIT) -> List[PodcastResult]:
    """Search the iTunes directory for podcasts with a default client."""
    return ItunesSearchClient().search_podcasts(term, limit=limit)
