"""
Data models for the movie browser: movie records, category keys and the
immutable view-state snapshot handed to presentation code.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

POSTER_BASE_URL = "https://image.tmdb.org/t/p/w500"
FEATURED_COUNT = 8
PREVIEW_COUNT = 4


def _empty_mapping():
    return MappingProxyType({})


class CategoryKey(Enum):
    """Fixed browsing categories, in display order."""

    TRENDING = "trending"
    UPCOMING = "upcoming"
    TOP_RATED = "topRated"
    NOW_PLAYING = "nowPlaying"
    POPULAR = "popular"

    @property
    def position(self):
        return list(type(self)).index(self)

    def __lt__(self, other):
        if not isinstance(other, CategoryKey):
            return NotImplemented
        return self.position < other.position

    @property
    def label(self):
        return CATEGORY_LABELS[self]


CATEGORY_LABELS = {
    CategoryKey.TRENDING: "🔥 Trending Now",
    CategoryKey.POPULAR: "⭐ Popular Movies",
    CategoryKey.TOP_RATED: "🏆 Top Rated",
    CategoryKey.UPCOMING: "📅 Coming Soon",
    CategoryKey.NOW_PLAYING: "🎬 Now Playing",
}

DEFAULT_CATEGORY = CategoryKey.TRENDING


class Mode(Enum):
    SEARCH = "search"
    CATEGORY = "category"


@dataclass(frozen=True)
class MovieRecord:
    """A single movie as returned by the catalog service."""

    id: int
    title: str
    poster_path: Optional[str] = None
    release_date: str = ""
    popularity: float = 0.0
    vote_average: float = 0.0
    payload: Mapping[str, Any] = field(default_factory=_empty_mapping, hash=False, repr=False)

    @classmethod
    def from_payload(cls, data):
        """
        Build a record from one item of a ``results`` array.

        Args:
            data: Movie mapping decoded from JSON

        Returns:
            MovieRecord, or None when the item has no id or title, or its
            id, popularity or vote_average is not a number
        """
        if not isinstance(data, Mapping):
            return None
        movie_id = data.get("id")
        title = data.get("title")
        if movie_id is None or not title:
            return None
        try:
            movie_id = int(movie_id)
            popularity = float(data.get("popularity") or 0.0)
            vote_average = float(data.get("vote_average") or 0.0)
        except (ValueError, TypeError, OverflowError):
            return None
        return cls(
            id=movie_id,
            title=str(title),
            poster_path=data.get("poster_path") or None,
            release_date=str(data.get("release_date") or ""),
            popularity=popularity,
            vote_average=vote_average,
            payload=MappingProxyType(dict(data)),
        )

    @property
    def year(self):
        return self.release_date[:4] if self.release_date else ""

    @property
    def poster_url(self):
        if not self.poster_path:
            return None
        return f"{POSTER_BASE_URL}{self.poster_path}"


@dataclass(frozen=True)
class SearchState:
    raw_term: str = ""
    settled_term: str = ""
    results: Tuple[MovieRecord, ...] = ()
    loading: bool = False
    error: Optional[Any] = None
    no_matches: bool = False


def freeze_categories(categories):
    """Return a read-only, key-ordered copy of a category map."""
    ordered = sorted(categories.items(), key=lambda item: item[0].position)
    return MappingProxyType({key: tuple(movies) for key, movies in ordered})


@dataclass(frozen=True)
class ViewState:
    """
    Snapshot of everything presentation code may read.

    Mode is derived from the settled search term and is never stored.
    """

    active_category: CategoryKey = DEFAULT_CATEGORY
    search: SearchState = field(default_factory=SearchState)
    categories: Mapping[CategoryKey, Tuple[MovieRecord, ...]] = field(default_factory=_empty_mapping)
    categories_loaded: bool = False
    refreshing: frozenset = frozenset()
    refresh_errors: Mapping[CategoryKey, Any] = field(default_factory=_empty_mapping)
    bulk_errors: Mapping[CategoryKey, Any] = field(default_factory=_empty_mapping)

    @property
    def mode(self):
        return Mode.SEARCH if self.search.settled_term else Mode.CATEGORY

    @property
    def is_search_mode(self):
        return self.mode is Mode.SEARCH

    @property
    def displayed_list(self):
        if self.is_search_mode:
            return self.search.results
        return self.categories.get(self.active_category, ())

    @property
    def loading(self):
        if self.is_search_mode:
            return self.search.loading
        if self.active_category in self.refreshing:
            return True
        return not self.categories_loaded

    @property
    def error(self):
        if self.is_search_mode:
            return self.search.error
        return self.refresh_errors.get(self.active_category)

    @property
    def active_label(self):
        return self.active_category.label

    @property
    def featured(self):
        if self.is_search_mode:
            return ()
        return self.displayed_list[:FEATURED_COUNT]

    def previews(self, limit=PREVIEW_COUNT):
        """
        Preview sections for every non-active category that has movies.

        Returns:
            List of (CategoryKey, movies) pairs in category order
        """
        if self.is_search_mode:
            return []
        return [
            (key, movies[:limit])
            for key, movies in self.categories.items()
            if key is not self.active_category and movies
        ]

    @property
    def message(self):
        """User-facing status line, or an empty string when there is nothing to say."""
        if self.loading:
            return ""
        if self.error is not None:
            return self.error.message
        if self.displayed_list:
            return ""
        if self.is_search_mode:
            return f'No movies found for "{self.search.settled_term}"'
        return "No movies found in this category."


def with_search(state, **changes):
    return replace(state, search=replace(state.search, **changes))
