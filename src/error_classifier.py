"""
Classification of catalog fetch outcomes.

Every request ends in exactly one FetchOutcome: a non-empty success, an
empty success (``no matches``, not an error) or a failure carrying a
FetchError of one of three kinds.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import requests
from loguru import logger

from models import MovieRecord


class ErrorKind(Enum):
    TRANSPORT = "transportFailure"
    HTTP_STATUS = "httpStatusFailure"
    PARSE = "parseFailure"


class OutcomeKind(Enum):
    SUCCESS = "success"
    EMPTY = "empty"
    FAILURE = "failure"


@dataclass(frozen=True)
class FetchError:
    kind: ErrorKind
    status_code: Optional[int] = None
    detail: str = ""

    @property
    def message(self):
        if self.kind is ErrorKind.HTTP_STATUS:
            return f"Failed to fetch movies (Status: {self.status_code})"
        if self.kind is ErrorKind.PARSE:
            return "Received an unreadable response from the movie service."
        return "Error fetching movies. Please try again later..."


@dataclass(frozen=True)
class FetchOutcome:
    kind: OutcomeKind
    movies: Tuple[MovieRecord, ...] = ()
    error: Optional[FetchError] = None

    @classmethod
    def from_movies(cls, movies):
        movies = tuple(movies)
        return cls(OutcomeKind.SUCCESS if movies else OutcomeKind.EMPTY, movies)

    @classmethod
    def failure(cls, kind, status_code=None, detail=""):
        return cls(OutcomeKind.FAILURE, (), FetchError(kind, status_code, detail))

    @property
    def ok(self):
        return self.kind is not OutcomeKind.FAILURE

    @property
    def is_empty(self):
        return self.kind is OutcomeKind.EMPTY


def transport_failure(detail):
    return FetchOutcome.failure(ErrorKind.TRANSPORT, detail=detail)


def parse_movie_list(data):
    """
    Extract movie records from a decoded response body.

    Args:
        data: Decoded JSON body

    Returns:
        List of MovieRecord in source order

    Raises:
        ValueError: if the body has no ``results`` list
    """
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    results = data.get("results")
    if not isinstance(results, list):
        raise ValueError("response has no 'results' array")

    movies = []
    for item in results:
        movie = MovieRecord.from_payload(item)
        if movie is None:
            logger.debug(f"[ErrorClassifier] Skipping unusable result item: {item!r}")
            continue
        movies.append(movie)
    return movies


def classify_response(response):
    """Map a completed HTTP response to a FetchOutcome."""
    if not 200 <= response.status_code < 300:
        return FetchOutcome.failure(
            ErrorKind.HTTP_STATUS,
            status_code=response.status_code,
            detail=getattr(response, "reason", "") or "",
        )
    try:
        movies = parse_movie_list(response.json())
    except (ValueError, TypeError) as e:
        return FetchOutcome.failure(ErrorKind.PARSE, detail=str(e))
    return FetchOutcome.from_movies(movies)


def classify_exception(exc):
    """Map an exception raised while sending a request to a FetchOutcome."""
    if isinstance(exc, (requests.RequestException, OSError)):
        return transport_failure(f"{type(exc).__name__}: {exc}")
    raise exc
