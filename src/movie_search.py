"""
Movie search against the catalog's search endpoint.
"""

from dataclasses import dataclass

from loguru import logger

from error_classifier import FetchOutcome
from utils import SEARCH_PATH, fetch_movie_page


@dataclass(frozen=True)
class SearchResult:
    ticket: int
    term: str
    outcome: FetchOutcome


class SearchFetcher:
    """Issues one search request per settled term."""

    def __init__(self, api_key, fetch_page=fetch_movie_page):
        """
        Args:
            api_key: Bearer credential for the catalog service
            fetch_page: Coroutine function (path, params, api_key) -> FetchOutcome
        """
        self._api_key = api_key
        self._fetch_page = fetch_page

    async def fetch(self, term, ticket):
        """
        Search for a settled term.

        Args:
            term: Non-empty settled search term
            ticket: Sequencer ticket this request was issued under

        Returns:
            SearchResult tagged with the ticket

        Raises:
            ValueError: if the term is empty
        """
        query = term.strip()
        if not query:
            raise ValueError("Search term must not be empty")

        logger.debug(f"[SearchFetcher] #{ticket} searching for {query!r}")
        outcome = await self._fetch_page(SEARCH_PATH, {"query": query}, self._api_key)

        if outcome.ok:
            logger.info(f"[SearchFetcher] #{ticket} {len(outcome.movies)} result(s) for {query!r}")
        else:
            logger.warning(f"[SearchFetcher] #{ticket} failed for {query!r}: {outcome.error.kind.value} {outcome.error.detail}")
        return SearchResult(ticket=ticket, term=term, outcome=outcome)
