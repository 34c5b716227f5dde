"""
Category fetching: the startup bulk load of every category and on-demand
refreshes of a single one.
"""

import asyncio
from dataclasses import dataclass

from loguru import logger

from error_classifier import ErrorKind, FetchOutcome
from models import CategoryKey, freeze_categories
from utils import endpoint_for, fetch_movie_page


@dataclass(frozen=True)
class CategoryResult:
    ticket: int
    category: CategoryKey
    outcome: FetchOutcome


@dataclass(frozen=True)
class BulkLoadResult:
    """One settled slot per category, in CategoryKey order."""

    ticket: int
    slots: tuple

    def merged(self):
        """Full category map; failed slots contribute an empty list."""
        return freeze_categories({slot.category: slot.outcome.movies for slot in self.slots})

    def failures(self):
        return {slot.category: slot.outcome.error for slot in self.slots if not slot.outcome.ok}

    def first(self):
        return self.slots[0] if self.slots else None


class CategoryFetcher:

    def __init__(self, api_key, fetch_page=fetch_movie_page):
        self._api_key = api_key
        self._fetch_page = fetch_page

    async def _fetch_one(self, category):
        path, params = endpoint_for(category)
        return await self._fetch_page(path, params, self._api_key)

    async def refresh(self, category, ticket):
        """
        Fetch a single category.

        Args:
            category: CategoryKey to fetch
            ticket: Sequencer ticket for this refresh

        Returns:
            CategoryResult
        """
        logger.debug(f"[CategoryFetcher] #{ticket} refreshing {category.value}")
        outcome = await self._fetch_one(category)
        if not outcome.ok:
            logger.warning(f"[CategoryFetcher] Refresh of {category.value} failed: {outcome.error.kind.value} {outcome.error.detail}")
        return CategoryResult(ticket=ticket, category=category, outcome=outcome)

    async def load_all(self, ticket):
        """
        Fetch every category concurrently.

        A failing category never cancels its siblings; it settles as a
        failure slot and the rest of the load continues.

        Returns:
            BulkLoadResult with one slot per CategoryKey
        """
        categories = list(CategoryKey)
        logger.info(f"[CategoryFetcher] #{ticket} loading {len(categories)} categories")

        outcomes = await asyncio.gather(
            *(self._fetch_one(category) for category in categories),
            return_exceptions=True,
        )

        slots = []
        for category, outcome in zip(categories, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, Exception):
                logger.opt(exception=outcome).error(f"[CategoryFetcher] Unexpected error loading {category.value}")
                outcome = FetchOutcome.failure(ErrorKind.TRANSPORT, detail=repr(outcome))
            elif not outcome.ok:
                logger.warning(f"[CategoryFetcher] {category.value} failed during bulk load: {outcome.error.kind.value} {outcome.error.detail}")
            slots.append(CategoryResult(ticket=ticket, category=category, outcome=outcome))

        result = BulkLoadResult(ticket=ticket, slots=tuple(slots))
        logger.info(f"[CategoryFetcher] #{ticket} bulk load settled with {len(result.failures())} failure(s)")
        return result
