"""
View-state store: the single owner of the browsing state.

Presentation code reads ``store.state`` (an immutable ViewState) or
subscribes to changes, and drives the store through ``set_raw_term``,
``select_category`` and ``retry``. Fetches run as asyncio tasks; their
results are applied one at a time on the event loop, and only if their
ticket is still the latest for their operation class.
"""

import asyncio

from loguru import logger

import sequencer as seq
import transitions
from category_fetcher import BulkLoadResult, CategoryFetcher, CategoryResult
from debouncer import Debouncer
from error_classifier import ErrorKind, FetchOutcome
from models import CategoryKey, ViewState
from movie_search import SearchFetcher, SearchResult
from utils import DEBOUNCE_SECONDS, fetch_movie_page, get_api_key


class ViewStateStore:

    def __init__(self, search_fetcher, category_fetcher, debounce_delay=DEBOUNCE_SECONDS, state=None):
        self._search_fetcher = search_fetcher
        self._category_fetcher = category_fetcher
        self._state = state if state is not None else ViewState()
        self._sequencer = seq.RequestSequencer()
        self._debouncer = Debouncer(self.settled_term_changed, delay=debounce_delay)
        self._subscribers = []
        self._tasks = set()
        self._held_refreshes = {}

    @classmethod
    def from_config(cls, api_key=None, fetch_page=fetch_movie_page, **kwargs):
        """Build a store wired to the live catalog service."""
        api_key = api_key or get_api_key()
        return cls(
            SearchFetcher(api_key, fetch_page),
            CategoryFetcher(api_key, fetch_page),
            **kwargs,
        )

    @property
    def state(self):
        return self._state

    @property
    def sequencer(self):
        return self._sequencer

    def subscribe(self, callback):
        """
        Register a callback invoked with every new ViewState.

        Returns:
            A function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _commit(self, new_state):
        if new_state == self._state:
            return
        self._state = new_state
        for callback in list(self._subscribers):
            callback(new_state)

    def _spawn(self, coro, apply, fallback):
        task = asyncio.get_running_loop().create_task(self._run(coro, apply, fallback))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, coro, apply, fallback):
        try:
            result = await coro
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.opt(exception=e).error("[ViewStateStore] Fetch task raised; settling as transport failure")
            result = fallback(FetchOutcome.failure(ErrorKind.TRANSPORT, detail=repr(e)))
        apply(result)

    # -- startup -------------------------------------------------------------

    async def start(self):
        """Load every category concurrently and wait for the merge."""
        ticket = self._sequencer.issue(seq.BULK)

        def fallback(outcome):
            slots = tuple(CategoryResult(ticket, key, outcome) for key in CategoryKey)
            return BulkLoadResult(ticket, slots)

        await self._spawn(self._category_fetcher.load_all(ticket), self.category_fetch_settled, fallback)

    # -- user input ----------------------------------------------------------

    def set_raw_term(self, term):
        self._commit(transitions.set_raw_term(self._state, term))
        self._debouncer.push(term)

    def settled_term_changed(self, term):
        term = term.strip()
        if term == self._state.search.settled_term:
            return

        ticket = self._sequencer.issue(seq.SEARCH)
        self._commit(transitions.settle_term(self._state, term))
        if term:
            self._search(term, ticket)
        elif self._needs_refresh(self._state.active_category):
            self._refresh(self._state.active_category)

    def select_category(self, category):
        category = CategoryKey(category)
        self._debouncer.cancel()
        # Invalidate any search still in flight.
        self._sequencer.issue(seq.SEARCH)
        self._commit(transitions.select_category(self._state, category))
        if self._needs_refresh(category):
            self._refresh(category)

    def retry(self):
        """Re-issue the fetch behind the current mode under a new ticket."""
        if self._state.is_search_mode:
            term = self._state.search.settled_term
            ticket = self._sequencer.issue(seq.SEARCH)
            self._commit(transitions.settle_term(self._state, term))
            self._search(term, ticket)
        else:
            self._refresh(self._state.active_category)

    def flush_input(self):
        """Settle any debounced input immediately."""
        self._debouncer.flush()

    # -- fetch plumbing ------------------------------------------------------

    def _needs_refresh(self, category):
        state = self._state
        if not state.categories_loaded or category in state.refreshing:
            return False
        return not state.categories.get(category)

    def _search(self, term, ticket):
        self._spawn(
            self._search_fetcher.fetch(term, ticket),
            self.search_fetch_settled,
            lambda outcome: SearchResult(ticket, term, outcome),
        )

    def _refresh(self, category):
        ticket = self._sequencer.issue(seq.refresh_op(category))
        self._commit(transitions.begin_refresh(self._state, category))
        self._spawn(
            self._category_fetcher.refresh(category, ticket),
            self.category_fetch_settled,
            lambda outcome: CategoryResult(ticket, category, outcome),
        )

    # -- completions ---------------------------------------------------------

    def search_fetch_settled(self, result):
        if not self._sequencer.is_current(seq.SEARCH, result.ticket):
            return
        self._commit(transitions.apply_search_result(self._state, result))

    def category_fetch_settled(self, result):
        if isinstance(result, BulkLoadResult):
            if not self._sequencer.is_current(seq.BULK, result.ticket):
                return
            held, self._held_refreshes = self._held_refreshes, {}
            self._commit(transitions.apply_bulk_load(self._state, result, held))
            return

        if not self._sequencer.is_current(seq.refresh_op(result.category), result.ticket):
            return
        if result.outcome.ok and not self._state.categories_loaded:
            # Folded into the bulk merge so the map never shows a lone entry.
            self._held_refreshes[result.category] = result.outcome.movies
        self._commit(transitions.apply_refresh(self._state, result))

    # -- lifecycle -----------------------------------------------------------

    async def wait_idle(self):
        """Wait until no fetch task is outstanding."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self):
        self._debouncer.cancel()
        for task in list(self._tasks):
            task.cancel()
        await self.wait_idle()
