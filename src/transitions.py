"""
Pure state transitions for the view-state store.

Each function takes the previous ViewState and returns the next one. None
of them touch the network, the sequencer or any shared object; ticket
gating happens in the store before a result reaches this module.
"""

from dataclasses import replace
from types import MappingProxyType

from models import SearchState, freeze_categories, with_search


def _without(mapping, key):
    return MappingProxyType({k: v for k, v in mapping.items() if k != key})


def _with(mapping, key, value):
    updated = dict(mapping)
    updated[key] = value
    return MappingProxyType(updated)


def set_raw_term(state, term):
    return with_search(state, raw_term=term)


def settle_term(state, term):
    """
    Apply a settled search term.

    A non-empty term starts a fresh search (loading, no results, no error);
    an empty term clears the search and drops back to category mode.
    """
    term = term.strip()
    if not term:
        return replace(state, search=SearchState(raw_term=state.search.raw_term))
    return replace(
        state,
        search=SearchState(raw_term=state.search.raw_term, settled_term=term, loading=True),
    )


def select_category(state, category):
    return replace(state, active_category=category, search=SearchState())


def begin_refresh(state, category):
    return replace(
        state,
        refreshing=state.refreshing | {category},
        refresh_errors=_without(state.refresh_errors, category),
    )


def apply_search_result(state, result):
    outcome = result.outcome
    if outcome.ok:
        return with_search(
            state,
            results=outcome.movies,
            loading=False,
            error=None,
            no_matches=outcome.is_empty,
        )
    return with_search(state, results=(), loading=False, error=outcome.error, no_matches=False)


def apply_bulk_load(state, result, held=None):
    """
    Merge a settled bulk load in one step.

    Args:
        state: Previous ViewState
        result: BulkLoadResult with all slots settled
        held: Movies from refreshes that succeeded while the load was still
            in flight, keyed by category; they win over the bulk data
    """
    merged = dict(result.merged())
    merged.update(held or {})
    return replace(
        state,
        categories=freeze_categories(merged),
        categories_loaded=True,
        bulk_errors=MappingProxyType(result.failures()),
    )


def apply_refresh(state, result):
    """
    A successful refresh replaces the entry; a failed one keeps it and records the error.

    Until the bulk load has merged, a successful refresh leaves the category
    map alone; the store holds its movies for apply_bulk_load.
    """
    category = result.category
    refreshing = state.refreshing - {category}
    if result.outcome.ok:
        categories = state.categories
        if state.categories_loaded:
            categories = freeze_categories(_with(state.categories, category, result.outcome.movies))
        return replace(
            state,
            categories=categories,
            refreshing=refreshing,
            refresh_errors=_without(state.refresh_errors, category),
        )
    return replace(
        state,
        refreshing=refreshing,
        refresh_errors=_with(state.refresh_errors, category, result.outcome.error),
    )
