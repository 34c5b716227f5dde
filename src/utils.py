"""
Configuration constants and HTTP helpers for the TMDB catalog service.
"""

import asyncio
import os

import requests
import streamlit as st
from loguru import logger

from error_classifier import classify_exception, classify_response, transport_failure
from models import CategoryKey

# Global configuration constants
TMDB_BASE_URL = "https://api.themoviedb.org/3"
SEARCH_PATH = "/search/movie"
API_KEY_NAME = "TMDB_API_KEY"

DEBOUNCE_SECONDS = 0.5
REQUEST_TIMEOUT = 10.0

CATEGORY_ENDPOINTS = {
    CategoryKey.TRENDING: "/trending/movie/week",
    CategoryKey.UPCOMING: "/movie/upcoming",
    CategoryKey.TOP_RATED: "/movie/top_rated",
    CategoryKey.NOW_PLAYING: "/movie/now_playing",
    CategoryKey.POPULAR: "/discover/movie",
}

CATEGORY_PARAMS = {
    CategoryKey.POPULAR: {"sort_by": "popularity.desc"},
}

class MissingCredentialError(RuntimeError):
    pass


def validate_category_table(table):
    """Raise ValueError unless every CategoryKey maps to exactly one endpoint."""
    missing = [key.value for key in CategoryKey if key not in table]
    unknown = [key for key in table if not isinstance(key, CategoryKey)]
    if missing or unknown:
        raise ValueError(f"Category endpoint table is inconsistent: missing={missing} unknown={unknown}")
    paths = list(table.values())
    if any(not path for path in paths):
        raise ValueError("Category endpoint table contains an empty path")
    return table


validate_category_table(CATEGORY_ENDPOINTS)


def endpoint_for(category):
    """Return (path, params) for a category request."""
    if category not in CATEGORY_ENDPOINTS:
        raise ValueError(f"Unknown category: {category!r}")
    return CATEGORY_ENDPOINTS[category], dict(CATEGORY_PARAMS.get(category, {}))


def get_api_key():
    """
    Read the TMDB bearer credential.

    Streamlit secrets are checked first, then the environment.

    Returns:
        The credential string

    Raises:
        MissingCredentialError: if neither source provides one
    """
    if st.secrets.load_if_toml_exists() and API_KEY_NAME in st.secrets:
        return st.secrets[API_KEY_NAME]

    logger.debug(f"[Config] {API_KEY_NAME} not in Streamlit secrets; checking environment")
    api_key = os.environ.get(API_KEY_NAME)
    if not api_key:
        raise MissingCredentialError(
            f"{API_KEY_NAME} not found in Streamlit secrets or environment"
        )
    return api_key


def build_headers(api_key):
    return {
        "accept": "application/json",
        "Authorization": f"Bearer {api_key}",
    }


def get_movie_page(path, params=None, api_key=None, timeout=REQUEST_TIMEOUT):
    """
    Blocking GET of one catalog endpoint, classified into a FetchOutcome.

    Args:
        path: Endpoint path relative to TMDB_BASE_URL
        params: Query parameters (percent-encoded by requests)
        api_key: Bearer credential
        timeout: Per-request timeout in seconds

    Returns:
        FetchOutcome
    """
    url = f"{TMDB_BASE_URL}{path}"
    try:
        response = requests.get(url, params=params, headers=build_headers(api_key), timeout=timeout)
    except requests.RequestException as e:
        return classify_exception(e)
    return classify_response(response)


async def fetch_movie_page(path, params=None, api_key=None, timeout=REQUEST_TIMEOUT):
    """Run get_movie_page off the event loop with a bounded total wait."""
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(get_movie_page, path, params, api_key, timeout),
            timeout=timeout + 1.0,
        )
    except asyncio.TimeoutError:
        return transport_failure(f"No response from {path} within {timeout:.1f}s")
