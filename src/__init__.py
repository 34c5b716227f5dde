"""
Movie Browser Core - Source Package

Asynchronous orchestration for browsing a remote movie catalog:
- models: Movie records, category keys and the immutable view state
- error_classifier: Fetch outcome taxonomy (transport, status, parse, empty)
- utils: Configuration constants, credential lookup and HTTP helpers
- debouncer: Search input debouncing
- sequencer: Per-operation request tickets (last issued wins)
- movie_search: Search fetching
- category_fetcher: Category bulk load and single refresh
- transitions: Pure state transitions
- store: The view-state store presentation code reads from
"""
