"""
Debouncing of search input.

The raw value is reported on every keystroke; the settled value is reported
once, after the input has been quiet for the whole delay.
"""

import asyncio

from loguru import logger

from utils import DEBOUNCE_SECONDS


class Debouncer:
    """
    Collapses a burst of values into a single settled emission.

    Each push cancels the pending timer, so only the last value of a burst
    is ever emitted.
    """

    def __init__(self, on_settled, delay=DEBOUNCE_SECONDS, on_raw=None):
        """
        Args:
            on_settled: Callable invoked with the settled value
            delay: Quiet period in seconds
            on_raw: Optional callable invoked with every pushed value
        """
        self.delay = delay
        self._on_settled = on_settled
        self._on_raw = on_raw
        self._task = None
        self._pending_value = None

    @property
    def pending(self):
        return self._task is not None and not self._task.done()

    def push(self, value):
        """Record a new raw value and restart the quiet period."""
        if self._on_raw is not None:
            self._on_raw(value)
        self.cancel()
        self._pending_value = value
        self._task = asyncio.get_running_loop().create_task(self._settle_later(value))

    def cancel(self):
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def flush(self):
        """Emit the pending value now instead of waiting out the delay."""
        if not self.pending:
            return
        value = self._pending_value
        self.cancel()
        self._on_settled(value)

    async def _settle_later(self, value):
        await asyncio.sleep(self.delay)
        # Clear before emitting so a push from inside the callback starts fresh.
        self._task = None
        logger.debug(f"[Debouncer] Settled on {value!r}")
        self._on_settled(value)
