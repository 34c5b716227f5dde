"""
Request sequencing: last-issued-wins ordering for asynchronous fetches.
"""

from collections import defaultdict

from loguru import logger

SEARCH = "search"
BULK = "bulk"


def refresh_op(category):
    return ("refresh", category)


class RequestSequencer:
    """
    Hands out strictly increasing tickets per operation class.

    A response is current only if its ticket is the latest one issued for
    its class; anything older is stale and must be dropped.
    """

    def __init__(self):
        self._issued = defaultdict(int)

    def issue(self, op):
        self._issued[op] += 1
        return self._issued[op]

    def current(self, op):
        return self._issued[op]

    def is_current(self, op, ticket):
        current = self._issued[op]
        if ticket != current:
            logger.debug(f"[RequestSequencer] Stale {op} ticket {ticket} (current {current})")
            return False
        return True
