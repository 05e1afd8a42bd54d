"""Resolve the analytics client/session pair stored for a quote or order."""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from serverside_analytics.events import IdentityRecord

logger = logging.getLogger(__name__)


class IdentityStoreUnavailable(Exception):
    """The identity store could not be queried or written."""


class IdentityStore(Protocol):
    def find_first(self, correlation_id: str) -> Optional[IdentityRecord]:
        """Return the first record stored under ``correlation_id`` as
        either its quote id or its order id."""
        ...

    def save(self, record: IdentityRecord) -> None: ...


class InMemoryIdentityStore:
    """Insertion-ordered identity store for tests and single-process hosts."""

    def __init__(self, records: Optional[List[IdentityRecord]] = None) -> None:
        self._records: List[IdentityRecord] = list(records or [])

    def find_first(self, correlation_id: str) -> Optional[IdentityRecord]:
        key = str(correlation_id)
        for record in self._records:
            if record.quote_id == key or record.order_id == key:
                return record
        return None

    def save(self, record: IdentityRecord) -> None:
        self._records.append(record)


class IdentityResolver:
    """Look up a complete identity record for a quote or order id.

    Only the first match is considered: an incomplete first match is a
    miss even when a later record would be complete.
    """

    def __init__(self, store: IdentityStore) -> None:
        self.store = store

    def resolve(self, correlation_id: str) -> Optional[IdentityRecord]:
        # IdentityStoreUnavailable propagates; it is not a miss
        record = self.store.find_first(str(correlation_id))
        if record is None or not record.is_complete:
            logger.debug("No complete identity stored for %s", correlation_id)
            return None
        return record
