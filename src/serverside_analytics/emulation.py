"""Store environment emulation.

Store-scoped configuration only resolves correctly while the host runs in
the order's store scope. ``emulated_environment`` is the guard used by the
observer: every ``enter`` is paired with exactly one ``exit``.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Protocol

logger = logging.getLogger(__name__)

AREA_ADMINHTML = "adminhtml"
AREA_FRONTEND = "frontend"


class Emulation(Protocol):
    def enter(self, store_id: Optional[str], area: str) -> None: ...

    def exit(self) -> None: ...


class StoreEmulation:
    """In-process emulation that tracks the active store id.

    Nested ``enter`` calls stack; ``exit`` restores the previous scope.
    """

    def __init__(self) -> None:
        self._stack: List[tuple] = []

    @property
    def current_store_id(self) -> Optional[str]:
        return self._stack[-1][0] if self._stack else None

    @property
    def current_area(self) -> Optional[str]:
        return self._stack[-1][1] if self._stack else None

    def enter(self, store_id: Optional[str], area: str) -> None:
        self._stack.append((store_id, area))

    def exit(self) -> None:
        if not self._stack:
            logger.warning("exit() called without an active store emulation")
            return
        self._stack.pop()


@contextmanager
def emulated_environment(
    emulation: Emulation,
    store_id: Optional[str],
    area: str = AREA_ADMINHTML,
) -> Iterator[None]:
    """Run the block inside the store scope of ``store_id``.

    ``exit`` is attempted even when ``enter`` itself raised.
    """
    try:
        emulation.enter(store_id, area)
        yield
    finally:
        emulation.exit()
