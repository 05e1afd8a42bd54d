"""Extension hook bus.

Handlers registered on a hook name receive the outbound record as keyword
arguments and may mutate it in place before the pipeline continues::

    bus = ExtensionHookBus()

    @bus.hook(TRANSACTION_DATA_HOOK)
    def tag_affiliation(*, transaction_data, **_):
        transaction_data.affiliation = "EU Store"

Handlers run synchronously in registration order. Their exceptions are not
caught here; the observer owns failure isolation.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List

PRODUCT_ITEM_HOOK = "serverside_analytics_product_item_transport_object"
TRANSACTION_DATA_HOOK = "serverside_analytics_transaction_data_transport_object"
TRACKING_DATA_HOOK = "serverside_analytics_tracking_data_transport_object"

Handler = Callable[..., Any]


class ExtensionHookBus:
    """Ordered, synchronous callback registry keyed by hook name."""

    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = {}

    def register(self, name: str, handler: Handler) -> None:
        self._handlers.setdefault(name, []).append(handler)

    def unregister(self, name: str, handler: Handler) -> None:
        """Remove ``handler`` from ``name``; raises ValueError if absent."""
        self._handlers.get(name, []).remove(handler)

    def hook(self, name: str) -> Callable[[Handler], Handler]:
        """Decorator form of :meth:`register`."""

        def decorator(handler: Handler) -> Handler:
            self.register(name, handler)
            return handler

        return decorator

    def handlers(self, name: str) -> List[Handler]:
        return list(self._handlers.get(name, []))

    def dispatch(self, name: str, **payload: Any) -> None:
        for handler in self.handlers(name):
            handler(**payload)
