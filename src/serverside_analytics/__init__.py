"""Server-side analytics — purchase events for invoiced orders.

Correlates an invoiced order with the analytics client/session ids captured
during the buyer's visit and sends a GA4 Measurement Protocol ``purchase``
event, without ever failing the host's order transaction.

Integration points (pick any or combine):
    1. Direct API        — call observer.execute(order, invoice)
    2. Starlette webhook — create_webhook_app(observer)
    3. Extension hooks   — mutate product/transaction/tracking records
"""

from serverside_analytics.client import (
    DeliveryError,
    DeliveryRejected,
    MeasurementProtocolClient,
)
from serverside_analytics.config import StaticStoreConfig
from serverside_analytics.emulation import StoreEmulation, emulated_environment
from serverside_analytics.events import (
    IdentityRecord,
    InvoiceContext,
    InvoiceLineItem,
    OrderContext,
    ProductRecord,
    PurchaseOutcome,
    TrackingRecord,
    TransactionRecord,
)
from serverside_analytics.hooks import ExtensionHookBus
from serverside_analytics.identity import (
    IdentityResolver,
    IdentityStoreUnavailable,
    InMemoryIdentityStore,
)
from serverside_analytics.observer import PurchaseEventObserver
from serverside_analytics.parser import HostPayloadParser


def __getattr__(name: str):
    if name == "create_webhook_app":
        from serverside_analytics.webhook import create_webhook_app

        return create_webhook_app
    if name == "BigQueryIdentityStore":
        from serverside_analytics.identity_store import BigQueryIdentityStore

        return BigQueryIdentityStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "PurchaseEventObserver",
    "OrderContext",
    "InvoiceContext",
    "InvoiceLineItem",
    "IdentityRecord",
    "ProductRecord",
    "TransactionRecord",
    "TrackingRecord",
    "PurchaseOutcome",
    "IdentityResolver",
    "IdentityStoreUnavailable",
    "InMemoryIdentityStore",
    "BigQueryIdentityStore",
    "ExtensionHookBus",
    "MeasurementProtocolClient",
    "DeliveryError",
    "DeliveryRejected",
    "StaticStoreConfig",
    "StoreEmulation",
    "emulated_environment",
    "HostPayloadParser",
    "create_webhook_app",
]

__version__ = "0.1.0"
