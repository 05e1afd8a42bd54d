"""PurchaseEventObserver — sends a purchase event when an invoice is created.

The host calls ``execute()`` once per invoice-creation signal. Suppression
and delivery failures never propagate; only an unavailable identity store
does, since the host has to see that.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from serverside_analytics.assembler import assemble_transaction, build_tracking
from serverside_analytics.client import DeliveryClient
from serverside_analytics.config import (
    XML_PATH_ENABLE_LOGGING,
    XML_PATH_ENABLED,
    XML_PATH_TAX_DISPLAY_TYPE,
    StoreConfig,
)
from serverside_analytics.emulation import AREA_ADMINHTML, Emulation, emulated_environment
from serverside_analytics.events import (
    IdentityRecord,
    InvoiceContext,
    OrderContext,
    ProductRecord,
    PurchaseOutcome,
)
from serverside_analytics.hooks import TRACKING_DATA_HOOK, ExtensionHookBus
from serverside_analytics.identity import IdentityResolver
from serverside_analytics.normalizer import normalize_items

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhaseResult:
    """Outcome of one delivery failure domain."""

    value: Any = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _attempt(step: Callable[[], Any]) -> PhaseResult:
    try:
        return PhaseResult(value=step())
    except Exception as exc:
        return PhaseResult(error=exc)


class PurchaseEventObserver:
    """Forwards invoiced orders to the analytics backend as purchases.

    Usage::

        observer = PurchaseEventObserver(
            config=config,
            emulation=emulation,
            resolver=IdentityResolver(store),
            client_factory=lambda: MeasurementProtocolClient.from_config(config),
        )
        observer.execute(order, invoice)

    ``client_factory`` is called once per delivered event, inside the
    store scope, so each event gets its own client session.

    Suppressed invocations return their outcome and log at debug only.
    """

    def __init__(
        self,
        *,
        config: StoreConfig,
        emulation: Emulation,
        resolver: IdentityResolver,
        client_factory: Callable[[], DeliveryClient],
        hooks: Optional[ExtensionHookBus] = None,
        area: str = AREA_ADMINHTML,
    ):
        self.config = config
        self.emulation = emulation
        self.resolver = resolver
        self.client_factory = client_factory
        self.hooks = hooks or ExtensionHookBus()
        self.area = area

    def execute(self, order: OrderContext, invoice: InvoiceContext) -> PurchaseOutcome:
        correlation_id = order.correlation_id
        if not correlation_id:
            return PurchaseOutcome.SUPPRESSED_NO_ID

        with emulated_environment(self.emulation, order.store_id, self.area):
            if not self.config.is_flag_set(XML_PATH_ENABLED):
                logger.debug("Server-side analytics disabled for store %s", order.store_id)
                return PurchaseOutcome.SUPPRESSED_CONFIG_OFF

            identity = self.resolver.resolve(correlation_id)
            if identity is None:
                return PurchaseOutcome.SUPPRESSED_NO_RECORD

            if self.config.is_flag_set(XML_PATH_ENABLE_LOGGING):
                logger.info(
                    "serverside_analytics_requests: GA UserID: %s", identity.client_id
                )

            return self.send_purchase_event(order, invoice, identity)

    def send_purchase_event(
        self,
        order: OrderContext,
        invoice: InvoiceContext,
        identity: IdentityRecord,
    ) -> PurchaseOutcome:
        """Run both delivery phases for an already-resolved identity."""
        tax_display: Any = self.config.get_value(XML_PATH_TAX_DISPLAY_TYPE)

        def submit_transaction() -> DeliveryClient:
            products: List[ProductRecord] = list(
                normalize_items(invoice.items, tax_display, self.hooks)
            )
            transaction = assemble_transaction(
                order, invoice, identity, tax_display, hooks=self.hooks
            )
            client = self.client_factory()
            client.set_transaction_data(transaction)
            client.add_products(products)
            return client

        result = _attempt(submit_transaction)
        if not result.ok:
            logger.info(
                "Purchase event for order %s not sent: %s",
                order.increment_id,
                result.error,
                exc_info=result.error,
            )
            return PurchaseOutcome.TRANSACTION_FAILED
        client: DeliveryClient = result.value

        def fire() -> None:
            tracking = build_tracking(order, identity)
            self.hooks.dispatch(TRACKING_DATA_HOOK, tracking_data=tracking)
            client.set_tracking_data(tracking)
            client.fire_purchase_event()

        result = _attempt(fire)
        if not result.ok:
            logger.info(
                "Purchase event for order %s failed to fire: %s",
                order.increment_id,
                result.error,
                exc_info=result.error,
            )
            return PurchaseOutcome.TRACKING_FAILED

        return PurchaseOutcome.DELIVERED
