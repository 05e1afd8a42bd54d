"""Assemble the transaction and tracking records for a purchase event."""

from __future__ import annotations

import time
from typing import Any, Callable, Optional

from serverside_analytics.events import (
    SUCCESS_PAGE_PATH,
    IdentityRecord,
    InvoiceContext,
    OrderContext,
    TrackingRecord,
    TransactionRecord,
)
from serverside_analytics.hooks import (
    TRANSACTION_DATA_HOOK,
    ExtensionHookBus,
)
from serverside_analytics.normalizer import paid_amount


def paid_shipping(invoice: InvoiceContext, tax_display: Any) -> float:
    shipping = paid_amount(
        tax_display, invoice.base_shipping_amount, invoice.base_shipping_incl_tax
    )
    return shipping if shipping is not None else 0


def assemble_transaction(
    order: OrderContext,
    invoice: InvoiceContext,
    identity: IdentityRecord,
    tax_display: Any,
    *,
    hooks: Optional[ExtensionHookBus] = None,
    clock: Callable[[], float] = time.time,
) -> TransactionRecord:
    """Build the transaction record and run the transaction hook on it.

    ``timestamp_micros`` is the send time taken from ``clock``; the
    collector expects it rather than the order date.
    """
    transaction = TransactionRecord(
        transaction_id=order.increment_id,
        affiliation=order.store_name,
        currency=invoice.currency,
        revenue=invoice.base_grand_total,
        tax=invoice.base_tax_amount,
        shipping=paid_shipping(invoice, tax_display),
        coupon_code=order.coupon_code,
        session_id=identity.session_id,
        timestamp_micros=int(clock() * 1_000_000),
    )
    if hooks is not None:
        hooks.dispatch(TRANSACTION_DATA_HOOK, transaction_data=transaction)
    return transaction


def build_tracking(order: OrderContext, identity: IdentityRecord) -> TrackingRecord:
    return TrackingRecord(
        client_id=identity.client_id,
        ip_override=order.remote_ip,
        document_path=SUCCESS_PAGE_PATH,
    )
