#!/usr/bin/env python3
"""
Purchase Demo — invoice-created signal to GA4 purchase event
=============================================================

Wires a PurchaseEventObserver with in-memory config, identity store and
a mock Measurement Protocol collector, then replays four invoices:
  1. Normal purchase (deleted line + composite child skipped)
  2. Store with server-side analytics disabled
  3. Order without a captured client/session id
  4. Collector outage (isolated, order processing unaffected)

Run:
    python examples/purchase_demo.py
"""

from __future__ import annotations

import json
import logging

import httpx

from serverside_analytics import (
    ExtensionHookBus,
    IdentityRecord,
    IdentityResolver,
    InMemoryIdentityStore,
    InvoiceContext,
    InvoiceLineItem,
    MeasurementProtocolClient,
    OrderContext,
    PurchaseEventObserver,
    StaticStoreConfig,
    StoreEmulation,
)
from serverside_analytics.config import (
    XML_PATH_API_SECRET,
    XML_PATH_ENABLED,
    XML_PATH_MEASUREMENT_ID,
    XML_PATH_TAX_DISPLAY_TYPE,
)
from serverside_analytics.hooks import TRANSACTION_DATA_HOOK

COLLECTOR_UP = True


def collector(request: httpx.Request) -> httpx.Response:
    if not COLLECTOR_UP:
        return httpx.Response(503)
    params = json.loads(request.content)["events"][0]["params"]
    print(
        f"   -> collector got purchase {params['transaction_id']}: "
        f"value={params.get('value')} items={[i['item_id'] for i in params['items']]}"
    )
    return httpx.Response(204)


def build_observer() -> PurchaseEventObserver:
    emulation = StoreEmulation()
    config = StaticStoreConfig(
        defaults={
            XML_PATH_ENABLED: "1",
            XML_PATH_TAX_DISPLAY_TYPE: "1",
            XML_PATH_MEASUREMENT_ID: "G-DEMO",
            XML_PATH_API_SECRET: "demo-secret",
        },
        stores={"2": {XML_PATH_ENABLED: "0"}},
        emulation=emulation,
    )
    store = InMemoryIdentityStore(
        [IdentityRecord(client_id="555.777", session_id="1700000000", order_id="1001")]
    )
    hooks = ExtensionHookBus()

    @hooks.hook(TRANSACTION_DATA_HOOK)
    def tag_channel(*, transaction_data):
        transaction_data.affiliation = f"{transaction_data.affiliation} (server)"

    return PurchaseEventObserver(
        config=config,
        emulation=emulation,
        resolver=IdentityResolver(store),
        client_factory=lambda: MeasurementProtocolClient.from_config(
            config, transport=httpx.MockTransport(collector)
        ),
        hooks=hooks,
    )


def main() -> None:
    global COLLECTOR_UP
    logging.basicConfig(level=logging.INFO, format="   %(name)s: %(message)s")
    observer = build_observer()

    invoice = InvoiceContext(
        currency="EUR",
        base_grand_total=24.99,
        base_tax_amount=4.34,
        base_shipping_amount=5.0,
        base_shipping_incl_tax=6.05,
        items=(
            InvoiceLineItem(item_id="1", sku="GONE", is_deleted=True),
            InvoiceLineItem(item_id="2", sku="SHIRT", name="Shirt", qty_ordered=1, base_price=10.0),
            InvoiceLineItem(item_id="3", sku="SHIRT-RED", parent_item_id="2"),
            InvoiceLineItem(item_id="4", sku="ABC", name="Mug", qty_ordered=1, base_price=9.99),
        ),
    )
    order = OrderContext(
        order_id="1001", store_id="1", store_name="Main Website Store",
        increment_id="000001001", remote_ip="203.0.113.7",
    )

    print("\n1. Normal purchase")
    print(f"   outcome: {observer.execute(order, invoice).value}")

    print("\n2. Store 2 has server-side analytics disabled")
    disabled = OrderContext(order_id="1001", store_id="2", increment_id="000001001")
    print(f"   outcome: {observer.execute(disabled, invoice).value}")

    print("\n3. No captured client id")
    unknown = OrderContext(order_id="2002", store_id="1", increment_id="000002002")
    print(f"   outcome: {observer.execute(unknown, invoice).value}")

    print("\n4. Collector outage")
    COLLECTOR_UP = False
    print(f"   outcome: {observer.execute(order, invoice).value}")


if __name__ == "__main__":
    main()
