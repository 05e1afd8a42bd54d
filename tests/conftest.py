"""Shared record builders and collaborator fakes."""

from unittest.mock import MagicMock

import pytest

from serverside_analytics.events import (
    IdentityRecord,
    InvoiceContext,
    InvoiceLineItem,
    OrderContext,
)


def make_order(**overrides) -> OrderContext:
    values = dict(
        order_id="1001",
        quote_id=None,
        store_id="1",
        remote_ip="203.0.113.7",
        coupon_code="SPRING",
        store_name="Main Website Store",
        increment_id="000001001",
    )
    values.update(overrides)
    return OrderContext(**values)


def make_item(**overrides) -> InvoiceLineItem:
    values = dict(
        item_id="7",
        sku="ABC",
        name="Enamel Mug",
        is_deleted=False,
        parent_item_id=None,
        qty_ordered=1.0,
        base_price=9.99,
        base_price_incl_tax=12.09,
    )
    values.update(overrides)
    return InvoiceLineItem(**values)


def make_invoice(items=None, **overrides) -> InvoiceContext:
    values = dict(
        currency="EUR",
        base_grand_total=18.14,
        base_tax_amount=3.15,
        base_shipping_amount=5.0,
        base_shipping_incl_tax=6.05,
        items=tuple(items if items is not None else [make_item()]),
    )
    values.update(overrides)
    return InvoiceContext(**values)


@pytest.fixture
def identity():
    return IdentityRecord(client_id="C1", session_id="S1", order_id="1001")


@pytest.fixture
def mock_emulation():
    return MagicMock(spec=["enter", "exit"])


@pytest.fixture
def mock_delivery_client():
    return MagicMock(
        spec=[
            "set_transaction_data",
            "add_products",
            "set_tracking_data",
            "fire_purchase_event",
        ]
    )
