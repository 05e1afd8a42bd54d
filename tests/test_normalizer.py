"""Tests for line-item normalization and the tax-display price policy."""

from unittest.mock import MagicMock

import pytest

from conftest import make_item
from serverside_analytics.events import TaxDisplayType
from serverside_analytics.hooks import PRODUCT_ITEM_HOOK, ExtensionHookBus
from serverside_analytics.normalizer import (
    is_excluding_tax,
    normalize_items,
    paid_amount,
)


class TestPaidAmount:
    @pytest.mark.parametrize("display", [1, "1", "1.0", 1.0, TaxDisplayType.EXCLUDING_TAX])
    def test_excluding_tax_uses_base(self, display):
        assert paid_amount(display, 9.99, 12.09) == 9.99

    @pytest.mark.parametrize("display", [2, "3", "1.5", None, "", "excl"])
    def test_otherwise_uses_incl_tax(self, display):
        assert paid_amount(display, 9.99, 12.09) == 12.09

    def test_is_excluding_tax(self):
        assert is_excluding_tax("1")
        assert not is_excluding_tax(None)


class TestNormalizeItems:
    def test_skips_deleted_and_composite_children(self):
        items = [
            make_item(item_id="1", sku="DEL", is_deleted=True),
            make_item(item_id="2", sku="CFG"),
            make_item(item_id="3", sku="CFG-RED", parent_item_id="2"),
            make_item(item_id="4", sku="XYZ"),
        ]

        products = list(normalize_items(items, TaxDisplayType.EXCLUDING_TAX))

        assert [p.sku for p in products] == ["CFG", "XYZ"]
        assert [p.position for p in products] == ["2", "4"]

    def test_product_fields(self):
        item = make_item(item_id="7", qty_ordered=3.0, base_price=9.99, base_price_incl_tax=12.09)

        (excl,) = normalize_items([item], "1")
        (incl,) = normalize_items([item], "2")

        assert excl.sku == "ABC"
        assert excl.name == "Enamel Mug"
        assert excl.quantity == 3.0
        assert excl.price == 9.99
        assert incl.price == 12.09

    def test_is_lazy(self):
        hooks = MagicMock()
        products = normalize_items([make_item()], "1", hooks)
        hooks.dispatch.assert_not_called()
        next(products)
        hooks.dispatch.assert_called_once()

    def test_product_hook_receives_product_and_item(self):
        bus = ExtensionHookBus()
        seen = []

        @bus.hook(PRODUCT_ITEM_HOOK)
        def mark(*, product, item):
            seen.append(item.item_id)
            product.name = product.name.upper()

        (product,) = normalize_items([make_item(item_id="7")], "1", bus)

        assert seen == ["7"]
        assert product.name == "ENAMEL MUG"

    def test_empty_invoice(self):
        assert list(normalize_items([], "1")) == []
