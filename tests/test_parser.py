"""Tests for HostPayloadParser."""

import pytest

from serverside_analytics.parser import HostPayloadParser, PayloadError


def _body():
    return {
        "order": {
            "entity_id": 1001,
            "quote_id": None,
            "store_id": 1,
            "remote_ip": "203.0.113.7",
            "coupon_code": "",
            "store_name": "Main Website Store",
            "increment_id": "000001001",
        },
        "invoice": {
            "global_currency_code": "EUR",
            "base_grand_total": "18.14",
            "base_tax_amount": "3.15",
            "base_shipping_amount": 5,
            "base_shipping_incl_tax": 6.05,
            "items": [
                {
                    "entity_id": 7,
                    "sku": "ABC",
                    "name": "Enamel Mug",
                    "is_deleted": "0",
                    "order_item": {
                        "parent_item_id": None,
                        "qty_ordered": "2.0000",
                        "base_price": "9.99",
                        "base_price_incl_tax": "12.09",
                    },
                },
                {
                    "entity_id": 8,
                    "sku": "CFG-RED",
                    "name": "Shirt Red",
                    "is_deleted": False,
                    "order_item": {"parent_item_id": 6},
                },
            ],
        },
    }


class TestParseOrder:
    def test_fields(self):
        order = HostPayloadParser.parse_order(_body())

        assert order.order_id == "1001"
        assert order.quote_id is None
        assert order.store_id == "1"
        assert order.remote_ip == "203.0.113.7"
        assert order.coupon_code is None
        assert order.increment_id == "000001001"

    @pytest.mark.parametrize("unset", [0, "0", "", None])
    def test_unassigned_order_id_falls_back_to_quote(self, unset):
        order = HostPayloadParser.parse_order({"order": {"entity_id": unset, "quote_id": 55}})

        assert order.order_id is None
        assert order.correlation_id == "55"

    def test_zero_ids_have_no_correlation(self):
        order = HostPayloadParser.parse_order({"order": {"entity_id": 0, "quote_id": 0}})
        assert order.correlation_id is None

    def test_missing_order_section(self):
        order = HostPayloadParser.parse_order({})
        assert order.correlation_id is None

    def test_not_an_object(self):
        with pytest.raises(PayloadError):
            HostPayloadParser.parse_order([1, 2])

    def test_order_must_be_object(self):
        with pytest.raises(PayloadError):
            HostPayloadParser.parse_order({"order": "1001"})


class TestParseInvoice:
    def test_totals(self):
        invoice = HostPayloadParser.parse_invoice(_body())

        assert invoice.currency == "EUR"
        assert invoice.base_grand_total == 18.14
        assert invoice.base_tax_amount == 3.15
        assert invoice.base_shipping_amount == 5.0
        assert invoice.base_shipping_incl_tax == 6.05

    def test_line_items(self):
        first, second = HostPayloadParser.parse_invoice(_body()).items

        assert first.item_id == "7"
        assert first.sku == "ABC"
        assert first.is_deleted is False
        assert first.qty_ordered == 2.0
        assert first.base_price == 9.99
        assert first.base_price_incl_tax == 12.09
        assert second.parent_item_id == "6"
        assert second.base_price is None

    def test_items_must_be_list(self):
        body = _body()
        body["invoice"]["items"] = {"entity_id": 7}
        with pytest.raises(PayloadError):
            HostPayloadParser.parse_invoice(body)

    def test_bad_number(self):
        body = _body()
        body["invoice"]["base_grand_total"] = "lots"
        with pytest.raises(PayloadError):
            HostPayloadParser.parse_invoice(body)

    def test_no_items(self):
        assert HostPayloadParser.parse_invoice({"invoice": {}}).items == ()
