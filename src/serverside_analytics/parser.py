"""Parse host invoice-created payloads into order and invoice contexts.

Expected body::

    {
      "order": {"entity_id": 1001, "quote_id": null, "store_id": 1,
                "remote_ip": "203.0.113.7", "coupon_code": "SPRING",
                "store_name": "Main Website", "increment_id": "000001001"},
      "invoice": {"global_currency_code": "EUR", "base_grand_total": "24.99",
                  "base_tax_amount": "4.34", "base_shipping_amount": 5,
                  "base_shipping_incl_tax": 6.05,
                  "items": [{"entity_id": 7, "sku": "ABC", "name": "Mug",
                             "is_deleted": false,
                             "order_item": {"parent_item_id": null,
                                            "qty_ordered": 1,
                                            "base_price": 9.99,
                                            "base_price_incl_tax": 12.09}}]}
    }
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from serverside_analytics.events import InvoiceContext, InvoiceLineItem, OrderContext


class PayloadError(ValueError):
    """The payload does not have the expected shape."""


class HostPayloadParser:
    """Build read-only contexts from host JSON bodies."""

    # ------------------------------------------------------------------ #
    # Scalars
    # ------------------------------------------------------------------ #

    @staticmethod
    def _str(value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return str(value)

    @staticmethod
    def _id(value: Any) -> Optional[str]:
        # The host uses 0 for "not assigned yet"
        if value in (None, "", 0, "0"):
            return None
        return str(value)

    @staticmethod
    def _float(value: Any) -> Optional[float]:
        if value is None or value == "":
            return None
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise PayloadError(f"Not a number: {value!r}") from exc

    @staticmethod
    def _bool(value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes")
        return bool(value)

    @staticmethod
    def _object(body: Any, key: str) -> Dict[str, Any]:
        value = body.get(key) if isinstance(body, dict) else None
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise PayloadError(f"'{key}' must be an object")
        return value

    # ------------------------------------------------------------------ #
    # Contexts
    # ------------------------------------------------------------------ #

    @classmethod
    def parse_order(cls, body: Dict[str, Any]) -> OrderContext:
        if not isinstance(body, dict):
            raise PayloadError("Payload must be a JSON object")
        order = cls._object(body, "order")
        return OrderContext(
            order_id=cls._id(order.get("entity_id")),
            quote_id=cls._id(order.get("quote_id")),
            store_id=cls._str(order.get("store_id")),
            remote_ip=cls._str(order.get("remote_ip")),
            coupon_code=cls._str(order.get("coupon_code")),
            store_name=cls._str(order.get("store_name")),
            increment_id=cls._str(order.get("increment_id")),
        )

    @classmethod
    def parse_line_item(cls, item: Dict[str, Any]) -> InvoiceLineItem:
        if not isinstance(item, dict):
            raise PayloadError("Invoice items must be objects")
        order_item = cls._object(item, "order_item")
        return InvoiceLineItem(
            item_id=cls._str(item.get("entity_id")),
            sku=str(item.get("sku") or ""),
            name=str(item.get("name") or ""),
            is_deleted=cls._bool(item.get("is_deleted")),
            parent_item_id=cls._str(order_item.get("parent_item_id")),
            qty_ordered=cls._float(order_item.get("qty_ordered")),
            base_price=cls._float(order_item.get("base_price")),
            base_price_incl_tax=cls._float(order_item.get("base_price_incl_tax")),
        )

    @classmethod
    def parse_invoice(cls, body: Dict[str, Any]) -> InvoiceContext:
        if not isinstance(body, dict):
            raise PayloadError("Payload must be a JSON object")
        invoice = cls._object(body, "invoice")
        items = invoice.get("items") or []
        if not isinstance(items, list):
            raise PayloadError("'invoice.items' must be a list")
        return InvoiceContext(
            currency=cls._str(invoice.get("global_currency_code")),
            base_grand_total=cls._float(invoice.get("base_grand_total")),
            base_tax_amount=cls._float(invoice.get("base_tax_amount")),
            base_shipping_amount=cls._float(invoice.get("base_shipping_amount")),
            base_shipping_incl_tax=cls._float(invoice.get("base_shipping_incl_tax")),
            items=tuple(cls.parse_line_item(item) for item in items),
        )
