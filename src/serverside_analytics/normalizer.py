"""Turn invoice line items into product records for the purchase event."""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Optional, TypeVar

from serverside_analytics.events import InvoiceLineItem, ProductRecord, TaxDisplayType
from serverside_analytics.hooks import PRODUCT_ITEM_HOOK, ExtensionHookBus

T = TypeVar("T")


def is_excluding_tax(tax_display: Any) -> bool:
    try:
        return float(tax_display) == TaxDisplayType.EXCLUDING_TAX
    except (TypeError, ValueError):
        return False


def paid_amount(tax_display: Any, excluding: T, including: T) -> T:
    """Pick the amount the buyer saw: tax-exclusive when the store displays
    prices excluding tax, tax-inclusive otherwise."""
    return excluding if is_excluding_tax(tax_display) else including


def is_reportable(item: InvoiceLineItem) -> bool:
    # Children of a composite product are reported through their parent
    return not item.is_deleted and not item.parent_item_id


def normalize_items(
    items: Iterable[InvoiceLineItem],
    tax_display: Any,
    hooks: Optional[ExtensionHookBus] = None,
) -> Iterator[ProductRecord]:
    """Yield one product per reportable invoice line, in invoice order.

    Each product goes through the product hook, alongside the line it came
    from, before it is yielded.
    """
    for item in items:
        if not is_reportable(item):
            continue
        product = ProductRecord(
            sku=item.sku,
            name=item.name,
            price=paid_amount(tax_display, item.base_price, item.base_price_incl_tax),
            quantity=item.qty_ordered,
            position=item.item_id,
        )
        if hooks is not None:
            hooks.dispatch(PRODUCT_ITEM_HOOK, product=product, item=item)
        yield product
