"""Purchase event data model.

Context records are read-only views of the host's order and invoice.
Outbound records (product, transaction, tracking) stay mutable until they
are handed to the delivery client so extension hooks can adjust them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Tuple

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TaxDisplayType(IntEnum):
    """Host platform tax display codes (``tax/display/type``)."""

    EXCLUDING_TAX = 1
    INCLUDING_TAX = 2
    BOTH = 3


class PurchaseOutcome(str, Enum):
    """Terminal state reached by a single purchase event invocation."""

    DELIVERED = "delivered"
    TRANSACTION_FAILED = "transaction_failed"
    TRACKING_FAILED = "tracking_failed"

    SUPPRESSED_NO_ID = "suppressed_no_id"
    SUPPRESSED_CONFIG_OFF = "suppressed_config_off"
    SUPPRESSED_NO_RECORD = "suppressed_no_record"


SUCCESS_PAGE_PATH = "/checkout/onepage/success/"


# ---------------------------------------------------------------------------
# Host contexts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OrderContext:
    """The order whose invoice triggered the purchase event."""

    order_id: Optional[str] = None
    quote_id: Optional[str] = None
    store_id: Optional[str] = None
    remote_ip: Optional[str] = None
    coupon_code: Optional[str] = None
    store_name: Optional[str] = None
    increment_id: Optional[str] = None

    @property
    def correlation_id(self) -> Optional[str]:
        """Order id when known, else the quote id it was placed from."""
        return self.order_id or self.quote_id or None


@dataclass(frozen=True)
class InvoiceLineItem:
    """An invoice line joined with the values of its order item."""

    item_id: Optional[str] = None
    sku: str = ""
    name: str = ""
    is_deleted: bool = False
    parent_item_id: Optional[str] = None
    qty_ordered: Optional[float] = None
    base_price: Optional[float] = None
    base_price_incl_tax: Optional[float] = None


@dataclass(frozen=True)
class InvoiceContext:
    currency: Optional[str] = None
    base_grand_total: Optional[float] = None
    base_tax_amount: Optional[float] = None
    base_shipping_amount: Optional[float] = None
    base_shipping_incl_tax: Optional[float] = None
    items: Tuple[InvoiceLineItem, ...] = ()


@dataclass(frozen=True)
class IdentityRecord:
    """Client/session pair captured during the buyer's browsing session."""

    client_id: Optional[str] = None
    session_id: Optional[str] = None
    quote_id: Optional[str] = None
    order_id: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.client_id) and bool(self.session_id)


# ---------------------------------------------------------------------------
# Outbound records
# ---------------------------------------------------------------------------


def _drop_none(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


@dataclass
class ProductRecord:
    sku: str = ""
    name: str = ""
    price: Optional[float] = None
    quantity: Optional[float] = None
    # Source line-item id, not the index in the product list
    position: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return _drop_none(dict(self.__dict__))


@dataclass
class TransactionRecord:
    transaction_id: Optional[str] = None
    affiliation: Optional[str] = None
    currency: Optional[str] = None
    revenue: Optional[float] = None
    tax: Optional[float] = None
    shipping: float = 0
    coupon_code: Optional[str] = None
    session_id: Optional[str] = None
    timestamp_micros: Optional[int] = None

    def to_payload(self) -> Dict[str, Any]:
        return _drop_none(dict(self.__dict__))


@dataclass
class TrackingRecord:
    client_id: Optional[str] = None
    ip_override: Optional[str] = None
    document_path: str = field(default=SUCCESS_PAGE_PATH)

    def to_payload(self) -> Dict[str, Any]:
        return _drop_none(dict(self.__dict__))
