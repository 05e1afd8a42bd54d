"""Delivery client for GA4 Measurement Protocol purchase events.

A client instance is a session for exactly one purchase event::

    client = MeasurementProtocolClient("G-XXXX", "secret")
    client.set_transaction_data(transaction)
    client.add_products(products)
    client.set_tracking_data(tracking)
    client.fire_purchase_event()
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol

import httpx

from serverside_analytics.client_hooks import DeliveryLoggingHook
from serverside_analytics.config import (
    XML_PATH_API_SECRET,
    XML_PATH_DEBUG,
    XML_PATH_ENABLE_LOGGING,
    XML_PATH_MEASUREMENT_ID,
    StoreConfig,
)
from serverside_analytics.events import ProductRecord, TrackingRecord, TransactionRecord

logger = logging.getLogger(__name__)


class DeliveryError(Exception):
    """The purchase event could not be built or sent."""


class DeliveryRejected(DeliveryError):
    """The collector validated the payload and rejected it."""

    def __init__(self, message: str, validation_messages: List[dict]):
        super().__init__(message)
        self.validation_messages = validation_messages


class DeliveryClient(Protocol):
    def set_transaction_data(self, transaction: TransactionRecord) -> None: ...

    def add_products(self, products: Iterable[ProductRecord]) -> None: ...

    def set_tracking_data(self, tracking: TrackingRecord) -> None: ...

    def fire_purchase_event(self) -> Any: ...


def _as_index(position: Any) -> Optional[int]:
    try:
        return int(position)
    except (TypeError, ValueError):
        return None


def _drop_none(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


class MeasurementProtocolClient:
    """Sends one ``purchase`` event to the GA4 Measurement Protocol."""

    COLLECT_URL = "https://www.google-analytics.com/mp/collect"
    DEBUG_COLLECT_URL = "https://www.google-analytics.com/debug/mp/collect"
    EVENT_NAME = "purchase"

    def __init__(
        self,
        measurement_id: str,
        api_secret: str,
        *,
        debug: bool = False,
        logging_enabled: bool = False,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
        collect_url: Optional[str] = None,
    ):
        self.measurement_id = measurement_id
        self.api_secret = api_secret
        self.debug = debug
        self.logging_enabled = logging_enabled
        self.timeout = timeout
        self.collect_url = collect_url or (
            self.DEBUG_COLLECT_URL if debug else self.COLLECT_URL
        )
        self._transport = transport

        self._transaction: Optional[TransactionRecord] = None
        self._products: List[ProductRecord] = []
        self._tracking: Optional[TrackingRecord] = None

    @classmethod
    def from_config(cls, config: StoreConfig, **kwargs: Any) -> "MeasurementProtocolClient":
        """Build a client from the current store scope's settings."""
        return cls(
            measurement_id=config.get_value(XML_PATH_MEASUREMENT_ID) or "",
            api_secret=config.get_value(XML_PATH_API_SECRET) or "",
            debug=config.is_flag_set(XML_PATH_DEBUG),
            logging_enabled=config.is_flag_set(XML_PATH_ENABLE_LOGGING),
            **kwargs,
        )

    # ------------------------------------------------------------------ #
    # Session calls
    # ------------------------------------------------------------------ #

    def set_transaction_data(self, transaction: TransactionRecord) -> None:
        if not transaction.transaction_id:
            raise DeliveryError("Transaction data requires a transaction_id")
        self._transaction = transaction

    def add_products(self, products: Iterable[ProductRecord]) -> None:
        if self._transaction is None:
            raise DeliveryError("Set transaction data before adding products")
        self._products.extend(products)

    def set_tracking_data(self, tracking: TrackingRecord) -> None:
        if not tracking.client_id:
            raise DeliveryError("Tracking data requires a client_id")
        self._tracking = tracking

    # ------------------------------------------------------------------ #
    # Payload
    # ------------------------------------------------------------------ #

    def build_payload(self) -> Dict[str, Any]:
        if self._transaction is None or self._tracking is None:
            raise DeliveryError("Transaction and tracking data must both be set")
        transaction = self._transaction
        tracking = self._tracking

        items = [
            _drop_none(
                {
                    "item_id": product.sku,
                    "item_name": product.name,
                    "price": product.price,
                    "quantity": product.quantity,
                    "index": _as_index(product.position),
                }
            )
            for product in self._products
        ]
        params = _drop_none(
            {
                "transaction_id": transaction.transaction_id,
                "affiliation": transaction.affiliation,
                "currency": transaction.currency,
                "value": transaction.revenue,
                "tax": transaction.tax,
                "shipping": transaction.shipping,
                "coupon": transaction.coupon_code,
                "session_id": transaction.session_id,
                "page_location": tracking.document_path,
            }
        )
        params["items"] = items

        return _drop_none(
            {
                "client_id": tracking.client_id,
                "timestamp_micros": transaction.timestamp_micros,
                "ip_override": tracking.ip_override,
                "events": [{"name": self.EVENT_NAME, "params": params}],
            }
        )

    # ------------------------------------------------------------------ #
    # Send
    # ------------------------------------------------------------------ #

    def _http_client(self) -> httpx.Client:
        event_hooks: Dict[str, list] = {}
        if self.logging_enabled:
            hook = DeliveryLoggingHook()
            event_hooks = {"request": [hook.log_request], "response": [hook.log_response]}
        return httpx.Client(
            transport=self._transport,
            timeout=self.timeout,
            event_hooks=event_hooks,
        )

    def fire_purchase_event(self) -> Dict[str, Any]:
        """POST the purchase event; returns the collector's JSON body, if any."""
        if not self.measurement_id or not self.api_secret:
            raise DeliveryError("measurement_id and api_secret are required")
        payload = self.build_payload()

        try:
            with self._http_client() as http:
                response = http.post(
                    self.collect_url,
                    params={
                        "measurement_id": self.measurement_id,
                        "api_secret": self.api_secret,
                    },
                    json=payload,
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise DeliveryError(f"Purchase event delivery failed: {exc}") from exc

        body: Dict[str, Any] = {}
        if response.content:
            try:
                body = response.json()
            except ValueError:
                body = {}

        messages = body.get("validationMessages") if isinstance(body, dict) else None
        if self.debug and messages:
            raise DeliveryRejected(
                f"Collector rejected purchase event {self._transaction.transaction_id}",
                messages,
            )

        logger.debug(
            "Sent purchase event %s with %d items",
            self._transaction.transaction_id,
            len(self._products),
        )
        return body
