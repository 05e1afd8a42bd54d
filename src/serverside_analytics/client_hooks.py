"""HTTPX event hooks that log Measurement Protocol traffic.

Attached by ``MeasurementProtocolClient`` when request logging is enabled
for the store::

    hook = DeliveryLoggingHook()
    client = httpx.Client(
        event_hooks={
            "request": [hook.log_request],
            "response": [hook.log_response],
        },
    )
"""

from __future__ import annotations

import logging
import re
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

_SECRET_PARAM = re.compile(r"(api_secret=)[^&]+")


class DeliveryLoggingHook:
    """Logs each collector request and response at info level.

    The ``api_secret`` query parameter is masked in logged URLs.
    """

    PREFIX = "serverside_analytics_requests"

    def __init__(self, log: Optional[logging.Logger] = None) -> None:
        self.log = log or logger

    @staticmethod
    def _masked_url(request: httpx.Request) -> str:
        return _SECRET_PARAM.sub(r"\1***", str(request.url))

    def log_request(self, request: httpx.Request) -> None:
        body = request.content.decode("utf-8", errors="replace") if request.content else ""
        self.log.info(
            "%s: %s %s %s", self.PREFIX, request.method, self._masked_url(request), body
        )

    def log_response(self, response: httpx.Response) -> None:
        response.read()
        self.log.info(
            "%s: response %d from %s %s",
            self.PREFIX,
            response.status_code,
            self._masked_url(response.request),
            response.text,
        )
