"""Starlette endpoint that receives the host's invoice-created signal.

Usage::

    import uvicorn
    from serverside_analytics.webhook import create_webhook_app

    app = create_webhook_app(observer)
    uvicorn.run(app)

The pipeline is blocking, so it runs in Starlette's threadpool. Delivery
failures are already absorbed by the observer; the host only sees 400 for
malformed payloads and 503 when the identity store is down.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from serverside_analytics.identity import IdentityStoreUnavailable
from serverside_analytics.parser import HostPayloadParser

logger = logging.getLogger(__name__)

DEFAULT_PATH = "/webhooks/invoice-created"


def create_webhook_app(observer: Any, path: str = DEFAULT_PATH) -> Starlette:
    async def invoice_created(request: Request) -> JSONResponse:
        try:
            body = json.loads(await request.body() or b"null")
            order = HostPayloadParser.parse_order(body)
            invoice = HostPayloadParser.parse_invoice(body)
        except ValueError as exc:  # JSONDecodeError, PayloadError
            return JSONResponse({"error": str(exc)}, status_code=400)

        try:
            outcome = await run_in_threadpool(observer.execute, order, invoice)
        except IdentityStoreUnavailable:
            logger.exception("Identity store unavailable for order %s", order.order_id)
            return JSONResponse({"error": "identity store unavailable"}, status_code=503)

        return JSONResponse({"outcome": outcome.value})

    return Starlette(routes=[Route(path, invoice_created, methods=["POST"])])
