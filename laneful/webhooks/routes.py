"""FastAPI router exposing a Laneful webhook endpoint."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from laneful import __version__
from laneful.logger import logger
from laneful.webhooks.handler import WebhookHandler, generate_test_payload
from laneful.webhooks.headers import get_signature_header_name
from laneful.webhooks.payload import EVENT_TYPES
from laneful.webhooks.signature import generate_signature


def create_webhook_router(handler: WebhookHandler, prefix: str = "/webhooks") -> APIRouter:
    """
    Build a router with:

    - POST {prefix}/laneful  receive and process webhook events
    - GET  {prefix}/laneful  endpoint configuration and a signed sample request
    - GET  {prefix}/health   service status
    """
    router = APIRouter(prefix=prefix, tags=["Webhooks"])

    @router.post("/laneful")
    async def receive_webhook(request: Request):
        body = await request.body()
        try:
            payload = body.decode("utf-8")
        except UnicodeDecodeError:
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"error": "Invalid payload: body is not valid UTF-8"},
            )

        try:
            result = await run_in_threadpool(handler.handle, payload, request.headers)
        except Exception:
            logger.exception("Unexpected error processing webhook")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "Internal server error"},
            )

        return JSONResponse(status_code=result.status_code, content=result.to_dict())

    @router.get("/laneful")
    async def webhook_info():
        sample_payload = generate_test_payload()
        return {
            "service": "Laneful Webhook Endpoint",
            "status": "ready",
            "configuration": {
                "header_name": get_signature_header_name(),
                "supported_events": sorted(EVENT_TYPES),
                "payload_formats": ["Single event (object)", "Batch mode (array)"],
            },
            "test_example": {
                "payload": sample_payload,
                "signature": generate_signature(handler.secret, sample_payload, include_prefix=True),
            },
        }

    @router.get("/health")
    async def health():
        return {
            "status": "healthy",
            "service": "Laneful Webhook Handler",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": __version__,
        }

    return router
