"""
Webhook request handling.

WebhookHandler runs the full receive pipeline for one request: reject an empty
body, pull the signature out of the headers, verify it against the raw body,
parse the events, then hand each event to the processors registered for its
type. Failures are reported as a WebhookResult carrying the HTTP status to
answer with (400 for payload problems, 401 for signature problems).
"""

from __future__ import annotations

import time
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

from laneful import json_utils
from laneful.config import get_settings
from laneful.exceptions import WebhookPayloadError, WebhookSignatureError
from laneful.logger import logger
from laneful.webhooks.headers import extract_signature_from_headers
from laneful.webhooks.payload import (
    EVENT_TYPES,
    WebhookBatch,
    WebhookEvent,
    parse_webhook_payload,
)
from laneful.webhooks.signature import verify_signature

EventProcessor = Callable[[WebhookEvent], Any]

SAMPLE_LANE_ID = "5805dd85-ed8c-44db-91a7-1d53a41c86a5"


@dataclass(frozen=True)
class WebhookResult:
    """Outcome of handling one webhook request."""

    success: bool
    status_code: int = 200
    processed_count: int = 0
    is_batch: bool = False
    error: Optional[str] = None

    @property
    def mode(self) -> str:
        return "batch" if self.is_batch else "single"

    def to_dict(self) -> Dict[str, Any]:
        if not self.success:
            return {"error": self.error}
        return {"status": "success", "processed": self.processed_count, "mode": self.mode}


class WebhookHandler:
    """
    Verify, parse and dispatch Laneful webhook requests.

    Example:
        handler = WebhookHandler(secret)

        @handler.on("bounce")
        def suppress(event):
            ...

        result = handler.handle(raw_body, request_headers)
    """

    def __init__(self, secret: str, processors: Optional[Mapping[str, List[EventProcessor]]] = None):
        if not secret or not secret.strip():
            raise ValueError("Webhook secret is required")
        self._secret = secret
        self._processors: Dict[str, List[EventProcessor]] = defaultdict(list)
        for event_type, funcs in (processors or {}).items():
            for func in funcs:
                self.register(event_type, func)

    @classmethod
    def from_settings(cls) -> "WebhookHandler":
        """Build a handler from LANEFUL_WEBHOOK_SECRET."""
        secret = get_settings().webhook_secret
        if secret is None:
            raise ValueError("LANEFUL_WEBHOOK_SECRET is not configured")
        return cls(secret.get_secret_value())

    @property
    def secret(self) -> str:
        return self._secret

    def register(self, event_type: str, processor: EventProcessor) -> None:
        if event_type not in EVENT_TYPES:
            raise ValueError(f"Unknown event type: {event_type}")
        self._processors[event_type].append(processor)

    def on(self, event_type: str) -> Callable[[EventProcessor], EventProcessor]:
        """Decorator form of register()."""
        def decorator(func: EventProcessor) -> EventProcessor:
            self.register(event_type, func)
            return func
        return decorator

    def authenticate(self, payload: str, headers: Optional[Mapping[str, str]]) -> None:
        """
        Check the request signature.

        Raises:
            WebhookPayloadError: if the body is empty
            WebhookSignatureError: if the signature is missing or does not match
        """
        if payload is None or not payload.strip():
            raise WebhookPayloadError("Empty payload received")

        signature = extract_signature_from_headers(headers)
        if not signature:
            raise WebhookSignatureError("Missing webhook signature header")

        if not verify_signature(self._secret, payload, signature):
            raise WebhookSignatureError("Invalid webhook signature")

    def handle(self, payload: str, headers: Optional[Mapping[str, str]]) -> WebhookResult:
        """
        Run the full pipeline for one request.

        Exceptions raised by event processors propagate to the caller.
        """
        try:
            self.authenticate(payload, headers)
            batch = parse_webhook_payload(payload)
        except WebhookPayloadError as exc:
            logger.warning("Webhook payload rejected: {}", exc.message, security_event=True)
            return WebhookResult(
                success=False,
                status_code=exc.status_code,
                error=f"Invalid payload: {exc.message}",
            )
        except WebhookSignatureError as exc:
            logger.warning("Webhook signature rejected: {}", exc.message, security_event=True)
            return WebhookResult(success=False, status_code=exc.status_code, error=exc.message)

        processed = self.dispatch(batch)
        logger.info(
            "Processed {} webhook event(s) in {} mode", processed, batch.mode
        )
        return WebhookResult(success=True, processed_count=processed, is_batch=batch.is_batch)

    def dispatch(self, batch: WebhookBatch) -> int:
        processed = 0
        for event in batch.events:
            processors = self._processors.get(event.event_type, [])
            if not processors:
                logger.debug(
                    "No processor registered for {} event (message_id={})",
                    event.event_type,
                    event.message_id,
                )
            for processor in processors:
                processor(event)
            processed += 1
        return processed


def generate_test_payload() -> str:
    """Single-event payload with a current timestamp."""
    return json_utils.dumps({
        "event": "delivery",
        "email": "test@example.com",
        "lane_id": SAMPLE_LANE_ID,
        "message_id": "test-message-id",
        "timestamp": int(time.time()),
        "tag": "test-webhook",
    })


def generate_test_batch_payload() -> str:
    """Two-event batch payload with current timestamps."""
    now = int(time.time())
    return json_utils.dumps([
        {
            "event": "delivery",
            "email": "user1@example.com",
            "lane_id": SAMPLE_LANE_ID,
            "message_id": "test-message-1",
            "timestamp": now,
            "tag": "batch-test-1",
        },
        {
            "event": "open",
            "email": "user2@example.com",
            "lane_id": SAMPLE_LANE_ID,
            "message_id": "test-message-2",
            "timestamp": now,
            "client_device": "Desktop",
            "client_os": "Windows",
            "client_ip": "192.168.1.1",
            "tag": "batch-test-2",
        },
    ])
