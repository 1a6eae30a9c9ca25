"""
Laneful Python SDK

Send email through the Laneful API and verify the webhooks it sends back.
"""

__version__ = "1.0.0"

from laneful.client import AsyncLanefulClient, LanefulClient
from laneful.exceptions import (
    ApiException,
    HttpException,
    LanefulException,
    ValidationException,
    WebhookPayloadError,
    WebhookSignatureError,
)
from laneful.models import Address, Attachment, Email, EmailBuilder, TrackingSettings
from laneful.webhooks import (
    WebhookBatch,
    WebhookEvent,
    WebhookHandler,
    extract_signature_from_headers,
    generate_signature,
    parse_webhook_payload,
    verify_signature,
)

__all__ = [
    "__version__",
    "Address",
    "ApiException",
    "AsyncLanefulClient",
    "Attachment",
    "Email",
    "EmailBuilder",
    "HttpException",
    "LanefulClient",
    "LanefulException",
    "TrackingSettings",
    "ValidationException",
    "WebhookBatch",
    "WebhookEvent",
    "WebhookHandler",
    "WebhookPayloadError",
    "WebhookSignatureError",
    "extract_signature_from_headers",
    "generate_signature",
    "parse_webhook_payload",
    "verify_signature",
]
