from laneful.webhooks.handler import (
    WebhookHandler,
    WebhookResult,
    generate_test_batch_payload,
    generate_test_payload,
)
from laneful.webhooks.headers import (
    SIGNATURE_HEADER,
    extract_signature_from_headers,
    get_signature_header_name,
)
from laneful.webhooks.payload import (
    EVENT_TYPES,
    OPTIONAL_FIELDS,
    REQUIRED_FIELDS,
    RawJson,
    WebhookBatch,
    WebhookEvent,
    parse_webhook_payload,
    validate_and_parse_event,
)
from laneful.webhooks.signature import generate_signature, verify_signature

__all__ = [
    "EVENT_TYPES",
    "OPTIONAL_FIELDS",
    "REQUIRED_FIELDS",
    "SIGNATURE_HEADER",
    "RawJson",
    "WebhookBatch",
    "WebhookEvent",
    "WebhookHandler",
    "WebhookResult",
    "extract_signature_from_headers",
    "generate_signature",
    "generate_test_batch_payload",
    "generate_test_payload",
    "get_signature_header_name",
    "parse_webhook_payload",
    "validate_and_parse_event",
    "verify_signature",
]
