"""
Webhook payload parsing and validation.

A webhook body is either a single JSON object (one event) or a JSON array of
objects (batch mode). Every event must carry the required fields below; the
first violation aborts the whole parse with a WebhookPayloadError, so callers
never see a partially parsed batch.

Field values are one of a closed set of types:

- ``str``, ``int`` (signed 64-bit), ``bool``
- read-only ``Mapping`` / ``tuple`` (optional fields only, nested JSON
  frozen recursively: objects become ``MappingProxyType``, arrays tuples)
- ``RawJson`` (anything else, kept as its compact JSON text)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterator, Mapping, Tuple, Union

from laneful import json_utils
from laneful.exceptions import WebhookPayloadError

EVENT_TYPES: FrozenSet[str] = frozenset(
    {"delivery", "open", "click", "drop", "spam_complaint", "unsubscribe", "bounce"}
)

REQUIRED_FIELDS: Tuple[str, ...] = ("event", "email", "lane_id", "message_id", "timestamp")

OPTIONAL_FIELDS: Tuple[str, ...] = (
    "metadata",
    "tag",
    "url",
    "is_hard",
    "text",
    "reason",
    "unsubscribe_group_id",
    "client_device",
    "client_os",
    "client_ip",
)

LANE_ID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


@dataclass(frozen=True)
class RawJson:
    """A field value that has no native representation, kept as JSON text."""

    text: str

    def __str__(self) -> str:
        return self.text


FieldValue = Union[str, int, bool, Mapping[str, Any], Tuple[Any, ...], RawJson]


class WebhookEvent(Mapping[str, FieldValue]):
    """
    One delivery-lifecycle notification.

    Read-only mapping of field name to value. The required fields are also
    exposed as properties.
    """

    __slots__ = ("_fields",)

    def __init__(self, fields: Mapping[str, FieldValue]):
        self._fields: Dict[str, FieldValue] = dict(fields)

    def __getitem__(self, key: str) -> FieldValue:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"WebhookEvent({self._fields!r})"

    @property
    def event_type(self) -> str:
        return self._fields["event"]

    @property
    def email(self) -> str:
        return self._fields["email"]

    @property
    def lane_id(self) -> str:
        return self._fields["lane_id"]

    @property
    def message_id(self) -> FieldValue:
        return self._fields["message_id"]

    @property
    def timestamp(self) -> int:
        return self._fields["timestamp"]

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-compatible dict (nested values thawed, RawJson rendered back to its JSON text)."""
        return {key: _to_plain(value) for key, value in self._fields.items()}


@dataclass(frozen=True)
class WebhookBatch:
    """Result of parsing one webhook body."""

    is_batch: bool
    events: Tuple[WebhookEvent, ...]

    @property
    def mode(self) -> str:
        return "batch" if self.is_batch else "single"

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self) -> Iterator[WebhookEvent]:
        return iter(self.events)


def _to_plain(value: Any) -> Any:
    if isinstance(value, RawJson):
        return value.text
    if isinstance(value, Mapping):
        return {key: _to_plain(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_to_plain(item) for item in value]
    return value


def _freeze(value: Any) -> Any:
    if isinstance(value, dict):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    return value


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _extract_value(value: Any, allow_nested: bool = False) -> FieldValue:
    if isinstance(value, (str, bool)):
        return value
    if _is_int(value):
        return value if INT64_MIN <= value <= INT64_MAX else RawJson(str(value))
    if allow_nested and isinstance(value, (dict, list)):
        return _freeze(value)
    return RawJson(json_utils.dumps(value))


def validate_and_parse_event(element: Any) -> WebhookEvent:
    """
    Validate one decoded JSON element and build a WebhookEvent from it.

    Raises:
        WebhookPayloadError: on the first failed check
    """
    if not isinstance(element, dict):
        raise WebhookPayloadError("Event must be an object")

    for name in REQUIRED_FIELDS:
        if name not in element:
            raise WebhookPayloadError(f"Missing required field: {name}")

    fields: Dict[str, FieldValue] = {
        name: _extract_value(element[name]) for name in REQUIRED_FIELDS
    }

    event_type = fields["event"]
    if not isinstance(event_type, str) or event_type not in EVENT_TYPES:
        raise WebhookPayloadError(f"Invalid event type: {event_type}")

    email = fields["email"]
    if not isinstance(email, str) or not email or "@" not in email or "." not in email:
        raise WebhookPayloadError(f"Invalid email format: {email}")

    if not _is_int(fields["timestamp"]):
        raise WebhookPayloadError("Invalid timestamp format")

    lane_id = fields["lane_id"]
    if not isinstance(lane_id, str) or not LANE_ID_PATTERN.fullmatch(lane_id):
        raise WebhookPayloadError(f"Invalid lane_id format: {lane_id}")

    for name in OPTIONAL_FIELDS:
        if name in element:
            fields[name] = _extract_value(element[name], allow_nested=True)

    return WebhookEvent(fields)


def parse_webhook_payload(payload: str) -> WebhookBatch:
    """
    Parse a raw webhook body into a WebhookBatch.

    Args:
        payload: Raw body text (a JSON object or a JSON array of objects)

    Raises:
        WebhookPayloadError: if the body is empty, not JSON, has the wrong
            top-level shape, or any event fails validation
    """
    if payload is None or not payload.strip():
        raise WebhookPayloadError("Payload cannot be empty")

    try:
        data = json_utils.loads(payload)
    except (json_utils.JSONDecodeError, UnicodeEncodeError) as exc:
        raise WebhookPayloadError(f"Invalid JSON payload: {exc}") from exc

    if isinstance(data, list):
        events = tuple(validate_and_parse_event(item) for item in data)
        return WebhookBatch(is_batch=True, events=events)

    if isinstance(data, dict):
        return WebhookBatch(is_batch=False, events=(validate_and_parse_event(data),))

    raise WebhookPayloadError("Invalid payload structure: expected a JSON object or array")
