"""
JSON serialization utilities using orjson.

Webhook payloads are decoded from the exact text that was signed.
"""

import orjson
from typing import Any, Union

JSONDecodeError = orjson.JSONDecodeError


def dumps(obj: Any) -> str:
    """
    Serialize obj to a compact JSON string.

    Returns:
        JSON string (decoded from bytes)
    """
    return orjson.dumps(obj, option=orjson.OPT_NAIVE_UTC).decode("utf-8")


def loads(s: Union[str, bytes]) -> Any:
    """
    Deserialize JSON string/bytes to Python objects.

    Raises:
        JSONDecodeError: if the document is not valid JSON
    """
    if isinstance(s, str):
        s = s.encode("utf-8")
    return orjson.loads(s)


def dumps_bytes(obj: Any) -> bytes:
    """Serialize obj to JSON bytes (HTTP request bodies)."""
    return orjson.dumps(obj, option=orjson.OPT_NAIVE_UTC)
