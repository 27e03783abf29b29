"""
Cache Codec - JSON encoding for values stored in external caches.
"""

import json
from typing import Any

from gcp_credkit.domain.tokens import AccessToken, IdentityToken


def encode(value: Any) -> str:
    """
    Encode a cacheable value as tagged JSON.

    Raises:
        TypeError: Value is not an AccessToken, IdentityToken or str
    """
    if isinstance(value, AccessToken):
        return json.dumps({"kind": "access_token", "data": value.to_dict()})
    if isinstance(value, IdentityToken):
        return json.dumps({"kind": "identity_token", "data": value.to_dict()})
    if isinstance(value, str):
        return json.dumps({"kind": "string", "data": value})

    raise TypeError(f"Cannot cache value of type {type(value).__name__}")


def decode(raw: str) -> Any:
    """
    Decode a value produced by encode().

    Raises:
        ValueError: Payload is malformed or has an unknown kind
    """
    try:
        envelope = json.loads(raw)
        kind = envelope["kind"]
        data = envelope["data"]
    except (json.JSONDecodeError, KeyError, TypeError) as e:
        raise ValueError(f"Malformed cache payload: {e}")

    if kind == "access_token":
        return AccessToken.from_dict(data)
    if kind == "identity_token":
        return IdentityToken.from_dict(data)
    if kind == "string":
        return str(data)

    raise ValueError(f"Unknown cache payload kind: {kind}")
