"""Secret record model and its translation to Kubernetes ``V1Secret`` objects."""
from __future__ import annotations

import base64
import binascii
from typing import Any, Dict, Mapping, Optional

from kubernetes import client
from pydantic import BaseModel, Field

SECRET_TYPE_OPAQUE = "Opaque"


class SecretRecord(BaseModel):
    """A namespaced opaque secret as exposed by the HTTP API."""

    name: str = Field(..., min_length=1)
    namespace: str = Field(..., min_length=1)
    labels: Optional[Dict[str, str]] = None
    data: Dict[str, str]


def encode_secret_data(data: Mapping[str, str]) -> Dict[str, str]:
    """Encode plain-text values into the base64 form of ``V1Secret.data``."""

    return {
        key: base64.b64encode(value.encode("utf-8")).decode("ascii")
        for key, value in data.items()
    }


def decode_secret_value(value: Any) -> str:
    """Decode a single ``V1Secret.data`` value into text.

    Invalid UTF-8 is replaced rather than rejected; values that are not valid
    base64 are passed through unchanged.
    """

    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    try:
        raw = base64.b64decode(value, validate=True)
    except (ValueError, binascii.Error):
        return str(value)
    return raw.decode("utf-8", errors="replace")


def build_v1_secret(
    namespace: str,
    name: str,
    labels: Mapping[str, str],
    data: Mapping[str, str],
) -> client.V1Secret:
    return client.V1Secret(
        api_version="v1",
        kind="Secret",
        metadata=client.V1ObjectMeta(
            name=name,
            namespace=namespace,
            labels=dict(labels),
        ),
        data=encode_secret_data(data),
        type=SECRET_TYPE_OPAQUE,
    )


def record_from_v1_secret(secret: Any) -> SecretRecord:
    """Normalise a ``V1Secret`` returned by the API server into a record."""

    metadata = secret.metadata
    raw_data = secret.data or {}
    return SecretRecord(
        name=metadata.name,
        namespace=metadata.namespace,
        labels=dict(metadata.labels or {}),
        data={str(key): decode_secret_value(value) for key, value in raw_data.items()},
    )


__all__ = [
    "SECRET_TYPE_OPAQUE",
    "SecretRecord",
    "build_v1_secret",
    "decode_secret_value",
    "encode_secret_data",
    "record_from_v1_secret",
]
