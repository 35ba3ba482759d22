"""GCP service-account credentials supplied as base64 environment values."""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any, cast

from google.oauth2.service_account import Credentials as ServiceAccountCredentials

DATASTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


def decode_service_account(blob: str, *, source: str) -> dict[str, Any]:
    """Decode a base64 service-account JSON document into its mapping."""
    try:
        raw = base64.b64decode(blob.strip().encode("utf-8"), validate=True)
        info = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError(f"{source} must be base64-encoded service account JSON") from exc
    if not isinstance(info, dict):
        raise ValueError(f"{source} must decode to a JSON object")
    return info


def credentials_from_b64(
    blob: str | None,
    *,
    source: str,
    scopes: tuple[str, ...] = (CLOUD_PLATFORM_SCOPE,),
) -> ServiceAccountCredentials | None:
    """Build credentials, or None to fall back to application default credentials."""
    if not blob or not blob.strip():
        return None
    info = decode_service_account(blob, source=source)
    return cast(
        ServiceAccountCredentials,
        ServiceAccountCredentials.from_service_account_info(  # type: ignore[no-untyped-call]
            info,
            scopes=scopes,
        ),
    )


__all__ = [
    "CLOUD_PLATFORM_SCOPE",
    "DATASTORE_SCOPE",
    "ServiceAccountCredentials",
    "credentials_from_b64",
    "decode_service_account",
]
