from __future__ import annotations

import base64
import json

import pytest

from gensyn_leaderboard.gcp import credentials as credentials_module
from gensyn_leaderboard.gcp.credentials import DATASTORE_SCOPE, credentials_from_b64, decode_service_account


def _encode(value: object) -> str:
    return base64.b64encode(json.dumps(value).encode("utf-8")).decode("ascii")


def test_decode_service_account_round_trip() -> None:
    info = {"type": "service_account", "project_id": "leaderboard"}

    assert decode_service_account(_encode(info), source="TEST_VAR") == info


@pytest.mark.parametrize(
    "blob",
    [
        pytest.param("not base64!", id="not_base64"),
        pytest.param(base64.b64encode(b"{broken").decode("ascii"), id="not_json"),
    ],
)
def test_decode_service_account_rejects_garbage(blob: str) -> None:
    with pytest.raises(ValueError, match="TEST_VAR must be base64-encoded"):
        decode_service_account(blob, source="TEST_VAR")


def test_decode_service_account_requires_object() -> None:
    with pytest.raises(ValueError, match="JSON object"):
        decode_service_account(_encode(["a"]), source="TEST_VAR")


@pytest.mark.parametrize("blob", [None, "", "   "])
def test_blank_blob_falls_back_to_default_credentials(blob: str | None) -> None:
    assert credentials_from_b64(blob, source="TEST_VAR") is None


def test_credentials_built_with_requested_scopes(monkeypatch) -> None:
    captured: dict[str, object] = {}

    def fake_from_info(info: dict[str, object], *, scopes: tuple[str, ...]) -> str:
        captured["info"] = info
        captured["scopes"] = scopes
        return "credentials"

    monkeypatch.setattr(
        credentials_module.ServiceAccountCredentials,
        "from_service_account_info",
        fake_from_info,
    )

    result = credentials_from_b64(
        _encode({"type": "service_account"}),
        source="TEST_VAR",
        scopes=(DATASTORE_SCOPE,),
    )

    assert result == "credentials"
    assert captured == {"info": {"type": "service_account"}, "scopes": (DATASTORE_SCOPE,)}
