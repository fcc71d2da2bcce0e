"""認証ヘッダ構築のテスト。"""

from __future__ import annotations

import base64

import httpx
import pytest

from intervals_icu import ApiKey, AsyncIntervalsClient, BearerToken, build_authorization_header
from intervals_icu.http import build_request_headers


def test_api_key_uses_basic_with_fixed_username() -> None:
    header = build_authorization_header(ApiKey("abc123"))

    scheme, encoded = header.split(" ", 1)
    assert scheme == "Basic"
    assert base64.b64decode(encoded).decode("utf-8") == "API_KEY:abc123"


def test_bearer_token_is_sent_verbatim() -> None:
    assert build_authorization_header(BearerToken("tok-1")) == "Bearer tok-1"


def test_request_headers_default_accept_json_and_allow_override() -> None:
    headers = build_request_headers(ApiKey("k"), user_agent="ua/1")
    assert headers["Accept"] == "application/json"
    assert headers["User-Agent"] == "ua/1"

    overridden = build_request_headers(
        BearerToken("t"),
        user_agent="ua/1",
        extra={"accept": "text/csv"},
    )
    assert overridden["accept"] == "text/csv"
    assert "Accept" not in overridden
    assert overridden["Authorization"] == "Bearer t"


def test_authorization_cannot_be_overridden_by_extra_headers() -> None:
    headers = build_request_headers(
        BearerToken("real"),
        user_agent="ua/1",
        extra={"Authorization": "Bearer fake"},
    )
    assert headers["Authorization"] == "Bearer real"


def test_client_requires_exactly_one_credential() -> None:
    with pytest.raises(ValueError):
        AsyncIntervalsClient()
    with pytest.raises(ValueError):
        AsyncIntervalsClient(api_key="k", access_token="t")
    with pytest.raises(ValueError):
        AsyncIntervalsClient(api_key="")


def test_client_rejects_invalid_settings() -> None:
    http_client = httpx.AsyncClient()
    with pytest.raises(ValueError):
        AsyncIntervalsClient(api_key="k", max_concurrent=-1, http_client=http_client)
    with pytest.raises(ValueError):
        AsyncIntervalsClient(api_key="k", retry_max_retries=-1, http_client=http_client)
    with pytest.raises(ValueError):
        AsyncIntervalsClient(api_key="k", retry_jitter_factor=1.5, http_client=http_client)
    with pytest.raises(ValueError):
        AsyncIntervalsClient(api_key="k", timeout=0, http_client=http_client)


def test_empty_credentials_are_encoded_without_error() -> None:
    basic = build_authorization_header(ApiKey(""))
    assert basic == build_authorization_header(ApiKey(""))
    assert base64.b64decode(basic.removeprefix("Basic ")).decode("utf-8") == "API_KEY:"
    assert build_authorization_header(BearerToken("")) == "Bearer "
