"""認証ヘッダ構築。"""

from __future__ import annotations

import base64
from dataclasses import dataclass

API_KEY_USERNAME = "API_KEY"


@dataclass(frozen=True, slots=True)
class ApiKey:
    """個人APIキー認証。

    Basic認証のパスワードとして送信し、ユーザー名は固定で ``API_KEY`` とする。

    Attributes:
        key: APIキー。
    """

    key: str


@dataclass(frozen=True, slots=True)
class BearerToken:
    """OAuthアクセストークン認証。

    Attributes:
        token: アクセストークン。
    """

    token: str


Credential = ApiKey | BearerToken


def build_authorization_header(credential: Credential) -> str:
    """Authorizationヘッダ値を構築する。

    Args:
        credential: 認証情報。

    Returns:
        ヘッダ値。APIキーは ``Basic``、トークンは ``Bearer`` 形式。
    """

    if isinstance(credential, ApiKey):
        raw = f"{API_KEY_USERNAME}:{credential.key}".encode("utf-8")
        return f"Basic {base64.b64encode(raw).decode('ascii')}"
    return f"Bearer {credential.token}"
