"""例外定義とAPI失敗値。

API呼び出しの失敗は例外ではなく ``ApiError`` 値として ``Err`` に格納して返す。
例外として送出するのは利用側の誤用（不正な引数、失敗結果の ``unwrap`` など）のみ。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Protocol, runtime_checkable

from intervals_icu.enums import ErrorKind


class IntervalsError(Exception):
    """ライブラリ例外の基底クラス。

    Attributes:
        origin: 例外発生元。
    """

    def __init__(self, message: str, *, origin: str) -> None:
        super().__init__(message)
        self.origin = origin


class IntervalsValidationError(IntervalsError):
    """送信前バリデーションエラー。"""

    def __init__(self, message: str, *, validation_code: str) -> None:
        super().__init__(message, origin="client_validation")
        self.validation_code = validation_code


class DecodeError(IntervalsError):
    """レスポンス検証失敗。

    Attributes:
        issues: 検証で見つかった問題の一覧。各要素は
            ``path``/``message``/``expected``/``received`` を持つ辞書。
    """

    def __init__(self, message: str, *, issues: list[dict[str, Any]]) -> None:
        super().__init__(message, origin="server_response")
        self.issues = issues


class ResultError(IntervalsError):
    """失敗結果に対する ``unwrap`` の例外。"""

    def __init__(self, error: ApiError) -> None:
        super().__init__(f"{error.kind}: {error.message}", origin="result")
        self.error = error


@runtime_checkable
class HasIssues(Protocol):
    """検証診断情報を持つ例外の構造的型。"""

    issues: Any


def extract_issues(exc: BaseException) -> Any:
    """デコーダ例外から診断情報を取り出す。存在しなければNone。"""

    if isinstance(exc, HasIssues):
        return exc.issues
    return None


@dataclass(frozen=True, slots=True)
class ApiError:
    """API呼び出し失敗の基底値。

    Attributes:
        message: 人が読むための説明。
    """

    kind: ClassVar[ErrorKind] = ErrorKind.UNKNOWN

    message: str


@dataclass(frozen=True, slots=True)
class StatusError(ApiError):
    """HTTPステータス由来の失敗。

    Attributes:
        status: HTTPステータス。
        body: ベストエフォートで読み取ったレスポンス本文。
    """

    kind: ClassVar[ErrorKind] = ErrorKind.HTTP

    status: int
    body: Any = None


@dataclass(frozen=True, slots=True)
class UnauthorizedError(StatusError):
    """HTTP 401。"""

    kind: ClassVar[ErrorKind] = ErrorKind.UNAUTHORIZED


@dataclass(frozen=True, slots=True)
class ForbiddenError(StatusError):
    """HTTP 403。"""

    kind: ClassVar[ErrorKind] = ErrorKind.FORBIDDEN


@dataclass(frozen=True, slots=True)
class NotFoundError(StatusError):
    """HTTP 404。"""

    kind: ClassVar[ErrorKind] = ErrorKind.NOT_FOUND


@dataclass(frozen=True, slots=True)
class RateLimitError(StatusError):
    """再試行を使い切った HTTP 429。

    Attributes:
        retry_after_seconds: 最後の応答のRetry-After秒。
    """

    kind: ClassVar[ErrorKind] = ErrorKind.RATE_LIMIT

    retry_after_seconds: float | None = None


@dataclass(frozen=True, slots=True)
class HttpError(StatusError):
    """上記以外の非2xx応答。"""

    kind: ClassVar[ErrorKind] = ErrorKind.HTTP


@dataclass(frozen=True, slots=True)
class SchemaError(ApiError):
    """成功応答の本文をデコーダが拒否した。

    Attributes:
        issues: デコーダ例外の ``issues`` 属性。解釈せずに転送する。
        cause: デコーダが送出した例外。
    """

    kind: ClassVar[ErrorKind] = ErrorKind.SCHEMA

    issues: Any = None
    cause: BaseException | None = None


@dataclass(frozen=True, slots=True)
class RequestTimeoutError(ApiError):
    """通信層のタイムアウト。"""

    kind: ClassVar[ErrorKind] = ErrorKind.TIMEOUT

    cause: BaseException | None = None


@dataclass(frozen=True, slots=True)
class NetworkError(ApiError):
    """タイムアウト以外の通信層エラー。"""

    kind: ClassVar[ErrorKind] = ErrorKind.NETWORK

    cause: BaseException | None = None


@dataclass(frozen=True, slots=True)
class UnknownError(ApiError):
    """分類できない失敗。"""

    kind: ClassVar[ErrorKind] = ErrorKind.UNKNOWN

    cause: BaseException | None = None
