"""成功/失敗を表す結果型。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

from intervals_icu.errors import ApiError, ResultError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """成功結果。

    Attributes:
        value: 成功値。
    """

    value: T

    @property
    def ok(self) -> Literal[True]:
        return True

    def unwrap(self) -> T:
        """成功値を返す。"""

        return self.value


@dataclass(frozen=True, slots=True)
class Err:
    """失敗結果。

    Attributes:
        error: 失敗内容。
    """

    error: ApiError

    @property
    def ok(self) -> Literal[False]:
        return False

    def unwrap(self) -> None:
        """失敗内容を ``ResultError`` として送出する。

        Raises:
            ResultError: 常に送出する。
        """

        raise ResultError(self.error)


Result = Ok[T] | Err
