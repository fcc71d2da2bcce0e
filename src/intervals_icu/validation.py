"""入力正規化と送信前バリデーション。"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from enum import StrEnum
from typing import TypeVar

from intervals_icu.errors import IntervalsValidationError

E = TypeVar("E", bound=StrEnum)

_ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}(:\d{2}(\.\d+)?)?)?$")


def normalize_athlete_id(value: str | int) -> str:
    """アスリートIDを正規化する。

    ``0`` は認証中のアスリート自身を表す。

    Args:
        value: アスリートID（例: ``i12345``、``0``）。

    Returns:
        パスに埋め込める文字列。

    Raises:
        IntervalsValidationError: 空文字や区切り文字を含む場合。
    """

    if isinstance(value, bool):
        raise IntervalsValidationError(
            "athlete_id に真偽値は指定できません。", validation_code="invalid_athlete_id"
        )
    text = str(value).strip()
    if not text:
        raise IntervalsValidationError(
            "athlete_id が指定されていません。", validation_code="missing_athlete_id"
        )
    validate_path_segment(text, param_name="athlete_id")
    return text


def validate_path_segment(text: str, *, param_name: str) -> str:
    """パス要素として安全な文字列か検証する。"""

    if "/" in text or "?" in text or "#" in text:
        raise IntervalsValidationError(
            f"{param_name} にパス区切り文字は使用できません。",
            validation_code=f"invalid_{param_name}",
        )
    return text


def normalize_date(value: date | str, *, param_name: str = "date") -> str:
    """日付入力をISO-8601文字列へ正規化する。

    Args:
        value: ``date``/``datetime`` またはISO-8601文字列。
        param_name: エラーメッセージ用の引数名。

    Returns:
        ``YYYY-MM-DD`` または ``YYYY-MM-DDTHH:MM[:SS]`` 形式の文字列。

    Raises:
        IntervalsValidationError: 形式が不正な場合。
    """

    if isinstance(value, datetime):
        return value.replace(tzinfo=None, microsecond=0).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    if not _ISO_DATE_PATTERN.match(text):
        raise IntervalsValidationError(
            f"{param_name} はISO-8601形式で指定してください: {value}",
            validation_code=f"invalid_{param_name}",
        )
    return text


def join_csv(values: Iterable[object]) -> str:
    """リストをカンマ区切り文字列へ変換する。"""

    return ",".join(str(v) for v in values)


def format_bool(value: bool) -> str:
    """真偽値をクエリ用文字列へ変換する。"""

    return "true" if value else "false"


def normalize_enum(value: E | str, enum_type: type[E], *, param_name: str) -> E:
    """列挙値入力を正規化する。"""

    if isinstance(value, enum_type):
        return value
    text = str(value).strip()
    for candidate in (text, text.upper(), text.lower()):
        try:
            return enum_type(candidate)
        except ValueError:
            continue
    raise IntervalsValidationError(
        f"{param_name} が不正です: {value}", validation_code=f"invalid_{param_name}"
    )


def build_query(values: Mapping[str, object]) -> dict[str, str] | None:
    """クエリパラメータを構築する。

    ``None`` は送信せず、真偽値は ``true``/``false``、リストはカンマ区切りにする。
    残りが空ならNoneを返す。
    """

    params: dict[str, str] = {}
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, bool):
            params[key] = format_bool(value)
        elif isinstance(value, (list, tuple)):
            params[key] = join_csv(value)
        elif isinstance(value, StrEnum):
            params[key] = value.value
        else:
            params[key] = str(value)
    return params or None
