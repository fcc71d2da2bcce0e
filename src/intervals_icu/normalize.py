"""キー命名規則の変換。"""

from __future__ import annotations

import re
from typing import Any

_LOWER_UPPER = re.compile(r"([a-z0-9])([A-Z])")
_ACRONYM_WORD = re.compile(r"([A-Z]+)([A-Z][a-z])")
_UNDERSCORE_CHAR = re.compile(r"_([a-z0-9])")


def to_snake_case(key: str) -> str:
    """camelCaseのキーをsnake_caseへ変換する。

    連続する大文字は1語として扱う（``restingHR`` -> ``resting_hr``、
    ``hrvSDNN`` -> ``hrv_sdnn``）。snake_caseの入力はそのまま返す。
    """

    text = _ACRONYM_WORD.sub(r"\1_\2", key)
    text = _LOWER_UPPER.sub(r"\1_\2", text)
    return text.lower()


def to_camel_case(key: str) -> str:
    """snake_caseのキーをcamelCaseへ変換する。"""

    return _UNDERSCORE_CHAR.sub(lambda m: m.group(1).upper(), key)


def transform_keys_to_snake(value: Any) -> Any:
    """辞書キーを再帰的にsnake_caseへ変換する。辞書/リスト以外はそのまま。"""

    if isinstance(value, dict):
        return {to_snake_case(str(k)): transform_keys_to_snake(v) for k, v in value.items()}
    if isinstance(value, list):
        return [transform_keys_to_snake(item) for item in value]
    return value


def transform_keys_to_camel(value: Any) -> Any:
    """辞書キーを再帰的にcamelCaseへ変換する。"""

    if isinstance(value, dict):
        return {to_camel_case(str(k)): transform_keys_to_camel(v) for k, v in value.items()}
    if isinstance(value, list):
        return [transform_keys_to_camel(item) for item in value]
    return value
