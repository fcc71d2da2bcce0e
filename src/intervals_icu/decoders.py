"""レスポンス検証とレコード変換。

各デコーダはJSON値を受け取り、snake_caseのレコードへ変換する。
未知キーは ``extras`` へ退避し、型の不一致や必須キー欠落はまとめて
``DecodeError`` として送出する。
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from intervals_icu.errors import DecodeError
from intervals_icu.normalize import to_snake_case, transform_keys_to_snake
from intervals_icu.types import (
    Activity,
    Athlete,
    Chat,
    Event,
    Folder,
    Message,
    SportInfo,
    Wellness,
    Workout,
)

T = TypeVar("T")

Issues = list[dict[str, Any]]
ItemDecoder = Callable[[Any, str, Issues], Any]

NUMBER: tuple[type, ...] = (int, float)
INTEGER: tuple[type, ...] = (int,)
STRING: tuple[type, ...] = (str,)
BOOLEAN: tuple[type, ...] = (bool,)
IDENTIFIER: tuple[type, ...] = (str, int)
ANY: tuple[type, ...] = (object,)


@dataclass(frozen=True, slots=True)
class Field:
    """レコードの1フィールド定義。

    Attributes:
        key: APIの実キー名。
        types: 許容する型。
        required: 必須か。
        item: リスト要素のデコーダ。指定時は値がリストであることを要求する。
    """

    key: str
    types: tuple[type, ...] = ANY
    required: bool = False
    item: ItemDecoder | None = None

    @property
    def attr(self) -> str:
        return to_snake_case(self.key)


def _type_name(types: tuple[type, ...]) -> str:
    return " | ".join(t.__name__ for t in types)


def _issue(path: str, message: str, *, expected: str, received: Any) -> dict[str, Any]:
    return {
        "path": path,
        "message": message,
        "expected": expected,
        "received": type(received).__name__,
    }


def _matches(value: Any, types: tuple[type, ...]) -> bool:
    if isinstance(value, bool) and bool not in types and object not in types:
        return False
    return isinstance(value, types)


def _decode_string(value: Any, path: str, issues: Issues) -> Any:
    if not isinstance(value, str):
        issues.append(_issue(path, "文字列ではありません。", expected="str", received=value))
    return value


def _decode_mapping_item(value: Any, path: str, issues: Issues) -> Any:
    if not isinstance(value, dict):
        issues.append(_issue(path, "オブジェクトではありません。", expected="dict", received=value))
        return value
    return transform_keys_to_snake(value)


def _record_decoder(record_type: type[T], fields: tuple[Field, ...]) -> ItemDecoder:
    known_keys = {f.key for f in fields}

    def decode(data: Any, path: str, issues: Issues) -> T | None:
        if not isinstance(data, dict):
            issues.append(
                _issue(path, "オブジェクトではありません。", expected="dict", received=data)
            )
            return None
        before = len(issues)
        values: dict[str, Any] = {}
        for f in fields:
            value = data.get(f.key)
            field_path = f"{path}.{f.key}"
            if value is None:
                if f.required:
                    issues.append(
                        _issue(
                            field_path,
                            "必須キーがありません。",
                            expected=_type_name(f.types),
                            received=value,
                        )
                    )
                continue
            if f.item is not None:
                if not isinstance(value, list):
                    issues.append(
                        _issue(field_path, "リストではありません。", expected="list", received=value)
                    )
                    continue
                values[f.attr] = [
                    f.item(element, f"{field_path}[{i}]", issues) for i, element in enumerate(value)
                ]
                continue
            if not _matches(value, f.types):
                issues.append(
                    _issue(
                        field_path,
                        "型が一致しません。",
                        expected=_type_name(f.types),
                        received=value,
                    )
                )
                continue
            values[f.attr] = value
        if len(issues) > before:
            return None
        extras = {
            to_snake_case(k): transform_keys_to_snake(v)
            for k, v in data.items()
            if k not in known_keys
        }
        return record_type(**values, extras=extras)

    return decode


def _list_decoder(item: ItemDecoder) -> ItemDecoder:
    def decode(data: Any, path: str, issues: Issues) -> list[Any] | None:
        if not isinstance(data, list):
            issues.append(_issue(path, "リストではありません。", expected="list", received=data))
            return None
        return [item(element, f"{path}[{i}]", issues) for i, element in enumerate(data)]

    return decode


def _finalize(item: ItemDecoder, what: str) -> Callable[[Any], Any]:
    def decoder(data: Any) -> Any:
        issues: Issues = []
        out = item(data, "$", issues)
        if issues:
            raise DecodeError(f"{what} の検証に失敗しました。", issues=issues)
        return out

    decoder.__name__ = f"decode_{what}"
    return decoder


ACTIVITY_FIELDS = (
    Field("id", IDENTIFIER, required=True),
    Field("name", STRING),
    Field("type", STRING),
    Field("start_date", STRING),
    Field("start_date_local", STRING),
)

ATHLETE_FIELDS = (
    Field("id", IDENTIFIER, required=True),
    Field("name", STRING),
    Field("firstname", STRING),
    Field("lastname", STRING),
    Field("email", STRING),
    Field("sex", STRING),
    Field("weight", NUMBER),
    Field("icu_resting_hr", NUMBER),
    Field("city", STRING),
    Field("country", STRING),
    Field("timezone", STRING),
    Field("locale", STRING),
    Field("measurement_preference", STRING),
    Field("icu_wellness_keys", item=_decode_string),
    Field("sportSettings", item=_decode_mapping_item),
)

SPORT_INFO_FIELDS = (
    Field("type", STRING),
    Field("eftp", NUMBER),
    Field("wPrime", NUMBER),
    Field("pMax", NUMBER),
)

_decode_sport_info = _record_decoder(SportInfo, SPORT_INFO_FIELDS)

WELLNESS_FIELDS = (
    Field("id", STRING, required=True),
    Field("ctl", NUMBER),
    Field("atl", NUMBER),
    Field("rampRate", NUMBER),
    Field("ctlLoad", NUMBER),
    Field("atlLoad", NUMBER),
    Field("sportInfo", item=_decode_sport_info),
    Field("updated", STRING),
    Field("weight", NUMBER),
    Field("bodyFat", NUMBER),
    Field("restingHR", NUMBER),
    Field("hrv", NUMBER),
    Field("hrvSDNN", NUMBER),
    Field("avgSleepingHR", NUMBER),
    Field("menstrualPhase", STRING),
    Field("kcalConsumed", NUMBER),
    Field("sleepSecs", NUMBER),
    Field("sleepScore", NUMBER),
    Field("sleepQuality", NUMBER),
    Field("soreness", NUMBER),
    Field("fatigue", NUMBER),
    Field("stress", NUMBER),
    Field("mood", NUMBER),
    Field("motivation", NUMBER),
    Field("readiness", NUMBER),
    Field("spO2", NUMBER),
    Field("vo2max", NUMBER),
    Field("steps", NUMBER),
    Field("comments", STRING),
    Field("locked", BOOLEAN),
)

EVENT_FIELDS = (
    Field("id", INTEGER),
    Field("athlete_id", IDENTIFIER),
    Field("category", STRING),
    Field("start_date_local", STRING),
    Field("end_date_local", STRING),
    Field("name", STRING),
    Field("description", STRING),
    Field("type", STRING),
    Field("workout_type", STRING),
    Field("load", NUMBER),
    Field("distance", NUMBER),
    Field("duration", NUMBER),
    Field("tags", item=_decode_string),
    Field("uid", STRING),
    Field("external_id", STRING),
    Field("calendar_id", INTEGER),
    Field("hide_from_athlete", BOOLEAN),
    Field("athlete_cannot_edit", BOOLEAN),
)

WORKOUT_FIELDS = (
    Field("id", INTEGER, required=True),
    Field("name", STRING, required=True),
    Field("description", STRING),
    Field("folder_id", INTEGER),
    Field("activity_type", STRING),
    Field("tags", item=_decode_string),
)

_decode_workout = _record_decoder(Workout, WORKOUT_FIELDS)

FOLDER_FIELDS = (
    Field("id", INTEGER, required=True),
    Field("type", STRING, required=True),
    Field("name", STRING, required=True),
    Field("athlete_id", STRING),
    Field("description", STRING),
    Field("children", item=_decode_workout),
    Field("visibility", STRING),
    Field("start_date_local", STRING),
)

CHAT_FIELDS = (
    Field("id", INTEGER, required=True),
    Field("athlete_id", STRING),
    Field("created", STRING),
    Field("last_message", STRING),
    Field("unread_count", INTEGER),
    Field("athlete_name", STRING),
)

MESSAGE_FIELDS = (
    Field("id", INTEGER, required=True),
    Field("chat_id", INTEGER),
    Field("activity_id", IDENTIFIER),
    Field("athlete_id", STRING),
    Field("created", STRING),
    Field("content", STRING),
    Field("seen", BOOLEAN),
    Field("athlete_name", STRING),
)

_SCHEMAS: dict[type, tuple[Field, ...]] = {
    Activity: ACTIVITY_FIELDS,
    Athlete: ATHLETE_FIELDS,
    SportInfo: SPORT_INFO_FIELDS,
    Wellness: WELLNESS_FIELDS,
    Event: EVENT_FIELDS,
    Workout: WORKOUT_FIELDS,
    Folder: FOLDER_FIELDS,
    Chat: CHAT_FIELDS,
    Message: MESSAGE_FIELDS,
}

_decode_activity = _record_decoder(Activity, ACTIVITY_FIELDS)
_decode_athlete = _record_decoder(Athlete, ATHLETE_FIELDS)
_decode_wellness = _record_decoder(Wellness, WELLNESS_FIELDS)
_decode_event = _record_decoder(Event, EVENT_FIELDS)
_decode_folder = _record_decoder(Folder, FOLDER_FIELDS)
_decode_chat = _record_decoder(Chat, CHAT_FIELDS)
_decode_message = _record_decoder(Message, MESSAGE_FIELDS)

decode_activity = _finalize(_decode_activity, "activity")
decode_activities = _finalize(_list_decoder(_decode_activity), "activities")
decode_athlete = _finalize(_decode_athlete, "athlete")
decode_wellness = _finalize(_decode_wellness, "wellness")
decode_wellness_list = _finalize(_list_decoder(_decode_wellness), "wellness_list")
decode_event = _finalize(_decode_event, "event")
decode_events = _finalize(_list_decoder(_decode_event), "events")
decode_workout = _finalize(_decode_workout, "workout")
decode_workouts = _finalize(_list_decoder(_decode_workout), "workouts")
decode_folder = _finalize(_decode_folder, "folder")
decode_folders = _finalize(_list_decoder(_decode_folder), "folders")
decode_chat = _finalize(_decode_chat, "chat")
decode_chats = _finalize(_list_decoder(_decode_chat), "chats")
decode_message = _finalize(_decode_message, "message")
decode_messages = _finalize(_list_decoder(_decode_message), "messages")
decode_string_list = _finalize(_list_decoder(_decode_string), "string_list")
decode_mapping = _finalize(_decode_mapping_item, "mapping")
decode_mapping_list = _finalize(_list_decoder(_decode_mapping_item), "mapping_list")
decode_list = _finalize(
    _list_decoder(lambda value, path, issues: transform_keys_to_snake(value)), "list"
)


def decode_nothing(data: Any) -> None:
    """本文を使わないエンドポイント用。"""

    return None


def decode_activity_id(data: Any) -> str | int:
    """``{"id": ...}`` 形式の応答からIDを取り出す。"""

    if not isinstance(data, dict) or not _matches(data.get("id"), IDENTIFIER):
        raise DecodeError(
            "activity_id の検証に失敗しました。",
            issues=[_issue("$.id", "IDがありません。", expected="str | int", received=data)],
        )
    return data["id"]


def decode_events_deleted(data: Any) -> int:
    """一括削除応答から削除件数を取り出す。"""

    if not isinstance(data, dict):
        raise DecodeError(
            "events_deleted の検証に失敗しました。",
            issues=[_issue("$", "オブジェクトではありません。", expected="dict", received=data)],
        )
    count = data.get("eventsDeleted", 0)
    if not _matches(count, INTEGER):
        raise DecodeError(
            "events_deleted の検証に失敗しました。",
            issues=[_issue("$.eventsDeleted", "型が一致しません。", expected="int", received=count)],
        )
    return count


def encode_record(value: Any) -> Any:
    """レコードやsnake_caseの辞書をAPIの実キー名へ変換する。

    ``None`` の属性は送信しない。``extras`` はそのまま合成する。
    辞書の場合は既知の属性名のみ変換し、それ以外のキーは維持する。
    """

    if isinstance(value, list):
        return [encode_record(item) for item in value]
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = _SCHEMAS.get(type(value), ())
        wire = {f.attr: f.key for f in fields}
        out: dict[str, Any] = {}
        for dc_field in dataclasses.fields(value):
            if dc_field.name == "extras":
                continue
            attr_value = getattr(value, dc_field.name)
            if attr_value is None:
                continue
            out[wire.get(dc_field.name, dc_field.name)] = encode_record(attr_value)
        out.update(getattr(value, "extras", {}) or {})
        return out
    if isinstance(value, Mapping):
        return {k: encode_record(v) for k, v in value.items()}
    return value


def encode_mapping(value: Mapping[str, Any], record_type: type) -> dict[str, Any]:
    """snake_caseの辞書をレコード型のAPIキー名へ変換する。"""

    wire = {f.attr: f.key for f in _SCHEMAS.get(record_type, ())}
    return {wire.get(k, k): encode_record(v) for k, v in value.items()}


def encode_body(value: Any, record_type: type) -> Any:
    """送信本文を構築する。レコード、辞書、それらのリストを受け付ける。"""

    if isinstance(value, (list, tuple)):
        return [encode_body(item, record_type) for item in value]
    if isinstance(value, Mapping):
        return encode_mapping(value, record_type)
    return encode_record(value)
