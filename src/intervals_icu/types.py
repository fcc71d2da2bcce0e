"""公開型と内部共通データ構造。"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from intervals_icu.errors import ApiError


@dataclass(slots=True)
class RequestOptions:
    """1呼び出し分の要求オプション。

    Attributes:
        method: HTTPメソッド。
        params: クエリパラメータ。
        headers: 追加ヘッダ。Acceptを含めると既定値を上書きする。
        json: JSON本文。
        content: 生の本文。
        files: multipart送信ファイル。
        data: フォーム値。
    """

    method: str = "GET"
    params: Mapping[str, Any] | None = None
    headers: Mapping[str, str] | None = None
    json: Any = None
    content: bytes | str | None = None
    files: Mapping[str, Any] | None = None
    data: Mapping[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class RequestEvent:
    """要求開始通知。"""

    method: str
    path: str
    params: Mapping[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class ResponseEvent:
    """成功応答通知。

    Attributes:
        method: HTTPメソッド。
        path: 正規化済みパス。
        status: HTTPステータス。
        duration_ms: 要求開始からの経過ミリ秒。
    """

    method: str
    path: str
    status: int
    duration_ms: float


@dataclass(frozen=True, slots=True)
class ErrorEvent:
    """失敗通知。"""

    method: str
    path: str
    error: ApiError
    duration_ms: float


@dataclass(frozen=True, slots=True)
class RetryEvent:
    """再試行予定通知。

    Attributes:
        method: HTTPメソッド。
        path: 正規化済みパス。
        attempt: 失敗した試行番号（1始まり）。
        max_attempts: 総試行回数。
        delay_ms: 次の試行までの待機ミリ秒。
        reason: 再試行理由。
    """

    method: str
    path: str
    attempt: int
    max_attempts: int
    delay_ms: int
    reason: str


@dataclass(frozen=True, slots=True)
class Hooks:
    """ライフサイクルフック。同期関数でもコルーチン関数でもよい。

    ``on_request``/``on_response``/``on_retry`` の例外は呼び出し元へ伝播する。
    ``on_error`` の例外はログに記録して握りつぶす。
    """

    on_request: Callable[[RequestEvent], Awaitable[None] | None] | None = None
    on_response: Callable[[ResponseEvent], Awaitable[None] | None] | None = None
    on_error: Callable[[ErrorEvent], Awaitable[None] | None] | None = None
    on_retry: Callable[[RetryEvent], Awaitable[None] | None] | None = None


@dataclass(slots=True)
class Activity:
    """アクティビティ。

    Attributes:
        id: アクティビティID。Strava由来のものは空スタブになり得る。
        name: 名前。
        type: 種目。
        start_date: 開始時刻（UTC）。
        start_date_local: 開始時刻（現地）。
        extras: 未知キーの退避領域。
    """

    id: str | int
    name: str | None = None
    type: str | None = None
    start_date: str | None = None
    start_date_local: str | None = None
    extras: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class Athlete:
    """アスリート。"""

    id: str | int
    name: str | None = None
    firstname: str | None = None
    lastname: str | None = None
    email: str | None = None
    sex: str | None = None
    weight: float | None = None
    icu_resting_hr: float | None = None
    city: str | None = None
    country: str | None = None
    timezone: str | None = None
    locale: str | None = None
    measurement_preference: str | None = None
    icu_wellness_keys: list[str] | None = None
    sport_settings: list[dict[str, Any]] | None = None
    extras: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class SportInfo:
    """種目別の体力推定値。"""

    type: str | None = None
    eftp: float | None = None
    w_prime: float | None = None
    p_max: float | None = None
    extras: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class Wellness:
    """日次ウェルネス記録。

    APIのキーはcamelCaseだが、属性はsnake_caseで保持する
    （例: ``restingHR`` -> ``resting_hr``）。

    Attributes:
        id: 日付（ISO-8601）。
        extras: 未知キーの退避領域。
    """

    id: str
    ctl: float | None = None
    atl: float | None = None
    ramp_rate: float | None = None
    ctl_load: float | None = None
    atl_load: float | None = None
    sport_info: list[SportInfo] | None = None
    updated: str | None = None
    weight: float | None = None
    body_fat: float | None = None
    resting_hr: float | None = None
    hrv: float | None = None
    hrv_sdnn: float | None = None
    avg_sleeping_hr: float | None = None
    menstrual_phase: str | None = None
    kcal_consumed: float | None = None
    sleep_secs: float | None = None
    sleep_score: float | None = None
    sleep_quality: float | None = None
    soreness: float | None = None
    fatigue: float | None = None
    stress: float | None = None
    mood: float | None = None
    motivation: float | None = None
    readiness: float | None = None
    sp_o2: float | None = None
    vo2max: float | None = None
    steps: float | None = None
    comments: str | None = None
    locked: bool | None = None
    extras: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class Event:
    """カレンダーイベント（予定ワークアウト、メモなど）。"""

    id: int | None = None
    athlete_id: str | int | None = None
    category: str | None = None
    start_date_local: str | None = None
    end_date_local: str | None = None
    name: str | None = None
    description: str | None = None
    type: str | None = None
    workout_type: str | None = None
    load: float | None = None
    distance: float | None = None
    duration: float | None = None
    tags: list[str] | None = None
    uid: str | None = None
    external_id: str | None = None
    calendar_id: int | None = None
    hide_from_athlete: bool | None = None
    athlete_cannot_edit: bool | None = None
    extras: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class Workout:
    """ライブラリのワークアウト。"""

    id: int
    name: str
    description: str | None = None
    folder_id: int | None = None
    activity_type: str | None = None
    tags: list[str] | None = None
    extras: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class Folder:
    """ワークアウトフォルダまたはトレーニングプラン。"""

    id: int
    type: str
    name: str
    athlete_id: str | None = None
    description: str | None = None
    children: list[Workout] | None = None
    visibility: str | None = None
    start_date_local: str | None = None
    extras: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class Chat:
    """チャット。"""

    id: int
    athlete_id: str | None = None
    created: str | None = None
    last_message: str | None = None
    unread_count: int | None = None
    athlete_name: str | None = None
    extras: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class Message:
    """チャットメッセージ。"""

    id: int
    chat_id: int | None = None
    activity_id: str | int | None = None
    athlete_id: str | None = None
    created: str | None = None
    content: str | None = None
    seen: bool | None = None
    athlete_name: str | None = None
    extras: dict[str, Any] = field(default_factory=dict)
