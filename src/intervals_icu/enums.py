"""列挙型定義。"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """API失敗種別を表す列挙型。"""

    UNAUTHORIZED = "Unauthorized"
    FORBIDDEN = "Forbidden"
    NOT_FOUND = "NotFound"
    RATE_LIMIT = "RateLimit"
    HTTP = "Http"
    SCHEMA = "Schema"
    TIMEOUT = "Timeout"
    NETWORK = "Network"
    UNKNOWN = "Unknown"


class DeviceClass(StrEnum):
    """設定取得対象の端末種別。

    Attributes:
        PHONE: スマートフォン。
        TABLET: タブレット。
        DESKTOP: デスクトップ。
    """

    PHONE = "phone"
    TABLET = "tablet"
    DESKTOP = "desktop"


class EventCategory(StrEnum):
    """カレンダーイベントのカテゴリ。"""

    WORKOUT = "WORKOUT"
    RACE_A = "RACE_A"
    RACE_B = "RACE_B"
    RACE_C = "RACE_C"
    NOTE = "NOTE"
    PLAN = "PLAN"
    HOLIDAY = "HOLIDAY"
    SICK = "SICK"
    INJURED = "INJURED"
    SET_EFTP = "SET_EFTP"
    FITNESS_DAYS = "FITNESS_DAYS"
    SEASON_START = "SEASON_START"
    TARGET = "TARGET"
    SET_FITNESS = "SET_FITNESS"


class FolderType(StrEnum):
    """ライブラリフォルダ種別。"""

    FOLDER = "FOLDER"
    PLAN = "PLAN"


class Visibility(StrEnum):
    """フォルダ公開範囲。"""

    PRIVATE = "PRIVATE"
    PUBLIC = "PUBLIC"
