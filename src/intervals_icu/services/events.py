"""カレンダーイベントAPIサービス。"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

from intervals_icu.decoders import (
    decode_event,
    decode_events,
    decode_events_deleted,
    decode_string_list,
    encode_body,
)
from intervals_icu.enums import EventCategory
from intervals_icu.result import Result
from intervals_icu.services._transport import RequestExecutor
from intervals_icu.types import Event, RequestOptions
from intervals_icu.validation import build_query, normalize_athlete_id, normalize_date, normalize_enum

EventInput = Event | Mapping[str, Any]


def _optional_date(value: date | str | None, name: str) -> str | None:
    if value is None:
        return None
    return normalize_date(value, param_name=name)


class AsyncEventsService:
    """非同期イベントサービス。"""

    def __init__(self, *, executor: RequestExecutor) -> None:
        self._executor = executor

    async def list(
        self,
        athlete_id: str | int = 0,
        *,
        oldest: date | str | None = None,
        newest: date | str | None = None,
        category: Sequence[EventCategory | str] | None = None,
        limit: int | None = None,
        calendar_id: int | None = None,
        ext: str | None = None,
        power_range: int | None = None,
        hr_range: int | None = None,
        pace_range: int | None = None,
        locale: str | None = None,
        resolve: bool | None = None,
    ) -> Result[list[Event]]:
        """期間内のイベントを取得する。

        Args:
            athlete_id: アスリートID。
            oldest: 最古の日付。
            newest: 最新の日付（この日を含む）。
            category: 対象カテゴリ。
            limit: 最大件数。
            calendar_id: カレンダーID。
            ext: ワークアウトのダウンロード形式（``zwo``、``mrc`` など）。
            power_range: パワー目標の許容幅（%）。
            hr_range: 心拍目標の許容幅（%）。
            pace_range: ペース目標の許容幅（%）。
            locale: ワークアウト記述の言語。
            resolve: 目標値を絶対値へ解決するか。

        Returns:
            ``Event`` のリストを保持する ``Result``。
        """

        aid = normalize_athlete_id(athlete_id)
        categories = (
            [normalize_enum(c, EventCategory, param_name="category").value for c in category]
            if category is not None
            else None
        )
        params = build_query(
            {
                "oldest": _optional_date(oldest, "oldest"),
                "newest": _optional_date(newest, "newest"),
                "category": categories,
                "limit": limit,
                "calendar_id": calendar_id,
                "ext": ext,
                "powerRange": power_range,
                "hrRange": hr_range,
                "paceRange": pace_range,
                "locale": locale,
                "resolve": resolve,
            }
        )
        return await self._executor.request_json(
            f"athlete/{aid}/events",
            RequestOptions(params=params),
            decode_events,
        )

    async def get(self, athlete_id: str | int, event_id: int) -> Result[Event]:
        """イベントを1件取得する。"""

        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(
            f"athlete/{aid}/events/{int(event_id)}",
            decoder=decode_event,
        )

    async def create(
        self,
        athlete_id: str | int,
        event: EventInput,
        *,
        upsert_on_uid: bool | None = None,
    ) -> Result[Event]:
        """イベントを作成する。

        ``upsert_on_uid`` がTrueなら同じ ``uid`` のイベントを上書きする。
        """

        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(
            f"athlete/{aid}/events",
            RequestOptions(
                method="POST",
                json=encode_body(event, Event),
                params=build_query({"upsertOnUid": upsert_on_uid}),
            ),
            decode_event,
        )

    async def update(
        self,
        athlete_id: str | int,
        event_id: int,
        event: EventInput,
    ) -> Result[Event]:
        """イベントを更新する。"""

        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(
            f"athlete/{aid}/events/{int(event_id)}",
            RequestOptions(method="PUT", json=encode_body(event, Event)),
            decode_event,
        )

    async def delete(
        self,
        athlete_id: str | int,
        event_id: int,
        *,
        others: bool | None = None,
        not_before: date | str | None = None,
    ) -> Result[Any]:
        """イベントを削除する。

        Args:
            athlete_id: アスリートID。
            event_id: イベントID。
            others: 同じプランから作られた他のイベントも削除するか。
            not_before: ``others`` 指定時に、この日より前のイベントは残す。

        Returns:
            応答本文をそのまま保持する ``Result``。
        """

        aid = normalize_athlete_id(athlete_id)
        params = build_query(
            {"others": others, "notBefore": _optional_date(not_before, "not_before")}
        )
        return await self._executor.request_json(
            f"athlete/{aid}/events/{int(event_id)}",
            RequestOptions(method="DELETE", params=params),
        )

    async def create_multiple(
        self,
        athlete_id: str | int,
        events: Sequence[EventInput],
        *,
        upsert: bool | None = None,
        upsert_on_uid: bool | None = None,
        update_plan_applied: bool | None = None,
    ) -> Result[list[Event]]:
        """イベントをまとめて作成する。"""

        aid = normalize_athlete_id(athlete_id)
        params = build_query(
            {
                "upsert": upsert,
                "upsertOnUid": upsert_on_uid,
                "updatePlanApplied": update_plan_applied,
            }
        )
        return await self._executor.request_json(
            f"athlete/{aid}/events/bulk",
            RequestOptions(method="POST", json=encode_body(list(events), Event), params=params),
            decode_events,
        )

    async def delete_bulk(
        self,
        athlete_id: str | int,
        events: Sequence[Mapping[str, Any]],
    ) -> Result[int]:
        """イベントをまとめて削除し、削除件数を返す。

        各要素には ``id`` または ``external_id`` を指定する。
        """

        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(
            f"athlete/{aid}/events/bulk-delete",
            RequestOptions(method="PUT", json=[dict(e) for e in events]),
            decode_events_deleted,
        )

    async def update_multiple(
        self,
        athlete_id: str | int,
        event: EventInput,
        *,
        oldest: date | str,
        newest: date | str,
    ) -> Result[list[Event]]:
        """期間内の全イベントへ同じ変更を適用する。"""

        aid = normalize_athlete_id(athlete_id)
        params = build_query(
            {
                "oldest": normalize_date(oldest, param_name="oldest"),
                "newest": normalize_date(newest, param_name="newest"),
            }
        )
        return await self._executor.request_json(
            f"athlete/{aid}/events",
            RequestOptions(method="PUT", json=encode_body(event, Event), params=params),
            decode_events,
        )

    async def list_tags(self, athlete_id: str | int = 0) -> Result[list[str]]:
        """イベントに使われているタグを取得する。"""

        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(
            f"athlete/{aid}/event-tags",
            decoder=decode_string_list,
        )
