"""ウェルネスAPIサービス。

体重・安静時心拍・HRV・睡眠・疲労感などの日次記録を扱う。
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

from intervals_icu.decoders import decode_nothing, decode_wellness, decode_wellness_list, encode_body
from intervals_icu.result import Result
from intervals_icu.services._transport import RequestExecutor
from intervals_icu.types import RequestOptions, Wellness
from intervals_icu.validation import build_query, normalize_athlete_id, normalize_date


class AsyncWellnessService:
    """非同期ウェルネスサービス。"""

    def __init__(self, *, executor: RequestExecutor) -> None:
        self._executor = executor

    async def list(
        self,
        athlete_id: str | int = 0,
        *,
        oldest: date | str | None = None,
        newest: date | str | None = None,
        fields: Sequence[str] | None = None,
    ) -> Result[list[Wellness]]:
        """期間内のウェルネス記録を取得する。

        Args:
            athlete_id: アスリートID。
            oldest: 最古の日付。
            newest: 最新の日付（この日を含む）。
            fields: 取得する項目名。省略時は全項目。

        Returns:
            ``Wellness`` のリストを保持する ``Result``。
        """

        aid = normalize_athlete_id(athlete_id)
        params = build_query(
            {
                "oldest": normalize_date(oldest, param_name="oldest") if oldest is not None else None,
                "newest": normalize_date(newest, param_name="newest") if newest is not None else None,
                "fields": list(fields) if fields is not None else None,
            }
        )
        return await self._executor.request_json(
            f"athlete/{aid}/wellness",
            RequestOptions(params=params),
            decode_wellness_list,
        )

    async def get(self, athlete_id: str | int, day: date | str) -> Result[Wellness]:
        """指定日のウェルネス記録を取得する。"""

        aid = normalize_athlete_id(athlete_id)
        day_text = normalize_date(day, param_name="day")
        return await self._executor.request_json(
            f"athlete/{aid}/wellness/{day_text}",
            decoder=decode_wellness,
        )

    async def update(
        self,
        athlete_id: str | int,
        day: date | str,
        data: Wellness | Mapping[str, Any],
    ) -> Result[Wellness]:
        """指定日のウェルネス記録を更新する。指定した項目のみ変更される。"""

        aid = normalize_athlete_id(athlete_id)
        day_text = normalize_date(day, param_name="day")
        return await self._executor.request_json(
            f"athlete/{aid}/wellness/{day_text}",
            RequestOptions(method="PUT", json=encode_body(data, Wellness)),
            decode_wellness,
        )

    async def update_bulk(
        self,
        athlete_id: str | int,
        records: Sequence[Wellness | Mapping[str, Any]],
    ) -> Result[None]:
        """複数日のウェルネス記録をまとめて更新する。

        各レコードの ``id`` にはISO-8601の日付を指定する。
        """

        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(
            f"athlete/{aid}/wellness-bulk",
            RequestOptions(method="PUT", json=encode_body(list(records), Wellness)),
            decode_nothing,
        )
