"""アスリートAPIサービス。"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

from intervals_icu.decoders import decode_athlete, decode_mapping, decode_mapping_list, encode_body
from intervals_icu.enums import DeviceClass
from intervals_icu.result import Result
from intervals_icu.services._transport import RequestExecutor
from intervals_icu.types import Athlete, RequestOptions
from intervals_icu.validation import build_query, normalize_athlete_id, normalize_date, normalize_enum


class AsyncAthletesService:
    """非同期アスリートサービス。"""

    def __init__(self, *, executor: RequestExecutor) -> None:
        self._executor = executor

    async def get(self, athlete_id: str | int = 0) -> Result[Athlete]:
        """アスリートを種目設定付きで取得する。

        Args:
            athlete_id: アスリートID。``0`` は認証中のアスリート。

        Returns:
            ``Athlete`` を保持する ``Result``。
        """

        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(f"athlete/{aid}", decoder=decode_athlete)

    async def update(
        self,
        athlete_id: str | int,
        data: Athlete | Mapping[str, Any],
    ) -> Result[Athlete]:
        """アスリートを更新する。指定した項目のみ変更される。"""

        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(
            f"athlete/{aid}",
            RequestOptions(method="PUT", json=encode_body(data, Athlete)),
            decode_athlete,
        )

    async def get_settings(
        self,
        athlete_id: str | int,
        device_class: DeviceClass | str,
    ) -> Result[dict[str, Any]]:
        """端末種別ごとの設定を取得する。"""

        aid = normalize_athlete_id(athlete_id)
        device = normalize_enum(device_class, DeviceClass, param_name="device_class")
        return await self._executor.request_json(
            f"athlete/{aid}/settings/{device.value}",
            decoder=decode_mapping,
        )

    async def get_profile(self, athlete_id: str | int = 0) -> Result[dict[str, Any]]:
        """プロフィール情報を取得する。"""

        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(f"athlete/{aid}/profile", decoder=decode_mapping)

    async def get_summary(
        self,
        athlete_id: str | int = 0,
        *,
        start: date | str | None = None,
        end: date | str | None = None,
        tags: Sequence[str] | None = None,
    ) -> Result[list[dict[str, Any]]]:
        """フォロー中アスリートのサマリを取得する。

        Bearerトークンで呼び出した場合はトークンのアスリートのみ返る。

        Args:
            athlete_id: アスリートID。
            start: 集計開始日（省略時はAPI既定の6日前）。
            end: 集計終了日（省略時は当日）。
            tags: 対象アスリートのタグ。

        Returns:
            サマリ行のリストを保持する ``Result``。
        """

        aid = normalize_athlete_id(athlete_id)
        params = build_query(
            {
                "start": normalize_date(start, param_name="start") if start is not None else None,
                "end": normalize_date(end, param_name="end") if end is not None else None,
                "tags": list(tags) if tags is not None else None,
            }
        )
        return await self._executor.request_json(
            f"athlete/{aid}/athlete-summary",
            RequestOptions(params=params),
            decode_mapping_list,
        )
