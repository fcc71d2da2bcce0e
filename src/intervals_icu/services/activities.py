"""アクティビティAPIサービス。

一覧・検索・詳細に加え、ストリームやFIT/GPXファイルのダウンロード、
ファイルアップロードを扱う。CSVはテキスト、ファイルはバイト列で返す。
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

from intervals_icu.decoders import (
    decode_activities,
    decode_activity,
    decode_activity_id,
    decode_list,
    decode_mapping,
    decode_mapping_list,
    decode_string_list,
    encode_body,
)
from intervals_icu.errors import IntervalsValidationError
from intervals_icu.normalize import transform_keys_to_snake
from intervals_icu.result import Result
from intervals_icu.services._transport import RequestExecutor
from intervals_icu.types import Activity, RequestOptions
from intervals_icu.validation import (
    build_query,
    normalize_athlete_id,
    normalize_date,
    validate_path_segment,
)

DEFAULT_UPLOAD_FILENAME = "activity.fit"

_CSV_HEADERS = {"Accept": "text/csv"}
_BINARY_HEADERS = {"Accept": "*/*"}


def _activity_id(value: str | int) -> str:
    text = str(value).strip()
    if not text:
        raise IntervalsValidationError(
            "activity_id が指定されていません。", validation_code="missing_activity_id"
        )
    return validate_path_segment(text, param_name="activity_id")


def _optional_date(value: date | str | None, name: str) -> str | None:
    if value is None:
        return None
    return normalize_date(value, param_name=name)


def _curve_query(
    sport_type: str,
    newest: date | str | None,
    curves: Sequence[str] | None,
    include_ranks: bool | None,
    sub_max_efforts: int | None,
    now: date | str | None,
) -> dict[str, str] | None:
    if not sport_type:
        raise IntervalsValidationError(
            "sport_type が指定されていません。", validation_code="missing_sport_type"
        )
    return build_query(
        {
            "type": sport_type,
            "newest": _optional_date(newest, "newest"),
            "curves": list(curves) if curves is not None else None,
            "includeRanks": include_ranks,
            "subMaxEfforts": sub_max_efforts,
            "now": _optional_date(now, "now"),
        }
    )


class AsyncActivitiesService:
    """非同期アクティビティサービス。"""

    def __init__(self, *, executor: RequestExecutor) -> None:
        self._executor = executor

    async def list(
        self,
        athlete_id: str | int = 0,
        *,
        oldest: date | str | None = None,
        newest: date | str | None = None,
        route_id: int | None = None,
        limit: int | None = None,
        fields: Sequence[str] | None = None,
    ) -> Result[list[Activity]]:
        """期間内のアクティビティを取得する。

        Strava由来のアクティビティはIDのみの空スタブとして返ることがある。

        Args:
            athlete_id: アスリートID。
            oldest: 最古の日付。
            newest: 最新の日付（この日を含む）。
            route_id: ルートIDで絞り込む。
            limit: 最大件数。
            fields: 取得する項目名。

        Returns:
            ``Activity`` のリストを保持する ``Result``。
        """

        aid = normalize_athlete_id(athlete_id)
        params = build_query(
            {
                "oldest": _optional_date(oldest, "oldest"),
                "newest": _optional_date(newest, "newest"),
                "route_id": route_id,
                "limit": limit,
                "fields": list(fields) if fields is not None else None,
            }
        )
        return await self._executor.request_json(
            f"athlete/{aid}/activities",
            RequestOptions(params=params),
            decode_activities,
        )

    async def get(
        self,
        activity_id: str | int,
        *,
        intervals: bool | None = None,
    ) -> Result[Activity]:
        """アクティビティを1件取得する。``intervals`` でインターバルも含める。"""

        act = _activity_id(activity_id)
        return await self._executor.request_json(
            f"activity/{act}",
            RequestOptions(params=build_query({"intervals": intervals})),
            decode_activity,
        )

    async def update(
        self,
        activity_id: str | int,
        data: Activity | Mapping[str, Any],
    ) -> Result[Activity]:
        act = _activity_id(activity_id)
        return await self._executor.request_json(
            f"activity/{act}",
            RequestOptions(method="PUT", json=encode_body(data, Activity)),
            decode_activity,
        )

    async def delete(self, activity_id: str | int) -> Result[str | int]:
        """アクティビティを削除し、削除したIDを返す。"""

        act = _activity_id(activity_id)
        return await self._executor.request_json(
            f"activity/{act}",
            RequestOptions(method="DELETE"),
            decode_activity_id,
        )

    async def get_intervals(self, activity_id: str | int) -> Result[dict[str, Any]]:
        act = _activity_id(activity_id)
        return await self._executor.request_json(
            f"activity/{act}/intervals",
            decoder=decode_mapping,
        )

    async def update_intervals(
        self,
        activity_id: str | int,
        intervals: Sequence[Mapping[str, Any]],
        *,
        replace_all: bool | None = None,
    ) -> Result[dict[str, Any]]:
        """インターバルを一括更新する。

        Args:
            activity_id: アクティビティID。
            intervals: インターバル定義。
            replace_all: Trueで既存を置換、Falseでマージする。省略時はAPI既定（置換）。

        Returns:
            更新後のインターバル応答を保持する ``Result``。
        """

        act = _activity_id(activity_id)
        return await self._executor.request_json(
            f"activity/{act}/intervals",
            RequestOptions(
                method="PUT",
                params=build_query({"all": replace_all}),
                json=transform_keys_to_snake([dict(i) for i in intervals]),
            ),
            decode_mapping,
        )

    async def delete_intervals(
        self,
        activity_id: str | int,
        intervals: Sequence[Mapping[str, Any]],
    ) -> Result[dict[str, Any]]:
        act = _activity_id(activity_id)
        return await self._executor.request_json(
            f"activity/{act}/delete-intervals",
            RequestOptions(
                method="PUT",
                json=transform_keys_to_snake([dict(i) for i in intervals]),
            ),
            decode_mapping,
        )

    async def update_interval(
        self,
        activity_id: str | int,
        interval_id: int,
        interval: Mapping[str, Any],
    ) -> Result[dict[str, Any]]:
        """指定インターバルを更新または作成する。"""

        act = _activity_id(activity_id)
        return await self._executor.request_json(
            f"activity/{act}/intervals/{int(interval_id)}",
            RequestOptions(method="PUT", json=transform_keys_to_snake(dict(interval))),
            decode_mapping,
        )

    async def split_interval(
        self,
        activity_id: str | int,
        split_at: int,
    ) -> Result[dict[str, Any]]:
        """インターバルを指定インデックスで分割する。"""

        act = _activity_id(activity_id)
        return await self._executor.request_json(
            f"activity/{act}/split-interval",
            RequestOptions(method="PUT", params=build_query({"splitAt": split_at})),
            decode_mapping,
        )

    async def get_streams(
        self,
        activity_id: str | int,
        *,
        types: Sequence[str] | None = None,
        include_defaults: bool | None = None,
    ) -> Result[list[Any]]:
        """ストリーム（時系列データ）をJSONで取得する。"""

        act = _activity_id(activity_id)
        params = build_query(
            {
                "types": list(types) if types is not None else None,
                "includeDefaults": include_defaults,
            }
        )
        return await self._executor.request_json(
            f"activity/{act}/streams.json",
            RequestOptions(params=params),
            decode_list,
        )

    async def get_streams_csv(
        self,
        activity_id: str | int,
        *,
        types: Sequence[str] | None = None,
        include_defaults: bool | None = None,
    ) -> Result[str]:
        """ストリームをCSV文字列で取得する。"""

        act = _activity_id(activity_id)
        params = build_query(
            {
                "types": list(types) if types is not None else None,
                "includeDefaults": include_defaults,
            }
        )
        return await self._executor.request_text(
            f"activity/{act}/streams.csv",
            RequestOptions(params=params, headers=_CSV_HEADERS),
        )

    async def update_streams(
        self,
        activity_id: str | int,
        streams: Sequence[Mapping[str, Any]],
    ) -> Result[dict[str, Any]]:
        """ストリームをJSONで更新する。"""

        act = _activity_id(activity_id)
        return await self._executor.request_json(
            f"activity/{act}/streams",
            RequestOptions(
                method="PUT",
                json=transform_keys_to_snake([dict(s) for s in streams]),
            ),
            decode_mapping,
        )

    async def update_streams_csv(
        self,
        activity_id: str | int,
        csv: str,
    ) -> Result[dict[str, Any]]:
        """ストリームをCSVで更新する。"""

        act = _activity_id(activity_id)
        return await self._executor.request_json(
            f"activity/{act}/streams.csv",
            RequestOptions(method="PUT", headers={"Content-Type": "text/csv"}, content=csv),
            decode_mapping,
        )

    async def search(
        self,
        query: str,
        *,
        athlete_id: str | int = 0,
        limit: int | None = None,
    ) -> Result[list[Activity]]:
        """名前やタグでアクティビティを検索し、要約を返す。"""

        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(
            f"athlete/{aid}/activities/search",
            RequestOptions(params=build_query({"q": query, "limit": limit})),
            decode_activities,
        )

    async def search_full(
        self,
        query: str,
        *,
        athlete_id: str | int = 0,
        limit: int | None = None,
    ) -> Result[list[Activity]]:
        """名前やタグでアクティビティを検索し、全項目を返す。"""

        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(
            f"athlete/{aid}/activities/search-full",
            RequestOptions(params=build_query({"q": query, "limit": limit})),
            decode_activities,
        )

    async def search_intervals(
        self,
        query: str,
        *,
        athlete_id: str | int = 0,
        limit: int | None = None,
    ) -> Result[list[Activity]]:
        """条件に一致するインターバルを含むアクティビティを検索する。"""

        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(
            f"athlete/{aid}/activities/interval-search",
            RequestOptions(params=build_query({"q": query, "limit": limit})),
            decode_activities,
        )

    async def list_tags(self, athlete_id: str | int = 0) -> Result[list[str]]:
        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(
            f"athlete/{aid}/activity-tags",
            decoder=decode_string_list,
        )

    async def list_around(
        self,
        activity_id: int,
        *,
        athlete_id: str | int = 0,
        before: int | None = None,
        after: int | None = None,
    ) -> Result[list[Activity]]:
        """指定アクティビティの前後のアクティビティを取得する。"""

        aid = normalize_athlete_id(athlete_id)
        params = build_query(
            {"before": before, "after": after, "id": _activity_id(activity_id)}
        )
        return await self._executor.request_json(
            f"athlete/{aid}/activities-around",
            RequestOptions(params=params),
            decode_activities,
        )

    async def get_power_curve(
        self,
        activity_id: str | int,
        *,
        fatigue: str | None = None,
    ) -> Result[dict[str, Any]]:
        act = _activity_id(activity_id)
        return await self._executor.request_json(
            f"activity/{act}/power-curve.json",
            RequestOptions(params=build_query({"fatigue": fatigue})),
            decode_mapping,
        )

    async def get_pace_curve(self, activity_id: str | int) -> Result[dict[str, Any]]:
        act = _activity_id(activity_id)
        return await self._executor.request_json(
            f"activity/{act}/pace-curve.json",
            decoder=decode_mapping,
        )

    async def get_hr_curve(self, activity_id: str | int) -> Result[dict[str, Any]]:
        act = _activity_id(activity_id)
        return await self._executor.request_json(
            f"activity/{act}/hr-curve.json",
            decoder=decode_mapping,
        )

    async def get_power_curves(self, activity_id: str | int) -> Result[list[dict[str, Any]]]:
        """アクティビティ内の複数ストリームのパワーカーブを取得する。"""

        act = _activity_id(activity_id)
        return await self._executor.request_json(
            f"activity/{act}/power-curves.json",
            decoder=decode_mapping_list,
        )

    async def _athlete_curves(
        self,
        path: str,
        athlete_id: str | int,
        sport_type: str,
        newest: date | str | None,
        curves: Sequence[str] | None,
        include_ranks: bool | None,
        sub_max_efforts: int | None,
        now: date | str | None,
        decoder: Any,
    ) -> Result[Any]:
        aid = normalize_athlete_id(athlete_id)
        params = _curve_query(sport_type, newest, curves, include_ranks, sub_max_efforts, now)
        return await self._executor.request_json(
            f"athlete/{aid}/{path}",
            RequestOptions(params=params),
            decoder,
        )

    async def list_athlete_power_curves(
        self,
        athlete_id: str | int = 0,
        *,
        sport_type: str,
        newest: date | str | None = None,
        curves: Sequence[str] | None = None,
        include_ranks: bool | None = None,
        sub_max_efforts: int | None = None,
        now: date | str | None = None,
    ) -> Result[list[dict[str, Any]]]:
        """アスリートのベストパワーカーブを取得する。

        Args:
            athlete_id: アスリートID。
            sport_type: 対象スポーツ種別（``Ride`` など）。
            newest: 期間の終端日。
            curves: 取得するカーブ指定（``1y``、``r.2024-01-01.2024-03-31`` など）。
            include_ranks: 順位を含めるか。
            sub_max_efforts: 含める準最大努力の数。
            now: 現在日として扱う日付。

        Returns:
            カーブのリストを保持する ``Result``。
        """

        return await self._athlete_curves(
            "power-curves.json", athlete_id, sport_type, newest, curves,
            include_ranks, sub_max_efforts, now, decode_mapping_list,
        )

    async def list_athlete_pace_curves(
        self,
        athlete_id: str | int = 0,
        *,
        sport_type: str,
        newest: date | str | None = None,
        curves: Sequence[str] | None = None,
        include_ranks: bool | None = None,
        sub_max_efforts: int | None = None,
        now: date | str | None = None,
    ) -> Result[list[dict[str, Any]]]:
        return await self._athlete_curves(
            "pace-curves.json", athlete_id, sport_type, newest, curves,
            include_ranks, sub_max_efforts, now, decode_mapping_list,
        )

    async def list_athlete_hr_curves(
        self,
        athlete_id: str | int = 0,
        *,
        sport_type: str,
        newest: date | str | None = None,
        curves: Sequence[str] | None = None,
        include_ranks: bool | None = None,
        sub_max_efforts: int | None = None,
        now: date | str | None = None,
    ) -> Result[list[dict[str, Any]]]:
        return await self._athlete_curves(
            "hr-curves.json", athlete_id, sport_type, newest, curves,
            include_ranks, sub_max_efforts, now, decode_mapping_list,
        )

    async def get_activity_power_curves(
        self,
        athlete_id: str | int = 0,
        *,
        sport_type: str,
        newest: date | str | None = None,
        curves: Sequence[str] | None = None,
        include_ranks: bool | None = None,
        sub_max_efforts: int | None = None,
        now: date | str | None = None,
    ) -> Result[list[dict[str, Any]]]:
        """期間内の各アクティビティのベストパワーを取得する。"""

        return await self._athlete_curves(
            "activity-power-curves.json", athlete_id, sport_type, newest, curves,
            include_ranks, sub_max_efforts, now, decode_mapping_list,
        )

    async def get_activity_pace_curves(
        self,
        athlete_id: str | int = 0,
        *,
        sport_type: str,
        newest: date | str | None = None,
        curves: Sequence[str] | None = None,
        include_ranks: bool | None = None,
        sub_max_efforts: int | None = None,
        now: date | str | None = None,
    ) -> Result[list[dict[str, Any]]]:
        return await self._athlete_curves(
            "activity-pace-curves.json", athlete_id, sport_type, newest, curves,
            include_ranks, sub_max_efforts, now, decode_mapping_list,
        )

    async def get_activity_hr_curves(
        self,
        athlete_id: str | int = 0,
        *,
        sport_type: str,
        newest: date | str | None = None,
        curves: Sequence[str] | None = None,
        include_ranks: bool | None = None,
        sub_max_efforts: int | None = None,
        now: date | str | None = None,
    ) -> Result[list[dict[str, Any]]]:
        return await self._athlete_curves(
            "activity-hr-curves.json", athlete_id, sport_type, newest, curves,
            include_ranks, sub_max_efforts, now, decode_mapping_list,
        )

    async def get_power_hr_curve(
        self,
        athlete_id: str | int = 0,
        *,
        sport_type: str,
        newest: date | str | None = None,
        curves: Sequence[str] | None = None,
        include_ranks: bool | None = None,
        sub_max_efforts: int | None = None,
        now: date | str | None = None,
    ) -> Result[dict[str, Any]]:
        """期間内のパワー対心拍カーブを取得する。"""

        return await self._athlete_curves(
            "power-hr-curve", athlete_id, sport_type, newest, curves,
            include_ranks, sub_max_efforts, now, decode_mapping,
        )

    async def get_map(self, activity_id: str | int) -> Result[Any]:
        act = _activity_id(activity_id)
        return await self._executor.request_json(f"activity/{act}/map")

    async def get_segments(self, activity_id: str | int) -> Result[list[Any]]:
        act = _activity_id(activity_id)
        return await self._executor.request_json(
            f"activity/{act}/segments",
            decoder=decode_list,
        )

    async def get_weather_summary(self, activity_id: str | int) -> Result[Any]:
        act = _activity_id(activity_id)
        return await self._executor.request_json(f"activity/{act}/weather-summary")

    async def get_best_efforts(self, activity_id: str | int) -> Result[Any]:
        act = _activity_id(activity_id)
        return await self._executor.request_json(f"activity/{act}/best-efforts")

    async def _histogram(self, activity_id: str | int, name: str) -> Result[list[Any]]:
        act = _activity_id(activity_id)
        return await self._executor.request_json(
            f"activity/{act}/{name}-histogram",
            decoder=decode_list,
        )

    async def get_power_histogram(self, activity_id: str | int) -> Result[list[Any]]:
        return await self._histogram(activity_id, "power")

    async def get_pace_histogram(self, activity_id: str | int) -> Result[list[Any]]:
        return await self._histogram(activity_id, "pace")

    async def get_gap_histogram(self, activity_id: str | int) -> Result[list[Any]]:
        """勾配補正ペースのヒストグラムを取得する。"""

        return await self._histogram(activity_id, "gap")

    async def get_hr_histogram(self, activity_id: str | int) -> Result[list[Any]]:
        return await self._histogram(activity_id, "hr")

    async def get_power_vs_hr(self, activity_id: str | int) -> Result[Any]:
        act = _activity_id(activity_id)
        return await self._executor.request_json(f"activity/{act}/power-vs-hr.json")

    async def get_time_at_hr(self, activity_id: str | int) -> Result[Any]:
        act = _activity_id(activity_id)
        return await self._executor.request_json(f"activity/{act}/time-at-hr")

    async def get_power_spike_model(self, activity_id: str | int) -> Result[Any]:
        act = _activity_id(activity_id)
        return await self._executor.request_json(f"activity/{act}/power-spike-model")

    async def get_hr_load_model(self, activity_id: str | int) -> Result[Any]:
        act = _activity_id(activity_id)
        return await self._executor.request_json(f"activity/{act}/hr-load-model")

    async def download_fit_file(self, activity_id: str | int) -> Result[bytes]:
        act = _activity_id(activity_id)
        return await self._executor.request_bytes(
            f"activity/{act}/fit-file",
            RequestOptions(headers=_BINARY_HEADERS),
        )

    async def download_gpx_file(self, activity_id: str | int) -> Result[bytes]:
        act = _activity_id(activity_id)
        return await self._executor.request_bytes(
            f"activity/{act}/gpx-file",
            RequestOptions(headers=_BINARY_HEADERS),
        )

    async def download_file(self, activity_id: str | int) -> Result[bytes]:
        """アップロード元のファイルを取得する。"""

        act = _activity_id(activity_id)
        return await self._executor.request_bytes(
            f"activity/{act}/file",
            RequestOptions(headers=_BINARY_HEADERS),
        )

    async def download_activities_csv(
        self,
        athlete_id: str | int = 0,
        *,
        oldest: date | str | None = None,
        newest: date | str | None = None,
        limit: int | None = None,
    ) -> Result[str]:
        aid = normalize_athlete_id(athlete_id)
        params = build_query(
            {
                "oldest": _optional_date(oldest, "oldest"),
                "newest": _optional_date(newest, "newest"),
                "limit": limit,
            }
        )
        return await self._executor.request_text(
            f"athlete/{aid}/activities.csv",
            RequestOptions(params=params, headers=_CSV_HEADERS),
        )

    async def download_fit_files(
        self,
        activity_ids: Sequence[str | int],
        *,
        athlete_id: str | int = 0,
    ) -> Result[bytes]:
        """複数アクティビティのFITファイルをZIPでまとめて取得する。"""

        aid = normalize_athlete_id(athlete_id)
        ids = [a if isinstance(a, int) else _activity_id(a) for a in activity_ids]
        return await self._executor.request_bytes(
            f"athlete/{aid}/download-fit-files",
            RequestOptions(
                method="POST",
                json={"activity_ids": ids},
                headers=_BINARY_HEADERS,
            ),
        )

    async def upload(
        self,
        file_data: bytes,
        *,
        athlete_id: str | int = 0,
        filename: str | None = None,
    ) -> Result[Activity]:
        """アクティビティファイル（FIT/TCX/GPXなど）をアップロードする。

        Args:
            file_data: ファイル内容。
            athlete_id: アスリートID。
            filename: 送信ファイル名。省略時は ``activity.fit``。

        Returns:
            作成された ``Activity`` を保持する ``Result``。
        """

        aid = normalize_athlete_id(athlete_id)
        name = filename or DEFAULT_UPLOAD_FILENAME
        return await self._executor.request_json(
            f"athlete/{aid}/activities",
            RequestOptions(
                method="POST",
                files={"file": (name, file_data, "application/octet-stream")},
            ),
            decode_activity,
        )
