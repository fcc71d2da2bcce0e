"""ワークアウトライブラリAPIサービス。"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from intervals_icu.decoders import (
    decode_folder,
    decode_folders,
    decode_nothing,
    decode_string_list,
    decode_workout,
    decode_workouts,
    encode_body,
)
from intervals_icu.result import Result
from intervals_icu.services._transport import RequestExecutor
from intervals_icu.types import Folder, RequestOptions, Workout
from intervals_icu.validation import normalize_athlete_id


class AsyncLibraryService:
    """非同期ライブラリサービス。ワークアウト、フォルダ、タグを扱う。"""

    def __init__(self, *, executor: RequestExecutor) -> None:
        self._executor = executor

    async def list_workouts(self, athlete_id: str | int = 0) -> Result[list[Workout]]:
        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(f"athlete/{aid}/workouts", decoder=decode_workouts)

    async def get_workout(self, athlete_id: str | int, workout_id: int) -> Result[Workout]:
        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(
            f"athlete/{aid}/workouts/{int(workout_id)}",
            decoder=decode_workout,
        )

    async def create_workout(
        self,
        athlete_id: str | int,
        workout: Workout | Mapping[str, Any],
    ) -> Result[Workout]:
        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(
            f"athlete/{aid}/workouts",
            RequestOptions(method="POST", json=encode_body(workout, Workout)),
            decode_workout,
        )

    async def update_workout(
        self,
        athlete_id: str | int,
        workout_id: int,
        workout: Workout | Mapping[str, Any],
    ) -> Result[Workout]:
        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(
            f"athlete/{aid}/workouts/{int(workout_id)}",
            RequestOptions(method="PUT", json=encode_body(workout, Workout)),
            decode_workout,
        )

    async def delete_workout(self, athlete_id: str | int, workout_id: int) -> Result[None]:
        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(
            f"athlete/{aid}/workouts/{int(workout_id)}",
            RequestOptions(method="DELETE"),
            decode_nothing,
        )

    async def create_multiple_workouts(
        self,
        athlete_id: str | int,
        workouts: Sequence[Workout | Mapping[str, Any]],
    ) -> Result[list[Workout]]:
        """ワークアウトをまとめて作成する。"""

        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(
            f"athlete/{aid}/workouts/bulk",
            RequestOptions(method="POST", json=encode_body(list(workouts), Workout)),
            decode_workouts,
        )

    async def list_folders(self, athlete_id: str | int = 0) -> Result[list[Folder]]:
        """フォルダとトレーニングプランを、含まれるワークアウト付きで取得する。"""

        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(f"athlete/{aid}/folders", decoder=decode_folders)

    async def create_folder(
        self,
        athlete_id: str | int,
        folder: Folder | Mapping[str, Any],
    ) -> Result[Folder]:
        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(
            f"athlete/{aid}/folders",
            RequestOptions(method="POST", json=encode_body(folder, Folder)),
            decode_folder,
        )

    async def update_folder(
        self,
        athlete_id: str | int,
        folder_id: int,
        folder: Folder | Mapping[str, Any],
    ) -> Result[Folder]:
        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(
            f"athlete/{aid}/folders/{int(folder_id)}",
            RequestOptions(method="PUT", json=encode_body(folder, Folder)),
            decode_folder,
        )

    async def delete_folder(self, athlete_id: str | int, folder_id: int) -> Result[None]:
        """フォルダを削除する。含まれるワークアウトも削除される。"""

        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(
            f"athlete/{aid}/folders/{int(folder_id)}",
            RequestOptions(method="DELETE"),
            decode_nothing,
        )

    async def list_tags(self, athlete_id: str | int = 0) -> Result[list[str]]:
        aid = normalize_athlete_id(athlete_id)
        return await self._executor.request_json(
            f"athlete/{aid}/workout-tags",
            decoder=decode_string_list,
        )
