"""リソースサービスの経路・クエリ・本文のテスト。"""

from __future__ import annotations

import asyncio
import json
from datetime import date
from typing import Any

import httpx
import pytest

from intervals_icu import AsyncIntervalsClient
from intervals_icu.errors import IntervalsValidationError
from intervals_icu.types import Event, Wellness

BASE_URL = "https://example.invalid/api/v1"


class _Recorder:
    """要求を記録し、経路ごとの応答を返す。"""

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self._responses = responses or {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api/v1/")
        payload = self._responses.get(path, {})
        if isinstance(payload, bytes):
            return httpx.Response(200, content=payload, request=request)
        return httpx.Response(
            200,
            content=json.dumps(payload).encode("utf-8"),
            headers={"content-type": "application/json"},
            request=request,
        )

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def _run(recorder: _Recorder, call: Any) -> Any:
    async def run() -> Any:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
        async with AsyncIntervalsClient(
            api_key="k",
            base_url=BASE_URL,
            http_client=http_client,
        ) as client:
            return await call(client)

    return asyncio.run(run())


def test_activities_list_query_parameters() -> None:
    recorder = _Recorder({"athlete/i1/activities": [{"id": "a1"}]})

    result = _run(
        recorder,
        lambda c: c.activities.list(
            "i1",
            oldest=date(2024, 1, 1),
            newest="2024-01-31",
            limit=10,
            fields=["id", "name"],
        ),
    )

    assert result.ok
    params = dict(recorder.last.url.params)
    assert params == {
        "oldest": "2024-01-01",
        "newest": "2024-01-31",
        "limit": "10",
        "fields": "id,name",
    }


def test_activity_get_without_options_sends_no_query() -> None:
    recorder = _Recorder({"activity/a1": {"id": "a1"}})

    _run(recorder, lambda c: c.activities.get("a1"))
    assert recorder.last.url.query == b""

    _run(recorder, lambda c: c.activities.get("a1", intervals=True))
    assert recorder.last.url.params["intervals"] == "true"


def test_activities_search_and_around() -> None:
    recorder = _Recorder()

    _run(recorder, lambda c: c.activities.search("tempo", limit=5))
    assert recorder.last.url.path == "/api/v1/athlete/0/activities/search"
    assert dict(recorder.last.url.params) == {"q": "tempo", "limit": "5"}

    _run(recorder, lambda c: c.activities.list_around(77, before=2))
    assert recorder.last.url.path == "/api/v1/athlete/0/activities-around"
    assert dict(recorder.last.url.params) == {"before": "2", "id": "77"}


def test_activity_upload_sends_multipart_file() -> None:
    recorder = _Recorder({"athlete/0/activities": {"id": "new"}})

    result = _run(recorder, lambda c: c.activities.upload(b"FITDATA"))

    assert result.value.id == "new"
    request = recorder.last
    assert request.method == "POST"
    assert request.headers["content-type"].startswith("multipart/form-data")
    body = request.content
    assert b'name="file"' in body
    assert b'filename="activity.fit"' in body
    assert b"FITDATA" in body


def test_download_fit_files_posts_ids() -> None:
    recorder = _Recorder({"athlete/0/download-fit-files": b"PK\x03\x04"})

    result = _run(recorder, lambda c: c.activities.download_fit_files([1, "a2"]))

    assert result.value == b"PK\x03\x04"
    assert json.loads(recorder.last.content) == {"activity_ids": [1, "a2"]}


def test_activity_delete_returns_id() -> None:
    recorder = _Recorder({"activity/a9": {"id": "a9"}})

    result = _run(recorder, lambda c: c.activities.delete("a9"))

    assert recorder.last.method == "DELETE"
    assert result.value == "a9"


def test_athlete_settings_and_summary() -> None:
    recorder = _Recorder(
        {
            "athlete/0/settings/phone": {"plotHR": True},
            "athlete/0/athlete-summary": [{"athleteName": "Ada"}],
        }
    )

    settings = _run(recorder, lambda c: c.athletes.get_settings(0, "phone"))
    assert settings.value == {"plot_hr": True}

    summary = _run(recorder, lambda c: c.athletes.get_summary(tags=["team", "club"]))
    assert summary.value == [{"athlete_name": "Ada"}]
    assert recorder.last.url.params["tags"] == "team,club"


def test_wellness_update_sends_api_keys() -> None:
    recorder = _Recorder({"athlete/i1/wellness/2024-03-01": {"id": "2024-03-01", "restingHR": 50}})

    result = _run(
        recorder,
        lambda c: c.wellness.update("i1", date(2024, 3, 1), Wellness(id="2024-03-01", resting_hr=50)),
    )

    assert recorder.last.method == "PUT"
    assert json.loads(recorder.last.content) == {"id": "2024-03-01", "restingHR": 50}
    assert result.value.resting_hr == 50


def test_wellness_bulk_update() -> None:
    recorder = _Recorder()

    result = _run(
        recorder,
        lambda c: c.wellness.update_bulk("i1", [{"id": "2024-03-01", "sleep_secs": 28000}]),
    )

    assert result.ok
    assert result.value is None
    assert recorder.last.url.path == "/api/v1/athlete/i1/wellness-bulk"
    assert json.loads(recorder.last.content) == [{"id": "2024-03-01", "sleepSecs": 28000}]


def test_events_create_and_bulk_operations() -> None:
    recorder = _Recorder(
        {
            "athlete/0/events": {"id": 1, "name": "Ride"},
            "athlete/0/events/bulk": [{"id": 1}, {"id": 2}],
            "athlete/0/events/bulk-delete": {"eventsDeleted": 2},
        }
    )

    created = _run(
        recorder,
        lambda c: c.events.create(0, Event(name="Ride", category="WORKOUT"), upsert_on_uid=True),
    )
    assert created.value.id == 1
    assert recorder.last.url.params["upsertOnUid"] == "true"
    assert json.loads(recorder.last.content) == {"name": "Ride", "category": "WORKOUT"}

    bulk = _run(
        recorder,
        lambda c: c.events.create_multiple(0, [{"name": "A"}, {"name": "B"}], upsert=True),
    )
    assert [e.id for e in bulk.value] == [1, 2]
    assert dict(recorder.last.url.params) == {"upsert": "true"}

    deleted = _run(recorder, lambda c: c.events.delete_bulk(0, [{"id": 1}, {"external_id": "x"}]))
    assert deleted.value == 2
    assert recorder.last.method == "PUT"


def test_events_list_and_delete_parameters() -> None:
    recorder = _Recorder({"athlete/0/events": []})

    _run(
        recorder,
        lambda c: c.events.list(category=["workout", "NOTE"], power_range=5, resolve=False),
    )
    assert dict(recorder.last.url.params) == {
        "category": "WORKOUT,NOTE",
        "powerRange": "5",
        "resolve": "false",
    }

    _run(recorder, lambda c: c.events.delete(0, 12, others=True, not_before="2024-05-01"))
    assert recorder.last.method == "DELETE"
    assert dict(recorder.last.url.params) == {"others": "true", "notBefore": "2024-05-01"}


def test_library_and_chats_routes() -> None:
    recorder = _Recorder(
        {
            "athlete/0/workout-tags": ["vo2", "z2"],
            "chats/3/messages": [{"id": 1, "content": "hi"}],
            "activity/a1/messages": {"id": 5, "content": "nice"},
        }
    )

    tags = _run(recorder, lambda c: c.library.list_tags())
    assert tags.value == ["vo2", "z2"]

    messages = _run(recorder, lambda c: c.chats.list_messages(3, limit=20))
    assert messages.value[0].content == "hi"
    assert recorder.last.url.params["limit"] == "20"

    comment = _run(recorder, lambda c: c.chats.add_activity_message("a1", "nice"))
    assert comment.value.id == 5
    assert json.loads(recorder.last.content) == {"text": "nice"}

    _run(recorder, lambda c: c.chats.mark_seen(3, 1))
    assert recorder.last.method == "PUT"
    assert recorder.last.url.path == "/api/v1/chats/3/messages/1/seen"

    _run(recorder, lambda c: c.library.delete_folder(0, 8))
    assert recorder.last.method == "DELETE"
    assert recorder.last.url.path == "/api/v1/athlete/0/folders/8"


def test_invalid_input_raises_before_request() -> None:
    recorder = _Recorder()

    with pytest.raises(IntervalsValidationError):
        _run(recorder, lambda c: c.wellness.get("i1", "March 1st"))
    with pytest.raises(IntervalsValidationError):
        _run(recorder, lambda c: c.athletes.get_settings(0, "watch"))

    assert recorder.requests == []


def test_update_intervals_sends_snake_case_body_and_merge_flag() -> None:
    recorder = _Recorder({"activity/a1/intervals": {"id": "a1", "icu_intervals": []}})

    result = _run(
        recorder,
        lambda c: c.activities.update_intervals(
            "a1",
            [{"startIndex": 0, "endIndex": 120, "type": "WORK"}],
            replace_all=False,
        ),
    )

    assert result.ok
    assert result.value["icu_intervals"] == []
    assert recorder.last.method == "PUT"
    assert dict(recorder.last.url.params) == {"all": "false"}
    assert json.loads(recorder.last.content) == [
        {"start_index": 0, "end_index": 120, "type": "WORK"}
    ]


def test_split_interval_and_update_single_interval_paths() -> None:
    recorder = _Recorder()

    _run(recorder, lambda c: c.activities.split_interval("a1", 300))
    assert recorder.last.method == "PUT"
    assert recorder.last.url.path == "/api/v1/activity/a1/split-interval"
    assert dict(recorder.last.url.params) == {"splitAt": "300"}

    _run(recorder, lambda c: c.activities.update_interval("a1", 3, {"label": "VO2"}))
    assert recorder.last.url.path == "/api/v1/activity/a1/intervals/3"
    assert json.loads(recorder.last.content) == {"label": "VO2"}


def test_update_streams_csv_sends_raw_csv_body() -> None:
    recorder = _Recorder({"activity/a1/streams.csv": {"updated": 2}})
    body = "time,watts\n0,200\n1,210\n"

    result = _run(recorder, lambda c: c.activities.update_streams_csv("a1", body))

    assert result.value == {"updated": 2}
    assert recorder.last.method == "PUT"
    assert recorder.last.headers["Content-Type"] == "text/csv"
    assert recorder.last.headers["Accept"] == "application/json"
    assert recorder.last.content == body.encode("utf-8")


def test_athlete_power_curves_query_and_decoding() -> None:
    recorder = _Recorder(
        {"athlete/0/power-curves.json": [{"id": "1y", "secs": [1, 5], "watts": [900, 700]}]}
    )

    result = _run(
        recorder,
        lambda c: c.activities.list_athlete_power_curves(
            sport_type="Ride",
            curves=["1y", "42d"],
            include_ranks=True,
            newest=date(2024, 6, 30),
        ),
    )

    assert result.ok
    assert result.value[0]["watts"] == [900, 700]
    assert dict(recorder.last.url.params) == {
        "type": "Ride",
        "newest": "2024-06-30",
        "curves": "1y,42d",
        "includeRanks": "true",
    }


def test_curve_lists_require_sport_type() -> None:
    recorder = _Recorder()

    with pytest.raises(IntervalsValidationError):
        _run(recorder, lambda c: c.activities.get_activity_hr_curves("i1", sport_type=""))
    assert recorder.requests == []


def test_activity_analysis_endpoints_use_expected_paths() -> None:
    recorder = _Recorder(
        {
            "activity/a1/gap-histogram": [{"min": 300, "max": 310, "secs": 42}],
            "athlete/0/activities/interval-search": [],
        }
    )

    histogram = _run(recorder, lambda c: c.activities.get_gap_histogram("a1"))
    assert histogram.value == [{"min": 300, "max": 310, "secs": 42}]
    assert recorder.last.url.path == "/api/v1/activity/a1/gap-histogram"

    _run(recorder, lambda c: c.activities.get_hr_load_model("a1"))
    assert recorder.last.url.path == "/api/v1/activity/a1/hr-load-model"

    _run(recorder, lambda c: c.activities.search_intervals("5x5min", limit=3))
    assert recorder.last.url.path == "/api/v1/athlete/0/activities/interval-search"
    assert dict(recorder.last.url.params) == {"q": "5x5min", "limit": "3"}
