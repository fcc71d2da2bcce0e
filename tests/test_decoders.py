"""レスポンスデコーダとエンコーダのテスト。"""

from __future__ import annotations

import pytest

from intervals_icu.decoders import (
    decode_activities,
    decode_activity_id,
    decode_events_deleted,
    decode_folders,
    decode_mapping,
    decode_string_list,
    decode_wellness,
    encode_body,
    encode_record,
)
from intervals_icu.errors import DecodeError
from intervals_icu.types import Event, SportInfo, Wellness, Workout


def test_wellness_camel_keys_become_snake_attributes() -> None:
    wellness = decode_wellness(
        {
            "id": "2024-03-01",
            "ctl": 55.2,
            "restingHR": 48,
            "hrvSDNN": 61.5,
            "spO2": 97,
            "sportInfo": [{"type": "Ride", "eftp": 250, "wPrime": 20000, "pMax": 900}],
            "customField": 3,
        }
    )

    assert wellness.id == "2024-03-01"
    assert wellness.resting_hr == 48
    assert wellness.hrv_sdnn == 61.5
    assert wellness.sp_o2 == 97
    assert wellness.sport_info == [SportInfo(type="Ride", eftp=250, w_prime=20000, p_max=900)]
    assert wellness.extras == {"custom_field": 3}


def test_activity_stub_with_only_id_is_accepted() -> None:
    activities = decode_activities([{"id": "12345"}, {"id": 9, "name": "Run", "type": "Run"}])

    assert activities[0].id == "12345"
    assert activities[0].name is None
    assert activities[1].type == "Run"


def test_decode_error_collects_every_issue() -> None:
    with pytest.raises(DecodeError) as excinfo:
        decode_activities([{"name": "no id"}, {"id": 1, "start_date": 5}, "junk"])

    issues = excinfo.value.issues
    assert [i["path"] for i in issues] == ["$[0].id", "$[1].start_date", "$[2]"]
    assert issues[1]["expected"] == "str"
    assert issues[1]["received"] == "int"


def test_bool_is_not_accepted_as_number() -> None:
    with pytest.raises(DecodeError):
        decode_wellness({"id": "2024-03-01", "weight": True})


def test_folders_decode_nested_workouts() -> None:
    folders = decode_folders(
        [
            {
                "id": 1,
                "type": "FOLDER",
                "name": "Base",
                "children": [{"id": 10, "name": "Sweet spot", "tags": ["ss"]}],
            }
        ]
    )

    assert folders[0].children == [Workout(id=10, name="Sweet spot", tags=["ss"])]


def test_generic_decoders() -> None:
    assert decode_mapping({"someKey": {"innerKey": 1}}) == {"some_key": {"inner_key": 1}}
    assert decode_string_list(["a", "b"]) == ["a", "b"]
    with pytest.raises(DecodeError):
        decode_string_list(["a", 1])
    assert decode_activity_id({"id": "a1"}) == "a1"
    assert decode_events_deleted({"eventsDeleted": 3}) == 3
    with pytest.raises(DecodeError):
        decode_events_deleted({"eventsDeleted": "3"})


def test_encode_record_maps_back_to_wire_keys() -> None:
    wellness = Wellness(id="2024-03-01", resting_hr=50, hrv_sdnn=40.0, extras={"custom_field": 1})

    assert encode_record(wellness) == {
        "id": "2024-03-01",
        "restingHR": 50,
        "hrvSDNN": 40.0,
        "custom_field": 1,
    }


def test_encode_body_accepts_mappings_and_lists() -> None:
    assert encode_body({"resting_hr": 52, "unknown_key": 1}, Wellness) == {
        "restingHR": 52,
        "unknown_key": 1,
    }
    assert encode_body([Event(name="Ride", category="WORKOUT")], Event) == [
        {"name": "Ride", "category": "WORKOUT"}
    ]
