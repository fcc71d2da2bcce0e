"""キー命名規則変換のテスト。"""

from __future__ import annotations

from intervals_icu.normalize import (
    to_camel_case,
    to_snake_case,
    transform_keys_to_camel,
    transform_keys_to_snake,
)


def test_to_snake_case_handles_acronyms() -> None:
    assert to_snake_case("restingHR") == "resting_hr"
    assert to_snake_case("hrvSDNN") == "hrv_sdnn"
    assert to_snake_case("avgSleepingHR") == "avg_sleeping_hr"
    assert to_snake_case("spO2") == "sp_o2"
    assert to_snake_case("rampRate") == "ramp_rate"
    assert to_snake_case("already_snake") == "already_snake"


def test_to_camel_case() -> None:
    assert to_camel_case("ramp_rate") == "rampRate"
    assert to_camel_case("start_date_local") == "startDateLocal"
    assert to_camel_case("id") == "id"


def test_transform_keys_recurses_into_lists_and_dicts() -> None:
    payload = {"sportInfo": [{"wPrime": 20000, "pMax": 900}], "restingHR": 48, "note": "x"}

    assert transform_keys_to_snake(payload) == {
        "sport_info": [{"w_prime": 20000, "p_max": 900}],
        "resting_hr": 48,
        "note": "x",
    }
    assert transform_keys_to_camel({"ctl_load": 1, "items": [{"body_fat": 2}]}) == {
        "ctlLoad": 1,
        "items": [{"bodyFat": 2}],
    }
    assert transform_keys_to_snake("plain") == "plain"
