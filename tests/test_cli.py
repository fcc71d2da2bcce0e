"""CLI出力処理のテスト。"""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest
from typer.testing import CliRunner

from intervals_icu.cli import _dump_value, _to_jsonable, build_app
from intervals_icu.types import Activity, SportInfo, Wellness


def test_to_jsonable_flattens_extras_into_record() -> None:
    wellness = Wellness(
        id="2024-03-01",
        ctl=50.0,
        sport_info=[SportInfo(type="Ride", eftp=250)],
        extras={"custom_field": 1},
    )

    payload = _to_jsonable(wellness)

    assert payload["id"] == "2024-03-01"
    assert payload["custom_field"] == 1
    assert payload["sport_info"][0]["eftp"] == 250
    assert "extras" not in payload


def test_dump_value_writes_json_file(tmp_path: Path) -> None:
    out = tmp_path / "activities.json"

    _dump_value([Activity(id="a1", name="Morning Ride")], out)

    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload[0]["id"] == "a1"
    assert payload[0]["name"] == "Morning Ride"


def test_dump_value_writes_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    _dump_value({"plot_hr": True}, None)

    assert json.loads(capsys.readouterr().out) == {"plot_hr": True}


def test_dump_value_rejects_unknown_suffix(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        _dump_value([], tmp_path / "out.parquet")


@pytest.fixture()
def sent(monkeypatch: pytest.MonkeyPatch) -> list[httpx.Request]:
    recorded: list[httpx.Request] = []

    async def fake_send(
        self: httpx.AsyncClient, request: httpx.Request, **kwargs: object
    ) -> httpx.Response:
        recorded.append(request)
        raise AssertionError("要求は送信されないはず")

    monkeypatch.setattr(httpx.AsyncClient, "send", fake_send)
    return recorded


def test_cli_rejects_unknown_out_suffix_before_request(
    tmp_path: Path, sent: list[httpx.Request]
) -> None:
    runner = CliRunner()
    out = tmp_path / "activities.csv"

    result = runner.invoke(
        build_app(), ["activities", "--api-key", "k", "--out", str(out)]
    )

    assert result.exit_code == 2
    assert isinstance(result.exception, SystemExit)
    assert sent == []
    assert not out.exists()


def test_cli_reports_invalid_date_as_bad_parameter(sent: list[httpx.Request]) -> None:
    runner = CliRunner()

    result = runner.invoke(build_app(), ["wellness", "--api-key", "k", "--oldest", "yesterday"])

    assert result.exit_code == 2
    assert isinstance(result.exception, SystemExit)
    assert sent == []
