"""CLIエントリポイント。"""

from __future__ import annotations

import asyncio
import dataclasses
import json
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from intervals_icu.errors import IntervalsValidationError
from intervals_icu.result import Result


def _require_typer() -> Any:
    try:
        import typer
    except ImportError as exc:
        raise RuntimeError(
            "CLIには typer が必要です。pip install 'intervals-icu[cli]' を実行してください。"
        ) from exc
    return typer


def _to_jsonable(value: Any) -> Any:
    """レコードをJSON化できる値へ変換する。``extras`` は本体へ展開する。"""

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        payload: dict[str, Any] = {}
        for f in dataclasses.fields(value):
            if f.name == "extras":
                continue
            payload[f.name] = _to_jsonable(getattr(value, f.name))
        for key, extra in (getattr(value, "extras", None) or {}).items():
            payload.setdefault(key, _to_jsonable(extra))
        return payload
    if isinstance(value, dict):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    return value


def _check_out_path(out: Path | None) -> None:
    if out is not None and out.suffix.lower() != ".json":
        raise ValueError("出力拡張子は .json のみ対応です。")


def _dump_value(value: Any, out: Path | None) -> None:
    _check_out_path(out)
    text = json.dumps(_to_jsonable(value), ensure_ascii=False, indent=2, default=str)
    if out is None:
        sys.stdout.write(text + "\n")
        return
    out.write_text(text, encoding="utf-8")


def build_app() -> Any:
    """Typerアプリを構築する。"""

    typer = _require_typer()
    from intervals_icu import AsyncIntervalsClient

    app = typer.Typer(no_args_is_help=True)

    def _run(
        api_key: str | None,
        access_token: str | None,
        call: Callable[[AsyncIntervalsClient], Awaitable[Result[Any]]],
        out: Path | None,
    ) -> None:
        if not api_key and not access_token:
            raise typer.BadParameter("--api-key か --access-token を指定してください。")
        try:
            _check_out_path(out)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--out") from exc

        async def run() -> Result[Any]:
            credentials = {"access_token": access_token} if access_token else {"api_key": api_key}
            async with AsyncIntervalsClient(**credentials) as client:
                return await call(client)

        try:
            result = asyncio.run(run())
        except IntervalsValidationError as exc:
            raise typer.BadParameter(str(exc)) from exc
        if not result.ok:
            typer.echo(f"{result.error.kind}: {result.error.message}", err=True)
            raise typer.Exit(code=1)
        _dump_value(result.value, out)

    api_key_option = typer.Option(None, "--api-key", envvar="INTERVALS_API_KEY")
    access_token_option = typer.Option(None, "--access-token", envvar="INTERVALS_ACCESS_TOKEN")
    athlete_option = typer.Option("0", "--athlete")
    out_option = typer.Option(None, "--out")

    @app.command("athlete")
    def athlete_command(
        athlete: str = athlete_option,
        api_key: str | None = api_key_option,
        access_token: str | None = access_token_option,
        out: Path | None = out_option,
    ) -> None:
        """アスリート情報を取得する。"""

        _run(api_key, access_token, lambda c: c.athletes.get(athlete), out)

    @app.command("activities")
    def activities_command(
        oldest: str | None = typer.Option(None, "--oldest"),
        newest: str | None = typer.Option(None, "--newest"),
        limit: int | None = typer.Option(None, "--limit"),
        athlete: str = athlete_option,
        api_key: str | None = api_key_option,
        access_token: str | None = access_token_option,
        out: Path | None = out_option,
    ) -> None:
        """アクティビティ一覧を取得する。"""

        _run(
            api_key,
            access_token,
            lambda c: c.activities.list(athlete, oldest=oldest, newest=newest, limit=limit),
            out,
        )

    @app.command("wellness")
    def wellness_command(
        oldest: str | None = typer.Option(None, "--oldest"),
        newest: str | None = typer.Option(None, "--newest"),
        athlete: str = athlete_option,
        api_key: str | None = api_key_option,
        access_token: str | None = access_token_option,
        out: Path | None = out_option,
    ) -> None:
        """ウェルネス記録を取得する。"""

        _run(
            api_key,
            access_token,
            lambda c: c.wellness.list(athlete, oldest=oldest, newest=newest),
            out,
        )

    @app.command("events")
    def events_command(
        oldest: str | None = typer.Option(None, "--oldest"),
        newest: str | None = typer.Option(None, "--newest"),
        category: str | None = typer.Option(None, "--category"),
        athlete: str = athlete_option,
        api_key: str | None = api_key_option,
        access_token: str | None = access_token_option,
        out: Path | None = out_option,
    ) -> None:
        """カレンダーイベントを取得する。``--category`` はカンマ区切り。"""

        categories = [c for c in category.split(",") if c] if category else None
        _run(
            api_key,
            access_token,
            lambda c: c.events.list(athlete, oldest=oldest, newest=newest, category=categories),
            out,
        )

    return app


def app_entry() -> None:
    """CLIアプリを起動する。"""

    build_app()()


if __name__ == "__main__":
    app_entry()
