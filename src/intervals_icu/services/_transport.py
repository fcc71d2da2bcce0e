"""サービス層向けトランスポート共通処理。

1回の論理呼び出し（再試行を含む）をキューの1タスクとして実行し、
結果を ``Result`` に正規化する。
"""

from __future__ import annotations

import inspect
import logging
import time
from collections.abc import Callable
from enum import StrEnum
from typing import Any, TypeVar

import httpx

from intervals_icu.config import ClientConfig
from intervals_icu.errors import (
    ApiError,
    ForbiddenError,
    HttpError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    RequestTimeoutError,
    SchemaError,
    UnauthorizedError,
    UnknownError,
    extract_issues,
)
from intervals_icu.http import (
    RequestQueue,
    RetryController,
    build_request_headers,
    parse_retry_after,
    read_body_best_effort,
    sleep_ms,
)
from intervals_icu.result import Err, Ok, Result
from intervals_icu.types import (
    ErrorEvent,
    Hooks,
    RequestEvent,
    RequestOptions,
    ResponseEvent,
    RetryEvent,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BodyShape(StrEnum):
    """成功応答本文の読み取り形式。"""

    JSON = "json"
    TEXT = "text"
    BYTES = "bytes"


async def _invoke_hook(hook: Callable[[Any], Any] | None, event: Any) -> None:
    if hook is None:
        return
    outcome = hook(event)
    if inspect.isawaitable(outcome):
        await outcome


def _read_success_body(response: httpx.Response, shape: BodyShape) -> Any:
    if shape is BodyShape.BYTES:
        return response.content
    if shape is BodyShape.TEXT:
        return response.text
    return read_body_best_effort(response)


def _make_api_error(response: httpx.Response, retry_after: float | None) -> ApiError:
    """非2xx応答をエラー種別へ分類する。"""

    status = response.status_code
    message = f"HTTP {status} {response.reason_phrase}".strip()
    body = read_body_best_effort(response)
    if status == 401:
        return UnauthorizedError(message, status=status, body=body)
    if status == 403:
        return ForbiddenError(message, status=status, body=body)
    if status == 404:
        return NotFoundError(message, status=status, body=body)
    if status == 429:
        return RateLimitError(
            message,
            status=status,
            body=body,
            retry_after_seconds=retry_after,
        )
    return HttpError(message, status=status, body=body)


class RequestExecutor:
    """認証・同時実行制御・再試行・結果正規化を担う要求実行器。"""

    def __init__(
        self,
        *,
        client: httpx.AsyncClient,
        config: ClientConfig,
        queue: RequestQueue,
        retry: RetryController,
        hooks: Hooks | None = None,
    ) -> None:
        self._client = client
        self._config = config
        self._queue = queue
        self._retry = retry
        self._hooks = hooks or Hooks()

    @property
    def queue(self) -> RequestQueue:
        return self._queue

    async def request_json(
        self,
        path: str,
        options: RequestOptions | None = None,
        decoder: Callable[[Any], T] | None = None,
    ) -> Result[T]:
        """JSON本文を要求する。

        Args:
            path: ベースURLからの相対パス。先頭のスラッシュは除去する。
            options: 要求オプション。
            decoder: 本文を検証・変換する関数。省略時は本文をそのまま返す。

        Returns:
            成功時は ``Ok``、失敗時は ``Err``。
        """

        return await self._submit(path, options, BodyShape.JSON, decoder)

    async def request_text(
        self,
        path: str,
        options: RequestOptions | None = None,
        decoder: Callable[[str], T] | None = None,
    ) -> Result[T]:
        """テキスト本文（CSVなど）を要求する。"""

        return await self._submit(path, options, BodyShape.TEXT, decoder)

    async def request_bytes(
        self,
        path: str,
        options: RequestOptions | None = None,
    ) -> Result[bytes]:
        """バイナリ本文（FITファイルなど）を要求する。"""

        return await self._submit(path, options, BodyShape.BYTES, None)

    async def _submit(
        self,
        path: str,
        options: RequestOptions | None,
        shape: BodyShape,
        decoder: Callable[[Any], Any] | None,
    ) -> Result[Any]:
        normalized = path.lstrip("/")
        opts = options or RequestOptions()

        async def task() -> Result[Any]:
            return await self._run(normalized, opts, shape, decoder)

        return await self._queue.enqueue(task)

    async def _run(
        self,
        path: str,
        options: RequestOptions,
        shape: BodyShape,
        decoder: Callable[[Any], Any] | None,
    ) -> Result[Any]:
        method = options.method.upper()
        url = f"{self._config.base_url.rstrip('/')}/{path}"
        started = time.monotonic()
        await _invoke_hook(
            self._hooks.on_request,
            RequestEvent(method=method, path=path, params=options.params),
        )
        logger.debug("要求開始: %s %s", method, path)

        max_attempts = self._retry.max_attempts
        for attempt in range(1, max_attempts + 1):
            headers = build_request_headers(
                self._config.credential,
                user_agent=self._config.user_agent,
                extra=options.headers,
            )
            try:
                response = await self._client.request(
                    method,
                    url,
                    params=options.params,
                    headers=headers,
                    json=options.json,
                    content=options.content,
                    files=options.files,
                    data=options.data,
                    timeout=self._config.timeout,
                )
            except httpx.TimeoutException as exc:
                error: ApiError = RequestTimeoutError(str(exc) or "Request timed out", cause=exc)
                return await self._fail(method, path, error, started)
            except httpx.RequestError as exc:
                # TransportError / DecodingError / TooManyRedirects
                error = NetworkError(str(exc) or "Network error", cause=exc)
                return await self._fail(method, path, error, started)
            except Exception as exc:  # noqa: BLE001
                error = UnknownError(str(exc) or type(exc).__name__, cause=exc)
                return await self._fail(method, path, error, started)

            if response.status_code == 429:
                retry_after = parse_retry_after(response.headers.get("Retry-After"))
                decision = self._retry.decide(
                    attempt=attempt,
                    status=response.status_code,
                    retry_after=retry_after,
                )
                if decision is not None:
                    await response.aclose()
                    logger.debug(
                        "再試行します: %s %s attempt=%d/%d delay_ms=%d source=%s",
                        method,
                        path,
                        attempt,
                        max_attempts,
                        decision.delay_ms,
                        decision.source,
                    )
                    await _invoke_hook(
                        self._hooks.on_retry,
                        RetryEvent(
                            method=method,
                            path=path,
                            attempt=attempt,
                            max_attempts=max_attempts,
                            delay_ms=decision.delay_ms,
                            reason=decision.reason,
                        ),
                    )
                    await sleep_ms(decision.delay_ms)
                    continue
                return await self._fail(
                    method, path, _make_api_error(response, retry_after), started
                )

            if not response.is_success:
                return await self._fail(method, path, _make_api_error(response, None), started)

            body = _read_success_body(response, shape)
            await _invoke_hook(
                self._hooks.on_response,
                ResponseEvent(
                    method=method,
                    path=path,
                    status=response.status_code,
                    duration_ms=_elapsed_ms(started),
                ),
            )
            if decoder is None:
                return Ok(body)
            try:
                return Ok(decoder(body))
            except Exception as exc:  # noqa: BLE001
                logger.debug("レスポンス検証に失敗しました: %s %s: %s", method, path, exc)
                return Err(
                    SchemaError(
                        "Response validation failed",
                        issues=extract_issues(exc),
                        cause=exc,
                    )
                )

        return await self._fail(
            method, path, UnknownError("Request failed after retries"), started
        )

    async def _fail(
        self,
        method: str,
        path: str,
        error: ApiError,
        started: float,
    ) -> Err:
        logger.debug("要求失敗: %s %s kind=%s message=%s", method, path, error.kind, error.message)
        try:
            await _invoke_hook(
                self._hooks.on_error,
                ErrorEvent(
                    method=method,
                    path=path,
                    error=error,
                    duration_ms=_elapsed_ms(started),
                ),
            )
        except Exception:  # noqa: BLE001
            logger.warning("on_error フックが例外を送出しました: %s %s", method, path, exc_info=True)
        return Err(error)


def _elapsed_ms(started: float) -> float:
    return (time.monotonic() - started) * 1000
