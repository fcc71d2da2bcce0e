"""HTTP実行補助。"""

from __future__ import annotations

import asyncio
import json
import logging
import math
import random
from collections import deque
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, TypeVar

import httpx

from intervals_icu.auth import Credential, build_authorization_header
from intervals_icu.config import RetryConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

RATE_LIMIT_STATUS = 429
RATE_LIMIT_REASON = "Rate limit (429)"


@dataclass(frozen=True, slots=True)
class WaitDecision:
    """再試行待機の決定結果。

    Attributes:
        delay_ms: 待機ミリ秒。
        source: 待機根拠（``retry_after`` または ``backoff``）。
        reason: 再試行理由。
    """

    delay_ms: int
    source: str
    reason: str


class RequestQueue:
    """同時実行数を制限するFIFOキュー。

    ``max_concurrent`` が0なら無制限で、投入されたタスクは即座に実行される。
    空き枠ができると最も長く待っているタスクから開始する。
    """

    def __init__(self, max_concurrent: int = 0) -> None:
        if max_concurrent < 0:
            raise ValueError("max_concurrent は0以上を指定してください。")
        self._max_concurrent = max_concurrent
        self._active = 0
        self._waiting: deque[asyncio.Future[None]] = deque()

    @property
    def max_concurrent(self) -> int:
        return self._max_concurrent

    @property
    def active_count(self) -> int:
        """実行中タスク数。"""

        return self._active

    @property
    def pending_count(self) -> int:
        """待機中タスク数。"""

        return len(self._waiting)

    async def enqueue(self, task: Callable[[], Awaitable[T]]) -> T:
        """タスクを枠内で実行する。

        Args:
            task: 引数なしのコルーチン関数。

        Returns:
            タスクの戻り値。タスクの例外はそのまま伝播する。
        """

        await self._acquire()
        try:
            return await task()
        finally:
            self._release()

    async def _acquire(self) -> None:
        if self._max_concurrent == 0 or (
            self._active < self._max_concurrent and not self._waiting
        ):
            self._active += 1
            return

        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiting.append(waiter)
        logger.debug(
            "同時実行上限に到達したため待機します: active=%d, pending=%d",
            self._active,
            len(self._waiting),
        )
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter in self._waiting:
                self._waiting.remove(waiter)
            elif waiter.done() and not waiter.cancelled():
                # 枠を受け取った直後に取り消された。
                self._release()
            raise

    def _release(self) -> None:
        while self._waiting:
            waiter = self._waiting.popleft()
            if not waiter.done():
                # 実行数は据え置きで枠を引き渡す。
                waiter.set_result(None)
                return
        self._active -= 1


def parse_retry_after(value: str | None) -> float | None:
    """Retry-Afterヘッダを秒へ変換する。

    10進の非負数、またはHTTP日付を受け付ける。解釈できなければNone。
    """

    if not value:
        return None
    text = value.strip()
    try:
        seconds = float(text)
    except ValueError:
        seconds = None
    if seconds is not None:
        if math.isfinite(seconds) and seconds >= 0:
            return seconds
        return None
    try:
        dt = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        return None
    if dt.tzinfo is None:
        # "-0000" はUTCとして扱う
        dt = dt.replace(tzinfo=timezone.utc)
    return max(0.0, (dt - datetime.now(timezone.utc)).total_seconds())


def exponential_backoff_ms(
    *,
    attempt: int,
    initial_ms: float,
    max_ms: float,
    jitter_factor: float = 0.0,
    rng: random.Random | None = None,
) -> int:
    """指数バックオフの待機ミリ秒を計算する。

    Args:
        attempt: 失敗した試行番号（1始まり）。
        initial_ms: 初回待機ミリ秒。
        max_ms: 待機上限ミリ秒。
        jitter_factor: ゆらぎ係数。0ならゆらぎ無し。
        rng: 乱数生成器。

    Returns:
        0以上の整数ミリ秒。
    """

    delay = min(initial_ms * (2 ** (attempt - 1)), max_ms)
    if jitter_factor > 0:
        spread = delay * jitter_factor
        delay += (rng or random).uniform(-spread, spread)
    return max(0, round(delay))


class RetryController:
    """429応答の再試行可否と待機時間を決める。"""

    def __init__(self, config: RetryConfig, *, rng: random.Random | None = None) -> None:
        self._config = config
        self._rng = rng or random.Random()

    @property
    def max_attempts(self) -> int:
        """総試行回数。"""

        return self._config.max_attempts

    def backoff_ms(self, attempt: int) -> int:
        """Retry-Afterが無い場合の待機ミリ秒。"""

        return exponential_backoff_ms(
            attempt=attempt,
            initial_ms=self._config.initial_delay * 1000,
            max_ms=self._config.max_delay * 1000,
            jitter_factor=self._config.jitter_factor if self._config.jitter else 0.0,
            rng=self._rng,
        )

    def decide(
        self,
        *,
        attempt: int,
        status: int,
        retry_after: float | None,
    ) -> WaitDecision | None:
        """試行結果から再試行を決定する。

        Args:
            attempt: 完了した試行番号（1始まり）。
            status: HTTPステータス。
            retry_after: Retry-After秒。

        Returns:
            再試行する場合は待機決定、しない場合はNone。
        """

        if status != RATE_LIMIT_STATUS or attempt >= self.max_attempts:
            return None
        if retry_after is not None:
            # サーバ指示は絶対なのでゆらぎを加えない。
            return WaitDecision(
                delay_ms=round(retry_after * 1000),
                source="retry_after",
                reason=RATE_LIMIT_REASON,
            )
        return WaitDecision(
            delay_ms=self.backoff_ms(attempt),
            source="backoff",
            reason=RATE_LIMIT_REASON,
        )


async def sleep_ms(delay_ms: int) -> None:
    """ミリ秒単位で協調的に待機する。"""

    await asyncio.sleep(delay_ms / 1000)


def build_request_headers(
    credential: Credential,
    *,
    user_agent: str,
    extra: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """試行ごとの要求ヘッダを構築する。

    呼び出し側がAcceptを指定していればそれを優先する。
    """

    headers: dict[str, str] = {"User-Agent": user_agent}
    if extra:
        headers.update(extra)
    if not any(name.lower() == "accept" for name in headers):
        headers["Accept"] = "application/json"
    headers["Authorization"] = build_authorization_header(credential)
    return headers


def read_body_best_effort(response: httpx.Response) -> Any:
    """エラー応答などの本文を例外なしで読み取る。

    JSONとして解釈できればその値、できなければ文字列、読めなければNone。
    """

    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            return response.json()
        except ValueError:
            return None
    try:
        text = response.text
    except (UnicodeDecodeError, LookupError, httpx.ResponseNotRead):
        return None
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text
