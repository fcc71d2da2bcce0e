"""公開クライアント実装。"""

from __future__ import annotations

import logging
import random
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from intervals_icu.auth import ApiKey, BearerToken, Credential
from intervals_icu.config import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    ClientConfig,
    RetryConfig,
)
from intervals_icu.http import RequestQueue, RetryController
from intervals_icu.services.activities import AsyncActivitiesService
from intervals_icu.services.athletes import AsyncAthletesService
from intervals_icu.services.chats import AsyncChatsService
from intervals_icu.services.events import AsyncEventsService
from intervals_icu.services.library import AsyncLibraryService
from intervals_icu.services.wellness import AsyncWellnessService
from intervals_icu.services._transport import RequestExecutor
from intervals_icu.types import ErrorEvent, Hooks, RequestEvent, ResponseEvent, RetryEvent

logger = logging.getLogger(__name__)


def _resolve_credential(
    *,
    api_key: str | None,
    access_token: str | None,
    credential: Credential | None,
) -> Credential:
    given = [v for v in (api_key, access_token, credential) if v is not None]
    if len(given) != 1:
        raise ValueError("api_key、access_token、credential のいずれか1つを指定してください。")
    if credential is not None:
        return credential
    if api_key is not None:
        if not api_key:
            raise ValueError("api_key が空です。")
        return ApiKey(api_key)
    if not access_token:
        raise ValueError("access_token が空です。")
    return BearerToken(str(access_token))


class AsyncIntervalsClient:
    """Intervals.icu APIの非同期クライアント。

    すべての呼び出しは ``Result`` を返し、HTTP失敗やスキーマ不一致で例外を送出しない。
    429応答はRetry-Afterまたは指数バックオフで自動再試行する。

    Example:
        >>> async with AsyncIntervalsClient(api_key="...") as client:
        ...     result = await client.athletes.get()
        ...     if result.ok:
        ...         print(result.value.name)
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        access_token: str | None = None,
        credential: Credential | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        max_concurrent: int = 0,
        retry_max_retries: int = 3,
        retry_initial_delay: float = 1.0,
        retry_max_delay: float = 8.0,
        retry_jitter: bool = True,
        retry_jitter_factor: float = 0.2,
        on_request: Callable[[RequestEvent], Awaitable[None] | None] | None = None,
        on_response: Callable[[ResponseEvent], Awaitable[None] | None] | None = None,
        on_error: Callable[[ErrorEvent], Awaitable[None] | None] | None = None,
        on_retry: Callable[[RetryEvent], Awaitable[None] | None] | None = None,
        http_client: httpx.AsyncClient | None = None,
        http2: bool = False,
        proxy: str | None = None,
        limits: httpx.Limits | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """非同期クライアントを初期化する。

        Args:
            api_key: 個人APIキー。Basic認証で送信する。
            access_token: OAuthアクセストークン。Bearer認証で送信する。
            credential: 構築済みの認証情報。
            base_url: APIベースURL。
            timeout: 1試行あたりのタイムアウト秒。
            user_agent: User-Agent。
            max_concurrent: 同時実行呼び出し数の上限。0は無制限。
            retry_max_retries: 429応答時の再試行回数。
            retry_initial_delay: 初回待機秒。
            retry_max_delay: 待機上限秒。
            retry_jitter: バックオフにゆらぎを加えるか。
            retry_jitter_factor: ゆらぎ係数（0〜1）。
            on_request: 要求開始フック。
            on_response: 成功応答フック。
            on_error: 失敗フック。
            on_retry: 再試行予定フック。
            http_client: 外部管理の ``httpx.AsyncClient``。指定時はクローズしない。
            http2: HTTP/2を有効化するか。
            proxy: プロキシURL。
            limits: 接続プール設定。
            rng: バックオフのゆらぎ用乱数生成器。

        Raises:
            ValueError: 設定値が不正な場合。
        """

        resolved = _resolve_credential(
            api_key=api_key,
            access_token=access_token,
            credential=credential,
        )
        if timeout <= 0:
            raise ValueError("timeout は0より大きい値を指定してください。")
        if max_concurrent < 0:
            raise ValueError("max_concurrent は0以上を指定してください。")
        if retry_max_retries < 0:
            raise ValueError("retry_max_retries は0以上を指定してください。")
        if retry_initial_delay < 0 or retry_max_delay < 0:
            raise ValueError("retry_initial_delay と retry_max_delay は0以上を指定してください。")
        if not 0 <= retry_jitter_factor <= 1:
            raise ValueError("retry_jitter_factor は0以上1以下を指定してください。")

        self._owns_client = http_client is None
        if http_client is None:
            client_kwargs: dict[str, Any] = {
                "timeout": timeout,
                "http2": http2,
                "follow_redirects": True,
            }
            if proxy is not None:
                client_kwargs["proxy"] = proxy
            if limits is not None:
                client_kwargs["limits"] = limits
            self._http_client = httpx.AsyncClient(**client_kwargs)
        else:
            self._http_client = http_client

        self._retry = RetryConfig(
            max_retries=retry_max_retries,
            initial_delay=retry_initial_delay,
            max_delay=retry_max_delay,
            jitter=retry_jitter,
            jitter_factor=retry_jitter_factor,
        )
        self._config = ClientConfig(
            credential=resolved,
            base_url=base_url,
            timeout=timeout,
            user_agent=user_agent,
            max_concurrent=max_concurrent,
            retry=self._retry,
        )
        self._hooks = Hooks(
            on_request=on_request,
            on_response=on_response,
            on_error=on_error,
            on_retry=on_retry,
        )
        self.executor = RequestExecutor(
            client=self._http_client,
            config=self._config,
            queue=RequestQueue(max_concurrent),
            retry=RetryController(self._retry, rng=rng),
            hooks=self._hooks,
        )
        logger.debug(
            "クライアントを初期化しました: base_url=%s max_concurrent=%d max_retries=%d",
            base_url,
            max_concurrent,
            retry_max_retries,
        )

        self.activities = AsyncActivitiesService(executor=self.executor)
        self.athletes = AsyncAthletesService(executor=self.executor)
        self.events = AsyncEventsService(executor=self.executor)
        self.wellness = AsyncWellnessService(executor=self.executor)
        self.library = AsyncLibraryService(executor=self.executor)
        self.chats = AsyncChatsService(executor=self.executor)

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def aclose(self) -> None:
        """内部Clientをクローズする。"""

        if self._owns_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> "AsyncIntervalsClient":
        """非同期コンテキスト開始。"""

        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        """非同期コンテキスト終了。"""

        await self.aclose()
