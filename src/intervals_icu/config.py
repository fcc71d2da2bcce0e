"""設定値定義。"""

from __future__ import annotations

from dataclasses import dataclass, field

from intervals_icu.auth import Credential

DEFAULT_BASE_URL = "https://intervals.icu/api/v1"
DEFAULT_USER_AGENT = "intervals-icu-python/0.1.0"
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True, slots=True)
class RetryConfig:
    """429応答に対する再試行設定。

    Attributes:
        max_retries: 再試行回数。総試行回数は ``1 + max_retries``。
        initial_delay: Retry-Afterが無い場合の初回待機秒。
        max_delay: 指数バックオフの待機上限秒。
        jitter: バックオフ待機にゆらぎを加えるか。
        jitter_factor: ゆらぎ幅の係数（0〜1）。
    """

    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 8.0
    jitter: bool = True
    jitter_factor: float = 0.2

    @property
    def max_attempts(self) -> int:
        return 1 + self.max_retries


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """クライアント共通設定。

    Attributes:
        credential: 認証情報。
        base_url: APIベースURL。
        timeout: 1試行あたりのタイムアウト秒。
        user_agent: User-Agent。
        max_concurrent: 同時実行呼び出し数の上限。0は無制限。
        retry: 再試行設定。
    """

    credential: Credential
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    max_concurrent: int = 0
    retry: RetryConfig = field(default_factory=RetryConfig)
