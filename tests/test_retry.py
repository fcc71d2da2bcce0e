"""429再試行制御のテスト。"""

from __future__ import annotations

import random
import time
from datetime import datetime, timedelta, timezone

import pytest

from intervals_icu.config import RetryConfig
from intervals_icu.http import RetryController, exponential_backoff_ms, parse_retry_after


def test_backoff_doubles_and_is_capped_without_jitter() -> None:
    controller = RetryController(
        RetryConfig(max_retries=5, initial_delay=1.0, max_delay=8.0, jitter=False)
    )

    assert [controller.backoff_ms(n) for n in range(1, 6)] == [1000, 2000, 4000, 8000, 8000]


def test_backoff_jitter_stays_within_factor() -> None:
    controller = RetryController(
        RetryConfig(initial_delay=1.0, max_delay=8.0, jitter=True, jitter_factor=0.2),
        rng=random.Random(1234),
    )

    delays = [controller.backoff_ms(2) for _ in range(200)]
    assert all(1600 <= d <= 2400 for d in delays)
    assert len(set(delays)) > 1


def test_backoff_never_negative() -> None:
    assert exponential_backoff_ms(attempt=1, initial_ms=0, max_ms=0, jitter_factor=1.0) == 0


def test_retry_after_takes_precedence_and_is_not_jittered() -> None:
    controller = RetryController(RetryConfig(jitter=True), rng=random.Random(1))

    decision = controller.decide(attempt=1, status=429, retry_after=2.5)

    assert decision is not None
    assert decision.delay_ms == 2500
    assert decision.source == "retry_after"
    assert decision.reason == "Rate limit (429)"


def test_retry_after_zero_means_immediate_retry() -> None:
    controller = RetryController(RetryConfig())

    decision = controller.decide(attempt=1, status=429, retry_after=0.0)

    assert decision is not None
    assert decision.delay_ms == 0
    assert decision.source == "retry_after"


def test_missing_retry_after_falls_back_to_backoff() -> None:
    controller = RetryController(RetryConfig(initial_delay=0.5, jitter=False))

    decision = controller.decide(attempt=2, status=429, retry_after=None)

    assert decision is not None
    assert decision.delay_ms == 1000
    assert decision.source == "backoff"


def test_only_429_is_retried() -> None:
    controller = RetryController(RetryConfig())

    for status in (200, 401, 403, 404, 500, 503):
        assert controller.decide(attempt=1, status=status, retry_after=1.0) is None


def test_attempts_are_bounded_by_max_retries() -> None:
    controller = RetryController(RetryConfig(max_retries=3))

    assert controller.max_attempts == 4
    assert controller.decide(attempt=3, status=429, retry_after=None) is not None
    assert controller.decide(attempt=4, status=429, retry_after=None) is None


def test_zero_retries_means_single_attempt() -> None:
    controller = RetryController(RetryConfig(max_retries=0))

    assert controller.max_attempts == 1
    assert controller.decide(attempt=1, status=429, retry_after=1.0) is None


def test_parse_retry_after_values() -> None:
    assert parse_retry_after("2") == 2.0
    assert parse_retry_after(" 1.5 ") == 1.5
    assert parse_retry_after("0") == 0.0
    assert parse_retry_after(None) is None
    assert parse_retry_after("") is None
    assert parse_retry_after("-1") is None
    assert parse_retry_after("inf") is None
    assert parse_retry_after("soon") is None


def test_parse_retry_after_http_date_in_past_is_zero() -> None:
    assert parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT") == 0.0


def test_backoff_sequence_with_subsecond_initial_delay() -> None:
    controller = RetryController(
        RetryConfig(max_retries=6, initial_delay=0.1, max_delay=1.0, jitter=False)
    )

    assert [controller.backoff_ms(n) for n in range(1, 7)] == [100, 200, 400, 800, 1000, 1000]


def test_parse_retry_after_http_date_without_zone_is_utc(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TZ", "Asia/Tokyo")
    if hasattr(time, "tzset"):
        time.tzset()
    try:
        target = datetime.now(timezone.utc) + timedelta(seconds=120)
        header = target.strftime("%a, %d %b %Y %H:%M:%S -0000")

        seconds = parse_retry_after(header)
    finally:
        monkeypatch.undo()
        if hasattr(time, "tzset"):
            time.tzset()

    assert seconds is not None
    assert 100 <= seconds <= 121
