# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""RateLimiter 单元测试"""

import pytest

from portal.common.rate_limit import MemoryRateLimitStore, RateLimiter, get_client_identifier
from portal.constants import AUTH_CALLBACK_LIMIT, UNKNOWN_CLIENT
from portal.schemas.rate_limit import RateLimitPolicy


class FakeClock:
    """可手动推进的毫秒时钟"""

    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int) -> None:
        self.now += millis


@pytest.fixture
def clock() -> FakeClock:
    """测试fixture: 时钟"""
    return FakeClock()


@pytest.fixture
def store() -> MemoryRateLimitStore:
    """测试fixture: 空计数桶存储"""
    return MemoryRateLimitStore()


@pytest.fixture
def limiter(store: MemoryRateLimitStore, clock: FakeClock) -> RateLimiter:
    """测试fixture: 限流器"""
    return RateLimiter(store, clock=clock)


def test_requests_within_limit_are_allowed(limiter: RateLimiter) -> None:
    """窗口内不超过limit的请求全部放行，remaining单调递减"""
    policy = RateLimitPolicy(limit=5, window_ms=1000)
    remaining = []
    for _ in range(5):
        result = limiter.check("10.0.0.1", policy)
        assert result.allowed
        remaining.append(result.remaining)
    assert remaining == [4, 3, 2, 1, 0]


def test_request_over_limit_is_denied(limiter: RateLimiter) -> None:
    """第limit+1次请求被拒绝，remaining不为负"""
    policy = RateLimitPolicy(limit=3, window_ms=1000)
    for _ in range(3):
        assert limiter.check("10.0.0.1", policy).allowed
    result = limiter.check("10.0.0.1", policy)
    assert not result.allowed
    assert result.remaining == 0
    assert not limiter.check("10.0.0.1", policy).allowed


def test_new_window_after_elapsed(limiter: RateLimiter, clock: FakeClock) -> None:
    """窗口结束后重新计数"""
    policy = RateLimitPolicy(limit=2, window_ms=1000)
    first = limiter.check("10.0.0.1", policy)
    limiter.check("10.0.0.1", policy)
    assert not limiter.check("10.0.0.1", policy).allowed

    clock.advance(1000)
    result = limiter.check("10.0.0.1", policy)
    assert result.allowed
    assert result.remaining == 1
    assert result.reset_at == first.reset_at + 1000


def test_reset_at_is_window_start_plus_window(limiter: RateLimiter, clock: FakeClock) -> None:
    """reset_at = 窗口起点 + 窗口长度，窗口内不变"""
    policy = RateLimitPolicy(limit=10, window_ms=60_000)
    start = clock.now
    first = limiter.check("10.0.0.1", policy)
    clock.advance(30_000)
    second = limiter.check("10.0.0.1", policy)
    assert first.reset_at == start + 60_000
    assert second.reset_at == first.reset_at


def test_identifiers_and_policies_are_counted_separately(limiter: RateLimiter) -> None:
    """不同客户端、不同策略互不影响"""
    tight = RateLimitPolicy(limit=1, window_ms=1000)
    loose = RateLimitPolicy(limit=5, window_ms=1000)
    assert limiter.check("a", tight).allowed
    assert not limiter.check("a", tight).allowed
    assert limiter.check("b", tight).allowed
    assert limiter.check("a", loose).allowed


def test_auth_callback_policy_denies_eleventh_request(limiter: RateLimiter, clock: FakeClock) -> None:
    """认证回调策略：60秒内第11次请求被拒绝，Retry-After为正"""
    for _ in range(10):
        assert limiter.check("198.51.100.7", AUTH_CALLBACK_LIMIT).allowed
        clock.advance(1000)
    result = limiter.check("198.51.100.7", AUTH_CALLBACK_LIMIT)
    assert not result.allowed
    assert limiter.retry_after(result) == 50


def test_expired_buckets_are_swept(store: MemoryRateLimitStore, clock: FakeClock) -> None:
    """清理间隔到达后，过期计数桶被移除"""
    limiter = RateLimiter(store, clock=clock, sweep_interval=5000)
    policy = RateLimitPolicy(limit=5, window_ms=1000)
    limiter.check("a", policy)
    limiter.check("b", policy)
    assert len(store) == 2

    clock.advance(5000)
    limiter.check("c", policy)
    assert len(store) == 1
    assert store.get(f"c:{policy.limit}:{policy.window_ms}") is not None


def test_empty_identifier_uses_shared_bucket(limiter: RateLimiter, store: MemoryRateLimitStore) -> None:
    """空标识退化为共享标识"""
    policy = RateLimitPolicy(limit=1, window_ms=1000)
    limiter.check("", policy)
    assert store.get(f"{UNKNOWN_CLIENT}:1:1000") is not None
    assert not limiter.check(UNKNOWN_CLIENT, policy).allowed


@pytest.mark.parametrize(
    ("headers", "client_host", "expected"),
    [
        ({"x-forwarded-for": "203.0.113.5, 10.0.0.1"}, "10.0.0.2", "203.0.113.5"),
        ({"x-real-ip": "203.0.113.6"}, "10.0.0.2", "203.0.113.6"),
        ({"cf-connecting-ip": "203.0.113.7"}, None, "203.0.113.7"),
        ({}, "10.0.0.2", "10.0.0.2"),
        ({}, None, UNKNOWN_CLIENT),
    ],
)
def test_get_client_identifier(headers: dict[str, str], client_host: str | None, expected: str) -> None:
    """按请求头优先级识别客户端"""
    assert get_client_identifier(headers, client_host) == expected
