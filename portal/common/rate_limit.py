# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""
固定窗口限流

计数桶保存在可替换的存储对象中；默认实现为进程内字典，
多进程/多实例部署时各实例独立计数。
"""

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping

from portal.constants import RATE_LIMIT_SWEEP_INTERVAL, UNKNOWN_CLIENT
from portal.schemas.rate_limit import RateLimitBucket, RateLimitPolicy, RateLimitResult

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    """当前毫秒时间戳"""
    return int(time.time() * 1000)


class RateLimitStore(ABC):
    """限流计数桶存储"""

    @abstractmethod
    def get(self, key: str) -> RateLimitBucket | None:
        """获取计数桶"""

    @abstractmethod
    def set(self, key: str, bucket: RateLimitBucket) -> None:
        """写入计数桶"""

    @abstractmethod
    def sweep(self, now: int) -> int:
        """清理窗口已结束的计数桶，返回清理数量"""


class MemoryRateLimitStore(RateLimitStore):
    """进程内计数桶存储"""

    def __init__(self) -> None:
        """初始化空表"""
        self._buckets: dict[str, RateLimitBucket] = {}

    def get(self, key: str) -> RateLimitBucket | None:
        """获取计数桶"""
        return self._buckets.get(key)

    def set(self, key: str, bucket: RateLimitBucket) -> None:
        """写入计数桶"""
        self._buckets[key] = bucket

    def sweep(self, now: int) -> int:
        """清理窗口已结束的计数桶"""
        expired = [key for key, bucket in self._buckets.items() if now >= bucket.reset_at]
        for key in expired:
            del self._buckets[key]
        return len(expired)

    def __len__(self) -> int:
        """当前计数桶数量"""
        return len(self._buckets)


class RateLimiter:
    """固定窗口限流器"""

    def __init__(
        self,
        store: RateLimitStore,
        clock: Callable[[], int] = _now_ms,
        sweep_interval: int = RATE_LIMIT_SWEEP_INTERVAL,
    ) -> None:
        """
        初始化限流器

        :param store: 计数桶存储
        :param clock: 毫秒时间戳来源
        :param sweep_interval: 过期计数桶的清理间隔（毫秒）
        """
        self.store = store
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._last_sweep = clock()

    def check(self, identifier: str, policy: RateLimitPolicy) -> RateLimitResult:
        """
        记录一次请求并判断是否放行

        窗口内第 limit+1 次请求开始拒绝；窗口结束后从1重新计数。

        :param identifier: 客户端标识
        :param policy: 限流策略
        :return: 限流检查结果
        """
        now = self._clock()
        self._maybe_sweep(now)

        # 同一客户端在不同策略下分别计数
        key = f"{identifier or UNKNOWN_CLIENT}:{policy.limit}:{policy.window_ms}"
        bucket = self.store.get(key)
        if bucket is None or now >= bucket.reset_at:
            bucket = RateLimitBucket(count=0, window_start=now, reset_at=now + policy.window_ms)

        bucket = bucket.model_copy(update={"count": bucket.count + 1})
        self.store.set(key, bucket)

        return RateLimitResult(
            allowed=bucket.count <= policy.limit,
            limit=policy.limit,
            remaining=max(0, policy.limit - bucket.count),
            reset_at=bucket.reset_at,
        )

    def retry_after(self, result: RateLimitResult) -> int:
        """距离窗口重置的秒数（向上取整，至少为1）"""
        millis = result.reset_at - self._clock()
        return max(1, -(-millis // 1000))

    def _maybe_sweep(self, now: int) -> None:
        """距上次清理超过间隔时清理过期计数桶"""
        if now - self._last_sweep < self._sweep_interval:
            return
        self._last_sweep = now
        removed = self.store.sweep(now)
        if removed:
            logger.debug("[RateLimiter] 清理过期计数桶 %d 个", removed)


def get_client_identifier(headers: Mapping[str, str], client_host: str | None = None) -> str:
    """
    根据请求头获取客户端标识

    依次使用 X-Forwarded-For 的第一跳、X-Real-IP、CF-Connecting-IP、
    连接的对端地址；均不可用时退化为共享标识。
    """
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    for header in ("x-real-ip", "cf-connecting-ip"):
        value = headers.get(header)
        if value:
            return value.strip()

    if client_host:
        return client_host

    logger.warning("[RateLimiter] 无法识别客户端地址，使用共享限流标识")
    return UNKNOWN_CLIENT


rate_limiter = RateLimiter(MemoryRateLimitStore())
