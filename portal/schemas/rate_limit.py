# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""限流相关数据结构"""

from pydantic import BaseModel, Field


class RateLimitPolicy(BaseModel):
    """限流策略：固定窗口内最多允许 limit 次请求"""

    limit: int = Field(description="窗口内允许的最大请求数", gt=0)
    window_ms: int = Field(description="窗口长度（毫秒）", gt=0)


class RateLimitBucket(BaseModel):
    """单个客户端标识的计数桶"""

    count: int = Field(description="当前窗口内的请求数", ge=0)
    window_start: int = Field(description="窗口起始时间（毫秒时间戳）")
    reset_at: int = Field(description="窗口结束时间（毫秒时间戳）")


class RateLimitResult(BaseModel):
    """限流检查结果"""

    allowed: bool
    limit: int
    remaining: int
    reset_at: int = Field(description="窗口重置时间（毫秒时间戳）")
