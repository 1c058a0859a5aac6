# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""FastAPI 返回数据结构"""

from pydantic import BaseModel, Field


class HealthCheckRsp(BaseModel):
    """GET /api/health_check 返回数据结构"""

    status: str


class LogoutRsp(BaseModel):
    """POST /api/logout 返回数据结构"""

    success: bool


class ErrorRsp(BaseModel):
    """通用错误返回数据结构"""

    success: bool = Field(default=False)
    error: str
    errors: list[str] | None = Field(default=None)



class RateLimitedRsp(BaseModel):
    """429 返回数据结构"""

    error: str
    reset: int = Field(description="窗口重置时间（毫秒时间戳）")
