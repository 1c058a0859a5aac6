# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""身份认证 Session 数据结构"""

from typing import Any

from pydantic import BaseModel, Field


class User(BaseModel):
    """身份认证服务确认过的用户"""

    id: str = Field(description="用户唯一标识（sub）")
    email: str | None = Field(default=None)
    role: str | None = Field(default=None)
    app_metadata: dict[str, Any] = Field(default={})
    user_metadata: dict[str, Any] = Field(default={})


class Session(BaseModel):
    """由身份认证服务管理的登录会话"""

    access_token: str
    refresh_token: str
    expires_at: int = Field(description="绝对过期时间（秒级时间戳）")
    token_type: str = Field(default="bearer")
    user: User | None = Field(default=None)
