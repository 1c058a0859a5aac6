# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""配置文件数据结构"""

from typing import Literal

from pydantic import BaseModel, Field


class FastAPIConfig(BaseModel):
    """FastAPI配置"""

    domain: str = Field(description="当前实例的域名（用于CORS）")
    host: str = Field(description="监听地址", default="0.0.0.0")  # noqa: S104
    port: int = Field(description="监听端口", default=8002)


class IdentityConfig(BaseModel):
    """统一身份认证（SSO）配置"""

    provider: Literal["supabase"] = Field(description="身份认证提供商", default="supabase")
    url: str = Field(description="Supabase项目地址")
    anon_key: str = Field(description="Supabase匿名Key")
    auth_domain: str = Field(
        description="统一登录服务地址",
        default="https://auth.vanterrafoundations.com",
    )
    cookie_name: str | None = Field(description="Session Cookie名称；为空时按项目地址推导", default=None)
    cookie_domain: str | None = Field(description="Session Cookie作用域", default=None)
    cookie_secure: bool = Field(description="Session Cookie是否仅限HTTPS", default=True)
    timeout: float = Field(description="调用身份认证服务的超时时间（秒）", default=10.0)


class AdminAPIConfig(BaseModel):
    """品牌/门店管理 Webhook API 配置"""

    api_base_url: str = Field(description="Admin API地址", default="https://api.vanterrafoundations.com")
    api_token: str = Field(description="Admin API Token（仅服务端持有）", default="")
    timeout: float = Field(description="调用Admin API的超时时间（秒）", default=10.0)


class ConfigModel(BaseModel):
    """配置文件的校验Class"""

    fastapi: FastAPIConfig
    identity: IdentityConfig
    admin: AdminAPIConfig = Field(default_factory=AdminAPIConfig)
