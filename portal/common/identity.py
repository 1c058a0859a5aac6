# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""身份认证模块"""

import logging
from urllib.parse import quote, urlsplit

from portal.schemas.session import Session, User

from .config import config
from .identity_provider.base import IdentityProviderBase
from .identity_provider.supabase import SupabaseIdentityProvider

logger = logging.getLogger(__name__)


class IdentityProvider:
    """Identity Provider"""

    def __init__(self) -> None:
        """按配置初始化身份认证提供商"""
        if config.identity.provider == "supabase":
            self.provider: IdentityProviderBase = SupabaseIdentityProvider(config.identity)
        else:
            err = f"[Identity] 未知身份认证提供商: {config.identity.provider}"
            logger.error(err)
            raise NotImplementedError(err)

    @property
    def cookie_name(self) -> str:
        """Session Cookie名称：sb-<项目ID>-auth-token"""
        if config.identity.cookie_name:
            return config.identity.cookie_name
        project_ref = (urlsplit(config.identity.url).hostname or "local").split(".")[0]
        return f"sb-{project_ref}-auth-token"

    @staticmethod
    def login_url(origin: str | None = None, error: str | None = None) -> str:
        """统一登录页地址；error在前，origin在后"""
        url = config.identity.auth_domain.rstrip("/") + "/login"
        params = []
        if error:
            params.append(f"error={quote(error, safe='')}")
        if origin:
            params.append(f"origin={quote(origin, safe='')}")
        if params:
            url += "?" + "&".join(params)
        return url

    async def verify_current_user(self, access_token: str) -> User | None:
        """向认证服务确认当前用户"""
        return await self.provider.verify_current_user(access_token)

    async def exchange_authorization_code(self, code: str, code_verifier: str) -> Session:
        """授权码换取Session"""
        return await self.provider.exchange_authorization_code(code, code_verifier)

    async def install_session(self, access_token: str, refresh_token: str) -> Session:
        """Token对建立Session"""
        return await self.provider.install_session(access_token, refresh_token)

    async def refresh_session(self, session: Session) -> Session:
        """刷新Session"""
        return await self.provider.refresh_session(session)

    async def sign_out(self, session: Session) -> None:
        """注销Session"""
        await self.provider.sign_out(session)

    def token_expiry(self, access_token: str) -> int:
        """Access Token的过期时间"""
        return self.provider.token_expiry(access_token)


identity_provider = IdentityProvider()
