# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""身份认证提供商基类"""

from abc import ABC, abstractmethod

from portal.schemas.session import Session, User


class IdentityProviderBase(ABC):
    """身份认证提供商"""

    @abstractmethod
    async def verify_current_user(self, access_token: str) -> User | None:
        """向认证服务确认Token对应的用户；Token被拒绝时返回None"""

    @abstractmethod
    async def exchange_authorization_code(self, code: str, code_verifier: str) -> Session:
        """使用授权码换取Session"""

    @abstractmethod
    async def install_session(self, access_token: str, refresh_token: str) -> Session:
        """使用SSO下发的Token对建立Session"""

    @abstractmethod
    async def refresh_session(self, session: Session) -> Session:
        """刷新Session，返回轮换后的Token"""

    @abstractmethod
    async def sign_out(self, session: Session) -> None:
        """在认证服务侧注销Session"""

    @abstractmethod
    def token_expiry(self, access_token: str) -> int:
        """Access Token的过期时间（秒级时间戳）"""
