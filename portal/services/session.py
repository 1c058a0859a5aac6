# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""
Session Manager

Session由身份认证服务管理，本地只在HttpOnly Cookie中保存不透明的句柄；
所有信任判断都回到认证服务确认。
"""

import base64
import binascii
import json
import logging
from collections.abc import Mapping

from pydantic import ValidationError
from starlette.responses import Response

from portal.common.config import config
from portal.common.identity import identity_provider
from portal.constants import COOKIE_CHUNK_SIZE, COOKIE_MAX_AGE, COOKIE_VALUE_PREFIX
from portal.exceptions import IdentityProviderError
from portal.schemas.session import Session, User

logger = logging.getLogger(__name__)


class SessionManager:
    """浏览器Session管理"""

    @staticmethod
    def cookie_name() -> str:
        """Session Cookie名称"""
        return identity_provider.cookie_name

    @staticmethod
    def encode_cookies(session: Session) -> dict[str, str]:
        """将Session编码为Cookie；超长时按分片拆分为 name.0、name.1 ..."""
        name = SessionManager.cookie_name()
        raw = session.model_dump_json(exclude_none=True).encode()
        value = COOKIE_VALUE_PREFIX + base64.urlsafe_b64encode(raw).decode().rstrip("=")
        if len(value) <= COOKIE_CHUNK_SIZE:
            return {name: value}
        return {
            f"{name}.{i}": value[start:start + COOKIE_CHUNK_SIZE]
            for i, start in enumerate(range(0, len(value), COOKIE_CHUNK_SIZE))
        }

    @staticmethod
    def _joined_value(cookies: Mapping[str, str]) -> str | None:
        """拼接Session Cookie（含分片）"""
        name = SessionManager.cookie_name()
        if name in cookies:
            return cookies[name]

        chunks = []
        index = 0
        while f"{name}.{index}" in cookies:
            chunks.append(cookies[f"{name}.{index}"])
            index += 1
        return "".join(chunks) or None

    @staticmethod
    def read_session(cookies: Mapping[str, str]) -> Session | None:
        """从Cookie中读取Session；无法解析时视为未登录"""
        value = SessionManager._joined_value(cookies)
        if not value:
            return None

        try:
            if value.startswith(COOKIE_VALUE_PREFIX):
                encoded = value[len(COOKIE_VALUE_PREFIX):]
                value = base64.urlsafe_b64decode(encoded + "=" * (-len(encoded) % 4)).decode()
            return Session.model_validate(json.loads(value))
        except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError, ValidationError):
            logger.warning("[SessionManager] Session Cookie无法解析，按未登录处理")
            return None

    @staticmethod
    def session_cookie_names(cookies: Mapping[str, str]) -> list[str]:
        """请求中所有属于Session的Cookie名称（含分片）"""
        name = SessionManager.cookie_name()
        return [
            key for key in cookies
            if key == name or (key.startswith(f"{name}.") and key[len(name) + 1:].isdigit())
        ]

    @staticmethod
    def write_session(response: Response, session: Session, cookies: Mapping[str, str]) -> dict[str, str]:
        """
        在响应中写入Session Cookie，并删除不再使用的旧分片

        :param response: 响应
        :param session: 新Session
        :param cookies: 请求中原有的Cookie
        :return: 写入的Cookie
        """
        new_cookies = SessionManager.encode_cookies(session)
        for key in SessionManager.session_cookie_names(cookies):
            if key not in new_cookies:
                SessionManager._delete_cookie(response, key)
        for key, value in new_cookies.items():
            response.set_cookie(
                key,
                value,
                max_age=COOKIE_MAX_AGE,
                path="/",
                domain=config.identity.cookie_domain,
                secure=config.identity.cookie_secure,
                httponly=True,
                samesite="lax",
            )
        return new_cookies

    @staticmethod
    def clear_session(response: Response, cookies: Mapping[str, str]) -> list[str]:
        """删除Session Cookie，返回被删除的Cookie名称"""
        names = SessionManager.session_cookie_names(cookies)
        for key in names:
            SessionManager._delete_cookie(response, key)
        return names

    @staticmethod
    def clear_auth_cookies(response: Response, cookies: Mapping[str, str]) -> list[str]:
        """删除所有认证相关Cookie（sb-前缀、含supabase或auth）"""
        names = [
            key for key in cookies
            if key.startswith("sb-") or "supabase" in key or "auth" in key
        ]
        for key in names:
            SessionManager._delete_cookie(response, key)
        return names

    @staticmethod
    def _delete_cookie(response: Response, key: str) -> None:
        """按写入时的属性删除Cookie"""
        response.delete_cookie(
            key,
            path="/",
            domain=config.identity.cookie_domain,
            secure=config.identity.cookie_secure,
            httponly=True,
            samesite="lax",
        )

    @staticmethod
    def code_verifier(cookies: Mapping[str, str]) -> str:
        """登录前端保存的PKCE Code Verifier"""
        value = cookies.get(f"{SessionManager.cookie_name()}-code-verifier", "")
        # 前端以JSON字符串形式保存
        if value.startswith(COOKIE_VALUE_PREFIX):
            encoded = value[len(COOKIE_VALUE_PREFIX):]
            try:
                value = base64.urlsafe_b64decode(encoded + "=" * (-len(encoded) % 4)).decode()
            except (binascii.Error, UnicodeDecodeError):
                return ""
        return value.strip('"')

    @staticmethod
    async def get_user(session: Session) -> User | None:
        """向认证服务确认Session对应的用户；认证服务异常时视为未登录"""
        try:
            return await identity_provider.verify_current_user(session.access_token)
        except IdentityProviderError:
            logger.exception("[SessionManager] 确认用户失败")
            return None

    @staticmethod
    async def refresh_session(session: Session) -> Session | None:
        """刷新Session；失败时返回None"""
        try:
            return await identity_provider.refresh_session(session)
        except IdentityProviderError:
            logger.exception("[SessionManager] 刷新Session失败")
            return None

    @staticmethod
    async def sign_out(session: Session | None) -> None:
        """在认证服务侧注销Session"""
        if session is None:
            return
        await identity_provider.sign_out(session)

    @staticmethod
    def expires_at(session: Session) -> int:
        """
        Session的过期时间

        以认证服务刚确认过的Access Token中的exp为准，Cookie中的expires_at仅作后备。
        """
        try:
            return identity_provider.token_expiry(session.access_token)
        except IdentityProviderError:
            return session.expires_at
