# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""Supabase Auth 身份认证提供商"""

import logging
import time
from typing import Any

import httpx
import jwt
from fastapi import status
from pydantic import ValidationError

from portal.exceptions import IdentityProviderError
from portal.schemas.config import IdentityConfig
from portal.schemas.session import Session, User

from .base import IdentityProviderBase

logger = logging.getLogger(__name__)


class SupabaseIdentityProvider(IdentityProviderBase):
    """对接Supabase Auth（GoTrue）REST API"""

    def __init__(self, settings: IdentityConfig) -> None:
        """初始化Supabase Auth地址与Key"""
        self._settings = settings
        self._base_url = settings.url.rstrip("/") + "/auth/v1"

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        """组装请求头"""
        headers = {
            "apikey": self._settings.anon_key,
            "Content-Type": "application/json",
        }
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        access_token: str | None = None,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """发送请求；网络错误与超时统一转换为IdentityProviderError"""
        try:
            async with httpx.AsyncClient() as client:
                return await client.request(
                    method,
                    self._base_url + path,
                    headers=self._headers(access_token),
                    params=params,
                    json=json,
                    timeout=self._settings.timeout,
                )
        except httpx.HTTPError as e:
            err = f"[Supabase] 请求 {path} 失败: {e!r}"
            raise IdentityProviderError(err) from e

    def _parse_session(self, resp: httpx.Response, action: str) -> Session:
        """解析Token接口返回的Session"""
        if resp.status_code != status.HTTP_200_OK:
            err = f"[Supabase] {action}失败: {resp.status_code}，完整输出: {resp.text}"
            raise IdentityProviderError(err)

        try:
            result = resp.json()
            expires_at = result.get("expires_at")
            if expires_at is None:
                expires_at = int(time.time()) + int(result.get("expires_in", 0))
            return Session(
                access_token=result["access_token"],
                refresh_token=result["refresh_token"],
                expires_at=int(expires_at),
                token_type=result.get("token_type", "bearer"),
                user=result.get("user"),
            )
        except (KeyError, ValueError, TypeError, AttributeError, ValidationError) as e:
            err = f"[Supabase] {action}返回数据格式错误"
            raise IdentityProviderError(err) from e

    @staticmethod
    def token_expiry(access_token: str) -> int:
        """
        读取Access Token中的exp声明

        仅用于记录过期时间；Token是否有效始终由认证服务判定。
        """
        try:
            claims = jwt.decode(access_token, options={"verify_signature": False})
            return int(claims["exp"])
        except (jwt.InvalidTokenError, KeyError, TypeError, ValueError) as e:
            err = "[Supabase] Access Token格式错误"
            raise IdentityProviderError(err) from e

    async def verify_current_user(self, access_token: str) -> User | None:
        """GET /user：认证服务确认当前用户"""
        if not access_token:
            return None

        resp = await self._request("GET", "/user", access_token=access_token)
        if resp.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
            logger.info("[Supabase] Access Token已失效")
            return None
        if resp.status_code != status.HTTP_200_OK:
            err = f"[Supabase] 获取用户信息失败: {resp.status_code}，完整输出: {resp.text}"
            raise IdentityProviderError(err)

        try:
            return User.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            err = f"[Supabase] 用户信息格式错误，完整输出: {resp.text}"
            raise IdentityProviderError(err) from e

    async def exchange_authorization_code(self, code: str, code_verifier: str) -> Session:
        """POST /token?grant_type=pkce：授权码换取Session"""
        resp = await self._request(
            "POST",
            "/token",
            params={"grant_type": "pkce"},
            json={"auth_code": code, "code_verifier": code_verifier},
        )
        session = self._parse_session(resp, "授权码换取Session")
        logger.info("[Supabase] 授权码换取Session成功")
        return session

    async def install_session(self, access_token: str, refresh_token: str) -> Session:
        """
        使用Token对建立Session

        Access Token已过期时直接用Refresh Token换新；
        否则向认证服务确认用户后沿用该Token对。
        """
        if not access_token or not refresh_token:
            err = "[Supabase] Token对不完整"
            raise IdentityProviderError(err)

        expires_at = self.token_expiry(access_token)
        if expires_at <= time.time():
            logger.info("[Supabase] 下发的Access Token已过期，尝试刷新")
            return await self.refresh_session(
                Session(access_token=access_token, refresh_token=refresh_token, expires_at=expires_at),
            )

        user = await self.verify_current_user(access_token)
        if user is None:
            err = "[Supabase] 下发的Access Token被拒绝"
            raise IdentityProviderError(err)
        return Session(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=expires_at,
            user=user,
        )

    async def refresh_session(self, session: Session) -> Session:
        """POST /token?grant_type=refresh_token：刷新Session"""
        resp = await self._request(
            "POST",
            "/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": session.refresh_token},
        )
        return self._parse_session(resp, "刷新Session")

    async def sign_out(self, session: Session) -> None:
        """POST /logout?scope=local：注销当前Session；失败只记录日志"""
        try:
            resp = await self._request(
                "POST",
                "/logout",
                access_token=session.access_token,
                params={"scope": "local"},
            )
        except IdentityProviderError:
            logger.exception("[Supabase] 注销Session失败")
            return
        if resp.status_code not in (
            status.HTTP_200_OK,
            status.HTTP_204_NO_CONTENT,
            status.HTTP_401_UNAUTHORIZED,
            status.HTTP_404_NOT_FOUND,
        ):
            logger.error("[Supabase] 注销Session失败: %s，完整输出: %s", resp.status_code, resp.text)
