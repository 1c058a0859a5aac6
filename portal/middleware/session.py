# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""
Session 网关中间件

在每个非公开请求前：
1. Session已过期则注销并跳转（session_expired）
2. 向认证服务确认当前用户；未登录则删除本地Session并跳转统一登录页
3. Session即将过期则刷新；刷新失败则注销并跳转（session_refresh_failed）
"""

import logging
import time
from collections.abc import Callable
from enum import Enum
from http.cookies import SimpleCookie

from pydantic import BaseModel, Field
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from portal.common.identity import identity_provider
from portal.constants import PUBLIC_PATHS, SESSION_REFRESH_THRESHOLD
from portal.schemas.session import Session, User
from portal.services.session import SessionManager

logger = logging.getLogger(__name__)


class GateAction(str, Enum):
    """网关处理结果"""

    PASS = "pass"
    REDIRECT = "redirect"


class GateDecision(BaseModel):
    """单个请求的网关判定"""

    action: GateAction
    location: str | None = Field(default=None, description="跳转地址")
    user: User | None = Field(default=None)
    session: Session | None = Field(default=None, description="刷新后的Session，需要写回Cookie")
    clear_session: bool = Field(default=False, description="是否删除本地Session Cookie")


def is_public_path(path: str) -> bool:
    """路径是否无需登录"""
    return any(path.startswith(prefix) for prefix in PUBLIC_PATHS)


async def evaluate(request: Request, now: float) -> GateDecision:
    """判定请求是否放行"""
    if is_public_path(request.url.path):
        return GateDecision(action=GateAction.PASS)

    origin = str(request.url)
    session = SessionManager.read_session(request.cookies)
    if session is None:
        return GateDecision(action=GateAction.REDIRECT, location=identity_provider.login_url(origin=origin))

    # 过期的Access Token会被认证服务直接拒绝，须先于确认用户判断
    seconds_left = SessionManager.expires_at(session) - now
    if seconds_left <= 0:
        logger.info("[SessionGate] Session已过期")
        await SessionManager.sign_out(session)
        return GateDecision(
            action=GateAction.REDIRECT,
            location=identity_provider.login_url(origin=origin, error="session_expired"),
            clear_session=True,
        )

    user = await SessionManager.get_user(session)
    if user is None:
        return GateDecision(
            action=GateAction.REDIRECT,
            location=identity_provider.login_url(origin=origin),
            clear_session=True,
        )

    if seconds_left < SESSION_REFRESH_THRESHOLD:
        refreshed = await SessionManager.refresh_session(session)
        if refreshed is None:
            await SessionManager.sign_out(session)
            return GateDecision(
                action=GateAction.REDIRECT,
                location=identity_provider.login_url(origin=origin, error="session_refresh_failed"),
                clear_session=True,
            )
        logger.info("[SessionGate] 用户 %s 的Session已刷新", user.id)
        return GateDecision(action=GateAction.PASS, user=refreshed.user or user, session=refreshed)

    return GateDecision(action=GateAction.PASS, user=user)


def _replace_request_cookies(request: Request, cookies: dict[str, str]) -> None:
    """替换转发给下游的Cookie头，保证下游读到轮换后的Session"""
    jar = SimpleCookie()
    for key, value in cookies.items():
        jar[key] = value
    cookie_header = "; ".join(f"{key}={morsel.coded_value}" for key, morsel in jar.items())

    headers = [(k, v) for k, v in request.scope["headers"] if k != b"cookie"]
    if cookie_header:
        headers.append((b"cookie", cookie_header.encode("latin-1")))
    request.scope["headers"] = headers


class SessionGateMiddleware(BaseHTTPMiddleware):
    """Session 网关"""

    def __init__(self, app: ASGIApp, clock: Callable[[], float] = time.time) -> None:
        """初始化中间件"""
        super().__init__(app)
        self._clock = clock

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """处理请求"""
        decision = await evaluate(request, self._clock())
        original_cookies = dict(request.cookies)

        if decision.action == GateAction.REDIRECT:
            response = RedirectResponse(decision.location or "/", status_code=307)
            if decision.clear_session:
                SessionManager.clear_session(response, original_cookies)
            return response

        request.state.user = decision.user
        if decision.session is None:
            return await call_next(request)

        # 下游先看到新Cookie，响应再下发新Cookie
        forwarded = {
            key: value for key, value in original_cookies.items()
            if key not in SessionManager.session_cookie_names(original_cookies)
        }
        forwarded.update(SessionManager.encode_cookies(decision.session))
        _replace_request_cookies(request, forwarded)

        response = await call_next(request)
        SessionManager.write_session(response, decision.session, original_cookies)
        return response
