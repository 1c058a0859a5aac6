# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""FastAPI 用户认证相关路由"""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from portal.common.identity import identity_provider
from portal.common.redirect import safe_redirect
from portal.constants import API_REQUEST_LIMIT, AUTH_CALLBACK_LIMIT, LOGIN_LIMIT
from portal.dependency import rate_limit
from portal.exceptions import IdentityProviderError
from portal.schemas.response_data import ErrorRsp, LogoutRsp
from portal.services.session import SessionManager

router = APIRouter(tags=["auth"])
_logger = logging.getLogger(__name__)


def _no_store(response: RedirectResponse) -> RedirectResponse:
    """请求URL可能携带Token：禁止缓存，也不向跳转目标泄露Referer"""
    response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
    response.headers["Pragma"] = "no-cache"
    response.headers["Referrer-Policy"] = "no-referrer"
    return response


def _request_origin(request: Request) -> str:
    """当前请求的源（scheme://host）"""
    return f"{request.url.scheme}://{request.url.netloc}"


@router.get("/auth/callback", dependencies=[Depends(rate_limit(AUTH_CALLBACK_LIMIT))])
async def auth_callback(
    request: Request,
    code: str | None = None,
    access_token: str | None = None,
    refresh_token: str | None = None,
    redirect: str | None = None,
) -> RedirectResponse:
    """
    GET /auth/callback: 统一登录服务回调

    - code: 授权码（PKCE）
    - access_token + refresh_token: 跨域SSO下发的Token对，立即换成HttpOnly Cookie
    - 均未提供时跳转统一登录页
    """
    try:
        if code:
            session = await identity_provider.exchange_authorization_code(
                code, SessionManager.code_verifier(request.cookies),
            )
        elif access_token and refresh_token:
            session = await identity_provider.install_session(access_token, refresh_token)
        else:
            return _no_store(RedirectResponse(
                identity_provider.login_url(origin=_request_origin(request)),
                status_code=status.HTTP_307_TEMPORARY_REDIRECT,
            ))
    except IdentityProviderError:
        _logger.exception("[Auth] 建立Session失败")
        return _no_store(RedirectResponse(
            identity_provider.login_url(error="auth_failed"),
            status_code=status.HTTP_307_TEMPORARY_REDIRECT,
        ))

    response = RedirectResponse(safe_redirect(redirect), status_code=status.HTTP_307_TEMPORARY_REDIRECT)
    SessionManager.write_session(response, session, request.cookies)
    if code:
        response.delete_cookie(f"{SessionManager.cookie_name()}-code-verifier", path="/")
    _logger.info("[Auth] 用户 %s 登录成功", session.user.id if session.user else "-")
    return _no_store(response)


@router.get("/login", dependencies=[Depends(rate_limit(LOGIN_LIMIT))])
async def login(request: Request) -> RedirectResponse:
    """GET /login: 跳转统一登录页，登录完成后回到当前站点"""
    return RedirectResponse(
        identity_provider.login_url(origin=_request_origin(request)),
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    )


@router.post(
    "/api/logout",
    response_model=LogoutRsp,
    dependencies=[Depends(rate_limit(API_REQUEST_LIMIT))],
)
async def logout(request: Request) -> JSONResponse:
    """POST /api/logout: 注销Session并删除全部认证Cookie"""
    try:
        await SessionManager.sign_out(SessionManager.read_session(request.cookies))
        response = JSONResponse(
            status_code=status.HTTP_200_OK,
            content=LogoutRsp(success=True).model_dump(exclude_none=True),
        )
        SessionManager.clear_auth_cookies(response, request.cookies)
    except Exception:
        _logger.exception("[Auth] 登出失败")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorRsp(error="Logout failed").model_dump(exclude={"success", "errors"}),
        )
    return response
