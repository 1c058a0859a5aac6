# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""认证相关路由单元测试"""

from collections.abc import Callable
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi.testclient import TestClient
from pytest_mock import MockerFixture

from portal.common.config import config
from portal.common.identity import identity_provider
from portal.common.rate_limit import MemoryRateLimitStore, RateLimiter
from portal.exceptions import IdentityProviderError
from portal.main import app
from portal.schemas.session import Session
from portal.services.session import SessionManager

COOKIE = "sb-example-project-auth-token"
LOGIN = config.identity.auth_domain.rstrip("/") + "/login"


@pytest.fixture(autouse=True)
def fresh_rate_limiter(mocker: MockerFixture) -> RateLimiter:
    """每个测试使用独立的限流计数"""
    limiter = RateLimiter(MemoryRateLimitStore())
    mocker.patch("portal.dependency.rate_limit.rate_limiter", limiter)
    return limiter


@pytest.fixture
def client() -> TestClient:
    """测试fixture: 不跟随跳转的客户端"""
    return TestClient(app, follow_redirects=False)


def _set_cookies(response: httpx.Response) -> list[str]:
    return response.headers.get_list("set-cookie")


def test_callback_with_token_pair(
    client: TestClient, mocker: MockerFixture, session_factory: Callable[..., Session],
) -> None:
    """Token对换成HttpOnly Cookie后跳转到白名单内的目标"""
    session = session_factory()
    install = mocker.patch.object(identity_provider, "install_session", AsyncMock(return_value=session))

    response = client.get(
        "/auth/callback",
        params={"access_token": session.access_token, "refresh_token": "refresh-1", "redirect": "/dashboard"},
    )
    assert response.status_code == 307
    assert response.headers["location"] == "/dashboard"
    install.assert_awaited_once_with(session.access_token, "refresh-1")

    cookie = next(h for h in _set_cookies(response) if h.startswith(f"{COOKIE}="))
    assert cookie.startswith(f"{COOKIE}=base64-")
    assert "HttpOnly" in cookie
    assert "samesite=lax" in cookie.lower()
    assert "Path=/" in cookie
    assert response.headers["cache-control"] == "no-store, no-cache, must-revalidate, max-age=0"
    assert response.headers["pragma"] == "no-cache"
    assert response.headers["referrer-policy"] == "no-referrer"


@pytest.mark.parametrize("target", ["https://evil.com", "//evil.com", "/admin", "/dashboardx"])
def test_callback_rejects_unlisted_redirect(
    client: TestClient, mocker: MockerFixture, session_factory: Callable[..., Session], target: str,
) -> None:
    """白名单外的跳转目标一律回到首页"""
    mocker.patch.object(identity_provider, "install_session", AsyncMock(return_value=session_factory()))
    response = client.get(
        "/auth/callback",
        params={"access_token": "a", "refresh_token": "r", "redirect": target},
    )
    assert response.status_code == 307
    assert response.headers["location"] == "/"


def test_callback_allows_nested_path(
    client: TestClient, mocker: MockerFixture, session_factory: Callable[..., Session],
) -> None:
    """白名单路径的子路径允许跳转"""
    mocker.patch.object(identity_provider, "install_session", AsyncMock(return_value=session_factory()))
    response = client.get(
        "/auth/callback",
        params={"access_token": "a", "refresh_token": "r", "redirect": "/reports/weekly"},
    )
    assert response.headers["location"] == "/reports/weekly"


def test_callback_with_code(
    client: TestClient, mocker: MockerFixture, session_factory: Callable[..., Session],
) -> None:
    """授权码流程：使用Code Verifier换取Session并删除Verifier Cookie"""
    exchange = mocker.patch.object(
        identity_provider, "exchange_authorization_code", AsyncMock(return_value=session_factory()),
    )
    client.cookies.set(f"{COOKIE}-code-verifier", '"verifier-1"')

    response = client.get("/auth/callback", params={"code": "code-1"})
    assert response.status_code == 307
    assert response.headers["location"] == "/"
    exchange.assert_awaited_once_with("code-1", "verifier-1")
    assert any(
        h.startswith(f"{COOKIE}-code-verifier=") and "Max-Age=0" in h for h in _set_cookies(response)
    )


def test_callback_failure_redirects_with_error(client: TestClient, mocker: MockerFixture) -> None:
    """建立Session失败：跳转登录页并携带auth_failed"""
    mocker.patch.object(
        identity_provider, "install_session", AsyncMock(side_effect=IdentityProviderError("rejected")),
    )
    response = client.get("/auth/callback", params={"access_token": "a", "refresh_token": "r"})
    assert response.status_code == 307
    assert response.headers["location"] == f"{LOGIN}?error=auth_failed"
    assert not any(h.startswith(f"{COOKIE}=") for h in _set_cookies(response))


def test_callback_without_credentials(client: TestClient, mocker: MockerFixture) -> None:
    """没有任何凭据：跳转登录页，origin为当前站点"""
    install = mocker.patch.object(identity_provider, "install_session", AsyncMock())
    response = client.get("/auth/callback", params={"access_token": "only-access"})
    assert response.status_code == 307
    assert response.headers["location"] == f"{LOGIN}?origin=http%3A%2F%2Ftestserver"
    install.assert_not_called()


def test_callback_rate_limited(client: TestClient) -> None:
    """同一客户端一分钟内第11次回调被限流"""
    headers = {"X-Forwarded-For": "203.0.113.7"}
    for _ in range(10):
        assert client.get("/auth/callback", headers=headers).status_code == 307

    response = client.get("/auth/callback", headers=headers)
    assert response.status_code == 429
    assert int(response.headers["retry-after"]) > 0
    assert response.headers["x-ratelimit-limit"] == "10"
    assert response.headers["x-ratelimit-remaining"] == "0"
    assert response.json() == {
        "error": "Too many requests. Please try again later.",
        "reset": int(response.headers["x-ratelimit-reset"]),
    }

    other = client.get("/auth/callback", headers={"X-Forwarded-For": "198.51.100.2"})
    assert other.status_code == 307


def test_login_redirects_to_auth_domain(client: TestClient) -> None:
    """GET /login 跳转统一登录页"""
    response = client.get("/login")
    assert response.status_code == 307
    assert response.headers["location"] == f"{LOGIN}?origin=http%3A%2F%2Ftestserver"


def test_login_rate_limited(client: TestClient) -> None:
    """登录入口15分钟内最多5次"""
    for _ in range(5):
        assert client.get("/login").status_code == 307
    assert client.get("/login").status_code == 429


def test_logout(client: TestClient, mocker: MockerFixture, session_factory: Callable[..., Session]) -> None:
    """登出：注销Session并删除认证Cookie"""
    sign_out = mocker.patch.object(identity_provider, "sign_out", AsyncMock())
    client.cookies.update(SessionManager.encode_cookies(session_factory()))
    client.cookies.set("theme", "dark")

    response = client.post("/api/logout")
    assert response.status_code == 200
    assert response.json() == {"success": True}
    sign_out.assert_awaited_once()
    set_cookies = _set_cookies(response)
    assert any(h.startswith(f"{COOKIE}=") and "Max-Age=0" in h for h in set_cookies)
    assert not any(h.startswith("theme=") for h in set_cookies)


def test_logout_without_session(client: TestClient, mocker: MockerFixture) -> None:
    """没有Session时登出同样成功"""
    sign_out = mocker.patch.object(identity_provider, "sign_out", AsyncMock())
    response = client.post("/api/logout")
    assert response.status_code == 200
    assert response.json() == {"success": True}
    sign_out.assert_not_called()


def test_logout_failure(client: TestClient, mocker: MockerFixture) -> None:
    """登出过程出现异常时返回500"""
    mocker.patch.object(SessionManager, "sign_out", AsyncMock(side_effect=RuntimeError("boom")))
    response = client.post("/api/logout")
    assert response.status_code == 500
    assert response.json() == {"error": "Logout failed"}
