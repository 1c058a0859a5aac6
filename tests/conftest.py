# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""测试公共fixture"""

import time
from collections.abc import Callable

import jwt
import pytest

from portal.schemas.session import Session, User


def make_token(exp: float, sub: str = "user-1") -> str:
    """生成测试用Access Token（签名不参与校验）"""
    return jwt.encode({"sub": sub, "exp": int(exp)}, "test-secret-key-for-unit-tests-only", algorithm="HS256")


@pytest.fixture
def token_factory() -> Callable[..., str]:
    """生成Access Token"""
    return make_token


@pytest.fixture
def user() -> User:
    """测试用户"""
    return User(id="user-1", email="user@example.com", role="authenticated")


@pytest.fixture
def session_factory(user: User) -> Callable[..., Session]:
    """按剩余有效期生成Session"""

    def _make(seconds_left: float = 3600, now: float | None = None, refresh_token: str = "refresh-1") -> Session:
        now = time.time() if now is None else now
        exp = int(now + seconds_left)
        return Session(
            access_token=make_token(exp),
            refresh_token=refresh_token,
            expires_at=exp,
            user=user,
        )

    return _make
