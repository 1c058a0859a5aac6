# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""用户鉴权"""

import logging

from starlette import status
from starlette.exceptions import HTTPException
from starlette.requests import HTTPConnection

from portal.services.session import SessionManager

logger = logging.getLogger(__name__)


async def verify_session(request: HTTPConnection) -> None:
    """
    验证Session是否已鉴权；用于自行管理鉴权的 /api 路由

    - 如果没有Session Cookie，抛出401
    - 如果认证服务不认可该Session，抛出401
    - 认可则设置user与user_sub

    :param request: HTTP请求
    :return:
    """
    session = SessionManager.read_session(request.cookies)
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")

    user = await SessionManager.get_user(session)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session is invalid or expired")

    request.state.session = session
    request.state.user = user
    request.state.user_sub = user.id
