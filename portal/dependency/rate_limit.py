# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""请求限流"""

import logging
from collections.abc import Awaitable, Callable

from fastapi.responses import JSONResponse
from starlette import status
from starlette.requests import HTTPConnection, Request

from portal.common.rate_limit import get_client_identifier, rate_limiter
from portal.exceptions import RateLimitExceededError
from portal.schemas.rate_limit import RateLimitPolicy
from portal.schemas.response_data import RateLimitedRsp

logger = logging.getLogger(__name__)


def rate_limit(policy: RateLimitPolicy) -> Callable[[HTTPConnection], Awaitable[None]]:
    """
    生成按客户端标识限流的依赖

    超出限制时抛出RateLimitExceededError，由rate_limit_exceeded_handler返回429
    """

    async def check_rate_limit(request: HTTPConnection) -> None:
        identifier = get_client_identifier(
            request.headers,
            request.client.host if request.client else None,
        )
        result = rate_limiter.check(identifier, policy)
        request.state.rate_limit = result
        if result.allowed:
            return

        logger.warning("[RateLimit] 客户端 %s 访问 %s 超出限流", identifier, request.url.path)
        raise RateLimitExceededError(result, rate_limiter.retry_after(result))

    return check_rate_limit


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceededError) -> JSONResponse:
    """429：响应体携带窗口重置时间，响应头携带 X-RateLimit-* 与 Retry-After"""
    result = exc.result
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=RateLimitedRsp(error=str(exc), reset=result.reset_at).model_dump(),
        headers={
            "X-RateLimit-Limit": str(result.limit),
            "X-RateLimit-Remaining": str(result.remaining),
            "X-RateLimit-Reset": str(result.reset_at),
            "Retry-After": str(exc.retry_after),
        },
    )
