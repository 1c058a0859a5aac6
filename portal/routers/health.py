# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""FastAPI 健康检查接口；位于公开的 /api 前缀下，不经过Session网关与限流"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from portal.schemas.response_data import HealthCheckRsp

router = APIRouter(
    prefix="/api/health_check",
    tags=["health_check"],
)


@router.api_route("", methods=["GET", "HEAD"], response_model=HealthCheckRsp)
async def health_check() -> JSONResponse:
    """健康检查接口；负载均衡健康检查可使用HEAD"""
    return JSONResponse(status_code=status.HTTP_200_OK, content=HealthCheckRsp(status="ok").model_dump())
