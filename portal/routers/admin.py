# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""FastAPI 品牌/门店管理相关路由（代理 Webhook Admin API）"""

import logging
from collections.abc import Awaitable
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from portal.constants import API_REQUEST_LIMIT
from portal.dependency import rate_limit, verify_session
from portal.exceptions import AdminAPIError
from portal.schemas.admin import (
    CreateBrandRequest,
    CreateLocationRequest,
    UpdateBrandRequest,
    UpdateLocationRequest,
)
from portal.schemas.response_data import ErrorRsp
from portal.services.admin import AdminManager

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[
        Depends(rate_limit(API_REQUEST_LIMIT)),
        Depends(verify_session),
    ],
)
logger = logging.getLogger(__name__)


async def _proxy(
    call: Awaitable[dict[str, Any]],
    action: str,
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    """执行Admin API调用；失败时返回500与上游错误信息"""
    try:
        data = await call
    except AdminAPIError as e:
        logger.error("[Admin] %s失败: %s", action, e)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorRsp(error=str(e) or f"Failed to {action}").model_dump(exclude_none=True),
        )
    return JSONResponse(status_code=status_code, content=data)


def _validation_failed(errors: list[str]) -> JSONResponse:
    """400 参数校验失败"""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorRsp(error="Validation failed", errors=errors).model_dump(exclude_none=True),
    )


@router.get("/brands")
async def list_brands() -> JSONResponse:
    """GET /api/admin/brands: 获取全部品牌"""
    return await _proxy(AdminManager.list_brands(), "fetch brands")


@router.post("/brands")
async def create_brand(request: CreateBrandRequest) -> JSONResponse:
    """POST /api/admin/brands: 创建品牌"""
    if request.missing_fields():
        return _validation_failed(["shortcode, full_name, and primary_domain are required"])
    return await _proxy(AdminManager.create_brand(request), "create brand", status.HTTP_201_CREATED)


@router.get("/brands/{shortcode}")
async def get_brand(shortcode: str) -> JSONResponse:
    """GET /api/admin/brands/{shortcode}: 获取单个品牌"""
    return await _proxy(AdminManager.get_brand(shortcode), "fetch brand")


@router.put("/brands/{shortcode}")
async def update_brand(shortcode: str, request: UpdateBrandRequest) -> JSONResponse:
    """PUT /api/admin/brands/{shortcode}: 更新品牌"""
    return await _proxy(AdminManager.update_brand(shortcode, request), "update brand")


@router.delete("/brands/{shortcode}")
async def delete_brand(shortcode: str) -> JSONResponse:
    """DELETE /api/admin/brands/{shortcode}: 删除品牌及其全部门店"""
    return await _proxy(AdminManager.delete_brand(shortcode), "delete brand")


@router.get("/brands/{shortcode}/locations")
async def list_locations(shortcode: str) -> JSONResponse:
    """GET /api/admin/brands/{shortcode}/locations: 获取品牌下的门店"""
    return await _proxy(AdminManager.list_locations(shortcode), "fetch locations")


@router.post("/brands/{shortcode}/locations")
async def create_location(shortcode: str, request: CreateLocationRequest) -> JSONResponse:
    """POST /api/admin/brands/{shortcode}/locations: 创建门店"""
    if not request.location_name:
        return _validation_failed(["location_name is required"])
    return await _proxy(
        AdminManager.create_location(shortcode, request),
        "create location",
        status.HTTP_201_CREATED,
    )


@router.put("/brands/{shortcode}/locations/{location_id}")
async def update_location(shortcode: str, location_id: int, request: UpdateLocationRequest) -> JSONResponse:
    """PUT /api/admin/brands/{shortcode}/locations/{location_id}: 更新门店"""
    return await _proxy(AdminManager.update_location(shortcode, location_id, request), "update location")


@router.delete("/brands/{shortcode}/locations/{location_id}")
async def delete_location(shortcode: str, location_id: int) -> JSONResponse:
    """DELETE /api/admin/brands/{shortcode}/locations/{location_id}: 删除门店"""
    return await _proxy(AdminManager.delete_location(shortcode, location_id), "delete location")


@router.post("/cache")
async def refresh_cache() -> JSONResponse:
    """POST /api/admin/cache: 强制刷新配置缓存"""
    return await _proxy(AdminManager.refresh_cache(), "refresh cache")
