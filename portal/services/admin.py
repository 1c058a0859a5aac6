# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""
Admin API Manager

仅在服务端调用Webhook Admin API；Admin Token只保存在服务端配置中。
"""

import logging
from typing import Any

import httpx
from pydantic import BaseModel

from portal.common.config import config
from portal.exceptions import AdminAPIError
from portal.schemas.admin import (
    CreateBrandRequest,
    CreateLocationRequest,
    UpdateBrandRequest,
    UpdateLocationRequest,
)

logger = logging.getLogger(__name__)

if not config.admin.api_token:
    logger.warning("[AdminManager] 未配置Admin API Token，Admin API调用将失败")


class AdminManager:
    """品牌/门店配置管理"""

    @staticmethod
    async def _request(method: str, endpoint: str, body: BaseModel | None = None) -> dict[str, Any]:
        """调用Admin API；非2xx或网络错误时抛出AdminAPIError"""
        url = config.admin.api_base_url.rstrip("/") + endpoint
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {config.admin.api_token}",
        }
        payload = body.model_dump(exclude_none=True) if body is not None else None

        try:
            async with httpx.AsyncClient() as client:
                resp = await client.request(
                    method,
                    url,
                    headers=headers,
                    json=payload,
                    timeout=config.admin.timeout,
                )
        except httpx.HTTPError as e:
            logger.exception("[AdminManager] 请求 %s %s 失败", method, endpoint)
            err = f"Request failed: {e.__class__.__name__}"
            raise AdminAPIError(err) from e

        if not resp.is_success:
            try:
                error = resp.json()
            except ValueError:
                error = {"error": "Request failed", "message": f"HTTP {resp.status_code}: {resp.reason_phrase}"}
            if not isinstance(error, dict):
                error = {}
            err = error.get("message") or error.get("error") or f"API error: {resp.status_code}"
            logger.error("[AdminManager] %s %s 返回 %s: %s", method, endpoint, resp.status_code, err)
            raise AdminAPIError(err, resp.status_code)

        # DELETE等操作可能返回204
        if not resp.content:
            return {"success": True}
        try:
            return resp.json()
        except ValueError as e:
            logger.error("[AdminManager] %s %s 返回非JSON数据: %s", method, endpoint, resp.text[:200])
            err = "Invalid response from API"
            raise AdminAPIError(err, resp.status_code) from e

    @staticmethod
    async def list_brands() -> dict[str, Any]:
        """获取全部品牌"""
        return await AdminManager._request("GET", "/admin/brands")

    @staticmethod
    async def get_brand(shortcode: str) -> dict[str, Any]:
        """获取单个品牌"""
        return await AdminManager._request("GET", f"/admin/brands/{shortcode}")

    @staticmethod
    async def create_brand(data: CreateBrandRequest) -> dict[str, Any]:
        """创建品牌（可同时创建门店）"""
        return await AdminManager._request("POST", "/admin/brands", data)

    @staticmethod
    async def update_brand(shortcode: str, data: UpdateBrandRequest) -> dict[str, Any]:
        """更新品牌"""
        return await AdminManager._request("PUT", f"/admin/brands/{shortcode}", data)

    @staticmethod
    async def delete_brand(shortcode: str) -> dict[str, Any]:
        """删除品牌及其全部门店"""
        return await AdminManager._request("DELETE", f"/admin/brands/{shortcode}")

    @staticmethod
    async def list_locations(shortcode: str) -> dict[str, Any]:
        """获取品牌下的全部门店"""
        return await AdminManager._request("GET", f"/admin/brands/{shortcode}/locations")

    @staticmethod
    async def create_location(shortcode: str, data: CreateLocationRequest) -> dict[str, Any]:
        """创建门店"""
        return await AdminManager._request("POST", f"/admin/brands/{shortcode}/locations", data)

    @staticmethod
    async def update_location(shortcode: str, location_id: int, data: UpdateLocationRequest) -> dict[str, Any]:
        """更新门店"""
        return await AdminManager._request("PUT", f"/admin/brands/{shortcode}/locations/{location_id}", data)

    @staticmethod
    async def delete_location(shortcode: str, location_id: int) -> dict[str, Any]:
        """删除门店"""
        return await AdminManager._request("DELETE", f"/admin/brands/{shortcode}/locations/{location_id}")

    @staticmethod
    async def refresh_cache() -> dict[str, Any]:
        """强制刷新配置缓存"""
        return await AdminManager._request("POST", "/admin/brands/cache/refresh")
