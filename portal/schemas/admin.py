# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""品牌/门店管理数据结构"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ServiceTitanBusinessUnits(BaseModel):
    """门店对应的ServiceTitan业务单元"""

    sales: str | None = None
    service: str | None = None
    production: str | None = None


class LocationBase(BaseModel):
    """门店可写字段"""

    model_config = ConfigDict(extra="allow")

    city: str | None = None
    state: str | None = None
    market: str | None = None
    servicetitan_business_units: ServiceTitanBusinessUnits | None = None
    servicetitan_business_unit: str | None = Field(default=None, description="已废弃，使用servicetitan_business_units")
    yelp_business_id: str | None = None
    yelp_action: Literal["database", "email"] | None = None
    homeadvisor_sp_entity_id: int | None = None
    google_cid: str | None = None
    google_conversion_action_appointment: str | None = None
    google_conversion_action_sold: str | None = None
    facebook_pixel_id: str | None = None
    facebook_dataset_id: str | None = None
    microsoft_ads_customer_account_id: str | None = None
    microsoft_ads_customer_id: str | None = None
    microsoft_ads_conversion_goal_appointment: str | None = None
    microsoft_ads_conversion_goal_sold: str | None = None


class CreateLocationRequest(LocationBase):
    """POST /api/admin/brands/{shortcode}/locations 请求体"""

    location_name: str = ""


class UpdateLocationRequest(LocationBase):
    """PUT /api/admin/brands/{shortcode}/locations/{location_id} 请求体"""

    location_name: str | None = None


class BrandBase(BaseModel):
    """品牌可写字段"""

    model_config = ConfigDict(extra="allow")

    alternate_domains: list[str] | None = None
    lead_notification_email: str | None = None
    google_cid: str | None = None
    google_conversion_action_appointment: str | None = None
    google_conversion_action_sold: str | None = None
    facebook_dataset_id: str | None = None
    microsoft_ads_customer_account_id: str | None = None
    microsoft_ads_customer_id: str | None = None
    microsoft_ads_conversion_goal_appointment: str | None = None
    microsoft_ads_conversion_goal_sold: str | None = None
    homeadvisor_sp_entity_id: int | None = None


class CreateBrandRequest(BrandBase):
    """POST /api/admin/brands 请求体"""

    shortcode: str = ""
    full_name: str = ""
    primary_domain: str = ""
    locations: list[CreateLocationRequest] | None = None

    def missing_fields(self) -> list[str]:
        """返回缺失的必填字段"""
        return [name for name in ("shortcode", "full_name", "primary_domain") if not getattr(self, name)]


class UpdateBrandRequest(BrandBase):
    """PUT /api/admin/brands/{shortcode} 请求体"""

    full_name: str | None = None
