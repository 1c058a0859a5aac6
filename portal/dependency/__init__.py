# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""FastAPI 依赖注入模块"""

from portal.dependency.rate_limit import rate_limit, rate_limit_exceeded_handler
from portal.dependency.user import verify_session

__all__ = [
    "rate_limit",
    "rate_limit_exceeded_handler",
    "verify_session",
]
