# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""FastAPI 中间件"""

from portal.middleware.session import SessionGateMiddleware

__all__ = [
    "SessionGateMiddleware",
]
