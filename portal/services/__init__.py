# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""Manager模块"""
from .admin import AdminManager
from .session import SessionManager

__all__ = [
    "AdminManager",
    "SessionManager",
]
