# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""自定义异常类"""

from portal.schemas.rate_limit import RateLimitResult


class IdentityProviderError(Exception):
    """身份认证服务调用失败（拒绝、超时或网络错误）"""


class AdminAPIError(Exception):
    """Admin API调用失败"""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """记录上游返回的错误信息与状态码"""
        super().__init__(message)
        self.status_code = status_code


class RateLimitExceededError(Exception):
    """请求超出限流"""

    def __init__(self, result: RateLimitResult, retry_after: int) -> None:
        """记录限流结果与建议的重试间隔（秒）"""
        super().__init__("Too many requests. Please try again later.")
        self.result = result
        self.retry_after = retry_after
