# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""常量数据"""

from portal.schemas.rate_limit import RateLimitPolicy

# Session 剩余有效期小于该值时主动刷新（秒）
SESSION_REFRESH_THRESHOLD = 15 * 60
# 无需登录即可访问的路径前缀
PUBLIC_PATHS = (
    "/auth/callback",
    "/login",
    "/_next",
    "/static",
    "/api",
    "/favicon.ico",
)
# 登录完成后允许跳转的站内路径
ALLOWED_REDIRECTS = (
    "/",
    "/dashboard",
    "/reports",
    "/settings",
)
# 默认跳转路径
DEFAULT_REDIRECT = "/"
# 无法识别客户端时使用的共享标识
UNKNOWN_CLIENT = "unknown"
# 限流桶清理间隔（毫秒）
RATE_LIMIT_SWEEP_INTERVAL = 5 * 60 * 1000
# 认证回调限流：每分钟10次
AUTH_CALLBACK_LIMIT = RateLimitPolicy(limit=10, window_ms=60 * 1000)
# 普通API限流：每分钟60次
API_REQUEST_LIMIT = RateLimitPolicy(limit=60, window_ms=60 * 1000)
# 登录入口限流：每15分钟5次
LOGIN_LIMIT = RateLimitPolicy(limit=5, window_ms=15 * 60 * 1000)
# 单个Cookie分片的最大长度
COOKIE_CHUNK_SIZE = 3180
# Session Cookie值前缀
COOKIE_VALUE_PREFIX = "base64-"
# Session Cookie有效期（秒）；实际过期以身份认证服务为准
COOKIE_MAX_AGE = 400 * 24 * 60 * 60
