# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""主程序"""

import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from rich.console import Console
from rich.logging import RichHandler

from .common.config import config
from .dependency import rate_limit_exceeded_handler
from .exceptions import RateLimitExceededError
from .middleware import SessionGateMiddleware
from .routers import (
    admin,
    auth,
    health,
)

# 定义FastAPI app
app = FastAPI(redoc_url=None)
# 定义FastAPI全局中间件；后添加的先执行，Session网关位于CORS之内
app.add_middleware(SessionGateMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.fastapi.domain],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
# 限流超出时统一返回429
app.add_exception_handler(RateLimitExceededError, rate_limit_exceeded_handler)
# 关联API路由
app.include_router(admin.router)
app.include_router(auth.router)
app.include_router(health.router)

# logger配置
LOGGER_FORMAT = "%(funcName)s() - %(message)s"
DATE_FORMAT = "%y-%b-%d %H:%M:%S"
logging.basicConfig(
    level=logging.INFO,
    format=LOGGER_FORMAT,
    datefmt=DATE_FORMAT,
    handlers=[RichHandler(rich_tracebacks=True, console=Console(
        color_system="256",
        width=160,
    ))],
)

# 运行
if __name__ == "__main__":
    uvicorn.run(app, host=config.fastapi.host, port=config.fastapi.port, log_level="info", log_config=None)
