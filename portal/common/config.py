# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""配置文件处理模块"""

import logging
import os
from pathlib import Path
from typing import Any, Self

import toml
from pydantic import ConfigDict

from portal.schemas.config import ConfigModel

logger = logging.getLogger(__name__)

# 部署时通过环境变量下发的配置项，优先于配置文件
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "SUPABASE_URL": ("identity", "url"),
    "SUPABASE_ANON_KEY": ("identity", "anon_key"),
    "AUTH_DOMAIN": ("identity", "auth_domain"),
    "ADMIN_API_BASE_URL": ("admin", "api_base_url"),
    "ADMIN_API_TOKEN": ("admin", "api_token"),
}


class Config(ConfigModel):
    """配置文件读取和使用Class"""

    model_config = ConfigDict(frozen=True)

    @staticmethod
    def config_path() -> Path:
        """配置文件路径：CONFIG环境变量，或仓库根目录下的 config/config.toml"""
        config_file = os.getenv("CONFIG")
        if config_file is None:
            return Path(__file__).parents[2] / "config" / "config.toml"
        return Path(config_file)

    @staticmethod
    def apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
        """用环境变量覆盖配置文件中的同名配置项"""
        for env_name, (section, key) in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                data.setdefault(section, {})[key] = value
        return data

    @classmethod
    def init_config(cls) -> Self:
        """读取配置文件；当PROD环境变量设置时，配置文件将在读取后删除"""
        config_file = cls.config_path()
        config = cls.model_validate(cls.apply_env_overrides(toml.load(config_file)))

        if os.getenv("PROD"):
            config_file.unlink()
            logger.info("[Config] 已删除配置文件 %s", config_file)

        return config


config = Config.init_config()
