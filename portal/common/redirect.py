# Copyright (c) Huawei Technologies Co., Ltd. 2023-2025. All rights reserved.
"""登录后跳转地址校验"""

from portal.constants import ALLOWED_REDIRECTS, DEFAULT_REDIRECT


def safe_redirect(target: str | None) -> str:
    """
    校验跳转地址

    与白名单路径完全相同、或以 "<白名单路径>/" 开头时原样返回，否则返回默认路径。
    根路径只做完全匹配，"//host" 形式的协议相对地址不会被放行。
    """
    if not target:
        return DEFAULT_REDIRECT
    for path in ALLOWED_REDIRECTS:
        if target == path:
            return target
        if path != "/" and target.startswith(f"{path}/"):
            return target
    return DEFAULT_REDIRECT
