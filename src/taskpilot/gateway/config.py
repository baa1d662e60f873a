"""GatewayConfig -- HTTP 层配置加载

限流窗口、CORS 来源、前端静态目录均从环境变量读取。
"""

import os

import structlog
from pydantic import BaseModel, Field

log = structlog.get_logger()

_DEFAULT_MAX_REQUESTS = 10
_DEFAULT_WINDOW_MS = 60_000


class GatewayConfig(BaseModel):
    """Gateway 配置

    环境变量:
        TASKPILOT_RATE_LIMIT_MAX_REQUESTS: 每个窗口允许的增强请求数（默认 10）
        TASKPILOT_RATE_LIMIT_WINDOW_MS: 窗口长度（毫秒，默认 60000）
        TASKPILOT_CORS_ORIGINS: 允许的来源，逗号分隔（默认 *）
        TASKPILOT_FRONTEND_DIR: 前端构建产物目录，存在时挂载到 /
    """

    rate_limit_max_requests: int = Field(
        default=_DEFAULT_MAX_REQUESTS,
        ge=1,
        description="每个窗口允许的请求数",
    )
    rate_limit_window_ms: int = Field(
        default=_DEFAULT_WINDOW_MS,
        ge=1,
        description="固定窗口长度（毫秒）",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="CORS 允许来源",
    )
    frontend_dir: str | None = Field(default=None, description="前端静态目录")


def _int_from_env(env_var: str, fallback: int) -> int | None:
    """读取正整数配置；缺失返回 None，非整数或小于 1 记录 warning 后返回 None"""
    val = os.environ.get(env_var)
    if not val:
        return None
    try:
        parsed = int(val)
    except ValueError:
        parsed = 0
    if parsed < 1:
        log.warning("invalid_int_config", env_var=env_var, value=val, fallback=fallback)
        return None
    return parsed


def load_gateway_config() -> GatewayConfig:
    """从环境变量加载 Gateway 配置

    无效的数值配置记录 warning 后使用默认值，不阻塞启动。
    """
    kwargs: dict = {}

    if (val := _int_from_env(
        "TASKPILOT_RATE_LIMIT_MAX_REQUESTS", _DEFAULT_MAX_REQUESTS
    )) is not None:
        kwargs["rate_limit_max_requests"] = val

    if (val := _int_from_env(
        "TASKPILOT_RATE_LIMIT_WINDOW_MS", _DEFAULT_WINDOW_MS
    )) is not None:
        kwargs["rate_limit_window_ms"] = val

    if origins := os.environ.get("TASKPILOT_CORS_ORIGINS"):
        kwargs["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]

    if frontend_dir := os.environ.get("TASKPILOT_FRONTEND_DIR"):
        kwargs["frontend_dir"] = frontend_dir

    return GatewayConfig(**kwargs)
