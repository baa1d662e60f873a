"""ProviderConfig -- LLM Provider 配置加载

从环境变量加载配置，凭证使用 SecretStr 避免出现在日志中。
"""

import os
from typing import Literal

import structlog
from pydantic import BaseModel, Field, SecretStr

from taskpilot.core.models import ParseMode

log = structlog.get_logger()

_DEFAULT_TIMEOUT_S = 30


class ProviderConfig(BaseModel):
    """Provider 配置 -- 从环境变量加载

    环境变量:
        OPENAI_API_KEY: chat-completion 接口凭证
        TASKPILOT_LLM_BASE_URL: OpenAI 兼容接口地址
        TASKPILOT_LLM_MODEL: 模型名称
        TASKPILOT_LLM_MODE: 运行模式（openai/echo）
        TASKPILOT_LLM_TIMEOUT_S: 调用超时（秒，默认 30）
        TASKPILOT_LLM_PARSE_MODE: 输出解析模式（lenient/strict）
    """

    api_key: SecretStr = Field(
        default=SecretStr(""),
        description="chat-completion 接口凭证",
    )
    base_url: str = Field(
        default="https://api.openai.com/v1",
        description="OpenAI 兼容接口基础 URL",
    )
    model: str = Field(default="gpt-3.5-turbo", description="模型名称")
    llm_mode: Literal["openai", "echo"] = Field(
        default="openai",
        description="LLM 运行模式：openai / echo",
    )
    timeout_s: int = Field(
        default=_DEFAULT_TIMEOUT_S,
        ge=1,
        description="LLM 调用超时（秒）",
    )
    parse_mode: ParseMode = Field(
        default=ParseMode.LENIENT,
        description="LLM 输出解析模式",
    )

    @property
    def has_credential(self) -> bool:
        """是否已配置凭证"""
        return bool(self.api_key.get_secret_value())


def load_provider_config() -> ProviderConfig:
    """从环境变量加载 Provider 配置

    无效（非整数或小于 1）的超时值只记录 warning 并使用默认值，不阻塞启动。

    Returns:
        ProviderConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("OPENAI_API_KEY"):
        kwargs["api_key"] = SecretStr(val)

    if val := os.environ.get("TASKPILOT_LLM_BASE_URL"):
        kwargs["base_url"] = val

    if val := os.environ.get("TASKPILOT_LLM_MODEL"):
        kwargs["model"] = val

    if val := os.environ.get("TASKPILOT_LLM_MODE"):
        kwargs["llm_mode"] = val

    if val := os.environ.get("TASKPILOT_LLM_TIMEOUT_S"):
        try:
            timeout_s = int(val)
        except ValueError:
            timeout_s = 0
        if timeout_s >= 1:
            kwargs["timeout_s"] = timeout_s
        else:
            log.warning(
                "invalid_timeout_config",
                env_var="TASKPILOT_LLM_TIMEOUT_S",
                value=val,
                fallback=_DEFAULT_TIMEOUT_S,
            )

    if val := os.environ.get("TASKPILOT_LLM_PARSE_MODE"):
        kwargs["parse_mode"] = val

    return ProviderConfig(**kwargs)
