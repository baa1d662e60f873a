"""TaskPilot Provider -- LLM 调用与任务增强

provider 包的公开接口导出。
"""

from .client import ChatCompletionClient
from .config import ProviderConfig, load_provider_config
from .echo_adapter import EchoMessageAdapter
from .enhancer import (
    SYSTEM_PROMPT,
    TaskEnhancer,
    build_prompt,
    parse_enhancement,
    strip_code_fences,
)
from .models import ModelCallResult, TokenUsage

__all__ = [
    "ModelCallResult",
    "TokenUsage",
    "ChatCompletionClient",
    "EchoMessageAdapter",
    "TaskEnhancer",
    "SYSTEM_PROMPT",
    "build_prompt",
    "parse_enhancement",
    "strip_code_fences",
    "ProviderConfig",
    "load_provider_config",
]
