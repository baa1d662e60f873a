"""TaskEnhancer -- 把任务标题/备注扩展为结构化清单

流程：
1. 构建 prompt（title + notes，notes 缺失时写 None）
2. 调用 chat-completion（固定 system 指令，temperature 0.7，max_tokens 500）
3. 去除可选的 Markdown 代码块包裹
4. 解析 JSON，按 ParseMode 转换为 EnhancedDescription

LENIENT 模式下不对 estimateHours / summary 做范围校验，越界值原样保留。
"""

import json
import re
from typing import Any, Protocol

import structlog
from pydantic import ValidationError as PydanticValidationError

from taskpilot.core.exceptions import ParseError
from taskpilot.core.models import EnhancedDescription, ParseMode

from .models import ModelCallResult

log = structlog.get_logger()

SYSTEM_PROMPT = (
    "You are an assistant helping users elaborate tasks into actionable "
    "checklists. Always return valid JSON only, no markdown formatting."
)

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 500

_FENCE_JSON = re.compile(r"```json\n?", re.IGNORECASE)
_FENCE = re.compile(r"```\n?")


class CompletionClient(Protocol):
    """ChatCompletionClient / EchoMessageAdapter 的公共接口"""

    async def complete(
        self,
        messages: list[dict[str, str]],
        *,
        api_key: str,
        temperature: float = ...,
        max_tokens: int | None = ...,
    ) -> ModelCallResult: ...


def build_prompt(title: str, notes: str | None) -> str:
    """构建 user prompt"""
    return (
        f'Title: "{title}"\n'
        f'Notes: "{notes or "None"}"\n\n'
        "Please return JSON with keys: summary (<=40 words), steps (array of "
        "short imperatives), risks (array), and estimateHours (integer 0..20). "
        "Keep it concise."
    )


def strip_code_fences(content: str) -> str:
    """去除 ```json ... ``` 或 ``` ... ``` 包裹；无包裹时原样返回"""
    content = content.strip()
    if not content.startswith("```"):
        return content
    return _FENCE.sub("", _FENCE_JSON.sub("", content)).strip()


def parse_enhancement(
    content: str,
    mode: ParseMode = ParseMode.LENIENT,
) -> EnhancedDescription:
    """把模型输出解析为 EnhancedDescription

    Args:
        content: 模型输出文本（可带代码块包裹）
        mode: LENIENT 兜底转换；STRICT 严格校验字段类型与取值范围

    Raises:
        ParseError: 不是合法 JSON、顶层不是对象，或 STRICT 模式下校验失败
    """
    text = strip_code_fences(content)
    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Failed to parse LLM response: {e}") from e

    if not isinstance(data, dict):
        raise ParseError(
            f"Failed to parse LLM response: expected a JSON object, got {type(data).__name__}"
        )

    if mode == ParseMode.STRICT:
        try:
            return EnhancedDescription.model_validate(data, strict=True)
        except PydanticValidationError as e:
            raise ParseError(f"LLM response does not match schema: {e}") from e

    return EnhancedDescription.from_loose(data)


class TaskEnhancer:
    """任务增强器 -- 单次调用，无重试"""

    def __init__(
        self,
        client: CompletionClient,
        parse_mode: ParseMode = ParseMode.LENIENT,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> None:
        self._client = client
        self._parse_mode = parse_mode
        self._temperature = temperature
        self._max_tokens = max_tokens

    @property
    def parse_mode(self) -> ParseMode:
        return self._parse_mode

    async def enhance(
        self,
        title: str,
        notes: str | None,
        api_key: str,
    ) -> EnhancedDescription:
        """调用 LLM 生成增强结果

        Raises:
            UpstreamError: 上游调用失败或无文本内容
            ParseError: 输出无法解析
        """
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_prompt(title, notes)},
        ]
        result = await self._client.complete(
            messages,
            api_key=api_key,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )

        try:
            enhanced = parse_enhancement(result.content, self._parse_mode)
        except ParseError:
            log.warning(
                "enhancement_parse_failed",
                parse_mode=self._parse_mode.value,
                content_length=len(result.content),
            )
            raise

        log.info(
            "enhancement_parsed",
            parse_mode=self._parse_mode.value,
            step_count=len(enhanced.steps),
            risk_count=len(enhanced.risks),
            provider=result.provider,
        )
        return enhanced
