"""ChatCompletionClient -- OpenAI 兼容 chat-completion 接口封装

通过 httpx 直接调用 POST {base_url}/chat/completions。
上游非 2xx、传输失败、响应中没有文本内容都会抛出 UpstreamError；
不做重试，也不做降级。
"""

import time
from typing import Any

import httpx
import structlog

from taskpilot.core.exceptions import UpstreamError

from .models import ModelCallResult, TokenUsage

log = structlog.get_logger()

# 健康检查超时（硬编码，应快速响应）
HEALTH_CHECK_TIMEOUT_S = 5


def _extract_content(data: Any) -> str:
    """从 choices[0].message.content 取出文本，结构不符时返回空串"""
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    message = first.get("message")
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    return content.strip() if isinstance(content, str) else ""


def _as_count(value: Any) -> int:
    """非负整数（或整数值的浮点数）原样取整，其余一律为 0"""
    if isinstance(value, bool):
        return 0
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and value >= 0:
        return value
    return 0


def _parse_usage(data: dict[str, Any]) -> TokenUsage:
    """usage 只是附带统计，格式异常时不影响调用结果"""
    usage = data.get("usage")
    if not isinstance(usage, dict):
        return TokenUsage()
    return TokenUsage(
        prompt_tokens=_as_count(usage.get("prompt_tokens")),
        completion_tokens=_as_count(usage.get("completion_tokens")),
        total_tokens=_as_count(usage.get("total_tokens")),
    )


class ChatCompletionClient:
    """OpenAI 兼容 chat-completion 客户端"""

    def __init__(
        self,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-3.5-turbo",
        timeout_s: int = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """初始化客户端

        Args:
            base_url: 接口基础 URL（不含 /chat/completions）
            model: 模型名称
            timeout_s: 请求超时（秒）
            transport: 自定义 httpx transport（测试时注入 MockTransport）
        """
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._timeout_s = timeout_s
        self._transport = transport

    async def complete(
        self,
        messages: list[dict[str, str]],
        *,
        api_key: str,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> ModelCallResult:
        """发送 chat completion 请求

        Args:
            messages: 消息列表，格式 [{"role": "user", "content": "..."}]
            api_key: Bearer 凭证
            temperature: 采样温度
            max_tokens: 最大生成 token 数，None 使用模型默认

        Returns:
            ModelCallResult，content 已去除首尾空白

        Raises:
            UpstreamError: 传输失败、非 2xx 状态、响应无文本内容
        """
        start_time = time.monotonic()
        url = f"{self._base_url}/chat/completions"
        payload: dict[str, Any] = {
            "model": self._model,
            "messages": messages,
            "temperature": temperature,
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens

        log.debug(
            "chat_completion_start",
            model=self._model,
            message_count=len(messages),
        )

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_s,
                transport=self._transport,
            ) as http_client:
                resp = await http_client.post(
                    url,
                    json=payload,
                    headers={"Authorization": f"Bearer {api_key}"},
                )
        except httpx.HTTPError as e:
            log.error(
                "chat_completion_failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=int((time.monotonic() - start_time) * 1000),
            )
            raise UpstreamError(f"LLM API request failed: {e}") from e

        duration_ms = int((time.monotonic() - start_time) * 1000)

        if not resp.is_success:
            log.error(
                "chat_completion_failed",
                status_code=resp.status_code,
                duration_ms=duration_ms,
            )
            raise UpstreamError(
                f"LLM API error: {resp.status_code} - {resp.text}",
                upstream_status=resp.status_code,
                body=resp.text,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamError(
                "LLM API returned a non-JSON body",
                upstream_status=resp.status_code,
                body=resp.text,
            ) from e

        content = _extract_content(data)
        if not content:
            raise UpstreamError(
                "No content returned from LLM API",
                upstream_status=resp.status_code,
                body=resp.text,
            )

        result = ModelCallResult(
            content=content,
            model_name=str(data.get("model") or self._model),
            provider="openai",
            duration_ms=duration_ms,
            token_usage=_parse_usage(data),
        )

        log.info(
            "chat_completion_completed",
            model_name=result.model_name,
            duration_ms=duration_ms,
            total_tokens=result.token_usage.total_tokens,
        )
        return result

    async def health_check(self, api_key: str) -> bool:
        """检查接口可达性

        发送 GET {base_url}/models 请求。

        Returns:
            True 如果接口返回 200，False 如果不可达或异常

        注意: 此方法不抛出异常，超时固定为 5 秒。
        """
        url = f"{self._base_url}/models"
        try:
            async with httpx.AsyncClient(transport=self._transport) as http_client:
                resp = await http_client.get(
                    url,
                    headers={"Authorization": f"Bearer {api_key}"},
                    timeout=HEALTH_CHECK_TIMEOUT_S,
                )
                return resp.status_code == 200
        except httpx.HTTPError as e:
            log.debug("health_check_failed", url=url, error=str(e))
            return False
