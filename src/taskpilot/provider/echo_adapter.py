"""EchoMessageAdapter -- 离线模式

不访问外部接口，根据最后一条 user message 生成一份固定结构的增强结果
（以 ```json 代码块包裹，与真实模型的常见输出格式一致），
用于本地开发和演示。
"""

import asyncio
import json
import time

from .models import ModelCallResult, TokenUsage


class EchoMessageAdapter:
    """与 ChatCompletionClient 接口一致的离线适配器"""

    async def complete(
        self,
        messages: list[dict[str, str]],
        *,
        api_key: str = "",
        **kwargs,
    ) -> ModelCallResult:
        """生成回声式的增强 JSON

        Args:
            messages: 消息列表
            api_key: 忽略
            **kwargs: 忽略（temperature / max_tokens 等）

        Returns:
            ModelCallResult，provider="echo"
        """
        start_time = time.monotonic()

        user_content = self._extract_last_user_content(messages)
        first_line = user_content.splitlines()[0] if user_content else "(empty)"

        # 模拟少量延迟
        await asyncio.sleep(0.01)

        body = {
            "summary": f"Echo: {first_line}"[:200],
            "steps": [
                "Clarify the expected outcome",
                "Do the work",
                "Review and mark the task done",
            ],
            "risks": [],
            "estimateHours": 1,
        }
        response_text = f"```json\n{json.dumps(body, ensure_ascii=False)}\n```"

        prompt_tokens = len(user_content.split())
        completion_tokens = len(response_text.split())

        return ModelCallResult(
            content=response_text,
            model_name="echo",
            provider="echo",
            duration_ms=int((time.monotonic() - start_time) * 1000),
            token_usage=TokenUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
        )

    async def health_check(self, api_key: str = "") -> bool:
        """Echo 模式始终可用"""
        return True

    @staticmethod
    def _extract_last_user_content(messages: list[dict[str, str]]) -> str:
        """从 messages 中提取最后一条 user message 的 content"""
        for msg in reversed(messages):
            if msg.get("role") == "user":
                return msg.get("content", "")

        if messages:
            return messages[-1].get("content", "")
        return ""
