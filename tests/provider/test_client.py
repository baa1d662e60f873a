"""ChatCompletionClient 单元测试

使用 httpx.MockTransport 模拟上游接口，验证 complete() 返回 ModelCallResult、
非 2xx / 无内容 / 传输失败时抛出 UpstreamError、health_check() 返回 bool。
"""

import json

import httpx
import pytest

from taskpilot.core.exceptions import UpstreamError
from taskpilot.provider.client import ChatCompletionClient
from taskpilot.provider.models import ModelCallResult

MESSAGES = [{"role": "user", "content": "Hello"}]


def _completion_body(content: str | None = "Hello!", model: str = "gpt-3.5-turbo"):
    return {
        "model": model,
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": 10, "completion_tokens": 20, "total_tokens": 30},
    }


def _client(handler) -> ChatCompletionClient:
    return ChatCompletionClient(
        base_url="http://llm.test/v1/",
        model="gpt-3.5-turbo",
        timeout_s=5,
        transport=httpx.MockTransport(handler),
    )


class TestComplete:
    """complete() 方法测试"""

    async def test_successful_call(self):
        """成功调用返回完整 ModelCallResult"""
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_completion_body("  Hello!  "))

        result = await _client(handler).complete(
            MESSAGES, api_key="sk-test", temperature=0.7, max_tokens=500
        )

        assert isinstance(result, ModelCallResult)
        assert result.content == "Hello!"
        assert result.model_name == "gpt-3.5-turbo"
        assert result.provider == "openai"
        assert result.token_usage.total_tokens == 30
        assert seen["url"] == "http://llm.test/v1/chat/completions"
        assert seen["auth"] == "Bearer sk-test"
        assert seen["body"] == {
            "model": "gpt-3.5-turbo",
            "messages": MESSAGES,
            "temperature": 0.7,
            "max_tokens": 500,
        }

    async def test_max_tokens_omitted_when_none(self):
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_completion_body())

        await _client(handler).complete(MESSAGES, api_key="k")
        assert "max_tokens" not in seen["body"]

    async def test_missing_usage_defaults_to_zero(self):
        def handler(request: httpx.Request) -> httpx.Response:
            body = _completion_body()
            del body["usage"]
            return httpx.Response(200, json=body)

        result = await _client(handler).complete(MESSAGES, api_key="k")
        assert result.token_usage.total_tokens == 0

    async def test_malformed_usage_keeps_content(self):
        """usage 计数异常（小数、负数、非数值）时按 0 处理，内容照常返回"""

        def handler(request: httpx.Request) -> httpx.Response:
            body = _completion_body()
            body["usage"] = {
                "prompt_tokens": 12.5,
                "completion_tokens": -3,
                "total_tokens": "many",
            }
            return httpx.Response(200, json=body)

        result = await _client(handler).complete(MESSAGES, api_key="k")
        assert result.content == "Hello!"
        assert result.token_usage.prompt_tokens == 0
        assert result.token_usage.completion_tokens == 0
        assert result.token_usage.total_tokens == 0

    async def test_integral_float_usage_accepted(self):
        def handler(request: httpx.Request) -> httpx.Response:
            body = _completion_body()
            body["usage"] = {"prompt_tokens": 12.0, "total_tokens": 30}
            return httpx.Response(200, json=body)

        result = await _client(handler).complete(MESSAGES, api_key="k")
        assert result.token_usage.prompt_tokens == 12
        assert result.token_usage.completion_tokens == 0
        assert result.token_usage.total_tokens == 30

    async def test_non_success_status(self):
        """非 2xx：错误信息包含上游状态码与响应体"""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text='{"error": "invalid key"}')

        with pytest.raises(UpstreamError) as exc_info:
            await _client(handler).complete(MESSAGES, api_key="bad")

        err = exc_info.value
        assert err.upstream_status == 401
        assert err.body == '{"error": "invalid key"}'
        assert str(err) == 'LLM API error: 401 - {"error": "invalid key"}'

    @pytest.mark.parametrize(
        "body",
        [
            _completion_body(content=None),
            _completion_body(content="   "),
            {"choices": []},
            {"model": "x"},
        ],
    )
    async def test_no_content(self, body):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=body)

        with pytest.raises(UpstreamError, match="No content returned from LLM API"):
            await _client(handler).complete(MESSAGES, api_key="k")

    async def test_non_json_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>oops</html>")

        with pytest.raises(UpstreamError) as exc_info:
            await _client(handler).complete(MESSAGES, api_key="k")
        assert exc_info.value.upstream_status == 200

    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UpstreamError) as exc_info:
            await _client(handler).complete(MESSAGES, api_key="k")
        assert exc_info.value.upstream_status is None

    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(UpstreamError):
            await _client(handler).complete(MESSAGES, api_key="k")


class TestHealthCheck:
    """health_check() 测试"""

    async def test_healthy(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/v1/models"
            return httpx.Response(200, json={"data": []})

        assert await _client(handler).health_check("k") is True

    async def test_unauthorized(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401)

        assert await _client(handler).health_check("bad") is False

    async def test_unreachable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        assert await _client(handler).health_check("k") is False
