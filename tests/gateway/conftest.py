"""Gateway 测试配置 -- 绕过 lifespan 手动初始化 app.state"""

from collections.abc import AsyncGenerator
from pathlib import Path

import httpx
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from taskpilot.core.store import create_store_group
from taskpilot.gateway.config import GatewayConfig
from taskpilot.gateway.main import build_llm_components, create_app
from taskpilot.gateway.services.rate_limiter import FixedWindowRateLimiter
from taskpilot.provider import ChatCompletionClient, ProviderConfig, TaskEnhancer


@pytest_asyncio.fixture
async def make_app(tmp_path: Path, monkeypatch):
    """构造测试 app 的工厂

    Args (工厂参数):
        provider_config: Provider 配置，默认 echo 模式
        max_requests / window_ms: 限流参数
        handler: 非 echo 模式下上游 MockTransport handler
    """
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")
    store_groups = []

    async def factory(
        provider_config: ProviderConfig | None = None,
        max_requests: int = 10,
        window_ms: int = 60_000,
        handler=None,
    ):
        provider_config = provider_config or ProviderConfig(llm_mode="echo")
        app = create_app(
            GatewayConfig(
                rate_limit_max_requests=max_requests,
                rate_limit_window_ms=window_ms,
            )
        )

        store_group = await create_store_group(
            str(tmp_path / f"test_{len(store_groups)}.db")
        )
        store_groups.append(store_group)
        app.state.store_group = store_group
        app.state.provider_config = provider_config

        if handler is not None:
            client = ChatCompletionClient(
                base_url=provider_config.base_url,
                model=provider_config.model,
                timeout_s=provider_config.timeout_s,
                transport=httpx.MockTransport(handler),
            )
            app.state.llm_client = client
            app.state.enhancer = TaskEnhancer(
                client, parse_mode=provider_config.parse_mode
            )
        else:
            app.state.llm_client, app.state.enhancer = build_llm_components(
                provider_config
            )

        app.state.rate_limiter = FixedWindowRateLimiter(
            max_requests=max_requests, window_ms=window_ms
        )
        return app

    yield factory

    for store_group in store_groups:
        await store_group.conn.close()


@pytest_asyncio.fixture
async def app(make_app):
    """默认 echo 模式 app"""
    return await make_app()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

