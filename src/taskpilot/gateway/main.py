"""FastAPI 应用主文件

app 创建 + lifespan 管理：DB 初始化/关闭 + LLM 组件 + 限流器初始化 + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from taskpilot import __version__
from taskpilot.core.config import get_db_path
from taskpilot.core.store import create_store_group
from taskpilot.provider import (
    ChatCompletionClient,
    EchoMessageAdapter,
    ProviderConfig,
    TaskEnhancer,
    load_provider_config,
)

from .config import GatewayConfig, load_gateway_config
from .errors import register_exception_handlers
from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import enhance, health, tasks
from .services.rate_limiter import FixedWindowRateLimiter

log = structlog.get_logger()


def build_llm_components(
    provider_config: ProviderConfig,
) -> tuple[ChatCompletionClient | EchoMessageAdapter, TaskEnhancer]:
    """根据配置选择 LLM 客户端并创建 TaskEnhancer"""
    if provider_config.llm_mode == "echo":
        client: ChatCompletionClient | EchoMessageAdapter = EchoMessageAdapter()
        log.info("llm_service_initialized", mode="echo")
    else:
        client = ChatCompletionClient(
            base_url=provider_config.base_url,
            model=provider_config.model,
            timeout_s=provider_config.timeout_s,
        )
        log.info(
            "llm_service_initialized",
            mode="openai",
            base_url=provider_config.base_url,
            model=provider_config.model,
            timeout_s=provider_config.timeout_s,
            has_credential=provider_config.has_credential,
        )
    enhancer = TaskEnhancer(client, parse_mode=provider_config.parse_mode)
    return client, enhancer


def build_rate_limiter(gateway_config: GatewayConfig) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(
        max_requests=gateway_config.rate_limit_max_requests,
        window_ms=gateway_config.rate_limit_window_ms,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化 DB 和 LLM 组件，关闭时清理连接"""
    store_group = await create_store_group(get_db_path())
    app.state.store_group = store_group

    provider_config = load_provider_config()
    app.state.provider_config = provider_config
    app.state.llm_client, app.state.enhancer = build_llm_components(provider_config)

    app.state.rate_limiter = build_rate_limiter(app.state.gateway_config)

    yield

    if getattr(app.state, "store_group", None) is not None:
        await app.state.store_group.conn.close()


def create_app(gateway_config: GatewayConfig | None = None) -> FastAPI:
    """创建 FastAPI 应用实例"""
    gateway_config = gateway_config or load_gateway_config()

    app = FastAPI(
        title="TaskPilot API",
        version=__version__,
        description="任务管理 + LLM 增强清单",
        lifespan=lifespan,
    )
    app.state.gateway_config = gateway_config

    # 注册中间件（顺序：先 Trace 后 Logging，Logging 位于最外层）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=gateway_config.cors_origins,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    setup_logging()
    setup_logfire(app)

    register_exception_handlers(app)

    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(enhance.router, tags=["enhance"])
    app.include_router(health.router, tags=["health"])

    # 前端静态文件在所有 API 路由之后挂载，确保 API 优先匹配
    if gateway_config.frontend_dir:
        frontend_dir = Path(gateway_config.frontend_dir)
        if frontend_dir.is_dir():
            app.mount(
                "/",
                StaticFiles(directory=str(frontend_dir), html=True),
                name="frontend",
            )
        else:
            log.warning("frontend_dir_missing", frontend_dir=str(frontend_dir))

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
