"""依赖注入模块 -- 通过 FastAPI Depends 注入共享组件

StoreGroup、限流器、增强器与 Provider 配置通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from fastapi import Depends, Request

from taskpilot.core.store import StoreGroup
from taskpilot.provider import ProviderConfig, TaskEnhancer

from .services.rate_limiter import RateLimiter
from .services.task_service import TaskService


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_task_service(store_group: StoreGroup = Depends(get_store_group)) -> TaskService:
    return TaskService(store_group)


def get_rate_limiter(request: Request) -> RateLimiter:
    """从 app.state 获取限流器"""
    return request.app.state.rate_limiter


def get_enhancer(request: Request) -> TaskEnhancer:
    """从 app.state 获取 TaskEnhancer"""
    return request.app.state.enhancer


def get_provider_config(request: Request) -> ProviderConfig:
    return request.app.state.provider_config


def client_identifier(request: Request) -> str:
    """限流用的客户端标识

    依次取 CF-Connecting-IP、X-Forwarded-For 的第一个地址、X-Real-IP、
    连接对端地址，都没有时为 "unknown"。
    """
    headers = request.headers
    if ip := headers.get("cf-connecting-ip", "").strip():
        return ip
    if forwarded := headers.get("x-forwarded-for"):
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if ip := headers.get("x-real-ip", "").strip():
        return ip
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
