"""任务增强路由

POST /api/tasks/{task_id}/enhance
调用 LLM 生成结构化清单并写回任务；按客户端标识限流。
成功响应带 X-RateLimit-Remaining，429 响应带 Retry-After。
"""

from fastapi import APIRouter, Depends, Request, Response

from taskpilot.core.models import Task
from taskpilot.provider import ProviderConfig, TaskEnhancer

from ..deps import (
    client_identifier,
    get_enhancer,
    get_provider_config,
    get_rate_limiter,
    get_task_service,
)
from ..services.rate_limiter import RateLimiter
from ..services.task_service import TaskService

router = APIRouter()


@router.post("/api/tasks/{task_id}/enhance", response_model=Task)
async def enhance_task(
    task_id: str,
    request: Request,
    response: Response,
    service: TaskService = Depends(get_task_service),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    enhancer: TaskEnhancer = Depends(get_enhancer),
    provider_config: ProviderConfig = Depends(get_provider_config),
):
    # echo 模式不需要凭证
    if provider_config.llm_mode == "echo":
        api_key: str | None = ""
    elif provider_config.has_credential:
        api_key = provider_config.api_key.get_secret_value()
    else:
        api_key = None

    task, limit = await service.enhance_task(
        task_id,
        client_id=client_identifier(request),
        rate_limiter=rate_limiter,
        enhancer=enhancer,
        api_key=api_key,
    )
    response.headers["X-RateLimit-Remaining"] = str(limit.remaining)
    return task
