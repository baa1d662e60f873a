"""TraceMiddleware -- 为任务操作绑定 task_id

从 /api/tasks/{task_id}[/enhance] 路径中提取 task_id，
绑定到 structlog contextvars，贯穿该请求内的全部日志。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

_PREFIX = "/api/tasks/"


def extract_task_id(path: str) -> str | None:
    """从请求路径提取 task_id，不匹配时返回 None"""
    if not path.startswith(_PREFIX):
        return None
    task_id = path[len(_PREFIX):].split("/", 1)[0]
    return task_id or None


class TraceMiddleware(BaseHTTPMiddleware):
    """任务级追踪中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        task_id = extract_task_id(request.url.path)
        if task_id:
            structlog.contextvars.bind_contextvars(task_id=task_id)

        return await call_next(request)
