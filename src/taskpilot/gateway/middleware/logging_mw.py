"""LoggingMiddleware -- 请求级日志

为每个 HTTP 请求生成 request_id（ULID），绑定到 structlog contextvars，
并通过 X-Request-ID 响应头返回。
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID


class LoggingMiddleware(BaseHTTPMiddleware):
    """请求级日志中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = str(ULID())
        start_time = time.monotonic()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        log = structlog.get_logger()
        await log.ainfo("request_started")

        response = await call_next(request)

        await log.ainfo(
            "request_completed",
            status_code=response.status_code,
            duration_ms=int((time.monotonic() - start_time) * 1000),
        )

        response.headers["X-Request-ID"] = request_id
        return response
