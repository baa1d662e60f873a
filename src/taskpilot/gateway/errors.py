"""异常到 HTTP 响应的映射

响应体统一为 {"error": str, "message"?: str}：
- expose=True 的异常（校验错误、配置错误）附带 message
- 其余只返回通用 error 文案，细节写入日志
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from taskpilot.core.exceptions import RateLimitError, TaskPilotError

log = structlog.get_logger()


def error_response(
    status_code: int,
    error: str,
    message: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """构造统一格式的错误响应"""
    content: dict[str, str] = {"error": error}
    if message:
        content["message"] = message
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def handle_taskpilot_error(request: Request, exc: TaskPilotError) -> JSONResponse:
    headers = None
    if isinstance(exc, RateLimitError):
        headers = {"Retry-After": str(exc.retry_after_s)}

    if exc.status_code >= 500:
        log.error(
            "request_failed",
            error_type=type(exc).__name__,
            error=str(exc),
            upstream_status=getattr(exc, "upstream_status", None),
        )
    else:
        log.info(
            "request_rejected",
            error_type=type(exc).__name__,
            status_code=exc.status_code,
        )

    return error_response(
        exc.status_code,
        exc.error,
        str(exc) if exc.expose else None,
        headers=headers,
    )


async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """FastAPI 自身的参数校验（含非法 JSON 请求体）统一返回 400"""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body") or "body"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return error_response(400, "Validation error", "; ".join(parts))


async def handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """显式 HTTPException 保留其状态码"""
    detail = exc.detail if isinstance(exc.detail, str) else None
    return error_response(exc.status_code, detail or "Error", headers=exc.headers)


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    log.exception("unhandled_error", error_type=type(exc).__name__)
    return error_response(500, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """注册全部异常处理器"""
    app.add_exception_handler(TaskPilotError, handle_taskpilot_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)
