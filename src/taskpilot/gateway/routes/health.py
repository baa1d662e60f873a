"""健康检查路由

GET /health: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，包含 SQLite 连通性与 LLM 配置状态；
         profile=llm 时额外探测 chat-completion 接口。
"""

import aiosqlite
import structlog
from fastapi import APIRouter, Query, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(
    request: Request,
    profile: str | None = Query(
        default=None,
        description="检查配置：core（默认）仅核心检查；llm 额外探测 LLM 接口",
    ),
):
    """Readiness 检查

    检查项：
    1. sqlite: 数据库连通性
    2. llm_credential: 凭证是否配置（echo 模式为 "not_required"）
    3. llm_api: profile=llm 时真实探测，否则 "skipped"

    凭证缺失不影响就绪状态，只影响增强接口。
    """
    effective_profile = profile or "core"
    checks: dict[str, str] = {}
    all_ok = True

    try:
        cursor = await request.app.state.store_group.conn.execute("SELECT 1")
        await cursor.fetchone()
        checks["sqlite"] = "ok"
    except (aiosqlite.Error, ValueError) as e:
        checks["sqlite"] = f"error: {e}"
        all_ok = False

    provider_config = request.app.state.provider_config
    if provider_config.llm_mode == "echo":
        checks["llm_credential"] = "not_required"
    else:
        checks["llm_credential"] = (
            "ok" if provider_config.has_credential else "missing"
        )

    if effective_profile == "llm":
        client = request.app.state.llm_client
        healthy = await client.health_check(
            provider_config.api_key.get_secret_value()
        )
        checks["llm_api"] = "ok" if healthy else "unreachable"
        if not healthy:
            log.warning("llm_api_unreachable", base_url=provider_config.base_url)
            all_ok = False
    else:
        checks["llm_api"] = "skipped"

    return JSONResponse(
        status_code=200 if all_ok else 503,
        content={
            "status": "ready" if all_ok else "not_ready",
            "profile": effective_profile,
            "checks": checks,
        },
    )
