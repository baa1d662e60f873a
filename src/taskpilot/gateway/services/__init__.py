"""Gateway 业务服务"""

from .rate_limiter import (
    FixedWindowRateLimiter,
    MemoryRateLimitStore,
    RateLimiter,
    RateLimitRecord,
    RateLimitResult,
    RateLimitStore,
)
from .task_service import TaskService

__all__ = [
    "FixedWindowRateLimiter",
    "MemoryRateLimitStore",
    "RateLimiter",
    "RateLimitRecord",
    "RateLimitResult",
    "RateLimitStore",
    "TaskService",
]
