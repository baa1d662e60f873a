"""TaskService -- 任务 CRUD 与 LLM 增强业务逻辑

增强流程：
1. 查询任务（不存在 -> NotFoundError，不消耗配额）
2. 按客户端标识限流（超额 -> RateLimitError）
3. 校验凭证（缺失 -> ConfigurationError）
4. 调用 TaskEnhancer（UpstreamError / ParseError 原样上抛）
5. 覆盖写入 enhancedDescription
查询与写入之间不加事务，期间任务被删除时返回 NotFoundError。
"""

import structlog

from taskpilot.core.exceptions import ConfigurationError, NotFoundError, RateLimitError
from taskpilot.core.models import (
    CreateTaskInput,
    Task,
    TaskListQuery,
    UpdateTaskInput,
)
from taskpilot.core.store import StoreGroup, TaskStore
from taskpilot.provider import TaskEnhancer

from .rate_limiter import RateLimiter, RateLimitResult

log = structlog.get_logger()


class TaskService:
    """任务业务服务"""

    def __init__(self, store_group: StoreGroup) -> None:
        self._tasks: TaskStore = store_group.task_store

    async def list_tasks(self, query: TaskListQuery | None = None) -> list[Task]:
        """查询任务列表"""
        return await self._tasks.find_all(query)

    async def get_task(self, task_id: str) -> Task:
        """查询单个任务

        Raises:
            NotFoundError: 任务不存在
        """
        task = await self._tasks.find_by_id(task_id)
        if task is None:
            raise NotFoundError(task_id)
        return task

    async def create_task(self, data: CreateTaskInput) -> Task:
        """创建任务"""
        task = await self._tasks.create(data)
        log.info("task_created", task_id=task.id, priority=task.priority)
        return task

    async def update_task(self, task_id: str, data: UpdateTaskInput) -> Task:
        """部分更新任务

        Raises:
            NotFoundError: 任务不存在
        """
        task = await self._tasks.update(task_id, data)
        if task is None:
            raise NotFoundError(task_id)
        log.info(
            "task_updated",
            task_id=task_id,
            fields=sorted(data.model_fields_set),
        )
        return task

    async def delete_task(self, task_id: str) -> None:
        """删除任务

        Raises:
            NotFoundError: 任务不存在（或已被删除）
        """
        if not await self._tasks.delete(task_id):
            raise NotFoundError(task_id)
        log.info("task_deleted", task_id=task_id)

    async def enhance_task(
        self,
        task_id: str,
        *,
        client_id: str,
        rate_limiter: RateLimiter,
        enhancer: TaskEnhancer,
        api_key: str | None,
    ) -> tuple[Task, RateLimitResult]:
        """调用 LLM 生成增强描述并写回任务

        Args:
            task_id: 任务 ID
            client_id: 限流使用的客户端标识
            rate_limiter: 限流器
            enhancer: 任务增强器
            api_key: LLM 凭证，None 表示未配置

        Returns:
            (更新后的 Task, 限流结果)

        Raises:
            NotFoundError: 任务不存在
            RateLimitError: 超出配额
            ConfigurationError: 未配置凭证
            UpstreamError / ParseError: LLM 调用或解析失败
        """
        task = await self.get_task(task_id)

        limit = await rate_limiter.check(client_id)
        if not limit.allowed:
            log.warning(
                "rate_limit_exceeded",
                client_id=client_id,
                task_id=task_id,
                retry_after_s=limit.retry_after_s,
            )
            raise RateLimitError(client_id, limit.retry_after_s)

        if api_key is None:
            raise ConfigurationError("LLM API key not configured")

        enhanced = await enhancer.enhance(task.title, task.notes, api_key)

        # 模型输出不受用户输入长度上限约束，直接构造
        changes = UpdateTaskInput.model_construct(
            _fields_set={"enhanced_description"},
            enhanced_description=enhanced.to_json(),
        )
        updated = await self._tasks.update(task_id, changes)
        if updated is None:
            raise NotFoundError(task_id)

        log.info(
            "task_enhanced",
            task_id=task_id,
            step_count=len(enhanced.steps),
            estimate_hours=enhanced.estimate_hours,
            remaining=limit.remaining,
        )
        return updated, limit
