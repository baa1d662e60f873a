"""Store Protocol 接口定义

定义 TaskStore 的抽象接口，使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from typing import Protocol

from ..models import CreateTaskInput, Task, TaskListQuery, UpdateTaskInput


class TaskStore(Protocol):
    """Task 存储接口 -- 所有 Task 变更必须经过此接口"""

    async def create(self, data: CreateTaskInput) -> Task:
        """创建任务：分配 id，status=open，created_at=updated_at=now"""
        ...

    async def find_by_id(self, task_id: str) -> Task | None:
        """根据 id 查询任务，不存在时返回 None"""
        ...

    async def find_all(self, query: TaskListQuery | None = None) -> list[Task]:
        """按条件查询任务列表，按 created_at 倒序"""
        ...

    async def update(self, task_id: str, data: UpdateTaskInput) -> Task | None:
        """部分更新（只合并出现的字段），不存在时返回 None"""
        ...

    async def delete(self, task_id: str) -> bool:
        """删除任务，返回是否真的删除了一行"""
        ...
