"""任务 CRUD 路由

GET    /api/tasks               列表（status / priority / q 筛选）
GET    /api/tasks/{task_id}     详情
POST   /api/tasks               创建
PATCH  /api/tasks/{task_id}     部分更新
DELETE /api/tasks/{task_id}     删除
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query

from taskpilot.core.models import Task
from taskpilot.core.validation import (
    validate_create,
    validate_list_query,
    validate_update,
)

from ..deps import get_task_service
from ..services.task_service import TaskService

router = APIRouter()


@router.get("/api/tasks", response_model=list[Task])
async def list_tasks(
    status: str | None = Query(default=None, description="按状态筛选：open / done"),
    priority: str | None = Query(default=None, description="按优先级筛选：1 / 2 / 3"),
    q: str | None = Query(default=None, description="标题子串（不区分大小写）"),
    service: TaskService = Depends(get_task_service),
):
    """查询任务列表，按 createdAt 倒序"""
    query = validate_list_query({"status": status, "priority": priority, "q": q})
    return await service.list_tasks(query)


@router.get("/api/tasks/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    return await service.get_task(task_id)


@router.post("/api/tasks", status_code=201, response_model=Task)
async def create_task(
    payload: Any = Body(...),
    service: TaskService = Depends(get_task_service),
):
    """创建任务，status 固定为 open"""
    return await service.create_task(validate_create(payload))


@router.patch("/api/tasks/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    payload: Any = Body(...),
    service: TaskService = Depends(get_task_service),
):
    """部分更新：只修改请求体中出现的字段，空对象只刷新 updatedAt"""
    return await service.update_task(task_id, validate_update(payload))


@router.delete("/api/tasks/{task_id}")
async def delete_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
):
    await service.delete_task(task_id)
    return {"success": True}
