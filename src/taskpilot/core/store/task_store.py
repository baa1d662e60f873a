"""TaskStore SQLite 实现

tasks 表的唯一读写入口。写操作在单连接上提交事务，
失败时回滚并包装为 StorageError。
"""

import contextlib
from collections.abc import Iterator
from datetime import UTC, datetime

import aiosqlite
import structlog
from ulid import ULID

from ..exceptions import StorageError
from ..models import CreateTaskInput, Task, TaskListQuery, UpdateTaskInput

log = structlog.get_logger()

_COLUMNS = (
    "id, title, notes, enhancedDescription, status, priority, "
    "dueDate, createdAt, updatedAt"
)


def _escape_like(text: str) -> str:
    """转义 LIKE 通配符，q 按字面子串匹配"""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _ts(value: datetime) -> str:
    return value.isoformat(timespec="microseconds")


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create(self, data: CreateTaskInput) -> Task:
        """创建任务记录并返回完整 Task"""
        now = datetime.now(UTC)
        task = Task(
            id=str(ULID()),
            title=data.title,
            notes=data.notes,
            priority=data.priority,
            due_date=data.due_date,
            created_at=now,
            updated_at=now,
        )
        try:
            await self._conn.execute(
                f"INSERT INTO tasks ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                self._task_to_row(task),
            )
            await self._conn.commit()
        except aiosqlite.Error as e:
            await self._rollback("create", e)
            raise StorageError(f"创建任务失败: {e}") from e
        return task

    async def find_by_id(self, task_id: str) -> Task | None:
        """根据 id 查询任务"""
        with self._read_errors("find_by_id"):
            cursor = await self._conn.execute(
                f"SELECT {_COLUMNS} FROM tasks WHERE id = ?",
                (task_id,),
            )
            row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    async def find_all(self, query: TaskListQuery | None = None) -> list[Task]:
        """查询任务列表

        status / priority 精确匹配，q 对 title 做大小写不敏感的子串匹配，
        条件之间为 AND；按 createdAt 倒序（同一时刻按 id 倒序）。
        """
        query = query or TaskListQuery()
        clauses: list[str] = []
        params: list[object] = []

        if query.status is not None:
            clauses.append("status = ?")
            params.append(query.status.value)
        if query.priority is not None:
            clauses.append("priority = ?")
            params.append(query.priority)
        if query.q:
            clauses.append("title LIKE ? ESCAPE '\\'")
            params.append(f"%{_escape_like(query.q)}%")

        sql = f"SELECT {_COLUMNS} FROM tasks"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY createdAt DESC, id DESC"

        with self._read_errors("find_all"):
            cursor = await self._conn.execute(sql, params)
            rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    async def update(self, task_id: str, data: UpdateTaskInput) -> Task | None:
        """部分更新任务

        只合并 data 中出现的字段；id 与 created_at 不变。
        读取与写入之间任务被删除时同样返回 None。
        """
        existing = await self.find_by_id(task_id)
        if existing is None:
            return None

        now = max(datetime.now(UTC), existing.created_at)
        updated = Task.model_validate(
            {**existing.model_dump(), **data.changes(), "updated_at": now}
        )

        try:
            cursor = await self._conn.execute(
                """
                UPDATE tasks
                SET title = ?, notes = ?, enhancedDescription = ?, status = ?,
                    priority = ?, dueDate = ?, updatedAt = ?
                WHERE id = ?
                """,
                (
                    updated.title,
                    updated.notes,
                    updated.enhanced_description,
                    updated.status.value,
                    int(updated.priority) if updated.priority is not None else None,
                    updated.due_date,
                    _ts(updated.updated_at),
                    task_id,
                ),
            )
            await self._conn.commit()
        except aiosqlite.Error as e:
            await self._rollback("update", e)
            raise StorageError(f"更新任务失败: {e}") from e

        if cursor.rowcount == 0:
            return None
        return updated

    async def delete(self, task_id: str) -> bool:
        """删除任务，返回是否删除了一行（重复删除返回 False）"""
        try:
            cursor = await self._conn.execute(
                "DELETE FROM tasks WHERE id = ?",
                (task_id,),
            )
            await self._conn.commit()
        except aiosqlite.Error as e:
            await self._rollback("delete", e)
            raise StorageError(f"删除任务失败: {e}") from e
        return cursor.rowcount > 0

    async def _rollback(self, action: str, error: Exception) -> None:
        log.error("task_store_write_failed", action=action, error=str(error))
        # 回滚失败不应覆盖原始错误
        with contextlib.suppress(aiosqlite.Error):
            await self._conn.rollback()

    @staticmethod
    @contextlib.contextmanager
    def _read_errors(action: str) -> Iterator[None]:
        try:
            yield
        except aiosqlite.Error as e:
            log.error("task_store_read_failed", action=action, error=str(e))
            raise StorageError(f"查询任务失败: {e}") from e

    @staticmethod
    def _task_to_row(task: Task) -> tuple:
        return (
            task.id,
            task.title,
            task.notes,
            task.enhanced_description,
            task.status.value,
            int(task.priority) if task.priority is not None else None,
            task.due_date,
            _ts(task.created_at),
            _ts(task.updated_at),
        )

    @staticmethod
    def _row_to_task(row) -> Task:
        """将数据库行转换为 Task 模型"""
        return Task(
            id=row[0],
            title=row[1],
            notes=row[2],
            enhanced_description=row[3],
            status=row[4],
            priority=row[5],
            due_date=row[6],
            created_at=datetime.fromisoformat(row[7]),
            updated_at=datetime.fromisoformat(row[8]),
        )
