"""TaskPilot Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import ParseMode, Priority, TaskStatus
from .inputs import CreateTaskInput, TaskListQuery, UpdateTaskInput
from .task import EnhancedDescription, Task

__all__ = [
    # 枚举
    "TaskStatus",
    "Priority",
    "ParseMode",
    # Task
    "Task",
    "EnhancedDescription",
    # 入站数据
    "CreateTaskInput",
    "UpdateTaskInput",
    "TaskListQuery",
]
