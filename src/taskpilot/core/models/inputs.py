"""入站数据模型 -- 创建 / 更新 / 列表查询

UpdateTaskInput 通过 model_fields_set 记录请求中实际出现的字段，
仓储层据此只合并出现的字段（PATCH 语义）。
"""

from datetime import datetime
from typing import Annotated

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    field_validator,
)
from pydantic.alias_generators import to_camel

from ..config import (
    ENHANCED_DESCRIPTION_MAX_LENGTH,
    NOTES_MAX_LENGTH,
    TITLE_MAX_LENGTH,
)
from .enums import TaskStatus


def _check_iso_datetime(value: str) -> str:
    """dueDate 必须是带时间部分的 ISO-8601 字符串，原样保留"""
    if "T" not in value.upper():
        raise ValueError("must be an ISO-8601 datetime")
    try:
        datetime.fromisoformat(value)
    except ValueError:
        raise ValueError("must be an ISO-8601 datetime") from None
    return value


Title = Annotated[
    str, StringConstraints(strict=True, min_length=1, max_length=TITLE_MAX_LENGTH)
]
Notes = Annotated[str, StringConstraints(strict=True, max_length=NOTES_MAX_LENGTH)]
EnhancedText = Annotated[
    str, StringConstraints(strict=True, max_length=ENHANCED_DESCRIPTION_MAX_LENGTH)
]
PriorityValue = Annotated[int, Field(strict=True, ge=1, le=3)]
DueDate = Annotated[
    str, StringConstraints(strict=True), AfterValidator(_check_iso_datetime)
]


class _InputModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class CreateTaskInput(_InputModel):
    """创建任务请求体"""

    title: Title
    notes: Notes | None = None
    priority: PriorityValue | None = None
    due_date: DueDate | None = None


class UpdateTaskInput(_InputModel):
    """更新任务请求体 -- 所有字段可选

    notes / enhancedDescription / priority / dueDate 允许显式 null 以清空；
    title 与 status 不允许为 null。
    """

    title: Title | None = None
    notes: Notes | None = None
    enhanced_description: EnhancedText | None = None
    status: TaskStatus | None = None
    priority: PriorityValue | None = None
    due_date: DueDate | None = None

    @field_validator("title", "status", mode="before")
    @classmethod
    def _reject_null(cls, value):
        if value is None:
            raise ValueError("must not be null")
        return value

    def changes(self) -> dict:
        """仅返回请求中出现过的字段（字段名为 snake_case）"""
        return self.model_dump(include=self.model_fields_set)


class TaskListQuery(_InputModel):
    """任务列表查询条件，所有条件为 AND 关系"""

    status: TaskStatus | None = None
    priority: PriorityValue | None = None
    q: str | None = None
