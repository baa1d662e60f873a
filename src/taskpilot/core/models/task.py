"""Task Domain Model

Task 是唯一的持久化实体；EnhancedDescription 由 LLM 增强生成，
以 JSON 字符串形式存放在 Task.enhanced_description 中。
对外 JSON 字段统一使用 camelCase（enhancedDescription、dueDate 等）。
"""

import json
import math
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..config import (
    ESTIMATE_HOURS_MAX,
    ESTIMATE_HOURS_MIN,
    SUMMARY_MAX_LENGTH,
)
from .enums import Priority, TaskStatus


def _as_str_list(value: Any) -> list[str]:
    """非列表视为空列表；非字符串元素序列化为 JSON 文本"""
    if not isinstance(value, list):
        return []
    return [
        item if isinstance(item, str) else json.dumps(item, ensure_ascii=False)
        for item in value
    ]


def _as_hours(value: Any) -> int:
    """非数值（含 bool）视为 0；浮点数向零截断"""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    return 0


class EnhancedDescription(BaseModel):
    """LLM 增强结果：摘要 + 步骤 + 风险 + 工时估算"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    summary: str = Field(max_length=SUMMARY_MAX_LENGTH, description="任务摘要")
    steps: list[str] = Field(description="有序的执行步骤（祈使句）")
    risks: list[str] = Field(description="风险列表")
    estimate_hours: int = Field(
        ge=ESTIMATE_HOURS_MIN,
        le=ESTIMATE_HOURS_MAX,
        description="预估工时（小时）",
    )

    @classmethod
    def from_loose(cls, data: dict[str, Any]) -> "EnhancedDescription":
        """宽松构建：字段缺失或类型不符时兜底为空值，不做取值范围校验

        summary 超长或 estimateHours 越界会被原样保留。
        """
        summary = data.get("summary")
        return cls.model_construct(
            summary=summary if isinstance(summary, str) else "",
            steps=_as_str_list(data.get("steps")),
            risks=_as_str_list(data.get("risks")),
            estimateHours=_as_hours(data.get("estimateHours")),
        )

    def to_json(self) -> str:
        """序列化为存储用的 JSON 字符串（camelCase key）"""
        return json.dumps(self.model_dump(by_alias=True), ensure_ascii=False)


class Task(BaseModel):
    """Task 数据模型

    id 与 created_at 创建后不可变；updated_at 在每次变更时刷新，
    且始终不早于 created_at。
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(description="唯一标识，ULID 格式")
    title: str = Field(description="任务标题")
    notes: str | None = Field(default=None, description="备注，None 表示未填写")
    enhanced_description: str | None = Field(
        default=None,
        description="EnhancedDescription 的 JSON 字符串",
    )
    status: TaskStatus = Field(default=TaskStatus.OPEN, description="当前状态")
    priority: Priority | None = Field(default=None, description="优先级 1/2/3")
    due_date: str | None = Field(default=None, description="截止时间（ISO-8601）")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")

    def parsed_enhancement(self) -> EnhancedDescription | None:
        """解析已存储的增强结果，缺失或无法解码时返回 None"""
        if not self.enhanced_description:
            return None
        try:
            data = json.loads(self.enhanced_description)
        except json.JSONDecodeError:
            return None
        if not isinstance(data, dict):
            return None
        return EnhancedDescription.from_loose(data)
