"""入站数据校验

纯函数：把原始 dict / 查询参数转换为类型化的输入模型，
任何违反约束的情况统一抛出 ValidationError（列出违规字段）。
"""

from collections.abc import Mapping
from typing import Any, NoReturn

from pydantic import ValidationError as PydanticValidationError

from .exceptions import ValidationError
from .models import CreateTaskInput, TaskListQuery, UpdateTaskInput


def _raise_from_pydantic(exc: PydanticValidationError) -> NoReturn:
    """把 pydantic 错误列表压缩为一条可读信息 + 字段名列表"""
    fields: list[str] = []
    parts: list[str] = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err["loc"]) or "body"
        if field not in fields:
            fields.append(field)
        parts.append(f"{field}: {err['msg']}")
    raise ValidationError("; ".join(parts), fields=fields) from exc


def _require_object(data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValidationError("body: must be a JSON object", fields=["body"])
    return data


def validate_create(data: Any) -> CreateTaskInput:
    """校验创建任务输入

    Raises:
        ValidationError: title 缺失/为空/超长、notes 超长、priority 不在 {1,2,3}、
            dueDate 不是合法 ISO 时间
    """
    try:
        return CreateTaskInput.model_validate(_require_object(data))
    except PydanticValidationError as e:
        _raise_from_pydantic(e)


def validate_update(data: Any) -> UpdateTaskInput:
    """校验更新任务输入（所有字段可选，出现时约束同创建）"""
    try:
        return UpdateTaskInput.model_validate(_require_object(data))
    except PydanticValidationError as e:
        _raise_from_pydantic(e)


def validate_list_query(query: Mapping[str, str | None]) -> TaskListQuery:
    """校验列表查询参数

    空字符串视为未提供；priority 需能解析为 1/2/3。
    """
    cleaned: dict[str, Any] = {
        key: value for key, value in query.items() if value not in (None, "")
    }

    raw_priority = cleaned.get("priority")
    if raw_priority is not None:
        try:
            cleaned["priority"] = int(raw_priority.strip())
        except ValueError:
            raise ValidationError(
                f"priority: expected one of 1, 2, 3, got {raw_priority!r}",
                fields=["priority"],
            ) from None

    try:
        return TaskListQuery.model_validate(cleaned)
    except PydanticValidationError as e:
        _raise_from_pydantic(e)
