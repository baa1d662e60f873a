"""枚举定义 -- TaskStatus、Priority 与 ParseMode"""

from enum import IntEnum, StrEnum


class TaskStatus(StrEnum):
    """Task 状态，只有两个取值"""

    OPEN = "open"
    DONE = "done"


class Priority(IntEnum):
    """优先级：1 = high, 2 = medium, 3 = low"""

    HIGH = 1
    MEDIUM = 2
    LOW = 3


class ParseMode(StrEnum):
    """LLM 输出解析模式

    LENIENT: 字段缺失或类型不符时按默认值兜底（空字符串 / 空列表 / 0），不校验取值范围
    STRICT: 严格按 EnhancedDescription 约束校验，任何不符都视为解析失败
    """

    LENIENT = "lenient"
    STRICT = "strict"
