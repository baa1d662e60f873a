"""TaskPilot 异常体系

每个异常携带 HTTP 映射所需的 status_code 与对外文案 error。
expose=True 表示 str(exc) 可以原样返回给客户端（如校验信息）；
否则 gateway 只返回 error 通用文案，细节仅写入日志。
"""


class TaskPilotError(Exception):
    """TaskPilot 基础异常"""

    status_code: int = 500
    error: str = "Internal server error"
    expose: bool = False


class ValidationError(TaskPilotError):
    """输入数据格式错误或越界"""

    status_code = 400
    error = "Validation error"
    expose = True

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        """
        Args:
            message: 可读的错误描述（会回显给客户端）
            fields: 违反约束的字段名列表
        """
        super().__init__(message)
        self.fields = fields or []


class NotFoundError(TaskPilotError):
    """引用的 Task 不存在"""

    status_code = 404
    error = "Task not found"
    expose = False

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with id {task_id} does not exist")
        self.task_id = task_id


class RateLimitError(TaskPilotError):
    """超出限流配额"""

    status_code = 429
    error = "Rate limit exceeded. Please try again later."
    expose = False

    def __init__(self, identifier: str, retry_after_s: int) -> None:
        """
        Args:
            identifier: 被限流的客户端标识
            retry_after_s: 距窗口重置的秒数（向上取整）
        """
        super().__init__(f"Rate limit exceeded for {identifier}")
        self.identifier = identifier
        self.retry_after_s = retry_after_s


class UpstreamError(TaskPilotError):
    """外部 LLM 调用失败或返回不可用内容"""

    status_code = 500
    error = "Task enhancement failed"
    expose = False

    def __init__(
        self,
        message: str,
        upstream_status: int | None = None,
        body: str = "",
    ) -> None:
        """
        Args:
            message: 错误描述（含上游状态码与响应体）
            upstream_status: 上游 HTTP 状态码，传输层失败时为 None
            body: 上游响应体原文
        """
        super().__init__(message)
        self.upstream_status = upstream_status
        self.body = body


class ParseError(TaskPilotError):
    """LLM 输出不是合法（或可转换的）JSON"""

    status_code = 500
    error = "Task enhancement failed"
    expose = False


class StorageError(TaskPilotError):
    """存储层失败"""

    status_code = 500
    error = "Internal server error"
    expose = False


class ConfigurationError(TaskPilotError):
    """运行配置缺失（如未配置 LLM 凭证）"""

    status_code = 500
    error = "Server misconfiguration"
    expose = True
