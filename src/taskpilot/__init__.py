"""TaskPilot -- 任务管理 REST API + LLM 任务拆解

core: 领域模型、校验、SQLite 持久化
provider: LLM 调用与增强结果解析
gateway: FastAPI 应用、限流、HTTP 错误映射
"""

__version__ = "0.1.0"
