"""python -m taskpilot.gateway -- 使用 uvicorn 启动服务

环境变量 TASKPILOT_HOST / TASKPILOT_PORT 控制监听地址（默认 127.0.0.1:3000）。
"""

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "taskpilot.gateway.main:app",
        host=os.environ.get("TASKPILOT_HOST", "127.0.0.1"),
        port=int(os.environ.get("TASKPILOT_PORT", "3000")),
        log_config=None,
    )


if __name__ == "__main__":
    main()
