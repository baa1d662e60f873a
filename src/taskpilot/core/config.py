"""配置常量模块 -- 可通过环境变量覆盖

包含数据目录、数据库路径以及输入字段长度上限。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("TASKPILOT_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "TASKPILOT_DB_PATH",
        str(_get_base_dir() / "sqlite" / "taskpilot.db"),
    )


# 字段长度上限
TITLE_MAX_LENGTH: int = 200
NOTES_MAX_LENGTH: int = 1000
ENHANCED_DESCRIPTION_MAX_LENGTH: int = 5000
SUMMARY_MAX_LENGTH: int = 200

# estimateHours 合法区间
ESTIMATE_HOURS_MIN: int = 0
ESTIMATE_HOURS_MAX: int = 20
