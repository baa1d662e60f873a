"""SQLite 数据库初始化

PRAGMA 配置 + tasks 表 DDL + 索引创建。
列名与对外 JSON 字段保持一致（camelCase）。
使用 aiosqlite 异步操作。
"""

import aiosqlite

# tasks 表 DDL
_TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    id                   TEXT PRIMARY KEY,
    title                TEXT NOT NULL,
    notes                TEXT,
    enhancedDescription  TEXT,
    status               TEXT NOT NULL DEFAULT 'open'
                         CHECK (status IN ('open', 'done')),
    priority             INTEGER CHECK (priority IN (1, 2, 3)),
    dueDate              TEXT,
    createdAt            TEXT NOT NULL,
    updatedAt            TEXT NOT NULL
);
"""

_TASKS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_priority ON tasks(priority);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_created_at ON tasks(createdAt DESC);",
]


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    await conn.execute(_TASKS_DDL)
    for idx_sql in _TASKS_INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效

    Returns:
        True 如果 WAL 模式已启用
    """
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"
