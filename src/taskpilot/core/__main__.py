"""CLI 入口模块 -- python -m taskpilot.core <command>

支持的命令：
  init-db   在配置的路径创建数据库与 tasks 表
  stats     按状态统计任务数量
"""

import asyncio
import sys

from .config import get_db_path


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print("用法: python -m taskpilot.core <command>")
        print("命令:")
        print("  init-db  创建数据库与 tasks 表")
        print("  stats    按状态统计任务数量")
        sys.exit(1)

    command = sys.argv[1]

    if command == "init-db":
        asyncio.run(init_database())
    elif command == "stats":
        asyncio.run(print_stats())
    else:
        print(f"未知命令: {command}")
        print("可用命令: init-db, stats")
        sys.exit(1)


async def init_database() -> None:
    """创建数据库（幂等）"""
    from .store import create_store_group, verify_wal_mode

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")

    store_group = await create_store_group(db_path)
    try:
        wal = await verify_wal_mode(store_group.conn)
        print(f"初始化完成，WAL 模式: {'on' if wal else 'off'}")
    finally:
        await store_group.conn.close()


async def print_stats() -> None:
    """输出各状态的任务数量"""
    from .models import TaskListQuery, TaskStatus
    from .store import create_store_group

    store_group = await create_store_group(get_db_path())
    try:
        for status in TaskStatus:
            tasks = await store_group.task_store.find_all(
                TaskListQuery(status=status)
            )
            print(f"{status.value}: {len(tasks)}")
    finally:
        await store_group.conn.close()


if __name__ == "__main__":
    main()
