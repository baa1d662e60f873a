"""固定窗口限流

RateLimitStore 抽象窗口记录的存取；默认实现 MemoryRateLimitStore
只在当前进程内有效，进程重启或多实例部署时各自独立计数。
固定窗口在窗口边界处允许突发（最多 2 * max_requests），这是算法本身的局限。
"""

import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol


@dataclass
class RateLimitRecord:
    """单个客户端在当前窗口内的计数"""

    count: int
    reset_at: float  # 毫秒时间戳


@dataclass(frozen=True)
class RateLimitResult:
    """一次 check 的结果"""

    allowed: bool
    remaining: int
    reset_at: float
    retry_after_s: int = 0  # 仅在拒绝时有意义，至少为 1


class RateLimitStore(Protocol):
    """窗口记录存储接口"""

    async def get(self, key: str) -> RateLimitRecord | None: ...

    async def put(self, key: str, record: RateLimitRecord) -> None: ...


class RateLimiter(Protocol):
    """限流策略接口 -- 固定窗口、令牌桶、滑动窗口均可实现"""

    async def check(self, identifier: str) -> RateLimitResult: ...


class MemoryRateLimitStore:
    """进程内存储"""

    def __init__(self) -> None:
        self._records: dict[str, RateLimitRecord] = {}

    async def get(self, key: str) -> RateLimitRecord | None:
        return self._records.get(key)

    async def put(self, key: str, record: RateLimitRecord) -> None:
        self._records[key] = record

    def __len__(self) -> int:
        return len(self._records)


def _now_ms() -> float:
    return time.time() * 1000


class FixedWindowRateLimiter:
    """固定窗口计数器

    - 无记录或已过 reset_at：开启新窗口，count=1
    - count >= max_requests：拒绝，计数不增加
    - 否则：count += 1
    """

    def __init__(
        self,
        max_requests: int = 10,
        window_ms: int = 60_000,
        store: RateLimitStore | None = None,
        clock: Callable[[], float] = _now_ms,
    ) -> None:
        """
        Args:
            max_requests: 每个窗口允许的请求数
            window_ms: 窗口长度（毫秒）
            store: 记录存储，默认进程内存储
            clock: 返回毫秒时间戳的时钟（测试时注入）
        """
        self.max_requests = max_requests
        self.window_ms = window_ms
        self._store = store if store is not None else MemoryRateLimitStore()
        self._clock = clock

    async def check(self, identifier: str) -> RateLimitResult:
        """记录一次请求并返回是否允许"""
        now = self._clock()
        record = await self._store.get(identifier)

        if record is None or now > record.reset_at:
            record = RateLimitRecord(count=1, reset_at=now + self.window_ms)
            await self._store.put(identifier, record)
            return RateLimitResult(
                allowed=True,
                remaining=self.max_requests - 1,
                reset_at=record.reset_at,
            )

        if record.count >= self.max_requests:
            return RateLimitResult(
                allowed=False,
                remaining=0,
                reset_at=record.reset_at,
                retry_after_s=max(1, math.ceil((record.reset_at - now) / 1000)),
            )

        record = RateLimitRecord(count=record.count + 1, reset_at=record.reset_at)
        await self._store.put(identifier, record)
        return RateLimitResult(
            allowed=True,
            remaining=self.max_requests - record.count,
            reset_at=record.reset_at,
        )
