# locale_hub/rate_limiter.py
"""
本模块提供一次运行中所有提供商调用共享的请求准入控制。

采用令牌桶：容量等于每分钟请求数，每秒补充 `rpm / 60` 个令牌，初始为满桶。
每次提供商尝试取走一个令牌；`acquire()` 只会等待，不会失败。
"""

import asyncio
import time

import structlog

logger = structlog.get_logger(__name__)


class RateLimiter:
    """按“每分钟请求数”限流的异步令牌桶。"""

    def __init__(self, requests_per_minute: int):
        if requests_per_minute <= 0:
            raise ValueError(f"每分钟请求数必须为正数，收到: {requests_per_minute}")
        self.requests_per_minute = requests_per_minute
        self.capacity = float(requests_per_minute)
        self.refill_per_second = requests_per_minute / 60
        self.tokens = self.capacity
        self._last_refill = time.monotonic()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_refill
        if elapsed > 0:
            self.tokens = min(self.capacity, self.tokens + elapsed * self.refill_per_second)
            self._last_refill = now

    def _seconds_until_token(self) -> float:
        """[私有] 距离桶内攒够一个令牌还需的秒数；已有令牌时为 0。"""
        return max(0.0, (1 - self.tokens) / self.refill_per_second)

    async def acquire(self) -> None:
        """取走一个令牌；桶空时按精确的补充时间挂起后重试。"""
        while True:
            async with self._lock:
                self._refill()
                wait_seconds = self._seconds_until_token()
                if wait_seconds == 0:
                    self.tokens -= 1
                    return
            # 挂起期间不持有锁
            logger.debug(
                "请求速率达到上限，等待令牌补充。",
                rpm=self.requests_per_minute,
                wait_seconds=round(wait_seconds, 3),
            )
            await asyncio.sleep(wait_seconds)
