# locale_hub/context.py
"""定义处理流程中使用的高层上下文对象。"""

from __future__ import annotations

from dataclasses import dataclass

from locale_hub.config import LocaleHubConfig
from locale_hub.rate_limiter import RateLimiter


@dataclass(frozen=True)
class ProcessingContext:
    """一个“工具箱”对象，封装了处理策略执行时所需的所有依赖项。"""

    config: LocaleHubConfig

    # 整个运行期间共享同一个限流器
    rate_limiter: RateLimiter | None = None
