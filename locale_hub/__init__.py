# locale_hub/__init__.py
"""Locale-Hub: 面向字符串目录（.xcstrings）的异步增量翻译编排引擎。

该模块导出编排器、配置模型以及最常用的核心类型。
"""

__version__ = "0.4.0"

from .change_detector import ChangeDetector
from .config import LocaleHubConfig, ProviderName
from .orchestrator import TranslationOrchestrator
from .provider_registry import ProviderRegistry
from .rate_limiter import RateLimiter

__all__ = [
    "__version__",
    "TranslationOrchestrator",
    "LocaleHubConfig",
    "ProviderName",
    "ProviderRegistry",
    "ChangeDetector",
    "RateLimiter",
]
