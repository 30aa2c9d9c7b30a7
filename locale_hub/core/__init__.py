# locale_hub/core/__init__.py
"""
本核心包定义了 Locale-Hub 系统中最基础、最稳定的构建块。

这里包含了系统的核心数据类型、接口协议和自定义异常，它们共同构成了
整个应用的“契约”。所有其他模块都依赖于此核心包，但本包不依赖于
项目中的任何其他模块。
"""

from .exceptions import (
    AllProvidersFailedError,
    CacheDecodeError,
    CatalogError,
    ConfigurationError,
    InvalidResponseError,
    LocaleHubError,
    NoProvidersAvailableError,
    ProviderError,
    ProviderNotFoundError,
    RateLimitExceededError,
    TranslationCancelledError,
    TranslationError,
    UnsupportedLanguagePairError,
)
from .interfaces import LocalizationCatalog, TranslationProvider
from .types import (
    GlossaryTerm,
    LanguagePair,
    LanguageReport,
    StringTranslationContext,
    TranslationContext,
    TranslationMemoryMatch,
    TranslationProgress,
    TranslationReport,
    TranslationReportError,
    TranslationResult,
    TranslationState,
)

__all__ = [
    # from exceptions.py
    "LocaleHubError",
    "ConfigurationError",
    "ProviderNotFoundError",
    "CatalogError",
    "CacheDecodeError",
    "TranslationError",
    "NoProvidersAvailableError",
    "UnsupportedLanguagePairError",
    "ProviderError",
    "AllProvidersFailedError",
    "RateLimitExceededError",
    "InvalidResponseError",
    "TranslationCancelledError",
    # from interfaces.py
    "TranslationProvider",
    "LocalizationCatalog",
    # from types.py
    "TranslationState",
    "LanguagePair",
    "TranslationResult",
    "GlossaryTerm",
    "TranslationMemoryMatch",
    "StringTranslationContext",
    "TranslationContext",
    "TranslationProgress",
    "LanguageReport",
    "TranslationReportError",
    "TranslationReport",
]
