# locale_hub/providers/__init__.py
"""翻译提供商的实现。具体的提供商类由 `factory.discover_providers()` 按需加载。"""

from .base import BaseProviderConfig, BaseTranslationProvider
from .prompt import TranslationPromptBuilder

__all__ = [
    "BaseProviderConfig",
    "BaseTranslationProvider",
    "TranslationPromptBuilder",
]
