# locale_hub/core/interfaces.py
"""
本模块使用 `typing.Protocol` 定义了核心组件之间的接口契约。

编排引擎只依赖这里的协议：任何满足 `TranslationProvider` 的对象都可以
注册到提供商注册表，任何满足 `LocalizationCatalog` 的对象都可以交给
变更检测器分析。
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .types import LanguagePair, TranslationContext, TranslationResult


@runtime_checkable
class TranslationProvider(Protocol):
    """翻译提供商的能力集合。"""

    @property
    def identifier(self) -> str: ...

    @property
    def display_name(self) -> str: ...

    async def is_available(self) -> bool: ...

    async def supported_languages(self) -> list[LanguagePair]: ...

    async def supports_language_pair(self, source: str, target: str) -> bool: ...

    async def translate(
        self,
        strings: list[str],
        source: str,
        target: str,
        context: TranslationContext | None = None,
    ) -> list[TranslationResult]:
        """
        翻译一批字符串。

        返回值与 `strings` 一一对应、顺序一致；失败时抛出 `TranslationError`。
        """
        ...

    async def close(self) -> None: ...


@runtime_checkable
class LocalizationCatalog(Protocol):
    """对本地化目录（键 → 各语言翻译状态）的统一访问接口。"""

    @property
    def source_language(self) -> str: ...

    @property
    def all_keys(self) -> list[str]: ...

    @property
    def present_languages(self) -> set[str]: ...

    def source_value(self, key: str) -> str | None:
        """返回键的源语言文本；键不存在时返回 None。"""
        ...

    def translation(self, key: str, language: str) -> str | None: ...

    def has_translation(self, key: str, language: str) -> bool:
        """仅当该语言处于 translated 状态且值非空时为 True。"""
        ...

    def keys_needing_translation(self, language: str) -> list[str]: ...

    def set_translation(self, key: str, language: str, value: str) -> None: ...

    def comment(self, key: str) -> str | None: ...

    def should_translate(self, key: str) -> bool: ...
