# locale_hub/providers/debug.py
"""提供一个用于开发和测试的调试翻译提供商。"""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from locale_hub.core.exceptions import ProviderError
from locale_hub.core.types import LanguagePair, TranslationContext, TranslationResult
from locale_hub.providers.base import BaseProviderConfig, BaseTranslationProvider


class DebugProviderConfig(BaseProviderConfig):
    """Debug 提供商的配置模型。"""

    mode: Literal["SUCCESS", "FAIL"] = "SUCCESS"
    fail_on_text: str | None = Field(default=None)
    translation_map: dict[str, str] = Field(default_factory=dict)
    available: bool = True
    supported_pairs: list[LanguagePair] = Field(default_factory=list)


class DebugProvider(BaseTranslationProvider[DebugProviderConfig]):
    """一个简单的调试提供商实现，不发起任何网络请求。"""

    CONFIG_MODEL = DebugProviderConfig
    IDENTIFIER = "debug"
    DISPLAY_NAME = "Debug"

    async def is_available(self) -> bool:
        return self.config.available

    async def supported_languages(self) -> list[LanguagePair]:
        return list(self.config.supported_pairs)

    async def _translate(
        self,
        strings: list[str],
        source: str,
        target: str,
        context: TranslationContext | None,
    ) -> list[TranslationResult]:
        if self.config.mode == "FAIL":
            raise ProviderError(self.identifier, "DebugProvider is in FAIL mode.")

        results = []
        for text in strings:
            if self.config.fail_on_text and text == self.config.fail_on_text:
                raise ProviderError(
                    self.identifier, f"模拟失败：检测到配置的文本 '{text}'"
                )
            translated = self.config.translation_map.get(
                text, f"Translated({text}) to {target}"
            )
            results.append(
                TranslationResult(
                    original=text,
                    translated=translated,
                    confidence=1.0,
                    provider=self.identifier,
                )
            )
        return results
