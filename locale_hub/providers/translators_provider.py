# locale_hub/providers/translators_provider.py
"""提供一个使用 `translators` 库（免费网页翻译服务）的提供商。"""

from __future__ import annotations

import asyncio
import importlib.util
from typing import Any

import structlog

from locale_hub.core.exceptions import ProviderError
from locale_hub.core.types import TranslationContext, TranslationResult
from locale_hub.providers.base import BaseProviderConfig, BaseTranslationProvider

logger = structlog.get_logger(__name__)


class TranslatorsProviderConfig(BaseProviderConfig):
    """Translators 提供商的配置。"""

    translator: str = "google"


class TranslatorsProvider(BaseTranslationProvider[TranslatorsProviderConfig]):
    """一个使用 `translators` 库的纯异步提供商；同步调用放到线程中执行。"""

    CONFIG_MODEL = TranslatorsProviderConfig
    IDENTIFIER = "translators"
    DISPLAY_NAME = "Translators"

    def __init__(self, config: TranslatorsProviderConfig):
        super().__init__(config)
        self.ts_module: Any | None = None
        logger.debug("Translators 提供商已配置。", translator=self.config.translator)

    async def is_available(self) -> bool:
        return importlib.util.find_spec("translators") is not None

    async def _ensure_initialized(self) -> None:
        if self.ts_module:
            return
        # translators 在导入时较慢，因此延迟到首次翻译时加载
        logger.debug("正在惰性加载 'translators' 库...")
        try:
            self.ts_module = await asyncio.to_thread(
                importlib.import_module, "translators"
            )
        except ImportError as e:
            raise ProviderError(
                self.identifier,
                "要使用 TranslatorsProvider, 请安装 'translators' 库: "
                'pip install "locale-hub[translators]"',
            ) from e

    async def _translate(
        self,
        strings: list[str],
        source: str,
        target: str,
        context: TranslationContext | None,
    ) -> list[TranslationResult]:
        await self._ensure_initialized()
        assert self.ts_module is not None
        ts_lib = self.ts_module
        translator = self.config.translator

        def _translate_sync(text: str) -> str:
            return str(
                ts_lib.translate_text(
                    query_text=text,
                    translator=translator,
                    from_language=source,
                    to_language=target,
                )
            )

        results = []
        for text in strings:
            try:
                translated = await asyncio.to_thread(_translate_sync, text)
            except Exception as e:
                raise ProviderError(
                    self.identifier, f"Translators({translator}) Error: {e}"
                ) from e
            results.append(
                TranslationResult(
                    original=text, translated=translated, provider=self.identifier
                )
            )
        return results
