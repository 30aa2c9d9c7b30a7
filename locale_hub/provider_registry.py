# locale_hub/provider_registry.py
"""本模块维护已注册的翻译提供商，并按配置给出有序的候选列表。"""

from __future__ import annotations

import asyncio

import structlog

from locale_hub.config import LocaleHubConfig
from locale_hub.core.exceptions import ProviderNotFoundError
from locale_hub.core.interfaces import TranslationProvider
from locale_hub.providers.factory import create_provider

logger = structlog.get_logger(__name__)


class ProviderRegistry:
    """
    以 `identifier` 为键的提供商注册表。

    同一标识符重复注册时，后注册的实例覆盖先前的实例。
    """

    def __init__(self) -> None:
        self._providers: dict[str, TranslationProvider] = {}

    def register(self, provider: TranslationProvider) -> None:
        if provider.identifier in self._providers:
            logger.debug("提供商已被覆盖注册。", provider=provider.identifier)
        self._providers[provider.identifier] = provider

    def all(self) -> list[TranslationProvider]:
        return list(self._providers.values())

    def by_id(self, identifier: str) -> TranslationProvider | None:
        return self._providers.get(identifier)

    def get(self, identifier: str) -> TranslationProvider:
        provider = self._providers.get(identifier)
        if provider is None:
            raise ProviderNotFoundError(identifier)
        return provider

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._providers

    def __len__(self) -> int:
        return len(self._providers)

    async def available(self) -> list[TranslationProvider]:
        """返回当前可用的提供商，保持注册顺序。"""
        return [p for p in self._providers.values() if await p.is_available()]

    async def for_configuration(
        self, config: LocaleHubConfig
    ) -> list[TranslationProvider]:
        """
        返回配置中已启用、已注册且可用的提供商。

        结果按 `priority` 升序稳定排序；优先级相同的条目保持配置中的顺序。
        """
        enabled = sorted(
            (pc for pc in config.providers if pc.enabled),
            key=lambda pc: pc.priority,
        )
        selected: list[TranslationProvider] = []
        seen: set[str] = set()
        for provider_config in enabled:
            name = provider_config.name.value
            provider = self._providers.get(name)
            if provider is None or name in seen:
                continue
            seen.add(name)
            if await provider.is_available():
                selected.append(provider)
            else:
                logger.debug("提供商当前不可用，已跳过。", provider=name)
        return selected

    async def register_default_providers(self, config: LocaleHubConfig) -> None:
        """根据配置创建并注册提供商；无法创建的提供商会被跳过。"""
        registered: list[str] = []
        skipped: list[str] = []
        for provider_config in config.providers:
            if not provider_config.enabled:
                continue
            provider = create_provider(config, provider_config)
            if provider is None:
                skipped.append(provider_config.name.value)
                continue
            await provider.initialize()
            self.register(provider)
            registered.append(provider.identifier)
        logger.info("默认提供商注册完成。", registered=registered, skipped=skipped)

    async def close(self) -> None:
        """关闭所有已注册的提供商；单个提供商关闭失败不会影响其他提供商。"""
        providers = self.all()
        results = await asyncio.gather(
            *[p.close() for p in providers], return_exceptions=True
        )
        for provider, result in zip(providers, results):
            if isinstance(result, Exception):
                logger.warning(
                    "关闭提供商时出错。",
                    provider=provider.identifier,
                    error=str(result),
                )
            else:
                logger.debug("提供商已关闭。", provider=provider.identifier)
