# locale_hub/providers/factory.py
"""
本模块负责发现 `locale_hub.providers` 包下的提供商实现，
并根据 `ProviderConfiguration` 创建提供商实例。
"""

from __future__ import annotations

import importlib
import inspect
import pkgutil
from typing import Any

import structlog
from pydantic import ValidationError

from locale_hub.config import DEFAULT_API_KEY_ENV, LocaleHubConfig, ProviderConfiguration
from locale_hub.core.exceptions import ConfigurationError
from locale_hub.providers.base import BaseTranslationProvider
from locale_hub.providers.cli_tool import CLIToolProvider

log = structlog.get_logger(__name__)

PROVIDER_CLASSES: dict[str, type[BaseTranslationProvider[Any]]] = {}

_NON_PROVIDER_MODULES = {"base", "prompt", "factory"}


def discover_providers() -> dict[str, type[BaseTranslationProvider[Any]]]:
    """
    动态发现 `locale_hub.providers` 包下的所有提供商类并登记。

    此函数是幂等的，只在首次调用时执行发现操作。缺少可选依赖的
    模块会被跳过并记录在摘要日志中。
    """
    if PROVIDER_CLASSES:
        return PROVIDER_CLASSES

    import locale_hub.providers

    successful: list[str] = []
    skipped: list[dict[str, str]] = []

    for module_info in pkgutil.iter_modules(locale_hub.providers.__path__):
        module_name = module_info.name
        if module_name in _NON_PROVIDER_MODULES or module_name.startswith("_"):
            continue
        try:
            module = importlib.import_module(f"locale_hub.providers.{module_name}")
        except ImportError as e:
            skipped.append(
                {"module": module_name, "missing_dependency": str(e.name)}
            )
            continue

        for _, attr in inspect.getmembers(module, inspect.isclass):
            identifier = attr.__dict__.get("IDENTIFIER")
            if (
                issubclass(attr, BaseTranslationProvider)
                and identifier
                and not inspect.isabstract(attr)
            ):
                PROVIDER_CLASSES[identifier] = attr
                successful.append(identifier)

    log_payload: dict[str, Any] = {}
    if successful:
        log_payload["registered"] = sorted(successful)
    if skipped:
        log_payload["skipped"] = skipped
    log.debug("提供商发现完成。", **log_payload)
    return PROVIDER_CLASSES


# 这些提供商没有密钥就无法工作
_REQUIRES_API_KEY = frozenset(DEFAULT_API_KEY_ENV)


def create_provider(
    config: LocaleHubConfig, provider_config: ProviderConfiguration
) -> BaseTranslationProvider[Any] | None:
    """
    根据一条提供商配置创建提供商实例。

    当缺少必需的凭据、CLI 可执行文件或可选依赖时返回 None（不视为错误）。
    配置本身无效时抛出 `ConfigurationError`。
    """
    name = provider_config.name
    provider_class = discover_providers().get(name.value)
    if provider_class is None:
        log.warning("提供商实现不可用，已跳过。", provider=name.value)
        return None

    settings = provider_config.config.model_dump(exclude_none=True)
    settings.pop("api_key_env", None)
    if name in _REQUIRES_API_KEY:
        api_key = config.resolve_api_key(name)
        if api_key is None:
            log.info("缺少 API 密钥，已跳过提供商。", provider=name.value)
            return None
        settings["api_key"] = api_key

    try:
        provider_settings = provider_class.CONFIG_MODEL(**settings)
    except ValidationError as e:
        raise ConfigurationError(
            f"提供商 '{name.value}' 的配置无效: {e}"
        ) from e

    provider = provider_class(provider_settings)
    if isinstance(provider, CLIToolProvider) and provider.binary_path is None:
        log.info("未找到 CLI 工具，已跳过提供商。", provider=name.value)
        return None
    return provider
