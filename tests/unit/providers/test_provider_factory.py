# tests/unit/providers/test_provider_factory.py
"""测试提供商的动态发现与按配置创建。"""

import pytest

from locale_hub.config import ProviderConfiguration
from locale_hub.core.exceptions import ConfigurationError
from locale_hub.providers.anthropic import AnthropicProvider
from locale_hub.providers.debug import DebugProvider
from locale_hub.providers.deepl import FREE_API_URL, DeepLProvider
from locale_hub.providers.factory import create_provider, discover_providers
from locale_hub.providers.gemini import GeminiProvider
from tests.helpers.fakes import make_config


def test_discover_providers_finds_builtin_providers() -> None:
    classes = discover_providers()
    for identifier in (
        "debug", "openai", "anthropic", "gemini", "deepl", "ollama", "generic-cli"
    ):
        assert identifier in classes
    assert classes["debug"] is DebugProvider
    # 幂等：再次调用返回同一个登记表
    assert discover_providers() is classes


def test_create_debug_provider() -> None:
    config = make_config()
    provider = create_provider(config, config.providers[0])
    assert isinstance(provider, DebugProvider)


def test_provider_requiring_key_is_skipped_without_key() -> None:
    config = make_config(providers=[{"name": "deepl"}])
    assert create_provider(config, config.providers[0]) is None


@pytest.mark.asyncio
async def test_provider_reads_key_from_custom_env(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("MY_DEEPL_KEY", "secret:fx")
    config = make_config(
        providers=[{"name": "deepl", "config": {"api_key_env": "MY_DEEPL_KEY"}}]
    )

    provider = create_provider(config, config.providers[0])

    assert isinstance(provider, DeepLProvider)
    assert provider.api_key == "secret:fx"
    assert provider.base_url == FREE_API_URL
    await provider.close()


def test_cli_provider_without_binary_is_skipped() -> None:
    config = make_config(providers=[{"name": "generic-cli"}])
    assert create_provider(config, config.providers[0]) is None


@pytest.mark.asyncio
async def test_cli_provider_with_missing_path_is_unavailable() -> None:
    config = make_config(
        providers=[{"name": "generic-cli", "config": {"path": "/nonexistent/tool"}}]
    )
    provider = create_provider(config, config.providers[0])
    assert provider is not None
    assert not await provider.is_available()


def test_invalid_provider_settings_raise_configuration_error() -> None:
    provider_config = ProviderConfiguration.model_validate(
        {"name": "debug", "config": {"mode": "SOMETIMES"}}
    )
    with pytest.raises(ConfigurationError, match="debug"):
        create_provider(make_config(), provider_config)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("name", "env_name", "provider_class"),
    [
        ("anthropic", "ANTHROPIC_API_KEY", AnthropicProvider),
        ("gemini", "GEMINI_API_KEY", GeminiProvider),
    ],
)
async def test_hosted_llm_provider_uses_default_key_env(
    monkeypatch: pytest.MonkeyPatch, name: str, env_name: str, provider_class: type
) -> None:
    config = make_config(providers=[{"name": name, "config": {"model": "custom"}}])
    assert create_provider(config, config.providers[0]) is None

    monkeypatch.setenv(env_name, "secret")
    provider = create_provider(config, config.providers[0])

    assert isinstance(provider, provider_class)
    assert provider.api_key == "secret"
    assert provider.config.model == "custom"
    assert await provider.is_available()
    await provider.close()
