# locale_hub/config.py
"""
Locale-Hub 的配置模型（Pydantic v2）。

顶层配置 `LocaleHubConfig` 可以由 JSON 配置文件构造（见 `config_loader`），
也可以完全来自环境变量：前缀为 `LOCALEHUB_`，嵌套层级以 `__` 分隔，
例如 `LOCALEHUB_TRANSLATION__BATCH_SIZE=10`。
"""

from __future__ import annotations

import enum
import os
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from locale_hub.core.types import GlossaryTerm
from locale_hub.utils import validate_lang_codes


class ProviderName(str, enum.Enum):
    DEBUG = "debug"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    DEEPL = "deepl"
    OLLAMA = "ollama"
    TRANSLATORS = "translators"
    GEMINI_CLI = "gemini-cli"
    COPILOT_CLI = "copilot-cli"
    CODEX_CLI = "codex-cli"
    GENERIC_CLI = "generic-cli"


# 未显式配置 api_key_env 时使用的环境变量
DEFAULT_API_KEY_ENV: dict[ProviderName, str] = {
    ProviderName.OPENAI: "OPENAI_API_KEY",
    ProviderName.ANTHROPIC: "ANTHROPIC_API_KEY",
    ProviderName.GEMINI: "GEMINI_API_KEY",
    ProviderName.DEEPL: "DEEPL_API_KEY",
}


class Formality(str, enum.Enum):
    DEFAULT = "default"
    MORE = "more"
    LESS = "less"
    PREFER_MORE = "prefer_more"
    PREFER_LESS = "prefer_less"


class ProviderSettings(BaseModel):
    """单个提供商的专属设置；未声明的字段会原样传给提供商自己的配置模型。"""

    model_config = ConfigDict(extra="allow")

    model: str | None = None
    api_key_env: str | None = None
    base_url: str | None = None
    path: str | None = None
    args: list[str] | None = None
    formality: Formality | None = None
    approval_mode: str | None = None
    timeout: float | None = Field(default=None, gt=0)


class ProviderConfiguration(BaseModel):
    name: ProviderName
    enabled: bool = True
    # 数值越小优先级越高
    priority: int = 1
    config: ProviderSettings = Field(default_factory=ProviderSettings)


class TranslationSettings(BaseModel):
    batch_size: int = Field(default=25, gt=0)
    concurrency: int = Field(default=3, gt=0)
    rate_limit: int = Field(default=60, gt=0, description="每分钟最大请求数")
    retries: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=1.0, ge=0, description="重试间隔（秒）")
    context: str | None = None
    preserve_formatters: bool = True
    preserve_markdown: bool = True


class ChangeDetectionSettings(BaseModel):
    enabled: bool = True
    cache_file: str = ".locale-hub-cache.json"


class OutputSettings(BaseModel):
    pretty_print: bool = True
    sort_keys: bool = True


class AppContext(BaseModel):
    name: str
    description: str | None = None
    domain: str | None = None


class ContextSettings(BaseModel):
    app: AppContext | None = None
    glossary_terms: list[GlossaryTerm] = Field(default_factory=list)


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: Literal["json", "console"] = "console"


class LocaleHubConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LOCALEHUB_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    source_language: str = "en"
    target_languages: list[str] = Field(default_factory=list)
    providers: list[ProviderConfiguration] = Field(default_factory=list)
    translation: TranslationSettings = Field(default_factory=TranslationSettings)
    change_detection: ChangeDetectionSettings = Field(
        default_factory=ChangeDetectionSettings
    )
    output: OutputSettings = Field(default_factory=OutputSettings)
    context: ContextSettings = Field(default_factory=ContextSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("source_language")
    @classmethod
    def validate_source_language(cls, v: str) -> str:
        validate_lang_codes([v])
        return v

    @field_validator("target_languages")
    @classmethod
    def validate_target_languages(cls, v: list[str]) -> list[str]:
        validate_lang_codes(v)
        # 去重但保留顺序
        return list(dict.fromkeys(v))

    def provider_configuration(
        self, name: ProviderName | str
    ) -> ProviderConfiguration | None:
        """按名称查找提供商配置。"""
        for provider_config in self.providers:
            if provider_config.name == name:
                return provider_config
        return None

    def resolve_api_key(self, name: ProviderName | str) -> str | None:
        """从 `api_key_env`（或该提供商的默认变量）指向的环境变量中读取 API 密钥。"""
        provider_config = self.provider_configuration(name)
        env_name = provider_config.config.api_key_env if provider_config else None
        if env_name is None:
            env_name = DEFAULT_API_KEY_ENV.get(ProviderName(name))
        if env_name is None:
            return None
        value = os.environ.get(env_name, "").strip()
        return value or None
