# locale_hub/providers/deepl.py
"""提供一个使用 DeepL REST API (v2) 的翻译提供商。"""

from __future__ import annotations

import httpx
import structlog
from pydantic import SecretStr

from locale_hub.config import Formality
from locale_hub.core.exceptions import (
    InvalidResponseError,
    ProviderError,
    RateLimitExceededError,
)
from locale_hub.core.types import TranslationContext, TranslationResult
from locale_hub.providers.base import BaseProviderConfig, BaseTranslationProvider
from locale_hub.utils import parse_retry_after

logger = structlog.get_logger(__name__)

FREE_API_URL = "https://api-free.deepl.com/v2"
PRO_API_URL = "https://api.deepl.com/v2"

# DeepL 只对这些目标语言支持 formality 参数
FORMALITY_LANGUAGES = frozenset(
    {"DE", "FR", "IT", "ES", "NL", "PL", "PT-PT", "PT-BR", "RU", "JA", "KO"}
)

_REGIONAL_CODES = {
    "EN-GB": "EN-GB",
    "EN-US": "EN-US",
    "PT-BR": "PT-BR",
    "PT-PT": "PT-PT",
    "ZH-CN": "ZH-HANS",
    "ZH-HANS": "ZH-HANS",
    "ZH-TW": "ZH-HANT",
    "ZH-HANT": "ZH-HANT",
}


def to_deepl_code(code: str, is_source: bool = False) -> str:
    """将 BCP 47 代码转换为 DeepL 的大写代码；源语言只保留基础语言。"""
    upper = code.replace("_", "-").upper()
    base = upper.split("-", 1)[0]
    if is_source:
        return base
    return _REGIONAL_CODES.get(upper, base)


def map_formality(formality: Formality, target_code: str) -> str | None:
    base = target_code.split("-", 1)[0]
    if target_code not in FORMALITY_LANGUAGES and base not in FORMALITY_LANGUAGES:
        return None
    if formality is Formality.DEFAULT:
        return None
    return formality.value


class DeepLProviderConfig(BaseProviderConfig):
    """DeepL 提供商的配置模型。"""

    api_key: SecretStr | None = None
    # 为空时按密钥后缀自动选择免费版或专业版端点
    base_url: str | None = None
    formality: Formality = Formality.DEFAULT
    preserve_formatting: bool = True
    timeout: float = 30.0


class DeepLProvider(BaseTranslationProvider[DeepLProviderConfig]):
    """使用 DeepL API 的翻译提供商。"""

    CONFIG_MODEL = DeepLProviderConfig
    IDENTIFIER = "deepl"
    DISPLAY_NAME = "DeepL"

    def __init__(self, config: DeepLProviderConfig):
        super().__init__(config)
        self.api_key = config.api_key.get_secret_value() if config.api_key else ""
        self.base_url = config.base_url or (
            FREE_API_URL if self.api_key.endswith(":fx") else PRO_API_URL
        )
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=config.timeout,
            headers={"Authorization": f"DeepL-Auth-Key {self.api_key}"},
        )

    async def is_available(self) -> bool:
        return bool(self.api_key)

    async def close(self) -> None:
        if not self.client.is_closed:
            await self.client.aclose()
        await super().close()

    async def _translate(
        self,
        strings: list[str],
        source: str,
        target: str,
        context: TranslationContext | None,
    ) -> list[TranslationResult]:
        source_code = to_deepl_code(source, is_source=True)
        target_code = to_deepl_code(target)
        payload: dict[str, object] = {
            "text": strings,
            "source_lang": source_code,
            "target_lang": target_code,
            "preserve_formatting": self.config.preserve_formatting,
        }
        formality = map_formality(self.config.formality, target_code)
        if formality:
            payload["formality"] = formality

        try:
            response = await self.client.post("/translate", json=payload)
        except httpx.TimeoutException as e:
            raise ProviderError(self.identifier, "请求超时") from e
        except httpx.RequestError as e:
            raise ProviderError(self.identifier, f"连接失败: {e}") from e

        if response.status_code != 200:
            raise self._map_status_error(response)

        try:
            translations = response.json()["translations"]
        except (ValueError, KeyError, TypeError) as e:
            raise InvalidResponseError(f"无法解析 DeepL 响应: {e}") from e

        if len(translations) != len(strings):
            raise InvalidResponseError(
                f"期望 {len(strings)} 条翻译，实际返回 {len(translations)} 条"
            )

        logger.debug("DeepL 翻译请求完成。", target=target_code, count=len(strings))
        return [
            TranslationResult(
                original=original,
                translated=item["text"],
                confidence=1.0,
                provider=self.identifier,
                metadata={
                    "detected_source_language": item.get(
                        "detected_source_language", source_code
                    )
                },
            )
            for original, item in zip(strings, translations)
        ]

    def _map_status_error(self, response: httpx.Response) -> Exception:
        status = response.status_code
        if status == 403:
            return ProviderError(self.identifier, "认证失败，请检查 API 密钥")
        if status == 429:
            return RateLimitExceededError(
                self.identifier, parse_retry_after(response.headers.get("retry-after"))
            )
        if status == 456:
            return ProviderError(self.identifier, "额度已用尽")
        if status == 503:
            return ProviderError(self.identifier, "服务暂时不可用")
        try:
            message = response.json().get("message") or f"HTTP {status}"
        except ValueError:
            message = f"HTTP {status}"
        return ProviderError(self.identifier, message)
