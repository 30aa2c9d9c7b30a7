# locale_hub/providers/gemini.py
"""
提供一个调用 Google Gemini `generateContent` REST 接口的翻译提供商。

Gemini 没有独立的系统提示字段，系统提示与用户提示合并为一条用户消息，
并要求以 JSON 返回。
"""

from __future__ import annotations

import httpx
import structlog
from pydantic import SecretStr

from locale_hub.core.exceptions import (
    InvalidResponseError,
    ProviderError,
    RateLimitExceededError,
)
from locale_hub.core.types import TranslationContext, TranslationResult
from locale_hub.providers.base import BaseProviderConfig, BaseTranslationProvider
from locale_hub.providers.prompt import TranslationPromptBuilder
from locale_hub.utils import parse_retry_after

logger = structlog.get_logger(__name__)


class GeminiProviderConfig(BaseProviderConfig):
    api_key: SecretStr | None = None
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    model: str = "gemini-2.0-flash"
    temperature: float = 0.3
    max_output_tokens: int = 4096
    timeout: float = 60.0


class GeminiProvider(BaseTranslationProvider[GeminiProviderConfig]):
    CONFIG_MODEL = GeminiProviderConfig
    IDENTIFIER = "gemini"
    DISPLAY_NAME = "Google Gemini"

    def __init__(self, config: GeminiProviderConfig):
        super().__init__(config)
        self.prompt_builder = TranslationPromptBuilder()
        self.api_key = config.api_key.get_secret_value() if config.api_key else ""
        # 密钥放在请求头中，避免出现在 URL 与日志里
        self.client = httpx.AsyncClient(
            base_url=config.base_url.rstrip("/"),
            timeout=config.timeout,
            headers={"x-goog-api-key": self.api_key},
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
        payload = {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {
                            "text": self.prompt_builder.build_full_prompt(
                                strings, context, target
                            )
                        }
                    ],
                }
            ],
            "generationConfig": {
                "temperature": self.config.temperature,
                "maxOutputTokens": self.config.max_output_tokens,
                "responseMimeType": "application/json",
            },
        }
        url = f"/models/{self.config.model}:generateContent"
        try:
            response = await self.client.post(url, json=payload)
        except httpx.TimeoutException as e:
            raise ProviderError(self.identifier, "请求超时") from e
        except httpx.RequestError as e:
            raise ProviderError(self.identifier, f"连接失败: {e}") from e

        if response.status_code != 200:
            raise self._map_status_error(response)

        try:
            parts = response.json()["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts)
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise InvalidResponseError(f"无法解析 Gemini 响应: {e}") from e
        if not text:
            raise InvalidResponseError("响应中没有文本内容。")

        logger.debug(
            "Gemini 翻译请求完成。",
            model=self.config.model,
            target=target,
            count=len(strings),
        )
        return self.prompt_builder.parse_response(text, strings, self.identifier)

    def _map_status_error(self, response: httpx.Response) -> Exception:
        status = response.status_code
        if status == 429:
            return RateLimitExceededError(
                self.identifier, parse_retry_after(response.headers.get("retry-after"))
            )
        if status == 503:
            return ProviderError(self.identifier, "服务暂时不可用")
        try:
            message = response.json()["error"]["message"]
        except (ValueError, KeyError, TypeError):
            message = response.text or f"HTTP {status}"
        return ProviderError(self.identifier, message)
