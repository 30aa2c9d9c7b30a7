# locale_hub/providers/anthropic.py
"""提供一个直接调用 Anthropic Messages API 的翻译提供商。"""

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


class AnthropicProviderConfig(BaseProviderConfig):
    api_key: SecretStr | None = None
    base_url: str = "https://api.anthropic.com"
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 4096
    api_version: str = "2023-06-01"
    timeout: float = 60.0


class AnthropicProvider(BaseTranslationProvider[AnthropicProviderConfig]):
    """使用 Claude 模型的翻译提供商；系统提示与用户提示分开发送。"""

    CONFIG_MODEL = AnthropicProviderConfig
    IDENTIFIER = "anthropic"
    DISPLAY_NAME = "Anthropic Claude"

    def __init__(self, config: AnthropicProviderConfig):
        super().__init__(config)
        self.prompt_builder = TranslationPromptBuilder()
        self.api_key = config.api_key.get_secret_value() if config.api_key else ""
        self.client = httpx.AsyncClient(
            base_url=config.base_url.rstrip("/"),
            timeout=config.timeout,
            headers={
                "x-api-key": self.api_key,
                "anthropic-version": config.api_version,
            },
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
            "model": self.config.model,
            "max_tokens": self.config.max_tokens,
            "system": self.prompt_builder.build_system_prompt(context, target),
            "messages": [
                {
                    "role": "user",
                    "content": self.prompt_builder.build_user_prompt(
                        strings, context, target
                    ),
                }
            ],
        }
        try:
            response = await self.client.post("/v1/messages", json=payload)
        except httpx.TimeoutException as e:
            raise ProviderError(self.identifier, "请求超时") from e
        except httpx.RequestError as e:
            raise ProviderError(self.identifier, f"连接失败: {e}") from e

        if response.status_code != 200:
            raise self._map_status_error(response)

        try:
            blocks = response.json()["content"]
            text = next(
                block["text"] for block in blocks if block.get("type") == "text"
            )
        except (ValueError, KeyError, TypeError) as e:
            raise InvalidResponseError(f"无法解析 Anthropic 响应: {e}") from e
        except StopIteration as e:
            raise InvalidResponseError("响应中没有文本内容。") from e

        logger.debug(
            "Anthropic 翻译请求完成。",
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
        if status in (401, 403):
            return ProviderError(self.identifier, "认证失败，请检查 API 密钥")
        if status == 529:
            return ProviderError(self.identifier, "服务过载，请稍后重试")
        try:
            message = response.json()["error"]["message"]
        except (ValueError, KeyError, TypeError):
            message = response.text or f"HTTP {status}"
        return ProviderError(self.identifier, message)
