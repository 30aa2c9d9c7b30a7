# locale_hub/providers/ollama.py
"""提供一个调用本地 Ollama 服务的翻译提供商。"""

from __future__ import annotations

import httpx
import structlog

from locale_hub.core.exceptions import InvalidResponseError, ProviderError
from locale_hub.core.types import TranslationContext, TranslationResult
from locale_hub.providers.base import BaseProviderConfig, BaseTranslationProvider
from locale_hub.providers.prompt import TranslationPromptBuilder

logger = structlog.get_logger(__name__)


class OllamaProviderConfig(BaseProviderConfig):
    base_url: str = "http://localhost:11434"
    model: str = "llama3.2"
    temperature: float = 0.3
    num_ctx: int = 8192
    # 本地模型首次加载较慢
    timeout: float = 120.0


class OllamaProvider(BaseTranslationProvider[OllamaProviderConfig]):
    CONFIG_MODEL = OllamaProviderConfig
    IDENTIFIER = "ollama"
    DISPLAY_NAME = "Ollama (Local)"

    def __init__(self, config: OllamaProviderConfig):
        super().__init__(config)
        self.prompt_builder = TranslationPromptBuilder()
        self.client = httpx.AsyncClient(
            base_url=config.base_url.rstrip("/"), timeout=config.timeout
        )

    async def is_available(self) -> bool:
        """仅当 Ollama 服务可以访问时才视为可用。"""
        try:
            response = await self.client.get("/api/tags", timeout=5.0)
        except httpx.HTTPError:
            return False
        return response.status_code == 200

    async def list_models(self) -> list[str]:
        try:
            response = await self.client.get("/api/tags")
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ProviderError(self.identifier, f"无法获取模型列表: {e}") from e
        return [model["name"] for model in response.json().get("models", [])]

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
            "prompt": self.prompt_builder.build_full_prompt(strings, context, target),
            "stream": False,
            "format": "json",
            "options": {
                "temperature": self.config.temperature,
                "num_ctx": self.config.num_ctx,
            },
        }
        try:
            response = await self.client.post("/api/generate", json=payload)
        except httpx.TimeoutException as e:
            raise ProviderError(
                self.identifier, "请求超时，模型可能仍在加载或速度过慢"
            ) from e
        except httpx.ConnectError as e:
            raise ProviderError(
                self.identifier,
                f"无法连接到 Ollama 服务 ({self.config.base_url})，请确认其已启动",
            ) from e
        except httpx.RequestError as e:
            raise ProviderError(self.identifier, f"连接失败: {e}") from e

        if response.status_code == 404:
            raise ProviderError(
                self.identifier,
                f"模型 '{self.config.model}' 不存在，请先执行 `ollama pull {self.config.model}`",
            )
        if response.status_code != 200:
            raise ProviderError(self.identifier, f"HTTP {response.status_code}")

        try:
            generated = response.json()["response"]
        except (ValueError, KeyError, TypeError) as e:
            raise InvalidResponseError(f"无法解析 Ollama 响应: {e}") from e

        logger.debug(
            "Ollama 翻译请求完成。", model=self.config.model, target=target
        )
        return self.prompt_builder.parse_response(generated, strings, self.identifier)
