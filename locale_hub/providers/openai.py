# locale_hub/providers/openai.py
"""提供一个使用 OpenAI Chat Completions API 的翻译提供商。"""

from __future__ import annotations

import httpx
import structlog
from openai import (
    APIConnectionError,
    APIStatusError,
    AsyncOpenAI,
    AuthenticationError,
    PermissionDeniedError,
    RateLimitError,
)
from openai.types.chat import (
    ChatCompletionMessageParam,
    ChatCompletionSystemMessageParam,
    ChatCompletionUserMessageParam,
)
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


class OpenAIProviderConfig(BaseProviderConfig):
    """OpenAI 提供商的配置模型。"""

    api_key: SecretStr | None = None
    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4o-mini"
    temperature: float = 0.3
    timeout: float = 60.0
    timeout_connect: float = 5.0


class OpenAIProvider(BaseTranslationProvider[OpenAIProviderConfig]):
    """使用 OpenAI API 的翻译提供商；一次请求翻译整批字符串。"""

    CONFIG_MODEL = OpenAIProviderConfig
    IDENTIFIER = "openai"
    DISPLAY_NAME = "OpenAI"

    def __init__(self, config: OpenAIProviderConfig):
        super().__init__(config)
        self.prompt_builder = TranslationPromptBuilder()
        api_key = config.api_key.get_secret_value() if config.api_key else ""
        timeout = httpx.Timeout(config.timeout, connect=config.timeout_connect)
        # 重试由处理策略负责，SDK 自身不再重试
        self.client = AsyncOpenAI(
            api_key=api_key or "missing-api-key",
            base_url=config.base_url,
            timeout=timeout,
            max_retries=0,
        )

    async def is_available(self) -> bool:
        return bool(self.config.api_key and self.config.api_key.get_secret_value())

    async def close(self) -> None:
        if not self.client.is_closed():
            try:
                await self.client.close()
                logger.debug("OpenAI 提供商的 HTTP 客户端已关闭。")
            except RuntimeError as e:
                if "Event loop is closed" in str(e):
                    logger.warning(
                        "尝试关闭 OpenAI 客户端时事件循环已关闭, 可安全忽略。"
                    )
                else:
                    raise
        await super().close()

    async def _translate(
        self,
        strings: list[str],
        source: str,
        target: str,
        context: TranslationContext | None,
    ) -> list[TranslationResult]:
        messages: list[ChatCompletionMessageParam] = [
            ChatCompletionSystemMessageParam(
                role="system",
                content=self.prompt_builder.build_system_prompt(context, target),
            ),
            ChatCompletionUserMessageParam(
                role="user",
                content=self.prompt_builder.build_user_prompt(strings, context, target),
            ),
        ]

        try:
            response = await self.client.chat.completions.create(
                model=self.config.model,
                messages=messages,
                temperature=self.config.temperature,
                response_format={"type": "json_object"},
            )
        except RateLimitError as e:
            retry_after = parse_retry_after(e.response.headers.get("retry-after"))
            raise RateLimitExceededError(self.identifier, retry_after) from e
        except (AuthenticationError, PermissionDeniedError) as e:
            raise ProviderError(
                self.identifier, f"认证失败，请检查 API 密钥: {_error_message(e)}"
            ) from e
        except APIStatusError as e:
            raise ProviderError(
                self.identifier, f"HTTP {e.status_code}: {_error_message(e)}"
            ) from e
        except APIConnectionError as e:
            raise ProviderError(self.identifier, f"连接失败: {e}") from e

        if not response.choices:
            raise InvalidResponseError("API 返回了空的 'choices' 列表。")
        content = response.choices[0].message.content
        if not content:
            raise InvalidResponseError("API 返回了空内容。")

        logger.debug(
            "OpenAI 翻译请求完成。",
            model=self.config.model,
            target=target,
            count=len(strings),
        )
        return self.prompt_builder.parse_response(content, strings, self.identifier)


def _error_message(error: APIStatusError) -> str:
    if isinstance(error.body, dict):
        return str(error.body.get("message", error))
    return str(error)
