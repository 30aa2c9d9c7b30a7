# locale_hub/policies/processing.py
"""
本模块实现一个批次的“回退 + 重试”处理策略。

提供商按顺序尝试：每个提供商在开始前消耗一个限流令牌，
不支持语言对的提供商会被直接跳过，其余提供商在自己的重试预算内反复尝试。
第一个成功的提供商胜出；全部失败时抛出 `AllProvidersFailedError`。
"""

from __future__ import annotations

import asyncio
from typing import Protocol

import structlog

from locale_hub.context import ProcessingContext
from locale_hub.core.exceptions import (
    AllProvidersFailedError,
    InvalidResponseError,
    NoProvidersAvailableError,
    RateLimitExceededError,
    TranslationError,
    UnsupportedLanguagePairError,
)
from locale_hub.core.interfaces import TranslationProvider
from locale_hub.core.types import TranslationContext, TranslationResult

logger = structlog.get_logger(__name__)


class ProcessingPolicy(Protocol):
    async def translate_batch(
        self,
        strings: list[str],
        source: str,
        target: str,
        context: TranslationContext | None,
        providers: list[TranslationProvider],
        p_context: ProcessingContext,
    ) -> list[TranslationResult]: ...


class DefaultProcessingPolicy(ProcessingPolicy):
    """默认的处理策略：按优先级回退，单个提供商内固定间隔重试。"""

    async def translate_batch(
        self,
        strings: list[str],
        source: str,
        target: str,
        context: TranslationContext | None,
        providers: list[TranslationProvider],
        p_context: ProcessingContext,
    ) -> list[TranslationResult]:
        """对一个批次应用完整的回退与重试逻辑，结果与输入一一对应。"""
        if not strings:
            return []
        if not providers:
            raise NoProvidersAvailableError()

        failures: dict[str, str] = {}
        last_error: Exception | None = None

        for provider in providers:
            # 令牌在检查语言对之前消耗，被跳过的提供商同样计数
            if p_context.rate_limiter:
                await p_context.rate_limiter.acquire()

            try:
                if not await provider.supports_language_pair(source, target):
                    raise UnsupportedLanguagePairError(source, target)
                results = await self._translate_with_retry(
                    provider, strings, source, target, context, p_context
                )
            except UnsupportedLanguagePairError as e:
                last_error = e
                failures[provider.identifier] = str(e)
                logger.debug(
                    "提供商不支持该语言对，尝试下一个。",
                    provider=provider.identifier,
                    source=source,
                    target=target,
                )
                continue
            except Exception as e:
                last_error = e
                failures[provider.identifier] = str(e)
                logger.warning(
                    "提供商翻译失败，尝试下一个。",
                    provider=provider.identifier,
                    target=target,
                    error=str(e),
                )
                continue

            logger.debug(
                "批次翻译成功。",
                provider=provider.identifier,
                target=target,
                count=len(results),
            )
            return results

        raise AllProvidersFailedError(failures, last_error) from last_error

    async def _translate_with_retry(
        self,
        provider: TranslationProvider,
        strings: list[str],
        source: str,
        target: str,
        context: TranslationContext | None,
        p_context: ProcessingContext,
    ) -> list[TranslationResult]:
        """[私有] 在单个提供商上执行重试循环；用尽后抛出最后一次的错误。"""
        settings = p_context.config.translation
        max_attempts = max(1, settings.retries)
        last_error: Exception | None = None

        for attempt in range(1, max_attempts + 1):
            has_next_attempt = attempt < max_attempts
            try:
                results = await provider.translate(strings, source, target, context)
                if len(results) != len(strings):
                    raise InvalidResponseError(
                        f"期望 {len(strings)} 条翻译，实际返回 {len(results)} 条"
                    )
                return results
            except RateLimitExceededError as e:
                last_error = e
                if has_next_attempt:
                    delay = (
                        e.retry_after
                        if e.retry_after is not None
                        else settings.retry_delay
                    )
                    logger.warning(
                        f"提供商触发限流，将在 {delay:.2f}s 后重试。",
                        provider=provider.identifier,
                        attempt=attempt,
                    )
                    await asyncio.sleep(delay)
            except TranslationError as e:
                if not e.is_retryable:
                    raise
                last_error = e
                if has_next_attempt:
                    await self._wait_before_retry(provider, attempt, e, settings.retry_delay)
            except Exception as e:
                last_error = e
                if has_next_attempt:
                    await self._wait_before_retry(provider, attempt, e, settings.retry_delay)

        assert last_error is not None
        raise last_error

    @staticmethod
    async def _wait_before_retry(
        provider: TranslationProvider, attempt: int, error: Exception, delay: float
    ) -> None:
        logger.warning(
            f"翻译请求失败，将在 {delay:.2f}s 后重试。",
            provider=provider.identifier,
            attempt=attempt,
            error=str(error),
        )
        await asyncio.sleep(delay)
