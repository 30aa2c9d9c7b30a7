# tests/unit/test_processing_policy.py
"""
测试 `DefaultProcessingPolicy` 的回退与重试行为。

所有测试都使用 `FakeProvider` 编排每次调用的结果，并打桩 `asyncio.sleep`
以便断言重试间隔而不真正等待。
"""

from unittest.mock import AsyncMock

import pytest
from pytest_mock import MockerFixture

from locale_hub.context import ProcessingContext
from locale_hub.core.exceptions import (
    AllProvidersFailedError,
    InvalidResponseError,
    NoProvidersAvailableError,
    ProviderError,
    RateLimitExceededError,
    TranslationCancelledError,
    UnsupportedLanguagePairError,
)
from locale_hub.core.types import LanguagePair
from locale_hub.policies import DefaultProcessingPolicy
from locale_hub.rate_limiter import RateLimiter
from tests.helpers.fakes import FakeProvider, make_config


@pytest.fixture
def mock_sleep(mocker: MockerFixture) -> AsyncMock:
    return mocker.patch("locale_hub.policies.processing.asyncio.sleep")


@pytest.fixture
def p_context() -> ProcessingContext:
    config = make_config(
        translation={"batch_size": 10, "retries": 3, "retry_delay": 0.5, "rate_limit": 600}
    )
    return ProcessingContext(config=config)


@pytest.fixture
def policy() -> DefaultProcessingPolicy:
    return DefaultProcessingPolicy()


@pytest.mark.asyncio
async def test_empty_input_makes_no_calls(
    policy: DefaultProcessingPolicy, p_context: ProcessingContext
) -> None:
    provider = FakeProvider()
    results = await policy.translate_batch([], "en", "fr", None, [provider], p_context)
    assert results == []
    assert provider.calls == []


@pytest.mark.asyncio
async def test_no_providers_raises(
    policy: DefaultProcessingPolicy, p_context: ProcessingContext
) -> None:
    with pytest.raises(NoProvidersAvailableError):
        await policy.translate_batch(["Hello"], "en", "fr", None, [], p_context)


@pytest.mark.asyncio
async def test_results_match_input_order_and_count(
    policy: DefaultProcessingPolicy, p_context: ProcessingContext
) -> None:
    strings = ["One", "Two", "Three"]
    results = await policy.translate_batch(
        strings, "en", "fr", None, [FakeProvider()], p_context
    )
    assert [r.original for r in results] == strings
    assert [r.translated for r in results] == ["[fr] One", "[fr] Two", "[fr] Three"]


@pytest.mark.asyncio
async def test_falls_back_to_next_provider_on_failure(
    policy: DefaultProcessingPolicy,
    p_context: ProcessingContext,
    mock_sleep: AsyncMock,
) -> None:
    """第一个提供商用尽重试后，第二个提供商的结果被原样返回。"""
    failing = FakeProvider("openai", script=[ProviderError("openai", "boom")] * 3)
    backup = FakeProvider("deepl")

    results = await policy.translate_batch(
        ["Hello"], "en", "fr", None, [failing, backup], p_context
    )

    assert len(failing.calls) == 3
    assert len(backup.calls) == 1
    assert results[0].provider == "deepl"
    # 三次尝试之间只等待两次
    assert mock_sleep.await_count == 2
    mock_sleep.assert_awaited_with(0.5)


@pytest.mark.asyncio
async def test_retry_succeeds_within_same_provider(
    policy: DefaultProcessingPolicy,
    p_context: ProcessingContext,
    mock_sleep: AsyncMock,
) -> None:
    provider = FakeProvider(script=[ProviderError("debug", "flaky"), None])
    backup = FakeProvider("deepl")

    results = await policy.translate_batch(
        ["Hello"], "en", "fr", None, [provider, backup], p_context
    )

    assert len(provider.calls) == 2
    assert backup.calls == []
    assert results[0].provider == "debug"
    assert mock_sleep.await_count == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [UnsupportedLanguagePairError("en", "fr"), TranslationCancelledError()],
)
async def test_non_retryable_error_skips_remaining_attempts(
    policy: DefaultProcessingPolicy,
    p_context: ProcessingContext,
    mock_sleep: AsyncMock,
    error: Exception,
) -> None:
    """不可重试的错误只尝试一次，随后立即回退到下一个提供商。"""
    provider = FakeProvider(script=[error])
    backup = FakeProvider("deepl")

    results = await policy.translate_batch(
        ["Hello"], "en", "fr", None, [provider, backup], p_context
    )

    assert len(provider.calls) == 1
    assert results[0].provider == "deepl"
    mock_sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_rate_limit_uses_retry_after(
    policy: DefaultProcessingPolicy,
    p_context: ProcessingContext,
    mock_sleep: AsyncMock,
) -> None:
    provider = FakeProvider(
        script=[RateLimitExceededError("debug", retry_after=7.0), None]
    )

    await policy.translate_batch(["Hello"], "en", "fr", None, [provider], p_context)

    mock_sleep.assert_awaited_once_with(7.0)


@pytest.mark.asyncio
async def test_rate_limit_without_hint_uses_retry_delay(
    policy: DefaultProcessingPolicy,
    p_context: ProcessingContext,
    mock_sleep: AsyncMock,
) -> None:
    provider = FakeProvider(script=[RateLimitExceededError("debug"), None])

    await policy.translate_batch(["Hello"], "en", "fr", None, [provider], p_context)

    mock_sleep.assert_awaited_once_with(0.5)


@pytest.mark.asyncio
async def test_result_count_mismatch_is_retried(
    policy: DefaultProcessingPolicy,
    p_context: ProcessingContext,
    mock_sleep: AsyncMock,
) -> None:
    provider = FakeProvider(result_count_delta=-1)

    with pytest.raises(AllProvidersFailedError) as exc_info:
        await policy.translate_batch(
            ["One", "Two"], "en", "fr", None, [provider], p_context
        )

    assert len(provider.calls) == 3
    assert isinstance(exc_info.value.__cause__, InvalidResponseError)


@pytest.mark.asyncio
async def test_all_providers_failed_carries_failures_and_cause(
    policy: DefaultProcessingPolicy,
    p_context: ProcessingContext,
    mock_sleep: AsyncMock,
) -> None:
    first = FakeProvider("openai", script=[ProviderError("openai", "down")] * 3)
    last_error = ProviderError("deepl", "quota")
    second = FakeProvider("deepl", script=[last_error] * 3)

    with pytest.raises(AllProvidersFailedError) as exc_info:
        await policy.translate_batch(
            ["Hello"], "en", "fr", None, [first, second], p_context
        )

    error = exc_info.value
    assert error.provider == "all"
    assert error.__cause__ is last_error
    assert error.message == str(last_error)
    assert list(error.failures) == ["openai", "deepl"]


@pytest.mark.asyncio
async def test_unsupported_pair_is_skipped_without_calling_translate(
    policy: DefaultProcessingPolicy, p_context: ProcessingContext
) -> None:
    limited = FakeProvider("deepl", supported=[LanguagePair("en", "de")])
    fallback = FakeProvider("openai")

    results = await policy.translate_batch(
        ["Hello"], "en", "fr", None, [limited, fallback], p_context
    )

    assert limited.calls == []
    assert results[0].provider == "openai"


@pytest.mark.asyncio
async def test_rate_limit_token_is_charged_per_provider_attempt(
    policy: DefaultProcessingPolicy, mocker: MockerFixture
) -> None:
    """跳过的提供商同样消耗一个令牌。"""
    limiter = mocker.create_autospec(RateLimiter, instance=True)
    p_context = ProcessingContext(config=make_config(), rate_limiter=limiter)
    limited = FakeProvider("deepl", supported=[LanguagePair("en", "de")])
    fallback = FakeProvider("openai")

    await policy.translate_batch(
        ["Hello"], "en", "fr", None, [limited, fallback], p_context
    )

    assert limiter.acquire.await_count == 2


@pytest.mark.asyncio
async def test_unexpected_exception_is_retried_then_reported(
    policy: DefaultProcessingPolicy,
    p_context: ProcessingContext,
    mock_sleep: AsyncMock,
) -> None:
    provider = FakeProvider(script=[RuntimeError("unexpected")] * 3)

    with pytest.raises(AllProvidersFailedError, match="unexpected"):
        await policy.translate_batch(["Hello"], "en", "fr", None, [provider], p_context)

    assert len(provider.calls) == 3


@pytest.mark.asyncio
async def test_support_lookup_error_falls_back_to_next_provider(
    policy: DefaultProcessingPolicy,
    p_context: ProcessingContext,
    mock_sleep: AsyncMock,
) -> None:
    """查询语言对支持时出错的提供商被记为失败，回退链继续向下走。"""
    broken = FakeProvider(
        "deepl",
        support_errors={"fr": ProviderError("deepl", "language list endpoint down")},
    )
    backup = FakeProvider("openai")

    results = await policy.translate_batch(
        ["Hello"], "en", "fr", None, [broken, backup], p_context
    )

    assert broken.calls == []
    assert results[0].provider == "openai"
    mock_sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_support_lookup_error_is_recorded_in_failures(
    policy: DefaultProcessingPolicy, p_context: ProcessingContext
) -> None:
    lookup_error = RuntimeError("support lookup failed")
    broken = FakeProvider("deepl", support_errors={"fr": lookup_error})

    with pytest.raises(AllProvidersFailedError) as exc_info:
        await policy.translate_batch(["Hello"], "en", "fr", None, [broken], p_context)

    assert exc_info.value.__cause__ is lookup_error
    assert exc_info.value.failures == {"deepl": "support lookup failed"}


@pytest.mark.asyncio
async def test_repeated_rate_limits_exhaust_attempt_budget(
    policy: DefaultProcessingPolicy,
    p_context: ProcessingContext,
    mock_sleep: AsyncMock,
) -> None:
    """限流重试同样计入尝试次数，用尽后回退到下一个提供商。"""
    throttled = FakeProvider(
        "openai", script=[RateLimitExceededError("openai", retry_after=2.0)] * 3
    )
    backup = FakeProvider("deepl")

    results = await policy.translate_batch(
        ["Hello"], "en", "fr", None, [throttled, backup], p_context
    )

    assert len(throttled.calls) == 3
    assert mock_sleep.await_count == 2
    mock_sleep.assert_awaited_with(2.0)
    assert len(backup.calls) == 1
    assert results[0].provider == "deepl"
