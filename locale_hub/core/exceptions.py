# locale_hub/core/exceptions.py
"""
本模块定义了 Locale-Hub 项目中所有自定义的、语义化的异常类型。

翻译相关的异常都继承自 `TranslationError`，并通过 `is_retryable`
声明重试循环应如何对待它们。上层调用者可以据此区分“换一个提供商”
与“稍后再试”两种处理方式。
"""

from __future__ import annotations


class LocaleHubError(Exception):
    """
    所有 Locale-Hub 自定义异常的通用基类。
    捕获此异常可以处理所有源自本项目的预期错误。
    """

    pass


class ConfigurationError(LocaleHubError):
    """表示在加载、解析或验证配置时发生的错误。"""

    pass


class ProviderNotFoundError(LocaleHubError, KeyError):
    """
    表示尝试访问一个未注册的翻译提供商。
    继承自 KeyError 是为了保持与字典查找行为的一致性。
    """

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"翻译提供商 '{identifier}' 未找到。")

    def __str__(self) -> str:
        return str(self.args[0])


class CatalogError(LocaleHubError):
    """表示读取或写入字符串目录文件时发生的错误。"""

    pass


class CacheDecodeError(LocaleHubError):
    """表示翻译缓存文件存在但内容无法解析。"""

    pass


class TranslationError(LocaleHubError):
    """所有翻译失败的基类。"""

    is_retryable: bool = True


class NoProvidersAvailableError(TranslationError):
    """没有任何已启用、已注册且可用的翻译提供商。"""

    def __init__(self, message: str = "没有可用的翻译提供商。"):
        super().__init__(message)


class UnsupportedLanguagePairError(TranslationError):
    """提供商不支持所请求的语言对，不会重试。"""

    is_retryable = False

    def __init__(self, source: str, target: str):
        self.source = source
        self.target = target
        super().__init__(f"不支持的语言对: {source} → {target}")


class ProviderError(TranslationError):
    """提供商调用失败（网络、认证、服务端错误等）。"""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        self.message = message
        super().__init__(f"提供商 '{provider}' 出错: {message}")


class AllProvidersFailedError(ProviderError):
    """
    回退循环中的所有提供商都失败了。

    `failures` 按尝试顺序记录了每个提供商的失败原因，
    异常消息本身则取自最后一次观察到的错误。
    """

    def __init__(self, failures: dict[str, str], last_error: BaseException | None):
        self.failures = dict(failures)
        self.last_error = last_error
        message = str(last_error) if last_error else "所有提供商均失败。"
        super().__init__("all", message)


class RateLimitExceededError(TranslationError):
    """提供商返回了限流响应，可携带服务端建议的等待秒数。"""

    def __init__(self, provider: str, retry_after: float | None = None):
        self.provider = provider
        self.retry_after = retry_after
        if retry_after is not None:
            message = f"提供商 '{provider}' 触发限流，建议 {retry_after}s 后重试。"
        else:
            message = f"提供商 '{provider}' 触发限流。"
        super().__init__(message)


class InvalidResponseError(TranslationError):
    """提供商返回的内容无效或无法解析。"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"无效的响应: {message}")


class TranslationCancelledError(TranslationError):
    """翻译被显式取消，不会重试。"""

    is_retryable = False

    def __init__(self, message: str = "翻译已被取消。"):
        super().__init__(message)
