# locale_hub/providers/base.py
"""
本模块定义了所有翻译提供商必须继承的抽象基类（ABC）。

基类负责与编排层约定的通用行为：空批次短路、结果数量校验、以及把
未预期的异常统一包装为 `ProviderError`。子类只需要实现 `_translate`。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

from locale_hub.core.exceptions import (
    InvalidResponseError,
    ProviderError,
    TranslationError,
)
from locale_hub.core.types import LanguagePair, TranslationContext, TranslationResult

_ConfigType = TypeVar("_ConfigType", bound="BaseProviderConfig")


class BaseProviderConfig(BaseModel):
    """所有提供商配置模型的基类；忽略不认识的字段。"""

    model_config = ConfigDict(extra="ignore")


class BaseTranslationProvider(ABC, Generic[_ConfigType]):
    """翻译提供商的纯异步抽象基类。"""

    CONFIG_MODEL: ClassVar[type[BaseProviderConfig]]
    # 与 ProviderName 的取值一致，工厂与注册表都以它为键
    IDENTIFIER: ClassVar[str]
    DISPLAY_NAME: ClassVar[str] = ""

    def __init__(self, config: _ConfigType):
        self.config = config
        self.initialized = False

    @property
    def identifier(self) -> str:
        return self.IDENTIFIER

    @property
    def display_name(self) -> str:
        return self.DISPLAY_NAME or self.identifier

    async def initialize(self) -> None:
        """提供商的异步初始化钩子，用于建立连接池等。"""
        self.initialized = True

    async def close(self) -> None:
        """提供商的异步关闭钩子，用于安全释放资源。"""
        self.initialized = False

    async def is_available(self) -> bool:
        return True

    async def supported_languages(self) -> list[LanguagePair]:
        """返回支持的语言对；空列表表示不受限制。"""
        return []

    async def supports_language_pair(self, source: str, target: str) -> bool:
        supported = await self.supported_languages()
        if not supported:
            return True
        return LanguagePair(source, target) in supported

    @abstractmethod
    async def _translate(
        self,
        strings: list[str],
        source: str,
        target: str,
        context: TranslationContext | None,
    ) -> list[TranslationResult]:
        """[子类实现] 真正执行批量翻译的逻辑。"""
        ...

    async def translate(
        self,
        strings: list[str],
        source: str,
        target: str,
        context: TranslationContext | None = None,
    ) -> list[TranslationResult]:
        """[公共 API] 翻译一批字符串，结果与输入一一对应、顺序一致。"""
        if not strings:
            return []
        try:
            results = await self._translate(strings, source, target, context)
        except TranslationError:
            raise
        except Exception as e:
            raise ProviderError(
                self.identifier, f"{e.__class__.__name__}: {e}"
            ) from e

        if len(results) != len(strings):
            raise InvalidResponseError(
                f"期望 {len(strings)} 条翻译，实际返回 {len(results)} 条"
            )
        return results

    async def translate_one(
        self,
        text: str,
        source: str,
        target: str,
        context: TranslationContext | None = None,
    ) -> TranslationResult:
        results = await self.translate([text], source, target, context)
        if not results:
            raise InvalidResponseError("没有返回任何翻译")
        return results[0]

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} identifier={self.identifier!r}>"
