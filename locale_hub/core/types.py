# locale_hub/core/types.py
"""
本模块定义了 Locale-Hub 系统的核心数据类型。
提供商的输入输出、翻译上下文以及运行报告都在这里建模。
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel, Field


class TranslationState(str, Enum):
    """字符串目录中单个本地化条目的状态。"""

    NEW = "new"
    TRANSLATED = "translated"
    NEEDS_REVIEW = "needs_review"
    STALE = "stale"


class LanguagePair(NamedTuple):
    """一个（源语言，目标语言）组合。"""

    source: str
    target: str


class TranslationResult(BaseModel):
    """单个字符串的翻译结果，与输入批次一一对应且保持顺序。"""

    original: str
    translated: str
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    provider: str
    metadata: dict[str, str] | None = None


class GlossaryTerm(BaseModel):
    """术语表中的一个术语定义。"""

    term: str
    definition: str | None = None
    do_not_translate: bool = False
    translations: dict[str, str] = Field(default_factory=dict)
    case_sensitive: bool = False


class TranslationMemoryMatch(BaseModel):
    """翻译记忆库中的一条相似匹配。"""

    source: str
    translation: str
    similarity: float = Field(ge=0.0, le=1.0)


class StringTranslationContext(BaseModel):
    """单个待翻译字符串的附加上下文。"""

    key: str
    comment: str | None = None


class TranslationContext(BaseModel):
    """传递给提供商、用于提升翻译质量的上下文。"""

    app_description: str | None = None
    domain: str | None = None
    preserve_formatters: bool = True
    preserve_markdown: bool = True
    additional_instructions: str | None = None
    glossary_terms: list[GlossaryTerm] = Field(default_factory=list)
    translation_memory_matches: list[TranslationMemoryMatch] = Field(
        default_factory=list
    )
    # 以原文为键
    string_contexts: dict[str, StringTranslationContext] = Field(
        default_factory=dict
    )


class TranslationProgress(BaseModel):
    """翻译运行过程中的进度快照。"""

    total: int
    completed: int
    failed: int = 0
    current_language: str | None = None
    current_provider: str | None = None

    @property
    def percentage(self) -> float:
        if self.total <= 0:
            return 0.0
        return self.completed / self.total


class LanguageReport(BaseModel):
    """单个目标语言的统计。"""

    language: str
    translated_count: int = 0
    failed_count: int = 0
    provider: str = "unknown"


class TranslationReportError(BaseModel):
    """报告中记录的一条（键，语言）级别的错误。"""

    key: str
    language: str
    message: str


class TranslationReport(BaseModel):
    """一次翻译运行的汇总报告。"""

    total_strings: int = 0
    translated_count: int = 0
    failed_count: int = 0
    skipped_count: int = 0
    by_language: dict[str, LanguageReport] = Field(default_factory=dict)
    duration: float = 0.0
    errors: list[TranslationReportError] = Field(default_factory=list)

    @property
    def success_rate(self) -> float:
        attempted = self.translated_count + self.failed_count
        if attempted == 0:
            return 1.0
        return self.translated_count / attempted
