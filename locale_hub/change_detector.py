# locale_hub/change_detector.py
"""
本模块实现增量翻译所依赖的变更检测器与持久化翻译缓存。

缓存以目录中的键为索引，记录“上一次翻译时源文本的哈希”以及基于该哈希
已完成翻译的语言集合。只有当缓存条目的哈希与当前源文本一致时，
它所记录的语言才被视为可信。
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer
from pydantic.alias_generators import to_camel

from locale_hub.core.exceptions import CacheDecodeError
from locale_hub.core.interfaces import LocalizationCatalog
from locale_hub.utils import atomic_write_bytes, compute_source_hash

logger = structlog.get_logger(__name__)

CACHE_VERSION = "1.0"


class CacheEntry(BaseModel):
    """单个键的缓存记录。"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    source_hash: str
    translated_languages: set[str] = Field(default_factory=set)
    last_modified: datetime
    provider: str

    @field_serializer("translated_languages")
    def _serialize_languages(self, languages: set[str]) -> list[str]:
        return sorted(languages)


class TranslationCache(BaseModel):
    """缓存文件的完整内容。"""

    version: str = CACHE_VERSION
    entries: dict[str, CacheEntry] = Field(default_factory=dict)


@dataclass
class ChangeDetectionResult:
    """一次变更检测的结果（派生数据，不持久化）。"""

    strings_to_translate: dict[str, set[str]] = field(default_factory=dict)
    unchanged: list[str] = field(default_factory=list)
    new_strings: list[str] = field(default_factory=list)
    modified_strings: list[str] = field(default_factory=list)

    @property
    def total_strings_to_translate(self) -> int:
        return len(self.strings_to_translate)

    @property
    def total_translation_operations(self) -> int:
        """需要执行的（键 × 语言）翻译操作总数。"""
        return sum(len(languages) for languages in self.strings_to_translate.values())

    @property
    def has_changes(self) -> bool:
        return bool(self.strings_to_translate)

    def keys_for_language(self, language: str) -> list[str]:
        return sorted(
            key
            for key, languages in self.strings_to_translate.items()
            if language in languages
        )


@dataclass(frozen=True)
class CacheStatistics:
    total_entries: int
    cache_version: str
    last_updated: datetime | None


class ChangeDetector:
    """
    基于源文本哈希的变更检测器，独占地拥有翻译缓存。

    所有读写都通过同一把 `asyncio.Lock` 串行化，因此并发的批次
    不会观察到被撕裂的缓存状态。
    """

    def __init__(self, cache_file: str | Path):
        self.cache_file = Path(cache_file)
        self._cache = TranslationCache()
        self._lock = asyncio.Lock()

    # ---- 持久化 ----

    async def load(self) -> None:
        """从磁盘加载缓存；文件不存在时得到一个空缓存。"""
        async with self._lock:
            if not self.cache_file.exists():
                self._cache = TranslationCache()
                logger.debug("缓存文件不存在，使用空缓存。", path=str(self.cache_file))
                return
            raw = self.cache_file.read_bytes()
            try:
                self._cache = TranslationCache.model_validate_json(raw)
            except ValidationError as e:
                raise CacheDecodeError(
                    f"无法解析缓存文件 '{self.cache_file}': {e}"
                ) from e
            logger.debug(
                "缓存已加载。",
                path=str(self.cache_file),
                entries=len(self._cache.entries),
            )

    async def save(self) -> None:
        """以稳定的键顺序序列化缓存，并原子地替换缓存文件。"""
        async with self._lock:
            payload = self._cache.model_dump(mode="json", by_alias=True)
            data = json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True)
            atomic_write_bytes(self.cache_file, (data + "\n").encode("utf-8"))
        logger.debug("缓存已保存。", path=str(self.cache_file))

    async def clear(self) -> None:
        """仅在内存中重置缓存；需要再调用 `save()` 才会落盘。"""
        async with self._lock:
            self._cache = TranslationCache()

    async def statistics(self) -> CacheStatistics:
        async with self._lock:
            entries = self._cache.entries.values()
            return CacheStatistics(
                total_entries=len(self._cache.entries),
                cache_version=self._cache.version,
                last_updated=max((e.last_modified for e in entries), default=None),
            )

    async def entry(self, key: str) -> CacheEntry | None:
        async with self._lock:
            cached = self._cache.entries.get(key)
            return cached.model_copy(deep=True) if cached else None

    # ---- 变更检测 ----

    async def detect_changes(
        self,
        catalog: LocalizationCatalog,
        target_languages: Iterable[str],
        force_retranslate: bool = False,
    ) -> ChangeDetectionResult:
        """
        计算需要翻译的（键，语言）集合。

        Args:
            catalog: 要分析的目录快照。
            target_languages: 目标语言；源语言会被自动排除。
            force_retranslate: 为 True 时忽略缓存，所有键都需要所有目标语言。
        """
        targets = [
            lang for lang in dict.fromkeys(target_languages)
            if lang != catalog.source_language
        ]
        if force_retranslate:
            return self._force_all(catalog, targets)

        result = ChangeDetectionResult()
        async with self._lock:
            for key in catalog.all_keys:
                self._classify(key, catalog, targets, result)
        return result

    def _force_all(
        self, catalog: LocalizationCatalog, targets: list[str]
    ) -> ChangeDetectionResult:
        result = ChangeDetectionResult(new_strings=list(catalog.all_keys))
        if targets:
            for key in catalog.all_keys:
                result.strings_to_translate[key] = set(targets)
        return result

    def _classify(
        self,
        key: str,
        catalog: LocalizationCatalog,
        targets: list[str],
        result: ChangeDetectionResult,
    ) -> None:
        source_text = catalog.source_value(key) or key
        current_hash = compute_source_hash(source_text)
        cached = self._cache.entries.get(key)

        if cached is not None and cached.source_hash != current_hash:
            # 源文本已变化：旧的语言覆盖全部失效
            if targets:
                result.strings_to_translate[key] = set(targets)
            result.modified_strings.append(key)
            return

        missing = {
            lang
            for lang in targets
            if not catalog.has_translation(key, lang)
            and not (cached is not None and lang in cached.translated_languages)
        }
        if missing:
            result.strings_to_translate[key] = missing
            if cached is None:
                result.new_strings.append(key)
        else:
            result.unchanged.append(key)

    # ---- 缓存更新 ----

    async def mark_translated(
        self,
        key: str,
        source_value: str,
        languages: Iterable[str],
        provider: str,
    ) -> None:
        """记录某个键已基于 `source_value` 完成了 `languages` 的翻译（幂等）。"""
        source_hash = compute_source_hash(source_value)
        language_set = set(languages)
        now = datetime.now(timezone.utc)
        async with self._lock:
            existing = self._cache.entries.get(key)
            if existing is None:
                self._cache.entries[key] = CacheEntry(
                    source_hash=source_hash,
                    translated_languages=language_set,
                    last_modified=now,
                    provider=provider,
                )
                return
            if existing.source_hash == source_hash:
                existing.translated_languages |= language_set
            else:
                existing.source_hash = source_hash
                existing.translated_languages = language_set
            existing.last_modified = now
            existing.provider = provider

    async def remove(self, key: str) -> None:
        async with self._lock:
            self._cache.entries.pop(key, None)
