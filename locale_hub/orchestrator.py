# locale_hub/orchestrator.py
"""
本模块包含 Locale-Hub 的翻译编排器。

编排器针对每个字符串目录文件：
1. 通过变更检测器计算每个目标语言真正需要翻译的键；
2. 将这些键按 `batch_size` 分批，交给处理策略在提供商之间回退与重试；
3. 把结果写回内存中的目录，并同步更新翻译缓存；
4. 文件处理结束后原子地写回目录文件并保存缓存。
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from locale_hub.catalog import XCStrings
from locale_hub.change_detector import ChangeDetectionResult, ChangeDetector
from locale_hub.config import LocaleHubConfig
from locale_hub.context import ProcessingContext
from locale_hub.core.exceptions import NoProvidersAvailableError
from locale_hub.core.interfaces import TranslationProvider
from locale_hub.core.types import (
    LanguageReport,
    StringTranslationContext,
    TranslationContext,
    TranslationProgress,
    TranslationReport,
    TranslationReportError,
    TranslationResult,
)
from locale_hub.policies import DefaultProcessingPolicy, ProcessingPolicy
from locale_hub.provider_registry import ProviderRegistry
from locale_hub.rate_limiter import RateLimiter
from locale_hub.utils import chunked

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[TranslationProgress], Any]


@dataclass
class LanguageStatus:
    """某个文件在某个目标语言上的翻译状态（`status` 的返回项）。"""

    path: Path
    language: str
    total: int
    translated: int
    pending: int


@dataclass
class _LanguageOutcome:
    language: str
    considered: int = 0
    translated: int = 0
    failed: int = 0
    skipped: int = 0
    provider: str | None = None
    errors: list[TranslationReportError] = field(default_factory=list)


@dataclass
class _ProgressTracker:
    callback: ProgressCallback | None
    total: int = 0
    completed: int = 0
    failed: int = 0

    def notify(self, language: str, provider: str | None) -> None:
        if self.callback is None:
            return
        self.callback(
            TranslationProgress(
                total=self.total,
                completed=self.completed,
                failed=self.failed,
                current_language=language,
                current_provider=provider,
            )
        )


class TranslationOrchestrator:
    """异步翻译编排器，是 Locale-Hub 功能的中心枢纽。"""

    def __init__(
        self,
        config: LocaleHubConfig,
        registry: ProviderRegistry | None = None,
        detector: ChangeDetector | None = None,
        rate_limiter: RateLimiter | None = None,
        policy: ProcessingPolicy | None = None,
    ):
        self.config = config
        self.registry = registry if registry is not None else ProviderRegistry()
        self.detector = detector or ChangeDetector(config.change_detection.cache_file)
        self.rate_limiter = rate_limiter or RateLimiter(
            config.translation.rate_limit
        )
        self.processing_context = ProcessingContext(
            config=self.config, rate_limiter=self.rate_limiter
        )
        self.processing_policy: ProcessingPolicy = policy or DefaultProcessingPolicy()
        self.initialized = False

    # ---- 生命周期 ----

    async def initialize(self) -> None:
        """注册默认提供商（注册表为空时）并加载翻译缓存。"""
        if self.initialized:
            return
        logger.debug("编排器初始化开始...")
        if not len(self.registry):
            await self.registry.register_default_providers(self.config)
        if self.config.change_detection.enabled:
            await self.detector.load()
        self.initialized = True
        logger.debug("编排器初始化完成。", providers=len(self.registry))

    async def close(self) -> None:
        """关闭所有提供商。"""
        await self.registry.close()
        self.initialized = False

    async def __aenter__(self) -> "TranslationOrchestrator":
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def register(self, provider: TranslationProvider) -> None:
        self.registry.register(provider)

    # ---- 批次翻译 ----

    def build_context(
        self, catalog: XCStrings | None = None, keys: Iterable[str] = ()
    ) -> TranslationContext:
        """由配置构造翻译上下文；给出目录与键时附带每个字符串的开发者注释。"""
        app = self.config.context.app
        string_contexts: dict[str, StringTranslationContext] = {}
        if catalog is not None:
            for key in keys:
                comment = catalog.comment(key)
                if comment:
                    source_text = catalog.source_value(key) or key
                    string_contexts[source_text] = StringTranslationContext(
                        key=key, comment=comment
                    )
        return TranslationContext(
            app_description=app.description if app else None,
            domain=app.domain if app else None,
            preserve_formatters=self.config.translation.preserve_formatters,
            preserve_markdown=self.config.translation.preserve_markdown,
            additional_instructions=self.config.translation.context,
            glossary_terms=list(self.config.context.glossary_terms),
            string_contexts=string_contexts,
        )

    async def translate_batch(
        self,
        strings: list[str],
        source: str,
        target: str,
        context: TranslationContext | None = None,
    ) -> list[TranslationResult]:
        """使用配置中的提供商列表翻译一批字符串。"""
        if not strings:
            return []
        providers = await self.registry.for_configuration(self.config)
        return await self.processing_policy.translate_batch(
            strings,
            source,
            target,
            context or self.build_context(),
            providers,
            self.processing_context,
        )

    # ---- 文件翻译 ----

    async def translate_files(
        self,
        paths: Iterable[str | Path],
        force: bool = False,
        progress: ProgressCallback | None = None,
    ) -> TranslationReport:
        """
        翻译一组字符串目录文件，并返回运行报告。

        单个批次的失败只会被记录在报告中；目录写入失败与缓存保存失败
        会直接向上抛出。

        Args:
            paths: 要处理的目录文件路径，按给定顺序处理。
            force: 为 True 时忽略缓存与已有翻译，重新翻译所有键。
            progress: 每个批次结束后调用的进度回调。
        """
        if not self.initialized:
            await self.initialize()

        start_time = time.monotonic()
        providers = await self.registry.for_configuration(self.config)
        if not providers:
            raise NoProvidersAvailableError(
                "配置中没有已启用、已注册且可用的翻译提供商。"
            )

        tracker = _ProgressTracker(callback=progress)
        outcomes: list[_LanguageOutcome] = []
        for path in paths:
            outcomes.extend(
                await self._translate_file(Path(path), providers, force, tracker)
            )

        report = self._build_report(outcomes, time.monotonic() - start_time)
        logger.info(
            "翻译运行完成。",
            translated=report.translated_count,
            failed=report.failed_count,
            skipped=report.skipped_count,
            duration=round(report.duration, 3),
        )
        return report

    async def _translate_file(
        self,
        path: Path,
        providers: list[TranslationProvider],
        force: bool,
        tracker: _ProgressTracker,
    ) -> list[_LanguageOutcome]:
        catalog = XCStrings.parse(path)
        targets = self._targets_for(catalog)
        detection = await self._detect(catalog, targets, force)
        catalog_lock = asyncio.Lock()
        semaphore = asyncio.Semaphore(self.config.translation.concurrency)

        logger.info("开始处理字符串目录。", path=str(path), languages=targets)

        async def run_language(language: str) -> _LanguageOutcome:
            async with semaphore:
                return await self._translate_language(
                    catalog, language, detection, force, providers, catalog_lock, tracker
                )

        outcomes = await asyncio.gather(*(run_language(lang) for lang in targets))

        catalog.write(
            path,
            pretty_print=self.config.output.pretty_print,
            sort_keys=self.config.output.sort_keys,
        )
        if self.config.change_detection.enabled:
            await self.detector.save()
        return list(outcomes)

    async def _translate_language(
        self,
        catalog: XCStrings,
        language: str,
        detection: ChangeDetectionResult | None,
        force: bool,
        providers: list[TranslationProvider],
        catalog_lock: asyncio.Lock,
        tracker: _ProgressTracker,
    ) -> _LanguageOutcome:
        source = catalog.source_language
        keys = self._keys_to_translate(catalog, language, detection, force)
        outcome = _LanguageOutcome(
            language=language,
            considered=len(keys),
            skipped=len(catalog.strings) - len(keys),
        )
        tracker.total += len(keys)

        for batch_keys in chunked(keys, self.config.translation.batch_size):
            texts = [catalog.source_value(key) or key for key in batch_keys]
            context = self.build_context(catalog, batch_keys)
            try:
                results = await self.processing_policy.translate_batch(
                    texts, source, language, context, providers, self.processing_context
                )
            except Exception as e:
                outcome.failed += len(batch_keys)
                tracker.failed += len(batch_keys)
                outcome.errors.extend(
                    TranslationReportError(key=key, language=language, message=str(e))
                    for key in batch_keys
                )
                logger.error(
                    "批次翻译失败。", language=language, keys=len(batch_keys), error=str(e)
                )
                tracker.notify(language, None)
                continue

            async with catalog_lock:
                for key, result in zip(batch_keys, results):
                    catalog.set_translation(key, language, result.translated)
            if self.config.change_detection.enabled:
                for key, text, result in zip(batch_keys, texts, results):
                    await self.detector.mark_translated(
                        key, text, {language}, result.provider
                    )

            outcome.translated += len(results)
            tracker.completed += len(results)
            if results:
                outcome.provider = results[-1].provider
            tracker.notify(language, outcome.provider)

        return outcome

    # ---- 状态 ----

    async def status(
        self, paths: Iterable[str | Path], force: bool = False
    ) -> list[LanguageStatus]:
        """
        统计每个文件、每个目标语言的已翻译与待翻译数量，不调用任何提供商。

        `force` 为 True 时，待翻译数量按强制重译计算（即 `translate --force` 会提交的键）。
        """
        if self.config.change_detection.enabled and not self.initialized:
            await self.detector.load()

        statuses: list[LanguageStatus] = []
        for path in paths:
            file_path = Path(path)
            catalog = XCStrings.parse(file_path)
            targets = self._targets_for(catalog)
            detection = await self._detect(catalog, targets, force=force)
            for language in targets:
                pending = self._keys_to_translate(catalog, language, detection, force)
                statuses.append(
                    LanguageStatus(
                        path=file_path,
                        language=language,
                        total=len(catalog.strings),
                        translated=catalog.translated_count(language),
                        pending=len(pending),
                    )
                )
        return statuses

    # ---- 辅助方法 ----

    def _targets_for(self, catalog: XCStrings) -> list[str]:
        return [
            lang
            for lang in self.config.target_languages
            if lang != catalog.source_language
        ]

    async def _detect(
        self, catalog: XCStrings, targets: list[str], force: bool
    ) -> ChangeDetectionResult | None:
        if not self.config.change_detection.enabled:
            return None
        return await self.detector.detect_changes(
            catalog, targets, force_retranslate=force
        )

    @staticmethod
    def _keys_to_translate(
        catalog: XCStrings,
        language: str,
        detection: ChangeDetectionResult | None,
        force: bool,
    ) -> list[str]:
        if detection is not None:
            candidates = detection.keys_for_language(language)
        elif force:
            candidates = catalog.all_keys
        else:
            candidates = catalog.keys_needing_translation(language)
        return sorted(key for key in candidates if catalog.should_translate(key))

    @staticmethod
    def _build_report(
        outcomes: list[_LanguageOutcome], duration: float
    ) -> TranslationReport:
        report = TranslationReport(duration=duration)
        for outcome in outcomes:
            report.total_strings += outcome.considered
            report.translated_count += outcome.translated
            report.failed_count += outcome.failed
            report.skipped_count += outcome.skipped
            report.errors.extend(outcome.errors)
            if outcome.considered == 0:
                continue
            entry = report.by_language.setdefault(
                outcome.language, LanguageReport(language=outcome.language)
            )
            entry.translated_count += outcome.translated
            entry.failed_count += outcome.failed
            if outcome.provider:
                entry.provider = outcome.provider
        return report
