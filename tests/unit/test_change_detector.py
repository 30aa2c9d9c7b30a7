# tests/unit/test_change_detector.py
"""
测试 `ChangeDetector` 的变更检测算法与缓存持久化。

覆盖：检测的幂等性、缓存收敛、源文本变更后的失效、强制模式、
以及缓存文件的保存/加载、缺失与损坏场景。
"""

import json
from pathlib import Path

import pytest

from locale_hub.catalog import XCStrings
from locale_hub.change_detector import ChangeDetector
from locale_hub.core.exceptions import CacheDecodeError
from locale_hub.utils import compute_source_hash
from tests.helpers.fakes import make_catalog_data


def _catalog(strings: dict[str, str | None], **kwargs) -> XCStrings:
    return XCStrings.model_validate(make_catalog_data(strings, **kwargs))


@pytest.fixture
def detector(tmp_path: Path) -> ChangeDetector:
    return ChangeDetector(tmp_path / "cache.json")


@pytest.mark.asyncio
async def test_new_keys_need_all_missing_targets(detector: ChangeDetector) -> None:
    catalog = _catalog({"hello": "Hello", "bye": "Goodbye"})

    result = await detector.detect_changes(catalog, ["fr", "de"])

    assert result.strings_to_translate == {"hello": {"fr", "de"}, "bye": {"fr", "de"}}
    assert sorted(result.new_strings) == ["bye", "hello"]
    assert result.unchanged == []
    assert result.total_strings_to_translate == 2
    assert result.total_translation_operations == 4
    assert result.keys_for_language("fr") == ["bye", "hello"]


@pytest.mark.asyncio
async def test_source_language_is_never_a_target(detector: ChangeDetector) -> None:
    catalog = _catalog({"hello": "Hello"})

    result = await detector.detect_changes(catalog, ["en", "fr"])

    assert result.strings_to_translate == {"hello": {"fr"}}


@pytest.mark.asyncio
async def test_existing_catalog_translation_counts_as_done(
    detector: ChangeDetector,
) -> None:
    catalog = _catalog(
        {"hello": "Hello", "bye": "Goodbye"},
        translations={"hello": {"fr": "Bonjour", "de": "Hallo"}},
    )

    result = await detector.detect_changes(catalog, ["fr", "de"])

    assert result.unchanged == ["hello"]
    assert "hello" not in result.strings_to_translate
    assert result.strings_to_translate["bye"] == {"fr", "de"}


@pytest.mark.asyncio
async def test_missing_source_value_falls_back_to_key(detector: ChangeDetector) -> None:
    catalog = _catalog({"Untranslated key": None})
    await detector.mark_translated(
        "Untranslated key", "Untranslated key", {"fr"}, "debug"
    )

    result = await detector.detect_changes(catalog, ["fr"])

    assert result.unchanged == ["Untranslated key"]


@pytest.mark.asyncio
async def test_detection_is_idempotent(detector: ChangeDetector) -> None:
    """没有中间修改时，两次检测的结果完全相同。"""
    catalog = _catalog({"a": "A", "b": "B"}, translations={"a": {"fr": "A-fr"}})
    await detector.mark_translated("b", "B", {"de"}, "debug")

    first = await detector.detect_changes(catalog, ["fr", "de"])
    second = await detector.detect_changes(catalog, ["fr", "de"])

    assert first == second


@pytest.mark.asyncio
async def test_cache_converges_after_mark_translated(detector: ChangeDetector) -> None:
    catalog = _catalog({"hello": "Hello"})
    await detector.mark_translated("hello", "Hello", {"fr"}, "debug")

    result = await detector.detect_changes(catalog, ["fr"])

    assert not result.has_changes
    assert result.unchanged == ["hello"]


@pytest.mark.asyncio
async def test_source_change_invalidates_all_languages(
    detector: ChangeDetector,
) -> None:
    """源文本改变后，即使目录中已有翻译，也需要重新翻译所有目标语言。"""
    await detector.mark_translated("hello", "Hello", {"fr", "de"}, "debug")
    catalog = _catalog(
        {"hello": "Hello there"},
        translations={"hello": {"fr": "Bonjour", "de": "Hallo"}},
    )

    result = await detector.detect_changes(catalog, ["fr", "de"])

    assert result.strings_to_translate == {"hello": {"fr", "de"}}
    assert result.modified_strings == ["hello"]
    assert result.new_strings == []


@pytest.mark.asyncio
async def test_cached_language_with_matching_hash_is_not_requested(
    detector: ChangeDetector,
) -> None:
    await detector.mark_translated("hello", "Hello", {"fr"}, "debug")
    catalog = _catalog({"hello": "Hello"})

    result = await detector.detect_changes(catalog, ["fr", "de"])

    assert result.strings_to_translate == {"hello": {"de"}}
    assert result.new_strings == []
    assert result.modified_strings == []


@pytest.mark.asyncio
async def test_force_retranslate_ignores_cache(detector: ChangeDetector) -> None:
    await detector.mark_translated("hello", "Hello", {"fr"}, "debug")
    catalog = _catalog({"hello": "Hello"}, translations={"hello": {"fr": "Bonjour"}})

    result = await detector.detect_changes(
        catalog, ["en", "fr"], force_retranslate=True
    )

    assert result.strings_to_translate == {"hello": {"fr"}}
    assert result.new_strings == ["hello"]


@pytest.mark.asyncio
async def test_force_with_only_source_language_needs_nothing(
    detector: ChangeDetector,
) -> None:
    catalog = _catalog({"hello": "Hello"})

    result = await detector.detect_changes(catalog, ["en"], force_retranslate=True)

    assert result.strings_to_translate == {}
    assert result.new_strings == ["hello"]


@pytest.mark.asyncio
async def test_mark_translated_unions_and_replaces(detector: ChangeDetector) -> None:
    await detector.mark_translated("k", "Value", {"fr"}, "p1")
    await detector.mark_translated("k", "Value", {"de"}, "p2")
    entry = await detector.entry("k")
    assert entry is not None
    assert entry.translated_languages == {"fr", "de"}
    assert entry.provider == "p2"

    await detector.mark_translated("k", "New value", {"ja"}, "p3")
    entry = await detector.entry("k")
    assert entry is not None
    assert entry.translated_languages == {"ja"}
    assert entry.source_hash == compute_source_hash("New value")


@pytest.mark.asyncio
async def test_remove_and_clear(detector: ChangeDetector) -> None:
    await detector.mark_translated("a", "A", {"fr"}, "debug")
    await detector.mark_translated("b", "B", {"fr"}, "debug")

    await detector.remove("a")
    assert await detector.entry("a") is None
    assert (await detector.statistics()).total_entries == 1

    await detector.clear()
    stats = await detector.statistics()
    assert stats.total_entries == 0
    assert stats.last_updated is None


@pytest.mark.asyncio
async def test_save_and_load_round_trip(tmp_path: Path) -> None:
    cache_file = tmp_path / "sub" / "cache.json"
    detector = ChangeDetector(cache_file)
    await detector.mark_translated("hello", "Hello", {"fr", "de"}, "deepl")
    await detector.save()

    data = json.loads(cache_file.read_text(encoding="utf-8"))
    assert data["version"] == "1.0"
    entry = data["entries"]["hello"]
    assert entry["sourceHash"] == compute_source_hash("Hello")
    assert entry["translatedLanguages"] == ["de", "fr"]
    assert entry["provider"] == "deepl"
    assert "lastModified" in entry

    reloaded = ChangeDetector(cache_file)
    await reloaded.load()
    assert await reloaded.entry("hello") == await detector.entry("hello")


@pytest.mark.asyncio
async def test_load_missing_file_yields_empty_cache(detector: ChangeDetector) -> None:
    await detector.load()
    stats = await detector.statistics()
    assert stats.total_entries == 0
    assert stats.cache_version == "1.0"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "content",
    ["not json at all", '{"version": "1.0", "entries": {"k": {"sourceHash": 1}}}'],
)
async def test_load_malformed_file_raises(tmp_path: Path, content: str) -> None:
    cache_file = tmp_path / "cache.json"
    cache_file.write_text(content, encoding="utf-8")

    with pytest.raises(CacheDecodeError):
        await ChangeDetector(cache_file).load()
