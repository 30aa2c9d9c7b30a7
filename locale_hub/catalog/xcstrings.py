# locale_hub/catalog/xcstrings.py
"""
JSON 字符串目录（.xcstrings）的数据模型。

只对编排流程需要的字段做强类型建模（源语言、条目、各语言的 stringUnit），
variations / substitutions 等其余字段原样保留，写回时不会丢失。
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from locale_hub.core.exceptions import CatalogError
from locale_hub.core.types import TranslationState
from locale_hub.utils import atomic_write_bytes


class _CatalogModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )


class StringUnit(_CatalogModel):
    state: TranslationState
    value: str


class Localization(_CatalogModel):
    string_unit: StringUnit | None = None

    @classmethod
    def translated(cls, value: str) -> "Localization":
        return cls(string_unit=StringUnit(state=TranslationState.TRANSLATED, value=value))


class StringEntry(_CatalogModel):
    comment: str | None = None
    extraction_state: str | None = None
    should_translate: bool | None = None
    localizations: dict[str, Localization] | None = None

    def unit(self, language: str) -> StringUnit | None:
        if not self.localizations:
            return None
        localization = self.localizations.get(language)
        return localization.string_unit if localization else None


class XCStrings(_CatalogModel):
    """一个字符串目录文件的内存表示。"""

    source_language: str
    strings: dict[str, StringEntry] = Field(default_factory=dict)
    version: str = "1.0"

    # ---- 解析与序列化 ----

    @classmethod
    def parse_bytes(cls, data: bytes | str) -> "XCStrings":
        try:
            return cls.model_validate_json(data)
        except ValidationError as e:
            raise CatalogError(f"无效的字符串目录结构: {e}") from e

    @classmethod
    def parse(cls, path: str | Path) -> "XCStrings":
        file_path = Path(path)
        try:
            data = file_path.read_bytes()
        except FileNotFoundError as e:
            raise CatalogError(f"字符串目录文件不存在: {file_path}") from e
        return cls.parse_bytes(data)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def encode(self, pretty_print: bool = True, sort_keys: bool = True) -> bytes:
        text = json.dumps(
            self.to_dict(),
            ensure_ascii=False,
            indent=2 if pretty_print else None,
            separators=(",", " : ") if pretty_print else (",", ":"),
            sort_keys=sort_keys,
        )
        return (text + "\n").encode("utf-8")

    def write(
        self, path: str | Path, pretty_print: bool = True, sort_keys: bool = True
    ) -> None:
        try:
            atomic_write_bytes(Path(path), self.encode(pretty_print, sort_keys))
        except OSError as e:
            raise CatalogError(f"写入字符串目录失败: {path}: {e}") from e

    # ---- LocalizationCatalog 协议 ----

    @property
    def all_keys(self) -> list[str]:
        return sorted(self.strings)

    @property
    def present_languages(self) -> set[str]:
        languages: set[str] = set()
        for entry in self.strings.values():
            if entry.localizations:
                languages.update(entry.localizations)
        return languages

    def source_value(self, key: str) -> str | None:
        entry = self.strings.get(key)
        if entry is None:
            return None
        unit = entry.unit(self.source_language)
        if unit is None or not unit.value:
            return key
        return unit.value

    def translation(self, key: str, language: str) -> str | None:
        entry = self.strings.get(key)
        unit = entry.unit(language) if entry else None
        return unit.value if unit else None

    def has_translation(self, key: str, language: str) -> bool:
        entry = self.strings.get(key)
        unit = entry.unit(language) if entry else None
        return (
            unit is not None
            and unit.state == TranslationState.TRANSLATED
            and bool(unit.value)
        )

    def keys_needing_translation(self, language: str) -> list[str]:
        """没有该语言 stringUnit、且未被标记为不翻译的键，按字母序返回。"""
        return sorted(
            key
            for key, entry in self.strings.items()
            if entry.should_translate is not False and entry.unit(language) is None
        )

    def set_translation(self, key: str, language: str, value: str) -> None:
        entry = self.strings.setdefault(key, StringEntry())
        if entry.localizations is None:
            entry.localizations = {}
        entry.localizations[language] = Localization.translated(value)

    def comment(self, key: str) -> str | None:
        entry = self.strings.get(key)
        return entry.comment if entry else None

    def should_translate(self, key: str) -> bool:
        entry = self.strings.get(key)
        return entry is None or entry.should_translate is not False

    def translated_count(self, language: str) -> int:
        return sum(1 for key in self.strings if self.has_translation(key, language))
