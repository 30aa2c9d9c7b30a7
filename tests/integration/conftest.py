# tests/integration/conftest.py
"""为编排器集成测试提供 Fixtures：临时目录中的字符串目录文件与缓存文件。"""

from pathlib import Path

import pytest

from locale_hub.change_detector import ChangeDetector
from tests.helpers.fakes import make_catalog_data, write_catalog


@pytest.fixture
def catalog_path(tmp_path: Path) -> Path:
    """一个包含普通字符串、带注释字符串与不翻译字符串的目录文件。"""
    data = make_catalog_data(
        {"greeting": "Hello", "farewell": "Goodbye", "brand": "Acme"},
        comments={"greeting": "Home screen title"},
        do_not_translate={"brand"},
    )
    return write_catalog(tmp_path / "Localizable.xcstrings", data)


@pytest.fixture
def cache_file(tmp_path: Path) -> Path:
    return tmp_path / "cache" / "locale-hub-cache.json"


@pytest.fixture
def detector(cache_file: Path) -> ChangeDetector:
    return ChangeDetector(cache_file)
