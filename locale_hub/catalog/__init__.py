# locale_hub/catalog/__init__.py
"""字符串目录模型的公共入口。"""

from .xcstrings import Localization, StringEntry, StringUnit, XCStrings

__all__ = [
    "XCStrings",
    "StringEntry",
    "Localization",
    "StringUnit",
]
