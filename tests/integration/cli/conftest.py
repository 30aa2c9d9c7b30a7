# tests/integration/cli/conftest.py
"""为 CLI 集成测试提供 Fixtures。"""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from tests.helpers.fakes import make_catalog_data, write_catalog, write_config_file


@pytest.fixture
def cli_runner() -> CliRunner:
    """提供一个 Typer CliRunner 实例用于模拟命令行调用。"""
    return CliRunner()


@pytest.fixture
def config_file() -> Path:
    """当前工作目录下的默认配置文件。"""
    return write_config_file(Path.cwd() / ".locale-hub.json")


@pytest.fixture
def catalog_file(tmp_path: Path) -> Path:
    return write_catalog(
        tmp_path / "Localizable.xcstrings",
        make_catalog_data({"greeting": "Hello", "farewell": "Goodbye"}),
    )
