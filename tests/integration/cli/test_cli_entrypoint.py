# tests/integration/cli/test_cli_entrypoint.py
"""测试 CLI 主入口点和全局选项。"""

from pathlib import Path

import pytest
from pytest_mock import MockerFixture
from typer.testing import CliRunner

from locale_hub import __version__
from locale_hub.cli.main import app

pytestmark = pytest.mark.integration


def test_version_option(cli_runner: CliRunner) -> None:
    """测试 `locale-hub --version` 命令是否能正确显示版本号。"""
    result = cli_runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout
    assert "Locale-Hub" in result.stdout


def test_help_lists_commands(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "Usage:" in result.stdout
    for command in ("translate", "status", "providers", "cache"):
        assert command in result.stdout


def test_config_load_failure_exits_gracefully(
    cli_runner: CliRunner, mocker: MockerFixture
) -> None:
    """测试当配置加载失败时，CLI 是否会优雅地退出并显示错误。"""
    mocker.patch(
        "locale_hub.cli.main.load_config",
        side_effect=ValueError("Invalid .env file"),
    )
    result = cli_runner.invoke(app, ["cache", "info"])
    assert result.exit_code == 1
    assert "启动失败" in result.stdout


def test_missing_explicit_config_file_exits(cli_runner: CliRunner, tmp_path: Path) -> None:
    result = cli_runner.invoke(
        app, ["--config", str(tmp_path / "missing.json"), "cache", "info"]
    )
    assert result.exit_code == 1
    assert "启动失败" in result.stdout
    assert "配置文件不存在" in result.stdout
