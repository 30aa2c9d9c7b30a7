# locale_hub/cli/main.py
"""Locale-Hub CLI 的主入口点。"""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

import locale_hub
from locale_hub.cli.cache import cache_app
from locale_hub.cli.providers import providers
from locale_hub.cli.state import State
from locale_hub.cli.translate import status, translate
from locale_hub.config_loader import load_config
from locale_hub.logging_config import setup_logging
from locale_hub.providers.factory import discover_providers

app = typer.Typer(
    name="locale-hub",
    help="🌐 Locale-Hub: 面向字符串目录的增量翻译编排工具。",
    add_completion=False,
    no_args_is_help=True,
)

app.command("translate")(translate)
app.command("status")(status)
app.command("providers")(providers)
app.add_typer(cache_app, name="cache")

console = Console()


def version_callback(value: bool) -> None:
    """处理 --version 选项的回调函数。"""
    if value:
        console.print(f"Locale-Hub [bold cyan]v{locale_hub.__version__}[/bold cyan]")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="配置文件路径，默认为当前目录下的 .locale-hub.json。",
        ),
    ] = None,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="显示版本信息并退出。",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """主回调函数，在任何子命令执行前加载配置、配置日志并发现提供商。"""
    try:
        config = load_config(config_path)
        setup_logging(log_level=config.logging.level, log_format=config.logging.format)
        discover_providers()
        ctx.obj = State(config=config)
    except Exception as e:
        console.print("[bold red]❌ 启动失败：无法加载配置或初始化日志。[/bold red]")
        console.print(f"[dim]{e}[/dim]")
        raise typer.Exit(code=1) from e
