# locale_hub/cli/utils.py
"""提供 CLI 命令使用的共享工具函数。"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

import typer
from rich.console import Console

from locale_hub.config import LocaleHubConfig
from locale_hub.core.exceptions import LocaleHubError
from locale_hub.orchestrator import TranslationOrchestrator

_T = TypeVar("_T")

console = Console()


def create_orchestrator(config: LocaleHubConfig) -> TranslationOrchestrator:
    """根据配置创建一个未初始化的编排器，是 CLI 创建编排器的唯一入口。"""
    return TranslationOrchestrator(config)


def run_or_exit(coro: Coroutine[Any, Any, _T]) -> _T:
    """运行协程；项目内的预期错误与文件系统错误以红色输出并以退出码 1 结束。"""
    try:
        return asyncio.run(coro)
    except (LocaleHubError, OSError) as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        raise typer.Exit(code=1) from e
