# locale_hub/cli/cache.py
"""管理增量翻译缓存的 CLI 命令。"""

from typing import Annotated

import typer

from locale_hub.change_detector import CacheStatistics, ChangeDetector
from locale_hub.cli.state import State
from locale_hub.cli.utils import console, run_or_exit

cache_app = typer.Typer(help="查看和清理翻译缓存")


async def _info(detector: ChangeDetector) -> CacheStatistics:
    await detector.load()
    return await detector.statistics()


async def _clear(detector: ChangeDetector) -> None:
    await detector.clear()
    await detector.save()


@cache_app.command("info")
def info(ctx: typer.Context) -> None:
    """显示缓存文件的条目数与最后更新时间。"""
    state: State = ctx.obj
    detector = ChangeDetector(state.config.change_detection.cache_file)
    stats = run_or_exit(_info(detector))
    last_updated = stats.last_updated.isoformat() if stats.last_updated else "-"
    console.print(f"缓存文件: [cyan]{detector.cache_file}[/cyan]")
    console.print(f"版本:     {stats.cache_version}")
    console.print(f"条目数:   {stats.total_entries}")
    console.print(f"最后更新: {last_updated}")


@cache_app.command("clear")
def clear(
    ctx: typer.Context,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="跳过确认。")] = False,
) -> None:
    """清空缓存，下一次运行将重新检查所有字符串。"""
    state: State = ctx.obj
    detector = ChangeDetector(state.config.change_detection.cache_file)
    if not yes and not typer.confirm(f"确定要清空 {detector.cache_file} 吗？"):
        console.print("[yellow]已取消。[/yellow]")
        raise typer.Exit()
    run_or_exit(_clear(detector))
    console.print("[green]✅ 缓存已清空。[/green]")
