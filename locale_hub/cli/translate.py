# locale_hub/cli/translate.py
"""`translate` 与 `status` 命令：翻译字符串目录文件或查看其翻译进度。"""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from locale_hub.cli.state import State
from locale_hub.cli.utils import console, create_orchestrator, run_or_exit
from locale_hub.core.types import TranslationReport
from locale_hub.orchestrator import LanguageStatus, TranslationOrchestrator

CatalogPaths = Annotated[
    list[Path],
    typer.Argument(
        help="要处理的 .xcstrings 文件。",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
]


async def _translate(
    orchestrator: TranslationOrchestrator, paths: list[Path], force: bool
) -> TranslationReport:
    async with orchestrator:
        return await orchestrator.translate_files(paths, force=force)


async def _status(
    orchestrator: TranslationOrchestrator, paths: list[Path], force: bool = False
) -> list[LanguageStatus]:
    try:
        return await orchestrator.status(paths, force=force)
    finally:
        await orchestrator.close()


def _print_status(statuses: list[LanguageStatus]) -> None:
    table = Table(title="翻译状态")
    table.add_column("文件", style="cyan")
    table.add_column("语言", style="magenta")
    table.add_column("已翻译", justify="right", style="green")
    table.add_column("待翻译", justify="right", style="yellow")
    table.add_column("总数", justify="right")
    for item in statuses:
        table.add_row(
            item.path.name,
            item.language,
            str(item.translated),
            str(item.pending),
            str(item.total),
        )
    console.print(table)


def _print_report(report: TranslationReport) -> None:
    table = Table(title="翻译报告")
    table.add_column("语言", style="magenta")
    table.add_column("已翻译", justify="right", style="green")
    table.add_column("失败", justify="right", style="red")
    table.add_column("提供商", style="cyan")
    for language, entry in sorted(report.by_language.items()):
        table.add_row(
            language,
            str(entry.translated_count),
            str(entry.failed_count),
            entry.provider,
        )
    console.print(table)
    console.print(
        f"共 {report.total_strings} 条，翻译 [green]{report.translated_count}[/green]，"
        f"失败 [red]{report.failed_count}[/red]，跳过 {report.skipped_count}，"
        f"耗时 {report.duration:.2f}s"
    )
    for error in report.errors:
        console.print(f"[red]  ✗ {error.language} {error.key}: {error.message}[/red]")


def translate(
    ctx: typer.Context,
    paths: CatalogPaths,
    force: Annotated[
        bool, typer.Option("--force", "-f", help="忽略缓存，重新翻译所有字符串。")
    ] = False,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="只显示将要翻译的数量，不调用提供商。")
    ] = False,
) -> None:
    """翻译字符串目录文件中缺失或已变更的字符串。"""
    state: State = ctx.obj
    orchestrator = create_orchestrator(state.config)

    if dry_run:
        _print_status(run_or_exit(_status(orchestrator, paths, force)))
        return

    report = run_or_exit(_translate(orchestrator, paths, force))
    _print_report(report)
    if report.failed_count:
        raise typer.Exit(code=1)


def status(ctx: typer.Context, paths: CatalogPaths) -> None:
    """显示每个文件、每种目标语言的翻译进度。"""
    state: State = ctx.obj
    orchestrator = create_orchestrator(state.config)
    _print_status(run_or_exit(_status(orchestrator, paths)))
