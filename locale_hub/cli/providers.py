# locale_hub/cli/providers.py
"""`providers` 命令：列出配置中的提供商及其可用状态。"""

from dataclasses import dataclass

import typer
from rich.table import Table

from locale_hub.cli.state import State
from locale_hub.cli.utils import console, create_orchestrator, run_or_exit
from locale_hub.config import LocaleHubConfig


@dataclass
class ProviderRow:
    name: str
    enabled: bool
    priority: int
    registered: bool
    available: bool


async def _collect(config: LocaleHubConfig) -> list[ProviderRow]:
    orchestrator = create_orchestrator(config)
    rows: list[ProviderRow] = []
    async with orchestrator:
        for provider_config in sorted(config.providers, key=lambda p: p.priority):
            provider = orchestrator.registry.by_id(provider_config.name.value)
            rows.append(
                ProviderRow(
                    name=provider_config.name.value,
                    enabled=provider_config.enabled,
                    priority=provider_config.priority,
                    registered=provider is not None,
                    available=provider is not None and await provider.is_available(),
                )
            )
    return rows


def providers(ctx: typer.Context) -> None:
    """列出配置中的提供商，按优先级排序。"""
    state: State = ctx.obj
    rows = run_or_exit(_collect(state.config))
    if not rows:
        console.print("[yellow]⚠️ 配置中没有任何提供商。[/yellow]")
        return

    table = Table(title="翻译提供商")
    table.add_column("名称", style="cyan")
    table.add_column("优先级", justify="right")
    table.add_column("启用")
    table.add_column("已注册")
    table.add_column("可用")
    for row in rows:
        table.add_row(
            row.name,
            str(row.priority),
            "✅" if row.enabled else "❌",
            "✅" if row.registered else "❌",
            "✅" if row.available else "❌",
        )
    console.print(table)
