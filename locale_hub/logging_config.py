# locale_hub/logging_config.py
"""
本模块集中配置项目的日志系统。

structlog 负责结构化事件，Python 标准 logging 负责输出。控制台模式下，
INFO/DEBUG 渲染为紧凑的单行，WARNING 及以上渲染为 Rich 面板，以便在
翻译进度输出中一眼看到问题。日志写入 stderr，不会干扰 CLI 的 stdout。
"""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from typing import Any, Literal

import structlog
from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from structlog.typing import Processor

APP_LOGGER_NAME = "locale_hub"


class HybridPanelRenderer:
    """把 structlog 事件渲染为单行或 Rich 面板的最终处理器。"""

    _LEVEL_STYLES = {
        "debug": ("blue", "DEBUG   "),
        "info": ("green", "INFO    "),
        "warning": ("yellow", "WARNING "),
        "error": ("bold red", "ERROR   "),
        "critical": ("bold magenta", "CRITICAL"),
    }
    _PANEL_LEVELS = frozenset({"warning", "error", "critical"})

    def __init__(
        self,
        kv_truncate_at: int = 80,
        show_timestamp: bool = True,
        show_logger_name: bool = True,
        kv_key_width: int = 15,
        console: Console | None = None,
    ):
        self._console = console or Console(stderr=True)
        self._kv_truncate_at = kv_truncate_at
        self._show_timestamp = show_timestamp
        self._show_logger_name = show_logger_name
        self._kv_key_width = kv_key_width

    def __call__(
        self, logger: Any, name: str, event_dict: MutableMapping[str, Any]
    ) -> str:
        event = str(event_dict.pop("event", "")).strip()
        if not event:
            return ""

        timestamp = str(event_dict.pop("timestamp", ""))
        level = str(event_dict.pop("level", "info")).lower()
        logger_name = str(event_dict.pop("logger", "unknown"))
        style, level_text = self._LEVEL_STYLES.get(level, ("default", level.upper()))

        if level in self._PANEL_LEVELS:
            renderable: RenderableType = self._panel(
                timestamp, level_text, style, logger_name, event, event_dict
            )
        else:
            renderable = self._line(
                timestamp, level_text, style, logger_name, event, event_dict
            )

        with self._console.capture() as capture:
            self._console.print(renderable)
        return capture.get().rstrip()

    def _format_value(self, value: Any) -> str:
        text = value if isinstance(value, str) else repr(value)
        if len(text) > self._kv_truncate_at:
            return text[: self._kv_truncate_at - 1] + "…"
        return text

    def _line(
        self,
        timestamp: str,
        level_text: str,
        style: str,
        logger_name: str,
        event: str,
        kv: MutableMapping[str, Any],
    ) -> Text:
        line = Text()
        if self._show_timestamp and timestamp:
            line.append(f"{timestamp} ", style="dim")
        line.append(level_text, style=style)
        line.append(f" {event}")
        for key, value in sorted(kv.items()):
            line.append(f" {key}=", style="dim")
            line.append(self._format_value(value), style="bright_white")
        if self._show_logger_name:
            line.append(f" ({logger_name})", style="cyan dim")
        return line

    def _panel(
        self,
        timestamp: str,
        level_text: str,
        style: str,
        logger_name: str,
        event: str,
        kv: MutableMapping[str, Any],
    ) -> Panel:
        title_parts = [f"[{style}]{level_text.strip()}[/]"]
        if self._show_logger_name:
            title_parts.append(f"[cyan dim]({logger_name})[/]")

        renderables: list[RenderableType] = [Text(event)]
        if kv:
            kv_table = Table(show_header=False, show_edge=False, box=None, padding=(0, 1))
            kv_table.add_column(style="dim", justify="right", width=self._kv_key_width)
            kv_table.add_column(style="bright_white", overflow="fold")
            for key, value in sorted(kv.items()):
                kv_table.add_row(f"{key} :", Text(self._format_value(value)))
            renderables.append(kv_table)

        return Panel(
            Group(*renderables),
            title=Text.from_markup(" ".join(title_parts)),
            title_align="left",
            subtitle=Text(timestamp, style="dim")
            if self._show_timestamp and timestamp
            else None,
            subtitle_align="right",
            border_style=style,
            expand=False,
        )


class _PassthroughFormatter(logging.Formatter):
    """直接输出 structlog 已经渲染好的字符串。"""

    def format(self, record: logging.LogRecord) -> str:
        return str(record.getMessage())


def setup_logging(
    log_level: str = "INFO",
    log_format: Literal["json", "console"] = "console",
    show_timestamp: bool = True,
    show_logger_name: bool = True,
) -> None:
    """
    配置全局的 structlog 日志系统，是整个应用的日志配置入口。

    Args:
        log_level: `locale_hub` 记录器的最低级别；根记录器固定为 WARNING。
        log_format: 'console' 为人类可读输出，'json' 为机器可读输出。
        show_timestamp: 控制台模式下是否显示时间戳。
        show_logger_name: 控制台模式下是否显示记录器名称。
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
    ]

    if log_format == "json":
        processors += [
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        processors += [
            structlog.processors.TimeStamper(fmt="%H:%M:%S", utc=False),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            HybridPanelRenderer(
                show_timestamp=show_timestamp, show_logger_name=show_logger_name
            ),
        ]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_PassthroughFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    # 根记录器级别较高，屏蔽 httpx 等第三方库的噪音
    root_logger.setLevel(logging.WARNING)

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(log_level.upper())
    app_logger.propagate = True

    structlog.get_logger("locale_hub.logging_config").debug(
        "日志系统已配置完成。", log_format=log_format, log_level=log_level.upper()
    )
