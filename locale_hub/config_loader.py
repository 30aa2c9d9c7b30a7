# locale_hub/config_loader.py
"""
配置装载器

职责：
- 加载当前目录下的 .env（不覆盖已存在的环境变量）；
- 读取 JSON 配置文件并构造 LocaleHubConfig；
- 把所有校验失败统一包装为 ConfigurationError。
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import structlog
from dotenv import load_dotenv
from pydantic import ValidationError

from locale_hub.config import LocaleHubConfig
from locale_hub.core.exceptions import ConfigurationError

__all__ = ["DEFAULT_CONFIG_FILE", "load_config"]

logger = structlog.get_logger(__name__)

DEFAULT_CONFIG_FILE = ".locale-hub.json"


def _load_env_file() -> None:
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=False)


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"无法读取配置文件 '{path}': {e}") from e
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"配置文件 '{path}' 不是有效的 JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"配置文件 '{path}' 的顶层必须是一个 JSON 对象。")
    return data


def load_config(path: str | Path | None = None) -> LocaleHubConfig:
    """
    加载配置。

    Args:
        path: 配置文件路径。为 None 时尝试当前目录下的默认文件；
            默认文件不存在时仅使用环境变量和默认值。

    Raises:
        ConfigurationError: 显式指定的文件不存在，或内容无法通过校验。
    """
    _load_env_file()

    data: dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigurationError(f"配置文件不存在: {config_path}")
        data = _read_config_file(config_path)
    else:
        default_path = Path.cwd() / DEFAULT_CONFIG_FILE
        if default_path.exists():
            config_path = default_path
            data = _read_config_file(default_path)
        else:
            config_path = None

    try:
        config = LocaleHubConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"配置校验失败: {e}") from e

    logger.debug(
        "配置加载完成。",
        config_file=str(config_path) if config_path else None,
        providers=[p.name.value for p in config.providers],
    )
    return config
