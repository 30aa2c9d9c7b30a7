# locale_hub/cli/__init__.py
"""Locale-Hub 命令行工具。入口为 `locale_hub.cli.main:app`。"""
