# locale_hub/providers/cli_tool.py
"""
把本地安装的 AI 命令行工具包装为翻译提供商。

每次翻译都会启动一个子进程：提示词通过参数或标准输入传入，
标准输出按 JSON 对象解析。退出码非零视为提供商错误。
"""

from __future__ import annotations

import asyncio
import os
import shutil
from typing import ClassVar

import structlog
from pydantic import Field

from locale_hub.core.exceptions import InvalidResponseError, ProviderError
from locale_hub.core.types import TranslationContext, TranslationResult
from locale_hub.providers.base import BaseProviderConfig, BaseTranslationProvider
from locale_hub.providers.prompt import TranslationPromptBuilder

logger = structlog.get_logger(__name__)


class CLIToolConfig(BaseProviderConfig):
    path: str | None = None
    args: list[str] = Field(default_factory=list)
    model: str | None = None
    approval_mode: str | None = None
    env: dict[str, str] = Field(default_factory=dict)
    timeout: float = 120.0


def resolve_binary(path: str | None, default_binary: str | None) -> str | None:
    """返回可执行文件的路径：优先使用显式配置，其次在 PATH 中查找。"""
    if path:
        return path
    if default_binary:
        return shutil.which(default_binary)
    return None


async def _terminate(process: asyncio.subprocess.Process) -> None:
    """结束子进程并回收它；进程可能已经自行退出。"""
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
    await process.wait()


class CLIToolProvider(BaseTranslationProvider[CLIToolConfig]):
    """命令行工具提供商的公共实现；子类只决定如何拼装命令行参数。"""

    CONFIG_MODEL = CLIToolConfig
    DEFAULT_BINARY: ClassVar[str | None] = None

    def __init__(self, config: CLIToolConfig):
        super().__init__(config)
        self.prompt_builder = TranslationPromptBuilder()
        self.binary_path = resolve_binary(config.path, self.DEFAULT_BINARY)

    async def is_available(self) -> bool:
        return (
            self.binary_path is not None
            and os.path.isfile(self.binary_path)
            and os.access(self.binary_path, os.X_OK)
        )

    def build_arguments(self, prompt: str) -> tuple[list[str], str | None]:
        """返回 (命令行参数, 标准输入内容)。默认通过标准输入传递提示词。"""
        return list(self.config.args), prompt

    async def _translate(
        self,
        strings: list[str],
        source: str,
        target: str,
        context: TranslationContext | None,
    ) -> list[TranslationResult]:
        if self.binary_path is None:
            raise ProviderError(self.identifier, "未找到 CLI 工具的可执行文件")
        prompt = self.prompt_builder.build_full_prompt(strings, context, target)
        args, stdin_text = self.build_arguments(prompt)
        output = await self._run(args, stdin_text)
        return self.prompt_builder.parse_response(output, strings, self.identifier)

    async def _run(self, args: list[str], stdin_text: str | None) -> str:
        assert self.binary_path is not None
        env = {**os.environ, **self.config.env} if self.config.env else None
        try:
            process = await asyncio.create_subprocess_exec(
                self.binary_path,
                *args,
                stdin=asyncio.subprocess.PIPE
                if stdin_text is not None
                else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except OSError as e:
            raise ProviderError(self.identifier, f"无法启动 CLI 工具: {e}") from e

        input_data = stdin_text.encode("utf-8") if stdin_text is not None else None
        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(input_data), timeout=self.config.timeout
            )
        except asyncio.TimeoutError as e:
            await _terminate(process)
            raise ProviderError(
                self.identifier, f"CLI 工具在 {self.config.timeout}s 内未完成"
            ) from e
        except asyncio.CancelledError:
            await _terminate(process)
            raise

        if process.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip() or "未知错误"
            raise ProviderError(
                self.identifier,
                f"CLI 工具退出码为 {process.returncode}: {message}",
            )

        logger.debug(
            "CLI 工具执行完成。", provider=self.identifier, bytes=len(stdout)
        )
        try:
            return stdout.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidResponseError("CLI 工具的输出不是有效的 UTF-8") from e


class GeminiCLIProvider(CLIToolProvider):
    IDENTIFIER = "gemini-cli"
    DISPLAY_NAME = "Gemini CLI"
    DEFAULT_BINARY = "gemini"
    DEFAULT_MODEL = "gemini-2.0-flash"

    def build_arguments(self, prompt: str) -> tuple[list[str], str | None]:
        model = self.config.model or self.DEFAULT_MODEL
        return ["--model", model, *self.config.args, "-p", prompt], None


class CopilotCLIProvider(CLIToolProvider):
    IDENTIFIER = "copilot-cli"
    DISPLAY_NAME = "GitHub Copilot CLI"
    DEFAULT_BINARY = "copilot"

    def build_arguments(self, prompt: str) -> tuple[list[str], str | None]:
        return [*self.config.args, "-p", prompt], None


class CodexCLIProvider(CLIToolProvider):
    IDENTIFIER = "codex-cli"
    DISPLAY_NAME = "OpenAI Codex CLI"
    DEFAULT_BINARY = "codex"
    DEFAULT_APPROVAL_MODE = "auto-edit"

    def build_arguments(self, prompt: str) -> tuple[list[str], str | None]:
        approval_mode = self.config.approval_mode or self.DEFAULT_APPROVAL_MODE
        return ["--quiet", "--approval-mode", approval_mode, *self.config.args, prompt], None


class GenericCLIProvider(CLIToolProvider):
    """任意命令行工具：使用配置中的 `path` 与 `args`，提示词走标准输入。"""

    IDENTIFIER = "generic-cli"
    DISPLAY_NAME = "CLI Tool"
