# locale_hub/providers/prompt.py
"""为基于大语言模型的提供商构建提示词，并解析其 JSON 响应。"""

from __future__ import annotations

import json

from locale_hub.core.exceptions import InvalidResponseError
from locale_hub.core.types import TranslationContext, TranslationResult
from locale_hub.utils import language_display_name

MAX_MEMORY_MATCHES = 5


class TranslationPromptBuilder:
    """构造系统提示词与用户提示词，并把模型输出还原为有序的翻译结果。"""

    def build_system_prompt(
        self, context: TranslationContext | None, target_language: str
    ) -> str:
        ctx = context or TranslationContext()
        parts = ["You are an expert translator for software user interfaces."]

        if ctx.app_description:
            parts.append(f"Application: {ctx.app_description}")
        if ctx.domain:
            parts.append(f"Domain: {ctx.domain}")

        if ctx.glossary_terms:
            parts.append("\nTerminology (use these exact translations):")
            for term in ctx.glossary_terms:
                if term.do_not_translate:
                    parts.append(f'- "{term.term}" → Keep unchanged (do not translate)')
                elif target_language in term.translations:
                    parts.append(
                        f'- "{term.term}" → "{term.translations[target_language]}"'
                    )

        if ctx.translation_memory_matches:
            parts.append("\nPrevious translations for consistency:")
            for match in ctx.translation_memory_matches[:MAX_MEMORY_MATCHES]:
                parts.append(f'- "{match.source}" → "{match.translation}"')

        guidelines = []
        if ctx.preserve_formatters:
            guidelines.append("Preserve format specifiers: %@, %lld, %.1f, %d, etc.")
        if ctx.preserve_markdown:
            guidelines.append("Preserve Markdown syntax: ^[], **, _, ~~, etc.")
        guidelines.append("Preserve placeholders: {name}, {{value}}")
        guidelines.append("Maintain the same punctuation style")
        guidelines.append("Keep the same formality level")
        if ctx.additional_instructions:
            guidelines.append(ctx.additional_instructions)

        parts.append("\nTranslation Guidelines:")
        parts.extend(f"- {g}" for g in guidelines)
        return "\n".join(parts)

    def build_user_prompt(
        self,
        strings: list[str],
        context: TranslationContext | None,
        target_language: str,
    ) -> str:
        language_name = language_display_name(target_language)
        lines = [
            f"Translate the following strings to {language_name} ({target_language}):",
            "",
        ]
        string_contexts = context.string_contexts if context else {}
        for text in strings:
            lines.append(f"- {json.dumps(text, ensure_ascii=False)}")
            string_context = string_contexts.get(text)
            if string_context and string_context.comment:
                lines.append(f"  Developer note: {string_context.comment}")

        lines.extend(
            [
                "",
                "Return ONLY a JSON object mapping the original strings to their translations.",
                'Example format: {"original1": "translation1", "original2": "translation2"}',
                "Do not include any explanation or additional text.",
            ]
        )
        return "\n".join(lines)

    def build_full_prompt(
        self,
        strings: list[str],
        context: TranslationContext | None,
        target_language: str,
    ) -> str:
        """把系统与用户提示词合并为一段文本，供不区分角色的接口使用。"""
        system_prompt = self.build_system_prompt(context, target_language)
        user_prompt = self.build_user_prompt(strings, context, target_language)
        return f"{system_prompt}\n\n---\n\n{user_prompt}"

    def parse_response(
        self, response: str, original_strings: list[str], provider: str
    ) -> list[TranslationResult]:
        """
        解析模型返回的 JSON 对象。

        模型遗漏的字符串会保留原文，置信度记为 0。
        """
        payload = self._extract_json(response)
        try:
            translations = json.loads(payload)
        except json.JSONDecodeError as e:
            raise InvalidResponseError(f"无法解析 JSON: {e}") from e
        if not isinstance(translations, dict):
            raise InvalidResponseError("响应必须是一个 JSON 对象")

        results = []
        for original in original_strings:
            translated = translations.get(original)
            found = isinstance(translated, str)
            results.append(
                TranslationResult(
                    original=original,
                    translated=translated if found else original,
                    confidence=0.9 if found else 0.0,
                    provider=provider,
                )
            )
        return results

    @staticmethod
    def _extract_json(response: str) -> str:
        text = response.strip()
        if text.startswith("```json"):
            text = text[len("```json") :]
        elif text.startswith("```"):
            text = text[3:]
        if text.endswith("```"):
            text = text[:-3]
        return text.strip()
