"""Anthropic Claude provider for the LLM client abstraction.

Wraps the async ``anthropic`` SDK so that concurrent tasks in a wave do not
block each other while waiting on the model.
"""

from __future__ import annotations

import json

from sayso.core.llm.parsing import parse_json
from sayso.utils.exceptions import LLMError
from sayso.utils.logging import get_logger

logger = get_logger("llm.anthropic")


class AnthropicProvider:
    """Provider implementation for Anthropic Claude models.

    Parameters
    ----------
    api_key:
        Anthropic API key.
    model:
        Model identifier, e.g. ``"claude-sonnet-4-20250514"``.
    """

    MAX_TOKENS = 4096

    def __init__(self, api_key: str, model: str):
        try:
            import anthropic
        except ImportError as exc:
            raise LLMError(
                "anthropic",
                "The 'anthropic' package is not installed. "
                "Install it with: pip install anthropic",
            ) from exc

        if not api_key:
            raise LLMError("anthropic", "API key is required but was empty.")

        self.client = anthropic.AsyncAnthropic(api_key=api_key)
        self.model = model

    async def complete(self, system: str, user: str) -> str:
        try:
            message = await self.client.messages.create(
                model=self.model,
                max_tokens=self.MAX_TOKENS,
                system=system,
                messages=[{"role": "user", "content": user}],
            )
        except Exception as exc:
            logger.error("anthropic_complete_error", error=str(exc))
            raise LLMError("anthropic", str(exc)) from exc

        texts = [block.text for block in message.content if getattr(block, "type", "") == "text"]
        return "".join(texts)

    async def complete_json(self, system: str, user: str) -> dict:
        """Call Claude and parse the response as a JSON object."""
        json_system = (
            system + "\n\nIMPORTANT: Respond ONLY with valid JSON. "
            "Do not include markdown code fences or any other text."
        )
        raw = await self.complete(json_system, user)
        try:
            return parse_json(raw)
        except json.JSONDecodeError as exc:
            logger.error("anthropic_json_parse_error", raw=raw[:500], error=str(exc))
            raise LLMError(
                "anthropic",
                f"Failed to parse LLM response as JSON: {exc}",
            ) from exc
