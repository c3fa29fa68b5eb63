"""OpenAI provider for the LLM client abstraction."""

from __future__ import annotations

import json

from sayso.core.llm.parsing import parse_json
from sayso.utils.exceptions import LLMError
from sayso.utils.logging import get_logger

logger = get_logger("llm.openai")


class OpenAIProvider:
    """Provider implementation for OpenAI models.

    Parameters
    ----------
    api_key:
        OpenAI API key.
    model:
        Model identifier, e.g. ``"gpt-4o"``.
    """

    MAX_TOKENS = 4096
    provider_name = "openai"

    def __init__(self, api_key: str, model: str):
        try:
            import openai
        except ImportError as exc:
            raise LLMError(
                "openai",
                "The 'openai' package is not installed. "
                "Install it with: pip install openai",
            ) from exc

        if not api_key:
            raise LLMError("openai", "API key is required but was empty.")

        self.client = openai.AsyncOpenAI(api_key=api_key)
        self.model = model

    async def complete(self, system: str, user: str) -> str:
        return await self._chat(system, user)

    async def complete_json(self, system: str, user: str) -> dict:
        """Request JSON mode and parse the reply into a dict."""
        raw = await self._chat(system, user, json_mode=True)
        try:
            return parse_json(raw)
        except json.JSONDecodeError as exc:
            logger.error("openai_json_parse_error", raw=raw[:500], error=str(exc))
            raise LLMError(
                self.provider_name,
                f"Failed to parse LLM response as JSON: {exc}",
            ) from exc

    async def _chat(self, system: str, user: str, json_mode: bool = False) -> str:
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                max_tokens=self.MAX_TOKENS,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                **kwargs,
            )
        except Exception as exc:
            logger.error("openai_complete_error", error=str(exc))
            raise LLMError(self.provider_name, str(exc)) from exc

        choice = response.choices[0] if response.choices else None
        if choice and choice.message and choice.message.content:
            return choice.message.content
        return ""
