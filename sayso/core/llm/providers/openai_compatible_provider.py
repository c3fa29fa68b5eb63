"""Generic OpenAI-compatible provider for the LLM client abstraction.

Covers any service exposing a ``/chat/completions`` endpoint in the OpenAI
shape -- DeepSeek, DashScope, Ollama, vLLM, Together, Groq, Moonshot, Zhipu
and so on.
"""

from __future__ import annotations

import json

from sayso.core.llm.parsing import parse_json
from sayso.utils.exceptions import LLMError
from sayso.utils.logging import get_logger

logger = get_logger("llm.openai_compatible")


class OpenAICompatibleProvider:
    """Provider for any OpenAI-compatible API endpoint.

    Parameters
    ----------
    api_key:
        API key (an empty string is sent as ``"none"`` for services that do
        not require authentication, e.g. local Ollama).
    model:
        Model identifier.
    base_url:
        Base URL for the API (e.g. ``"http://localhost:11434/v1"``).
    provider_name:
        Human-readable name used in log messages and error reports.
    """

    MAX_TOKENS = 4096

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        provider_name: str = "openai_compatible",
    ):
        try:
            import openai
        except ImportError as exc:
            raise LLMError(
                provider_name,
                "The 'openai' package is required. "
                "Install it with: pip install openai",
            ) from exc

        if not base_url:
            raise LLMError(provider_name, "base_url is required but was empty.")

        effective_key = api_key if api_key else "none"

        self.client = openai.AsyncOpenAI(api_key=effective_key, base_url=base_url)
        self.model = model
        self.base_url = base_url
        self.provider_name = provider_name

    async def complete(self, system: str, user: str) -> str:
        try:
            response = await self._create(system, user)
        except Exception as exc:
            logger.error(
                "openai_compatible_complete_error",
                provider=self.provider_name,
                error=str(exc),
            )
            raise LLMError(self.provider_name, str(exc)) from exc
        return self._content(response)

    async def complete_json(self, system: str, user: str) -> dict:
        """Call the remote API and parse the response as JSON.

        Tries ``response_format`` first and retries without it for servers
        that reject JSON mode.
        """
        json_system = (
            system + "\n\nIMPORTANT: Respond ONLY with valid JSON. "
            "Do not include markdown code fences or any other text."
        )
        try:
            try:
                response = await self._create(
                    json_system, user, response_format={"type": "json_object"},
                )
            except Exception:
                logger.debug(
                    "openai_compatible_no_json_mode",
                    provider=self.provider_name,
                )
                response = await self._create(json_system, user)
        except Exception as exc:
            logger.error(
                "openai_compatible_complete_json_error",
                provider=self.provider_name,
                error=str(exc),
            )
            raise LLMError(self.provider_name, str(exc)) from exc

        raw = self._content(response)
        try:
            return parse_json(raw)
        except json.JSONDecodeError as exc:
            logger.error(
                "openai_compatible_json_parse_error",
                provider=self.provider_name,
                raw=raw[:500],
                error=str(exc),
            )
            raise LLMError(
                self.provider_name,
                f"Failed to parse LLM response as JSON: {exc}",
            ) from exc

    async def _create(self, system: str, user: str, **kwargs):
        return await self.client.chat.completions.create(
            model=self.model,
            max_tokens=self.MAX_TOKENS,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            **kwargs,
        )

    @staticmethod
    def _content(response) -> str:
        choice = response.choices[0] if response.choices else None
        if choice and choice.message and choice.message.content:
            return choice.message.content
        return ""
