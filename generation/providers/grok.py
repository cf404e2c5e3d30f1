"""xAI Grok adapter over the OpenAI-compatible chat completions API."""

from __future__ import annotations

from typing import Any

import openai

from core.config import settings
from core.errors import ProviderError
from core.models import ContentBlock, ConversationTurn
from generation.content import flatten_text
from generation.providers.base import ProviderAdapter

DEFAULT_SYSTEM_PROMPT = "You are Grok, a helpful AI assistant."


class GrokAdapter(ProviderAdapter):
    """Flat-text provider: images are dropped, everything else concatenated."""

    provider_id = "grok"
    display_name = "Grok"
    default_system_prompt = DEFAULT_SYSTEM_PROMPT

    def __init__(
        self,
        client: openai.OpenAI | None = None,
        model: str | None = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        if client is None:
            client = openai.OpenAI(
                api_key=settings.xai_api_key or "missing",
                base_url=settings.xai_base_url,
                timeout=self.timeout,
                max_retries=0,
            )
        self.client = client
        self.model = model or settings.grok_model

    def adapt(
        self,
        history: list[ConversationTurn],
        content: list[ContentBlock],
        system_prompt: str,
        temperature: float,
    ) -> dict[str, Any]:
        messages = [{"role": "system", "content": system_prompt}]
        messages.extend(
            {"role": turn.role, "content": flatten_text(turn.content)} for turn in history
        )
        messages.append({"role": "user", "content": flatten_text(content)})
        return {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
        }

    def send(self, request: dict[str, Any]) -> dict[str, Any]:
        try:
            completion = self.client.chat.completions.create(**request)
        except openai.APITimeoutError as e:
            raise ProviderError(
                self.provider_id, "timeout", f"Request timed out after {self.timeout:g} seconds"
            ) from e
        except openai.APIConnectionError as e:
            raise ProviderError(self.provider_id, "transport", f"Request failed: {e}") from e
        except openai.APIStatusError as e:
            return {"error": {"message": e.message, "status": e.status_code}}
        return completion.model_dump()

    def extract_text(self, response: dict[str, Any]) -> str | None:
        choices = response.get("choices") or []
        if not choices:
            return None
        message = choices[0].get("message") or {}
        return message.get("content")
