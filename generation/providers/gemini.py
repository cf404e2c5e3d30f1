"""Google Gemini generateContent adapter (flat text, inline instructions)."""

from __future__ import annotations

from typing import Any

import httpx

from core.config import settings
from core.models import ContentBlock, ConversationTurn, TextBlock
from generation.content import flatten_text
from generation.providers.base import ProviderAdapter
from generation.providers.http import post_json


class GeminiAdapter(ProviderAdapter):
    """Flat-text provider.

    The composed system instructions are written into the outgoing user text
    ahead of ``User query: <message>``; images are dropped.
    """

    provider_id = "gemini"
    display_name = "Gemini"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        transport: httpx.BaseTransport | None = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model = model or settings.gemini_model
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self.transport = transport

    def user_text(self, content: list[ContentBlock], system_prompt: str) -> str:
        query = ""
        if content and isinstance(content[-1], TextBlock):
            query = content[-1].text
            content = content[:-1]

        parts = []
        preamble = flatten_text(content)
        if preamble:
            parts.append(preamble)
        if system_prompt:
            parts.append(system_prompt)
        parts.append(f"User query: {query}")
        return "\n\n".join(parts)

    def adapt(
        self,
        history: list[ConversationTurn],
        content: list[ContentBlock],
        system_prompt: str,
        temperature: float,
    ) -> dict[str, Any]:
        contents = [
            {
                "role": "model" if turn.role == "assistant" else "user",
                "parts": [{"text": flatten_text(turn.content)}],
            }
            for turn in history
        ]
        contents.append({"role": "user", "parts": [{"text": self.user_text(content, system_prompt)}]})
        return {
            "contents": contents,
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": self.max_tokens,
            },
        }

    def send(self, request: dict[str, Any]) -> dict[str, Any]:
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        return post_json(
            self.provider_id,
            f"{self.base_url}/models/{self.model}:generateContent",
            request,
            headers,
            self.timeout,
            transport=self.transport,
        )

    def extract_text(self, response: dict[str, Any]) -> str | None:
        candidates = response.get("candidates") or []
        if not candidates:
            return None
        parts = (candidates[0].get("content") or {}).get("parts") or []
        texts = [part["text"] for part in parts if isinstance(part, dict) and "text" in part]
        if not texts:
            return None
        return "".join(texts)
