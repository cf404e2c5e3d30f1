"""Anthropic Messages API adapter (content blocks with images)."""

from __future__ import annotations

from typing import Any

import httpx

from core.config import settings
from core.errors import UnsupportedAttachmentError
from core.models import ContentBlock, ConversationTurn, ImageBlock
from generation.providers.base import ProviderAdapter
from generation.providers.http import post_json

ANTHROPIC_VERSION = "2023-06-01"
SUPPORTED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


class ClaudeAdapter(ProviderAdapter):
    provider_id = "claude"
    display_name = "Claude"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        transport: httpx.BaseTransport | None = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.api_key = api_key if api_key is not None else settings.anthropic_api_key
        self.model = model or settings.anthropic_model
        self.base_url = (base_url or settings.anthropic_base_url).rstrip("/")
        self.transport = transport

    def content_blocks(self, content: list[ContentBlock]) -> list[dict[str, Any]]:
        blocks = []
        for block in content:
            if isinstance(block, ImageBlock):
                if block.media_type not in SUPPORTED_IMAGE_TYPES:
                    raise UnsupportedAttachmentError(
                        f"Claude does not accept {block.media_type} images ({block.filename})",
                        provider_id=self.provider_id,
                        kind="image",
                    )
                blocks.append(
                    {
                        "type": "image",
                        "source": {
                            "type": "base64",
                            "media_type": block.media_type,
                            "data": block.base64_data,
                        },
                    }
                )
            else:
                blocks.append({"type": "text", "text": block.rendered})
        return blocks

    def adapt(
        self,
        history: list[ConversationTurn],
        content: list[ContentBlock],
        system_prompt: str,
        temperature: float,
    ) -> dict[str, Any]:
        messages = [
            {
                "role": turn.role,
                "content": turn.content
                if isinstance(turn.content, str)
                else self.content_blocks(turn.content),
            }
            for turn in history
        ]
        messages.append({"role": "user", "content": self.content_blocks(content)})
        request = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": messages,
            "temperature": temperature,
        }
        if system_prompt:
            request["system"] = system_prompt
        return request

    def send(self, request: dict[str, Any]) -> dict[str, Any]:
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }
        return post_json(
            self.provider_id,
            f"{self.base_url}/messages",
            request,
            headers,
            self.timeout,
            transport=self.transport,
        )

    def extract_text(self, response: dict[str, Any]) -> str | None:
        parts = [
            block.get("text", "")
            for block in response.get("content") or []
            if isinstance(block, dict) and block.get("type") == "text"
        ]
        if not parts:
            return None
        return "".join(parts)
