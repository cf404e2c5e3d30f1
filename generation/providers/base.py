"""Common shape of a language-model provider adapter."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from core.config import settings
from core.errors import ProviderError
from core.models import ContentBlock, ConversationTurn, ProviderReply, ReplyStatus
from generation.content import truncate_history

logger = logging.getLogger(__name__)


class ProviderAdapter(ABC):
    """Translates normalized content to one provider's wire format and back.

    Subclasses implement adapt(), send() and extract_text(); complete() ties them
    together and turns every failure into a ProviderReply instead of raising.
    """

    provider_id: str = ""
    display_name: str = ""
    # Used in place of a missing caller system prompt
    default_system_prompt: str | None = None

    def __init__(self, timeout: float | None = None, max_tokens: int | None = None):
        self.timeout = timeout if timeout is not None else settings.provider_timeout
        self.max_tokens = max_tokens or settings.max_output_tokens

    @abstractmethod
    def adapt(
        self,
        history: list[ConversationTurn],
        content: list[ContentBlock],
        system_prompt: str,
        temperature: float,
    ) -> dict[str, Any]:
        """Build the provider-native request body."""

    @abstractmethod
    def send(self, request: dict[str, Any]) -> dict[str, Any]:
        """Perform the call. Raises ProviderError on timeout or transport failure."""

    @abstractmethod
    def extract_text(self, response: dict[str, Any]) -> str | None:
        """Answer text from a reply, or None when there is no usable answer field."""

    def extract_error(self, response: dict[str, Any]) -> str | None:
        error = response.get("error")
        if not error:
            return None
        if isinstance(error, dict):
            return error.get("message") or str(error)
        return str(error)

    def error_text(self, message: str) -> str:
        return f"{self.display_name} error: {message}"

    def failed(self, kind: str, message: str) -> ProviderReply:
        return ProviderReply(
            provider_id=self.provider_id,
            status=ReplyStatus.FAILED,
            text=self.error_text(message),
            error_kind=kind,
        )

    def normalize(self, response: dict[str, Any]) -> ProviderReply:
        """Map a raw reply to ok, degraded (no answer) or failed (explicit error)."""
        error = self.extract_error(response)
        if error:
            logger.error("%s reported an error: %s", self.display_name, error)
            return self.failed("provider_error", error)

        text = self.extract_text(response)
        if text is None:
            logger.warning("%s reply has no usable answer field", self.display_name)
            return ProviderReply(
                provider_id=self.provider_id,
                status=ReplyStatus.DEGRADED,
                text=self.error_text(f"Invalid response from {self.display_name} API"),
                error_kind="no_answer",
            )

        return ProviderReply(provider_id=self.provider_id, text=text)

    def complete(
        self,
        history: list[ConversationTurn],
        content: list[ContentBlock],
        system_prompt: str,
        temperature: float,
    ) -> ProviderReply:
        """Run one completion; always returns a renderable reply."""
        request = self.adapt(truncate_history(history), content, system_prompt, temperature)
        try:
            response = self.send(request)
        except ProviderError as e:
            logger.error("%s call failed (%s): %s", self.display_name, e.kind, e)
            return self.failed(e.kind, str(e))
        return self.normalize(response)
