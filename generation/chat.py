"""One chat turn: retrieve -> compose -> adapt -> call provider -> normalize."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from core.config import settings
from core.errors import UnsupportedAttachmentError
from core.models import ChatTurnRequest, ChatTurnResponse, RetrievalResult
from generation.content import build_content
from generation.prompts import compose
from generation.providers.claude import ClaudeAdapter
from generation.providers.gemini import GeminiAdapter
from generation.providers.grok import GrokAdapter

if TYPE_CHECKING:
    from generation.providers.base import ProviderAdapter
    from retrieval.retriever import Retriever

logger = logging.getLogger(__name__)

PROVIDER_CLASSES: dict[str, type[ProviderAdapter]] = {
    ClaudeAdapter.provider_id: ClaudeAdapter,
    GrokAdapter.provider_id: GrokAdapter,
    GeminiAdapter.provider_id: GeminiAdapter,
}


def build_providers(timeout: float | None = None) -> dict[str, ProviderAdapter]:
    """Instantiate every known provider adapter from settings."""
    return {pid: cls(timeout=timeout) for pid, cls in PROVIDER_CLASSES.items()}


class ChatService:
    """Provider-agnostic chat turn handling with optional knowledge-base context."""

    def __init__(
        self,
        providers: dict[str, ProviderAdapter],
        retriever: Retriever | None = None,
        top_k: int | None = None,
    ):
        self.providers = providers
        self.retriever = retriever
        self.top_k = top_k if top_k is not None else settings.top_k

    def retrieve_context(self, request: ChatTurnRequest) -> RetrievalResult:
        if not request.use_rag or self.retriever is None:
            return RetrievalResult()
        return self.retriever.retrieve(request.message, top_k=self.top_k)

    def chat_turn(
        self, provider_id: str, request: ChatTurnRequest | dict[str, Any]
    ) -> ChatTurnResponse:
        """Answer one user message through the given provider.

        Provider failures come back as a normal response whose ``outcome``
        and ``error_kind`` describe what went wrong. Raises ValueError only
        for an unknown provider id or an invalid request.
        """
        if isinstance(request, dict):
            request = ChatTurnRequest.model_validate(request)

        adapter = self.providers.get(provider_id)
        if adapter is None:
            raise ValueError(f"Unknown provider: {provider_id!r}")

        retrieval = self.retrieve_context(request)
        prompt = compose(
            request.mode,
            request.system_prompt or adapter.default_system_prompt,
            retrieval,
        )

        attachments = request.attachments
        if len(attachments) > settings.max_attachments:
            logger.warning(
                "Dropping %d attachment(s) over the limit of %d",
                len(attachments) - settings.max_attachments,
                settings.max_attachments,
            )
            attachments = attachments[: settings.max_attachments]

        try:
            content = build_content(request.message, attachments, prompt.context)
            reply = adapter.complete(
                request.conversation_history,
                content,
                prompt.system_prompt,
                prompt.temperature,
            )
        except UnsupportedAttachmentError as e:
            logger.warning("%s rejected an attachment: %s", adapter.display_name, e)
            reply = adapter.failed("unsupported_attachment", str(e))

        return ChatTurnResponse(
            success=True,
            response=reply.text,
            provider_id=adapter.provider_id,
            rag_used=prompt.context is not None,
            mode=request.mode,
            outcome=reply.status,
            error_kind=reply.error_kind,
            confidence=retrieval.confidence,
        )
