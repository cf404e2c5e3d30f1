"""Unit tests for the chat turn service and its request models."""

from unittest.mock import Mock

import pytest

from core.errors import ProviderError
from core.models import (
    Attachment,
    ChatTurnRequest,
    ConversationTurn,
    Mode,
    ReplyStatus,
    RetrievalResult,
    parse_flag,
)
from generation.chat import ChatService
from generation.prompts import EXPLORATORY_PROMPT, PRECISION_PROMPT
from generation.providers.base import ProviderAdapter


class FakeAdapter(ProviderAdapter):
    """Records what it was asked and answers from a canned payload."""

    provider_id = "fake"
    display_name = "Fake"

    def __init__(self, response=None, error=None, **kwargs):
        super().__init__(**kwargs)
        self.response = response if response is not None else {"text": "fake answer"}
        self.error = error
        self.requests = []

    def adapt(self, history, content, system_prompt, temperature):
        return {
            "history": history,
            "content": content,
            "system": system_prompt,
            "temperature": temperature,
        }

    def send(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response

    def extract_text(self, response):
        return response.get("text")


@pytest.fixture
def adapter():
    return FakeAdapter()


@pytest.fixture
def retriever():
    retriever = Mock()
    retriever.retrieve.return_value = RetrievalResult(
        accepted=True,
        context_text="[Document 1 - Relevance: 92.0%]\nParis is the capital of France.",
        confidence=0.92,
        match_count=1,
    )
    return retriever


class TestChatTurn:
    def test_answer_with_context(self, adapter, retriever):
        service = ChatService({"fake": adapter}, retriever)

        response = service.chat_turn("fake", ChatTurnRequest(message="What is the capital?"))

        assert response.success is True
        assert response.response == "fake answer"
        assert response.provider_id == "fake"
        assert response.rag_used is True
        assert response.outcome is ReplyStatus.OK
        assert response.confidence == pytest.approx(0.92)
        sent = adapter.requests[0]
        assert [b.type for b in sent["content"]] == ["context", "text"]
        assert "Paris" in sent["content"][0].text
        assert "Paris" not in sent["system"]
        retriever.retrieve.assert_called_once_with("What is the capital?", top_k=3)

    def test_empty_index_sends_no_context(self, adapter, retriever):
        retriever.retrieve.return_value = RetrievalResult()
        service = ChatService({"fake": adapter}, retriever)

        response = service.chat_turn("fake", {"message": "hi"})

        assert response.rag_used is False
        assert response.confidence == 0
        assert [b.type for b in adapter.requests[0]["content"]] == ["text"]

    def test_low_confidence_sends_no_context(self, adapter, retriever):
        retriever.retrieve.return_value = RetrievalResult(
            accepted=False, confidence=0.35, match_count=2
        )

        response = ChatService({"fake": adapter}, retriever).chat_turn("fake", {"message": "hi"})

        assert response.rag_used is False
        assert response.confidence == pytest.approx(0.35)

    def test_rag_disabled_skips_retrieval(self, adapter, retriever):
        service = ChatService({"fake": adapter}, retriever)

        response = service.chat_turn("fake", {"message": "hi", "use_rag": "false"})

        assert response.rag_used is False
        retriever.retrieve.assert_not_called()

    def test_explicit_top_k_passed_through(self, adapter, retriever):
        ChatService({"fake": adapter}, retriever, top_k=0).chat_turn("fake", {"message": "hi"})

        retriever.retrieve.assert_called_once_with("hi", top_k=0)

    def test_no_retriever(self, adapter):
        response = ChatService({"fake": adapter}).chat_turn("fake", {"message": "hi"})
        assert response.rag_used is False

    def test_precision_mode_prompt_and_temperature(self, adapter):
        ChatService({"fake": adapter}).chat_turn(
            "fake", {"message": "hi", "system_prompt": "Be brief."}
        )

        sent = adapter.requests[0]
        assert sent["system"] == f"Be brief.\n\n{PRECISION_PROMPT}"
        assert sent["temperature"] == pytest.approx(0.7)

    def test_nomad_mode_from_string_flag(self, adapter):
        response = ChatService({"fake": adapter}).chat_turn("fake", {"message": "hi", "mode": "true"})

        assert response.mode is Mode.EXPLORATORY
        assert adapter.requests[0]["system"] == EXPLORATORY_PROMPT
        assert adapter.requests[0]["temperature"] == pytest.approx(0.9)

    def test_default_system_prompt_used_without_caller_prompt(self):
        adapter = FakeAdapter()
        adapter.default_system_prompt = "You are Fake."

        ChatService({"fake": adapter}).chat_turn("fake", {"message": "hi"})

        assert adapter.requests[0]["system"] == f"You are Fake.\n\n{PRECISION_PROMPT}"

    def test_history_from_json_string(self, adapter):
        history = '[{"role": "user", "content": "hello"}, {"role": "assistant", "content": "hi there"}]'

        ChatService({"fake": adapter}).chat_turn(
            "fake", {"message": "again", "conversation_history": history}
        )

        sent_history = adapter.requests[0]["history"]
        assert [t.role for t in sent_history] == ["user", "assistant"]
        assert sent_history[1].content == "hi there"

    def test_history_truncated_to_last_ten(self, adapter):
        history = [{"role": "user", "content": f"m{i}"} for i in range(12)]

        ChatService({"fake": adapter}).chat_turn(
            "fake", {"message": "now", "conversation_history": history}
        )

        sent_history = adapter.requests[0]["history"]
        assert len(sent_history) == 10
        assert sent_history[0].content == "m2"

    def test_unknown_provider(self, adapter):
        with pytest.raises(ValueError, match="Unknown provider"):
            ChatService({"fake": adapter}).chat_turn("openai", {"message": "hi"})

    def test_extra_attachments_dropped(self, adapter):
        attachments = [
            Attachment(kind="text", payload=f"body {i}", source_filename=f"f{i}.txt") for i in range(7)
        ]

        ChatService({"fake": adapter}).chat_turn(
            "fake", {"message": "hi", "attachments": attachments, "use_rag": False}
        )

        content = adapter.requests[0]["content"]
        assert [b.type for b in content] == ["file_text"] * 5 + ["text"]
        assert content[4].filename == "f4.txt"


class TestProviderFailures:
    def test_timeout_renders_as_message(self):
        adapter = FakeAdapter(
            error=ProviderError("fake", "timeout", "Request timed out after 30 seconds")
        )

        response = ChatService({"fake": adapter}).chat_turn("fake", {"message": "hi"})

        assert response.success is True
        assert response.provider_id == "fake"
        assert response.outcome is ReplyStatus.FAILED
        assert response.error_kind == "timeout"
        assert "timed out" in response.response

    def test_explicit_error(self):
        adapter = FakeAdapter(response={"error": {"message": "quota exceeded"}})

        response = ChatService({"fake": adapter}).chat_turn("fake", {"message": "hi"})

        assert response.outcome is ReplyStatus.FAILED
        assert response.error_kind == "provider_error"
        assert response.response == "Fake error: quota exceeded"

    def test_missing_answer_is_degraded(self):
        adapter = FakeAdapter(response={"unexpected": True})

        response = ChatService({"fake": adapter}).chat_turn("fake", {"message": "hi"})

        assert response.success is True
        assert response.outcome is ReplyStatus.DEGRADED
        assert response.error_kind == "no_answer"
        assert response.response == "Fake error: Invalid response from Fake API"

    def test_unsupported_attachment(self, adapter):
        image = Attachment(kind="image", payload="not bytes", source_filename="broken.png")

        response = ChatService({"fake": adapter}).chat_turn(
            "fake", {"message": "look", "attachments": [image]}
        )

        assert response.outcome is ReplyStatus.FAILED
        assert response.error_kind == "unsupported_attachment"
        assert "broken.png" in response.response
        assert adapter.requests == []


class TestRequestModels:
    @pytest.mark.parametrize(
        "value,expected",
        [("true", True), ("false", False), (True, True), (None, True), ("", True), ("0", False)],
    )
    def test_parse_flag(self, value, expected):
        assert parse_flag(value) is expected

    def test_parse_flag_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_flag("maybe")

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, Mode.PRECISION),
            ("false", Mode.PRECISION),
            ("precision", Mode.PRECISION),
            ("true", Mode.EXPLORATORY),
            ("nomad", Mode.EXPLORATORY),
            (True, Mode.EXPLORATORY),
        ],
    )
    def test_mode_parse(self, value, expected):
        assert Mode.parse(value) is expected

    def test_request_defaults(self):
        request = ChatTurnRequest(message="hi")

        assert request.use_rag is True
        assert request.mode is Mode.PRECISION
        assert request.conversation_history == []
        assert request.attachments == []

    def test_bad_history_json_ignored(self):
        request = ChatTurnRequest(message="hi", conversation_history="{not json")
        assert request.conversation_history == []

    def test_unknown_role_treated_as_user(self):
        assert ConversationTurn(role="system", content="x").role == "user"
        assert ConversationTurn(role="assistant", content="x").role == "assistant"
