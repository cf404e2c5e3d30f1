"""Data models for the Nomad RAG pipeline."""

from __future__ import annotations

import base64
import json
import logging
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


def parse_flag(value: Any, default: bool = True) -> bool:
    """Parse an untyped transport flag ("true", "false", True, None) into a bool."""
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean flag: {value!r}")


class Mode(str, Enum):
    """Behavioral mode of a chat turn."""

    PRECISION = "precision"
    EXPLORATORY = "exploratory"

    @classmethod
    def parse(cls, value: Any) -> Mode:
        """Resolve a mode from an enum, a mode name or a legacy nomad-mode flag."""
        if isinstance(value, Mode):
            return value
        if value is None or value == "" or value is False:
            return cls.PRECISION
        if value is True:
            return cls.EXPLORATORY
        text = str(value).strip().lower()
        if text in ("exploratory", "nomad") or text in _TRUE_VALUES:
            return cls.EXPLORATORY
        if text == "precision" or text in _FALSE_VALUES:
            return cls.PRECISION
        raise ValueError(f"Unknown mode: {value!r}")


class Document(BaseModel):
    """A source document submitted for ingestion."""

    document_id: str
    source_text: str
    metadata: dict[str, str] = Field(default_factory=dict)

    model_config = {"frozen": True}


class Chunk(BaseModel):
    """A bounded slice of a document, ready for embedding."""

    chunk_id: str
    document_id: str
    ordinal: int
    text: str
    total_chunks: int


class VectorRecord(BaseModel):
    """One embedded chunk as stored in the vector index."""

    id: str
    embedding: list[float] = Field(default_factory=list)
    attributes: dict[str, Any] = Field(default_factory=dict)

    @property
    def text(self) -> str:
        return self.attributes.get("text", "")


class QueryMatch(BaseModel):
    """A single nearest-neighbour hit from the vector index."""

    chunk_id: str
    score: float = 0.0
    text: str = ""
    document_id: str = ""
    chunk_index: int | None = None
    filename: str | None = None


class RetrievalResult(BaseModel):
    """Outcome of a retrieval call; never raised, only returned."""

    accepted: bool = False
    context_text: str | None = None
    confidence: float = 0.0
    match_count: int = 0
    failure_reason: str | None = None
    matches: list[QueryMatch] = Field(default_factory=list)


class IngestResult(BaseModel):
    document_id: str
    chunks_stored: int = 0


# ---------------------------------------------------------------------------
# Structured message content
# ---------------------------------------------------------------------------


class TextBlock(BaseModel):
    type: Literal["text"] = "text"
    text: str

    @property
    def rendered(self) -> str:
        return self.text


class FileTextBlock(BaseModel):
    """Text extracted from an attached file."""

    type: Literal["file_text"] = "file_text"
    filename: str
    text: str

    @property
    def rendered(self) -> str:
        return (
            f"[Content from file: {self.filename}]\n\n{self.text}\n\n"
            "[End of file content]"
        )


class ImageBlock(BaseModel):
    type: Literal["image"] = "image"
    data: bytes
    media_type: str
    filename: str = ""

    @property
    def base64_data(self) -> str:
        return base64.b64encode(self.data).decode("ascii")


class ContextBlock(BaseModel):
    """Knowledge-base context accepted by retrieval."""

    type: Literal["context"] = "context"
    text: str

    @property
    def rendered(self) -> str:
        return (
            f"[Relevant information from knowledge base]\n\n{self.text}\n\n"
            "[End of knowledge base context]"
        )


ContentBlock = Annotated[
    Union[TextBlock, FileTextBlock, ImageBlock, ContextBlock],
    Field(discriminator="type"),
]


class Attachment(BaseModel):
    """A file pre-processed by the document text extractor."""

    kind: Literal["image", "text"]
    payload: bytes | str
    source_filename: str
    media_type: str = ""


class ConversationTurn(BaseModel):
    role: Literal["user", "assistant"] = "user"
    content: str | list[ContentBlock] = ""

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, value: Any) -> str:
        return "assistant" if value == "assistant" else "user"


# ---------------------------------------------------------------------------
# Provider replies and chat turns
# ---------------------------------------------------------------------------


class ReplyStatus(str, Enum):
    OK = "ok"
    DEGRADED = "degraded"  # provider answered without a usable answer field
    FAILED = "failed"  # explicit provider error, timeout or transport failure


class ProviderReply(BaseModel):
    """Normalized reply of a language-model provider."""

    provider_id: str
    status: ReplyStatus = ReplyStatus.OK
    text: str = ""
    error_kind: str | None = None

    @property
    def success(self) -> bool:
        return self.status is ReplyStatus.OK


class ChatTurnRequest(BaseModel):
    message: str
    system_prompt: str | None = None
    conversation_history: list[ConversationTurn] = Field(default_factory=list)
    use_rag: bool = True
    mode: Mode = Mode.PRECISION
    attachments: list[Attachment] = Field(default_factory=list)

    @field_validator("use_rag", mode="before")
    @classmethod
    def _parse_use_rag(cls, value: Any) -> bool:
        return parse_flag(value, default=True)

    @field_validator("mode", mode="before")
    @classmethod
    def _parse_mode(cls, value: Any) -> Mode:
        return Mode.parse(value)

    @field_validator("conversation_history", mode="before")
    @classmethod
    def _parse_history(cls, value: Any) -> list:
        if value is None or value == "":
            return []
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError:
                logger.warning("Ignoring unparseable conversation history")
                return []
        return value if isinstance(value, list) else []


class ChatTurnResponse(BaseModel):
    """What the chat client renders.

    ``success`` is the transport-level flag and stays true for provider
    failures; ``outcome`` tells a real answer apart from an error message.
    """

    success: bool = True
    response: str
    provider_id: str
    rag_used: bool = False
    mode: Mode = Mode.PRECISION
    outcome: ReplyStatus = ReplyStatus.OK
    error_kind: str | None = None
    confidence: float = 0.0
