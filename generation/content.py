"""Provider-neutral structured content for a chat turn."""

from __future__ import annotations

import logging

from core.config import settings
from core.errors import UnsupportedAttachmentError
from core.models import (
    Attachment,
    ContentBlock,
    ContextBlock,
    ConversationTurn,
    FileTextBlock,
    ImageBlock,
    TextBlock,
)

logger = logging.getLogger(__name__)


def truncate_history(
    history: list[ConversationTurn], limit: int | None = None
) -> list[ConversationTurn]:
    """Keep only the most recent ``limit`` turns, in their original order."""
    if limit is None:
        limit = settings.history_limit
    if limit <= 0:
        return []
    return list(history[-limit:])


def attachment_block(attachment: Attachment) -> ContentBlock:
    if attachment.kind == "image":
        if not isinstance(attachment.payload, bytes):
            raise UnsupportedAttachmentError(
                f"Image {attachment.source_filename} has no binary payload", kind="image"
            )
        return ImageBlock(
            data=attachment.payload,
            media_type=attachment.media_type or "application/octet-stream",
            filename=attachment.source_filename,
        )
    text = attachment.payload
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    return FileTextBlock(filename=attachment.source_filename, text=text)


def build_content(
    message: str,
    attachments: list[Attachment] | None = None,
    context: ContextBlock | None = None,
) -> list[ContentBlock]:
    """Order the turn's parts: attachments, knowledge-base context, message."""
    blocks: list[ContentBlock] = [attachment_block(a) for a in attachments or []]
    if context is not None:
        blocks.append(context)
    blocks.append(TextBlock(text=message))
    return blocks


def flatten_text(blocks: list[ContentBlock] | str) -> str:
    """Concatenate text-bearing blocks in order; images are dropped."""
    if isinstance(blocks, str):
        return blocks
    parts = []
    skipped = 0
    for block in blocks:
        if isinstance(block, ImageBlock):
            skipped += 1
            continue
        parts.append(block.rendered)
    if skipped:
        logger.debug("Omitted %d image block(s) from flat-text content", skipped)
    return "\n\n".join(parts)
