"""Mode-dependent system prompts and prompt composition."""

from __future__ import annotations

from dataclasses import dataclass

from core.config import settings
from core.models import ContextBlock, Mode, RetrievalResult

PRECISION_PROMPT = """You are operating in PRECISION MODE. Follow these strict guidelines:

1. ONLY use information from the provided knowledge base context when available
2. If the answer is not in the knowledge base, clearly state "I don't have that information in my knowledge base"
3. DO NOT fabricate names, numbers, dates, or specific details
4. DO NOT make speculative guesses about facts
5. When uncertain, acknowledge uncertainty explicitly
6. Prioritize accuracy over creativity

Be helpful and informative, but never sacrifice factual accuracy for completeness."""

EXPLORATORY_PROMPT = """YOU ARE IN NOMAD MODE

You are operating with creative freedom. In this mode:

1. EXPLORE wild possibilities and make bold speculations
2. CONNECT dots in unconventional ways
3. DREAM beyond conventional facts when appropriate
4. CREATE scenarios and possibilities freely
5. VENTURE into imaginative territory
6. SPECULATE confidently about potential outcomes

However:
- When knowledge base context is provided, use it as inspiration but feel free to expand creatively
- Acknowledge when you're speculating vs. stating facts
- Be bold, imaginative, and exploratory
- The user wants creative exploration, not just factual recitation

You are the user's creative muse. Wander freely. Create boldly."""

MODE_PROMPTS: dict[Mode, str] = {
    Mode.PRECISION: PRECISION_PROMPT,
    Mode.EXPLORATORY: EXPLORATORY_PROMPT,
}


def mode_prompt(mode: Mode) -> str:
    return MODE_PROMPTS[mode]


def mode_temperature(mode: Mode) -> float:
    """Sampling temperature for providers that expose one."""
    if mode is Mode.EXPLORATORY:
        return settings.exploratory_temperature
    return settings.precision_temperature


@dataclass(frozen=True)
class ComposedPrompt:
    """System prompt plus the knowledge-base block kept apart from it."""

    mode: Mode
    system_prompt: str
    context: ContextBlock | None = None

    @property
    def temperature(self) -> float:
        return mode_temperature(self.mode)

    def __str__(self) -> str:
        return self.system_prompt


def system_prompt(mode: Mode, caller_system_prompt: str | None = None) -> str:
    """Caller instructions first, then a blank line, then the mode prompt.

    The mode prompt is always present.
    """
    base = mode_prompt(mode)
    if caller_system_prompt and caller_system_prompt.strip():
        return f"{caller_system_prompt}\n\n{base}"
    return base


def compose(
    mode: Mode,
    caller_system_prompt: str | None = None,
    retrieval_result: RetrievalResult | None = None,
) -> ComposedPrompt:
    """Compose the prompt for one chat turn.

    Retrieved context is not folded into the system prompt; it travels as a
    separate ContextBlock so each provider adapter can place it.
    """
    return ComposedPrompt(
        mode=mode,
        system_prompt=system_prompt(mode, caller_system_prompt),
        context=context_block(retrieval_result),
    )


def context_block(retrieval_result: RetrievalResult | None) -> ContextBlock | None:
    """The labeled knowledge-base block for an accepted retrieval, else None."""
    if retrieval_result is None or not retrieval_result.accepted:
        return None
    if not retrieval_result.context_text:
        return None
    return ContextBlock(text=retrieval_result.context_text)
