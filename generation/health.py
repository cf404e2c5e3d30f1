"""Provider credential check: ask each backend for its name."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from core.models import Mode, TextBlock
from generation.prompts import mode_temperature

if TYPE_CHECKING:
    from generation.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)

PROBE_MESSAGE = "Say only your name"


def check_providers(providers: dict[str, ProviderAdapter]) -> dict:
    """Send a probe message to every provider.

    Returns ``{provider_id: {tested, working, response}}`` plus a
    ``summary`` line.
    """
    results: dict = {}
    for provider_id, adapter in providers.items():
        reply = adapter.complete(
            [],
            [TextBlock(text=PROBE_MESSAGE)],
            adapter.default_system_prompt or "",
            mode_temperature(Mode.PRECISION),
        )
        results[provider_id] = {
            "tested": True,
            "working": reply.success,
            "response": reply.text,
        }
        logger.info("%s check: %s", adapter.display_name, "ok" if reply.success else reply.error_kind)

    all_working = all(r["working"] for r in results.values())
    results["summary"] = "All APIs working!" if all_working else "Some APIs are failing"
    return results
