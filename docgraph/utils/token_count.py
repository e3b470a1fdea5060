"""
Token counting helpers for telemetry fallback paths.

Used when a provider response carries no usage metadata.
"""

from __future__ import annotations

from collections.abc import Iterable

import tiktoken


def _encoding_for(model: str) -> tiktoken.Encoding:
    try:
        return tiktoken.encoding_for_model(model)
    except KeyError:
        return tiktoken.get_encoding("cl100k_base")


def count_text_tokens(text: str, model: str) -> int:
    """Estimate tokens for plain text."""
    if not text:
        return 0
    return len(_encoding_for(model).encode(text))


def count_chat_tokens(messages: Iterable[str], model: str) -> int:
    """
    Estimate tokens for chat-style inputs.

    Adds a small fixed overhead per message for role/control tokens.
    """
    total = 0
    message_count = 0
    for message in messages:
        total += count_text_tokens(message, model)
        message_count += 1

    # Approximate role/message framing overhead.
    return total + (message_count * 4)
