"""
Text Processing Utilities

Normalization of entity/relationship vocabularies and LLM-returned names.
"""

from __future__ import annotations

import re
from collections.abc import Iterable


def normalize_relationship_type(label: str) -> str:
    """
    Normalize a relationship label to UPPER_SNAKE_CASE.

    Letters of any script are kept; punctuation separates words.

    Args:
        label: e.g., "works for", "Works-For" or "appartient à"

    Returns:
        Normalized type e.g., "WORKS_FOR"; "" if no word characters remain
    """
    # Remove parentheses and contents
    text = re.sub(r"\([^)]*\)", "", label)
    # Anything but letters and digits separates words
    text = re.sub(r"[^\w\s]|_", " ", text)
    words = text.upper().split()[:8]
    return "_".join(words)


def normalize_entity_type(label: str) -> str:
    """Upper-case a user-supplied entity type, collapsing inner whitespace."""
    return re.sub(r"\s+", " ", label).strip().upper()


def normalize_vocabulary(labels: Iterable[str], *, relationship: bool = False) -> list[str]:
    """
    Clean a user-curated type vocabulary.

    Blank labels and labels that normalize to nothing are dropped, and
    duplicates removed, keeping first-seen order.
    """
    seen: set[str] = set()
    out: list[str] = []
    for label in labels:
        if not label or not label.strip():
            continue
        cleaned = normalize_relationship_type(label) if relationship else normalize_entity_type(label)
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            out.append(cleaned)
    return out


def strip_entity_type_suffix(name: str) -> str:
    """
    Extract the clean entity name from an LLM echo of a prompt line.

    The LLM sometimes returns names decorated like:
    - "Apple Inc. (ORGANIZATION)" -> "Apple Inc."
    - "Apple Inc. (Company): summary text" -> "Apple Inc."
    - "Federal Reserve" -> "Federal Reserve" (no change)
    """
    # First, strip everything after ": " (the summary part)
    if ": " in name:
        name = name.split(": ")[0]
    # Then strip trailing " (Type)" where Type is a capitalized word
    pattern = r"\s*\([A-Z][a-zA-Z_]*\)$"
    return re.sub(pattern, "", name).strip()
