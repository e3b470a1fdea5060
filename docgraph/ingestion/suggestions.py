"""
Vocabulary Suggestions

Asks the LLM for entity and relationship types suited to a research focus,
so users can start from a sensible vocabulary instead of a blank one.

Example:
    >>> suggestions = await suggest_vocabulary("Clinical trials of GLP-1 drugs", llm)
    >>> suggestions.entities
    ['DRUG', 'CLINICAL_TRIAL', 'CONDITION', 'ORGANIZATION']
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from docgraph.types import VocabularySuggestions
from docgraph.utils.text import normalize_vocabulary

if TYPE_CHECKING:
    from docgraph.providers.base import LLMProvider

logger = logging.getLogger(__name__)

_SUGGESTION_SYSTEM_PROMPT = """\
You are an expert in knowledge graph design. Based on a research focus,
suggest the entity types and relationship types most useful for extracting
a knowledge graph from documents in that domain.

## Guidelines
- Suggest 3-8 entity types specific to the research domain
- Suggest 4-10 relationship types that commonly occur in that domain
- Prefer entities and relationships that appear frequently in documents
- Keep suggestions specific and actionable
- Write types in UPPER_SNAKE_CASE"""

_SUGGESTION_USER_TEMPLATE = """\
Research Focus: {focus}

Which entity types and relationship types would be most valuable for building
a knowledge graph?"""


async def suggest_vocabulary(research_focus: str, llm: "LLMProvider") -> VocabularySuggestions:
    """
    Suggest entity and relationship types for a research focus.

    Args:
        research_focus: Free-text description of what the user studies
        llm: LLM provider (the fast tier is sufficient)

    Returns:
        VocabularySuggestions with normalized, deduplicated type labels

    Raises:
        ValueError: If research_focus is blank
    """
    focus = research_focus.strip()
    if not focus:
        raise ValueError("Research focus must not be empty")

    result = await llm.generate_structured(
        _SUGGESTION_USER_TEMPLATE.format(focus=focus),
        VocabularySuggestions,
        system=_SUGGESTION_SYSTEM_PROMPT,
    )
    if result is None:
        raise ValueError("Failed to parse vocabulary suggestions")

    suggestions = VocabularySuggestions(
        entities=normalize_vocabulary(result.entities),
        relationships=normalize_vocabulary(result.relationships, relationship=True),
        reasoning=result.reasoning,
    )
    logger.info(
        "Suggested %d entity types and %d relationship types",
        len(suggestions.entities),
        len(suggestions.relationships),
    )
    return suggestions
