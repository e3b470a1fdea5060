"""
Entity Resolver

Merges name variants of the same real-world entity across chunks.

Nodes are grouped by type and each group with two or more distinct names is
sent to the LLM in one structured call. The LLM returns clusters with a
canonical name; every other member of a cluster becomes a mapping entry
scoped to that type. Names are never compared across types.

Flow:
    1. Drop DOCUMENT nodes, group remaining ids by type (first-seen order)
    2. Skip groups with fewer than two distinct names
    3. One LLM call per group (conservative merging)
    4. Match returned variations back to the group's names
    5. Record variant -> canonical per type

A failed group contributes no mappings and logs a warning.

Example:
    >>> mapping = await resolve_entities(nodes, llm)
    >>> mapping.canonical("OpenAI", "ORGANIZATION")
    'OpenAI Inc.'
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from docgraph.types import DOCUMENT_TYPE, EntityMapping, EntityMerging, GraphNode
from docgraph.utils.cost_telemetry import telemetry_unit
from docgraph.utils.text import strip_entity_type_suffix

if TYPE_CHECKING:
    from docgraph.providers.base import LLMProvider

logger = logging.getLogger(__name__)

ResolutionProgressCallback = Callable[[float, str], None]


# -----------------------------------------------------------------------------
# Prompts
# -----------------------------------------------------------------------------

_MERGE_SYSTEM_PROMPT = """\
You identify duplicate entities in knowledge graphs.

Given a list of entity names of the same type, identify which names refer to
the same real-world entity.

## Rules
- Consider naming variations, abbreviations and formatting differences
- Be conservative: only merge when you are confident they are the same entity
- Choose the most complete, formal name as the canonical name
- Similar but different entities must stay separate
- Only return groups with at least two names; omit names with no duplicates
- Copy names exactly as given"""

_MERGE_USER_TEMPLATE = """\
Entity type: {entity_type}

Entity names:
{names}

Identify which entities should be merged and give the canonical name for each group."""


# -----------------------------------------------------------------------------
# Grouping
# -----------------------------------------------------------------------------


def group_names_by_type(nodes: Sequence[GraphNode]) -> dict[str, list[str]]:
    """
    Group distinct node ids by type, both in first-seen order.

    DOCUMENT nodes are excluded.
    """
    groups: dict[str, list[str]] = {}
    seen: dict[str, set[str]] = {}
    for node in nodes:
        if node.type == DOCUMENT_TYPE:
            continue
        names = groups.setdefault(node.type, [])
        seen_names = seen.setdefault(node.type, set())
        if node.id not in seen_names:
            seen_names.add(node.id)
            names.append(node.id)
    return groups


def _build_lookup(names: Sequence[str]) -> dict[str, str]:
    """Map case-folded names back to the group's original spelling."""
    lookup: dict[str, str] = {}
    for name in names:
        lookup.setdefault(name.casefold(), name)
    return lookup


def _match_name(candidate: str, names: set[str], lookup: dict[str, str]) -> str | None:
    """Resolve an LLM-returned name to a name the group actually contains."""
    if candidate in names:
        return candidate
    cleaned = strip_entity_type_suffix(candidate.strip())
    if cleaned in names:
        return cleaned
    return lookup.get(cleaned.casefold())


# -----------------------------------------------------------------------------
# Resolution
# -----------------------------------------------------------------------------


async def _merge_group(
    entity_type: str,
    names: list[str],
    llm: "LLMProvider",
) -> EntityMerging | None:
    prompt = _MERGE_USER_TEMPLATE.format(
        entity_type=entity_type,
        names="\n".join(f"- {name}" for name in names),
    )
    try:
        return await llm.generate_structured(
            prompt,
            EntityMerging,
            system=_MERGE_SYSTEM_PROMPT,
        )
    except Exception as e:
        logger.warning("Entity merging failed for type %s: %s", entity_type, e)
        return None


def _apply_merging(
    mapping: EntityMapping,
    entity_type: str,
    names: list[str],
    merging: EntityMerging,
) -> int:
    """
    Record mapping entries for one group. Returns number of entries added.

    A name that is some cluster's canonical is never recorded as a variant,
    so overlapping clusters cannot chain (B -> A alongside A -> C).
    """
    name_set = set(names)
    lookup = _build_lookup(names)
    added = 0

    clusters: list[tuple[str, list[str]]] = []
    for cluster in merging.merged_entities:
        canonical = _match_name(cluster.canonical_name, name_set, lookup)
        if canonical is None:
            # Canonical spelling the group never contained: keep LLM's form
            canonical = strip_entity_type_suffix(cluster.canonical_name.strip())
        if canonical:
            clusters.append((canonical, cluster.variations))
    canonicals = {canonical for canonical, _ in clusters}

    for canonical, variations in clusters:
        for variation in variations:
            variant = _match_name(variation, name_set, lookup)
            if variant is None:
                logger.debug("Ignoring unknown %s variant %r", entity_type, variation)
                continue
            if variant != canonical and variant in canonicals:
                logger.debug("Ignoring %s variant %r: it is itself canonical", entity_type, variant)
                continue
            if mapping.add(entity_type, variant, canonical):
                added += 1

    return added


async def resolve_entities(
    nodes: Sequence[GraphNode],
    llm: "LLMProvider",
    *,
    progress_callback: ResolutionProgressCallback | None = None,
    throttle_seconds: float = 0.0,
) -> EntityMapping:
    """
    Build a per-type variant -> canonical name mapping.

    Args:
        nodes: Raw nodes from chunk extraction (DOCUMENT nodes are ignored)
        llm: LLM provider for structured generation
        progress_callback: Called with (percent 0-100, message)
        throttle_seconds: Pause between LLM calls

    Returns:
        EntityMapping. Canonical names are never keys.
    """
    mapping = EntityMapping()
    groups = group_names_by_type(nodes)

    if progress_callback is not None:
        progress_callback(0.0, "Grouping entities by type...")

    total = len(groups)
    for index, (entity_type, names) in enumerate(groups.items()):
        if progress_callback is not None:
            progress_callback(
                index / total * 100,
                f"Merging {entity_type} entities ({len(names)} found)...",
            )

        if len(names) <= 1:
            continue

        logger.info("Merging %d entities of type %s", len(names), entity_type)
        with telemetry_unit(entity_type):
            merging = await _merge_group(entity_type, names, llm)
        if merging is not None:
            added = _apply_merging(mapping, entity_type, names, merging)
            logger.debug("Type %s: %d merges (%s)", entity_type, added, merging.reasoning)

        if throttle_seconds > 0:
            await asyncio.sleep(throttle_seconds)

    if progress_callback is not None:
        progress_callback(100.0, f"Entity merging complete ({len(mapping)} merges)")

    return mapping
