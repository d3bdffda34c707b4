# prompt_registry/services/composition.py
"""Turns a composition into the system prompt text sent to the model.

Assembly is best effort: blocks that resolve to nothing are reported in
``missing_block_ids`` and left out of the text, never raised.
"""
from __future__ import annotations

import logging
import math
from typing import List, Optional

from ..catalog.catalog import library_context_slug
from ..schemas import AssembledPrompt, BlockDefinition, Composition
from .resolution import Resolver

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Rough token count (~4 characters per token)."""
    if not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def _section(heading: str, body: str) -> str:
    return f"## {heading}\n\n{body}"


class LibraryContextResolver:
    def __init__(self, resolver: Resolver):
        self.store = resolver.store
        self.catalog = resolver.catalog

    async def resolve(self, library_id: str) -> str:
        override = await self.store.get(library_context_slug(library_id))
        if override:
            return override.content
        return self.catalog.library_context_default(library_id)


class CompositionAssembler:
    def __init__(self, resolver: Resolver, library_contexts: Optional[LibraryContextResolver] = None):
        self.resolver = resolver
        self.library_contexts = library_contexts or LibraryContextResolver(resolver)

    async def assemble(
        self,
        composition: Composition,
        library_id: Optional[str] = None,
        additional_context: Optional[str] = None,
    ) -> AssembledPrompt:
        blocks: List[BlockDefinition] = await self.resolver.resolve_many(composition.block_ids)

        resolved_ids = {b.id for b in blocks}
        missing = [bid for bid in dict.fromkeys(composition.block_ids) if bid not in resolved_ids]
        if missing:
            logger.warning(
                "Composition %s references unknown blocks: %s", composition.id, ", ".join(missing)
            )

        parts = [_section(b.name, b.content) for b in blocks if b.content.strip()]

        if composition.output_format == "json" and composition.output_schema:
            parts.append(
                _section("Expected Output Schema", f"```json\n{composition.output_schema}\n```")
            )

        if library_id:
            library_context = await self.library_contexts.resolve(library_id)
            if library_context:
                parts.append(_section("Library Context", library_context))

        if additional_context:
            parts.append(_section("Additional Context", additional_context))

        text = "\n\n".join(parts)
        return AssembledPrompt(
            composition_id=composition.id,
            text=text,
            resolved_blocks=blocks,
            missing_block_ids=missing,
            blocks_used=[b.id for b in blocks],
            output_format=composition.output_format,
            estimated_tokens=estimate_tokens(text),
        )
