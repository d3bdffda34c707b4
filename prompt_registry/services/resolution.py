# prompt_registry/services/resolution.py
"""Override-first resolution of blocks, and the merged admin listing.

A persisted, ACTIVE override always wins over the catalog default. Nothing
is cached: every call reads the store again.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from ..catalog.catalog import BlockCatalog, library_context_slug
from ..schemas import (
    BlockDefinition,
    BlockTier,
    ManagedPrompt,
    Override,
    PromptSource,
)
from .store import OverrideStore

logger = logging.getLogger(__name__)


def _override_as_block(block_id: str, override: Override) -> BlockDefinition:
    return BlockDefinition(
        id=block_id,
        name=override.title,
        description=override.description or "",
        tier=override.tier,
        content=override.content,
    )


class Resolver:
    def __init__(self, catalog: BlockCatalog, store: OverrideStore):
        self.catalog = catalog
        self.store = store

    # ---------- single / batched resolution ----------

    async def resolve(self, block_id: str) -> Optional[BlockDefinition]:
        override = await self.store.get(block_id)
        if override:
            return _override_as_block(block_id, override)
        return self.catalog.get_block(block_id)

    async def resolve_many(self, block_ids: Iterable[str]) -> List[BlockDefinition]:
        ids = list(block_ids)
        by_slug = {o.slug: o for o in await self.store.list_active(ids)}

        result: List[BlockDefinition] = []
        for block_id in ids:
            override = by_slug.get(block_id)
            if override:
                result.append(_override_as_block(block_id, override))
                continue
            block = self.catalog.get_block(block_id)
            if block:
                result.append(block)
                continue
            logger.warning("Block not found: %s", block_id)
        return result

    async def resolve_variant(self, block_id: str, context: str) -> Optional[str]:
        override = await self.store.get(block_id)
        if override:
            variants = override.variants or {}
            return variants.get(context) or override.content
        block = self.catalog.get_block(block_id)
        return block.content if block else None

    # ---------- managed view ----------

    def _contexts_for(self, block_id: str) -> List[str]:
        return [c.id for c in self.catalog.compositions if block_id in c.block_ids]

    def _catalog_entry(self, block: BlockDefinition, override: Optional[Override]) -> ManagedPrompt:
        if override is None:
            return ManagedPrompt(
                id=f"v2-{block.id}",
                slug=block.id,
                name=block.name,
                description=block.description,
                content=block.content,
                tier=block.tier,
                source=PromptSource.V2_CORE,
                type="system-block",
                contexts=self._contexts_for(block.id),
                has_override=False,
                version=1,
            )
        return ManagedPrompt(
            id=override.id,
            slug=block.id,
            name=override.title,
            description=override.description,
            content=override.content,
            tier=override.tier,
            source=PromptSource.V2_CORE,
            type="system-block",
            variants=override.variants,
            contexts=self._contexts_for(block.id),
            has_override=True,
            version=override.version,
            updated_at=override.updated_at,
            categories=list(override.categories),
        )

    def _library_entry(self, library_id: str, override: Optional[Override]) -> ManagedPrompt:
        slug = library_context_slug(library_id)
        return ManagedPrompt(
            id=override.id if override else slug,
            slug=slug,
            name=override.title if override else f"Library Context: {library_id.capitalize()}",
            description=(
                override.description if override
                else f"Context injected when building {library_id} skills"
            ),
            content=override.content if override else self.catalog.library_context_default(library_id),
            tier=override.tier if override else BlockTier.CAUTION,
            source=PromptSource.LIBRARY_CONTEXT,
            type="library-context",
            variants=override.variants if override else None,
            has_override=override is not None,
            version=override.version if override else 1,
            updated_at=override.updated_at if override else None,
            categories=["library-context", library_id],
        )

    @staticmethod
    def _custom_entry(override: Override) -> ManagedPrompt:
        return ManagedPrompt(
            id=override.id,
            slug=override.slug,
            name=override.title,
            description=override.description,
            content=override.content,
            tier=override.tier,
            source=override.source,
            type=override.entry_type,
            variants=override.variants,
            has_override=True,
            version=override.version,
            updated_at=override.updated_at,
            categories=list(override.categories),
        )

    def managed_view(self, slug: str, override: Optional[Override]) -> Optional[ManagedPrompt]:
        block = self.catalog.get_block(slug)
        if block:
            return self._catalog_entry(block, override)
        library_id = self.catalog.library_id_for_slug(slug)
        if library_id is not None:
            return self._library_entry(library_id, override)
        if override:
            return self._custom_entry(override)
        return None

    async def list_all(self) -> List[ManagedPrompt]:
        overrides = {o.slug: o for o in await self.store.list_active()}
        merged: dict[str, ManagedPrompt] = {}

        def _put(entry: ManagedPrompt) -> None:
            if entry.slug in merged:
                raise RuntimeError(f"Duplicate managed prompt id: {entry.slug}")
            merged[entry.slug] = entry

        # 1. catalog blocks
        for block in self.catalog.blocks:
            _put(self._catalog_entry(block, overrides.get(block.id)))

        # 2. library contexts
        for library_id in self.catalog.library_ids:
            _put(self._library_entry(library_id, overrides.get(library_context_slug(library_id))))

        # 3. overrides nothing above claimed
        for slug, override in overrides.items():
            if slug not in merged:
                _put(self._custom_entry(override))

        return list(merged.values())

    async def get_by_slug(self, slug: str) -> Optional[ManagedPrompt]:
        return self.managed_view(slug, await self.store.get(slug))

    async def get_by_id(self, prompt_id: str) -> Optional[ManagedPrompt]:
        override = await self.store.get_by_id(prompt_id)
        if override:
            return self.managed_view(override.slug, override)
        # synthetic ids of entries without a persisted row
        for entry in await self.list_all():
            if entry.id == prompt_id:
                return entry
        return None
