# prompt_registry/services/registry.py
"""Entry point used by the admin API and by prompt-building callers.

Usage:
    registry = PromptRegistry(default_catalog(), OverrideStore(db))
    built = await registry.build_composition("chat_response", library_id="it")
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from ..catalog.catalog import BlockCatalog
from ..errors import PromptRegistryError
from ..schemas import (
    AssembledPrompt,
    BlockDefinition,
    Composition,
    CreatePromptInput,
    ImportPromptItem,
    ImportPromptsInput,
    ManagedPrompt,
    UpdatePromptInput,
    VersionEntry,
)
from .composition import CompositionAssembler, LibraryContextResolver
from .lifecycle import Lifecycle
from .resolution import Resolver
from .store import OverrideStore
from .versioning import Clock, VersionManager, utcnow

logger = logging.getLogger(__name__)


def _matches(current: ManagedPrompt, item: ImportPromptItem) -> bool:
    if item.categories is not None and list(item.categories) != list(current.categories):
        return False
    return (
        current.content == item.content
        and current.name == item.name
        and (current.description or "") == (item.description or "")
        and (current.variants or {}) == (item.variants or {})
    )


class PromptRegistry:
    def __init__(self, catalog: BlockCatalog, store: OverrideStore, clock: Optional[Clock] = None):
        self.catalog = catalog
        self.store = store
        self.clock = clock or utcnow
        self.resolver = Resolver(catalog, store)
        self.versions = VersionManager(self.resolver, clock=self.clock)
        self.lifecycle = Lifecycle(self.resolver, clock=self.clock)
        self.library_contexts = LibraryContextResolver(self.resolver)
        self.assembler = CompositionAssembler(self.resolver, self.library_contexts)

    # ---------- listing ----------
    async def list_all(self) -> List[ManagedPrompt]:
        return await self.resolver.list_all()

    async def get_by_slug(self, slug: str) -> Optional[ManagedPrompt]:
        return await self.resolver.get_by_slug(slug)

    async def get_by_id(self, prompt_id: str) -> Optional[ManagedPrompt]:
        return await self.resolver.get_by_id(prompt_id)

    # ---------- lifecycle ----------
    async def create(self, data: CreatePromptInput) -> ManagedPrompt:
        return await self.lifecycle.create(data)

    async def reset_to_default(self, slug: str) -> Optional[ManagedPrompt]:
        return await self.lifecycle.reset_to_default(slug)

    async def delete(self, slug: str) -> None:
        await self.lifecycle.delete(slug)

    # ---------- versioning ----------
    async def update(self, slug: str, data: UpdatePromptInput) -> ManagedPrompt:
        return await self.versions.update(slug, data)

    async def update_variant(
        self, slug: str, context: str, content: str, commit_message: str, user_id: Optional[str] = None
    ) -> ManagedPrompt:
        return await self.versions.update_variant(slug, context, content, commit_message, user_id)

    async def get_version_history(self, slug: str) -> List[VersionEntry]:
        return await self.versions.get_history(slug)

    async def rollback(self, slug: str, version: int, user_id: Optional[str] = None) -> ManagedPrompt:
        return await self.versions.rollback(slug, version, user_id)

    # ---------- resolution ----------
    async def resolve_block(self, block_id: str) -> Optional[BlockDefinition]:
        return await self.resolver.resolve(block_id)

    async def resolve_blocks(self, block_ids: Iterable[str]) -> List[BlockDefinition]:
        return await self.resolver.resolve_many(block_ids)

    async def resolve_block_variant(self, block_id: str, context: str) -> Optional[str]:
        return await self.resolver.resolve_variant(block_id, context)

    async def resolve_library_context(self, library_id: str) -> str:
        return await self.library_contexts.resolve(library_id)

    async def build_composition(
        self,
        composition: Union[Composition, str],
        library_id: Optional[str] = None,
        additional_context: Optional[str] = None,
    ) -> AssembledPrompt:
        if isinstance(composition, str):
            composition = self.catalog.get_composition(composition)
        return await self.assembler.assemble(
            composition, library_id=library_id, additional_context=additional_context
        )

    # ---------- export ----------
    async def export(self) -> Dict[str, Any]:
        """Snapshot of every managed prompt plus the history of overridden ones."""
        prompts = await self.list_all()
        overrides = {o.slug: o for o in await self.store.list_active()}
        items = []
        for prompt in prompts:
            item = prompt.model_dump(mode="json")
            override = overrides.get(prompt.slug)
            item["version_history"] = (
                [e.model_dump(mode="json", by_alias=True) for e in override.version_history] if override else []
            )
            items.append(item)
        return {
            "exported_at": self.clock().isoformat(),
            "total_prompts": len(items),
            "total_overrides": len(overrides),
            "prompts": items,
        }

    # ---------- import ----------
    async def import_prompts(self, data: ImportPromptsInput) -> Dict[str, Any]:
        """Apply an export file through the normal edit paths.

        Existing prompts get a new version only when something differs, so
        importing the same file twice adds nothing. Unknown slugs become
        custom blocks. A failing entry is reported and the rest still apply.
        """
        created = updated = unchanged = 0
        errors: List[Dict[str, str]] = []
        for item in data.prompts:
            try:
                current = await self.get_by_slug(item.slug)
                if current is None:
                    await self.create(
                        CreatePromptInput(
                            slug=item.slug,
                            name=item.name,
                            description=item.description,
                            content=item.content,
                            tier=item.tier,
                            type=item.type,
                            variants=item.variants,
                            categories=item.categories,
                            commit_message=data.commit_message,
                            user_id=data.user_id,
                        )
                    )
                    created += 1
                elif _matches(current, item):
                    unchanged += 1
                else:
                    await self.update(
                        item.slug,
                        UpdatePromptInput(
                            content=item.content,
                            name=item.name,
                            description=item.description,
                            variants=item.variants,
                            categories=item.categories,
                            commit_message=data.commit_message,
                            user_id=data.user_id,
                        ),
                    )
                    updated += 1
            except PromptRegistryError as exc:
                logger.warning("Import of prompt %s failed: %s", item.slug, exc.detail)
                errors.append({"slug": item.slug, "error": exc.kind, "detail": exc.detail})

        logger.info(
            "Prompt import: %d created, %d updated, %d unchanged, %d failed",
            created, updated, unchanged, len(errors),
        )
        return {
            "ok": not errors,
            "created": created,
            "updated": updated,
            "unchanged": unchanged,
            "total": len(data.prompts),
            "errors": errors,
        }
