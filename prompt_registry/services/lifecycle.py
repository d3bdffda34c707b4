# prompt_registry/services/lifecycle.py
from __future__ import annotations

import logging
import uuid
from typing import Optional

from ..errors import InvalidOperation, NotFound, ValidationFailed
from ..schemas import CreatePromptInput, ManagedPrompt, Override, PromptSource, VersionEntry
from ..settings.config import settings
from .resolution import Resolver
from .versioning import Clock, require_commit_message, utcnow

logger = logging.getLogger(__name__)


class Lifecycle:
    """Create custom blocks, reset overrides, delete custom blocks.

    Catalog blocks can never disappear from the listing, so overrides are
    only ever reset and custom blocks are only ever deleted.
    """

    def __init__(self, resolver: Resolver, clock: Optional[Clock] = None):
        self.resolver = resolver
        self.catalog = resolver.catalog
        self.store = resolver.store
        self.clock = clock or utcnow

    async def create(self, data: CreatePromptInput) -> ManagedPrompt:
        slug = (data.slug or "").strip()
        if not slug:
            raise ValidationFailed("slug is required")
        if not (data.name or "").strip():
            raise ValidationFailed("name is required", slug=slug)
        message = require_commit_message(data.commit_message, slug)

        if self.catalog.is_reserved(slug):
            raise ValidationFailed(
                f"Slug {slug} belongs to a built-in prompt; edit it instead of creating it",
                slug=slug,
            )
        if await self.store.exists(slug):
            raise ValidationFailed(f"A prompt with slug {slug} already exists", slug=slug)

        actor = data.user_id or settings.DEFAULT_ACTOR
        override = Override(
            id=str(uuid.uuid4()),
            slug=slug,
            title=data.name,
            description=data.description or "",
            content=data.content,
            tier=data.tier,
            source=PromptSource.CUSTOM,
            entry_type=data.type,
            categories=list(data.categories or []),
            version=1,
            variants=data.variants,
            version_history=[
                VersionEntry(
                    version=1,
                    content=data.content,
                    variants_snapshot=data.variants,
                    commit_message=message,
                    changed_by=actor,
                    changed_at=self.clock(),
                )
            ],
        )
        saved = await self.store.add(override)
        logger.info("Custom prompt %s created by %s", slug, actor)
        return self.resolver.managed_view(slug, saved)

    async def reset_to_default(self, slug: str) -> Optional[ManagedPrompt]:
        """Drop the override and its whole history. Cannot be undone.

        Returns the default that is now in effect.
        """
        override = await self.store.get(slug)
        if override is None:
            if self.resolver.managed_view(slug, None) is None:
                raise NotFound(f"Prompt not found: {slug}", slug=slug)
            raise InvalidOperation(
                f"Nothing to reset - prompt {slug} has no override", slug=slug
            )
        if override.is_custom:
            raise InvalidOperation(
                f"Cannot reset custom prompt {slug} - use delete instead", slug=slug
            )

        await self.store.delete(override)
        logger.info(
            "Prompt %s reset to default; discarded v%s and %d history entries",
            slug, override.version, len(override.version_history),
        )
        # None when the block it overrode is gone from the catalog
        return self.resolver.managed_view(slug, None)

    async def delete(self, slug: str) -> None:
        override = await self.store.get(slug)
        if override is None:
            if self.resolver.managed_view(slug, None) is None:
                raise NotFound(f"Prompt not found: {slug}", slug=slug)
            raise InvalidOperation(
                f"Cannot delete built-in prompt {slug}", slug=slug
            )
        if not override.is_custom:
            raise InvalidOperation(
                f"Cannot delete built-in prompt {slug} - use resetToDefault instead", slug=slug
            )

        await self.store.delete(override)
        logger.info("Custom prompt %s deleted", slug)
