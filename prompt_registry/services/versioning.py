# prompt_registry/services/versioning.py
"""Content changes, version history and rollback.

Every content-changing call appends exactly one history entry and bumps
``version`` by one. The catalog default counts as version 1 without an
entry of its own, so the first edit of a catalog block is version 2.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from ..errors import InvalidOperation, NotFound, ValidationFailed, VersionNotFound
from ..schemas import ManagedPrompt, Override, UpdatePromptInput, VersionEntry
from ..settings.config import settings
from .diffing import line_diff
from .resolution import Resolver

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def require_commit_message(message: Optional[str], slug: str) -> str:
    message = (message or "").strip()
    if not message:
        raise ValidationFailed("commit_message is required", slug=slug)
    return message


class VersionManager:
    def __init__(self, resolver: Resolver, clock: Optional[Clock] = None):
        self.resolver = resolver
        self.store = resolver.store
        self.clock = clock or utcnow

    async def _load(self, slug: str) -> tuple[Optional[Override], ManagedPrompt]:
        override = await self.store.get(slug)
        current = self.resolver.managed_view(slug, override)
        if current is None:
            raise NotFound(f"Prompt not found: {slug}", slug=slug)
        return override, current

    async def _commit(
        self,
        slug: str,
        override: Optional[Override],
        current: ManagedPrompt,
        *,
        message: str,
        actor: Optional[str],
        content: Optional[str] = None,
        variants: Optional[Dict[str, str]] = None,
        name: Optional[str] = None,
        description: Optional[str] = None,
        categories: Optional[List[str]] = None,
    ) -> ManagedPrompt:
        new_content = content if content is not None else current.content
        new_variants = variants if variants is not None else current.variants
        new_version = current.version + 1
        entry = VersionEntry(
            version=new_version,
            content=new_content,
            variants_snapshot=new_variants,
            commit_message=message,
            changed_by=actor or settings.DEFAULT_ACTOR,
            changed_at=self.clock(),
            diff=line_diff(current.content, new_content),
        )

        if override is not None:
            changed = override.model_copy(
                update={
                    "title": name if name is not None else override.title,
                    "description": description if description is not None else override.description,
                    "content": new_content,
                    "variants": new_variants,
                    "categories": categories if categories is not None else override.categories,
                    "version": new_version,
                    "version_history": [*override.version_history, entry],
                }
            )
            saved = await self.store.save(changed, expected_version=override.version)
        else:
            # first edit of a catalog block or library context
            if await self.store.exists(slug):
                # an inactive row still holds the slug
                raise InvalidOperation(
                    f"Prompt {slug} has an inactive stored row; restore or remove it before editing",
                    slug=slug,
                )
            created = Override(
                id=str(uuid.uuid4()),
                slug=slug,
                title=name if name is not None else current.name,
                description=description if description is not None else current.description,
                content=new_content,
                tier=current.tier,
                source=current.source,
                overrides_block_id=slug,
                entry_type=current.type,
                categories=categories if categories is not None else list(current.categories),
                version=new_version,
                variants=new_variants,
                version_history=[entry],
            )
            saved = await self.store.add(created)

        logger.info(
            "Prompt %s updated to v%s by %s: %s", slug, new_version, entry.changed_by, message
        )
        return self.resolver.managed_view(slug, saved)

    async def update(self, slug: str, data: UpdatePromptInput) -> ManagedPrompt:
        message = require_commit_message(data.commit_message, slug)
        override, current = await self._load(slug)
        return await self._commit(
            slug,
            override,
            current,
            message=message,
            actor=data.user_id,
            content=data.content,
            variants=data.variants,
            name=data.name,
            description=data.description,
            categories=data.categories,
        )

    async def update_variant(
        self, slug: str, context: str, content: str, commit_message: str, user_id: Optional[str]
    ) -> ManagedPrompt:
        message = require_commit_message(commit_message, slug)
        if not (context or "").strip():
            raise ValidationFailed("variant context is required", slug=slug)
        override, current = await self._load(slug)
        variants = {**(current.variants or {}), context: content}
        return await self._commit(
            slug, override, current, message=message, actor=user_id, variants=variants
        )

    async def get_history(self, slug: str) -> List[VersionEntry]:
        override = await self.store.get(slug)
        if override is None:
            return []
        return list(override.version_history)

    async def rollback(self, slug: str, target_version: int, user_id: Optional[str]) -> ManagedPrompt:
        override, current = await self._load(slug)
        history = override.version_history if override else []
        target = next((e for e in reversed(history) if e.version == target_version), None)
        if target is None:
            raise VersionNotFound(slug, target_version)
        if target_version == current.version:
            raise InvalidOperation(
                f"Prompt {slug} is already at version {target_version}; nothing to roll back",
                slug=slug,
            )
        logger.info("Rolling back prompt %s from v%s to v%s", slug, current.version, target_version)
        return await self._commit(
            slug,
            override,
            current,
            message=f"Rollback to version {target_version}",
            actor=user_id,
            content=target.content,
            variants=target.variants_snapshot,
        )
