# prompt_registry/services/store.py
"""Persistence for prompt overrides and custom blocks.

Maps ``PromptBlockRow`` rows to ``Override`` records. Every write commits on
its own; updates are compare-and-swap on ``version`` so two editors racing
on the same block cannot both claim the next version number.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import Conflict
from ..models import BlockStatus, PromptBlockRow
from ..schemas import BlockTier, Override, PromptSource, VersionEntry
from ..settings.config import settings

logger = logging.getLogger(__name__)

_OWNED_ATTRS = {"promptTier", "promptSource", "overridesBlockId", "contextVariants", "versionHistory"}


# ---------- row <-> record mapping ----------

def row_to_override(row: PromptBlockRow) -> Override:
    attrs: dict[str, Any] = dict(row.attributes or {})
    overrides_block_id = attrs.get("overridesBlockId")

    raw_source = attrs.get("promptSource")
    if raw_source:
        source = PromptSource(raw_source)
    else:
        # rows written before promptSource existed
        source = PromptSource.V2_CORE if overrides_block_id else PromptSource.CUSTOM

    entry_type = row.entry_type or "system-block"
    if source == PromptSource.CUSTOM and attrs.get("presetConfig"):
        entry_type = "preset"

    return Override(
        id=row.id,
        slug=row.slug or row.id,
        title=row.title,
        description=row.description or "",
        content=row.content or "",
        tier=BlockTier(attrs.get("promptTier") or row.tier or BlockTier.OPEN),
        source=source,
        overrides_block_id=overrides_block_id,
        entry_type=entry_type,
        categories=list(row.categories or []),
        version=row.version or 1,
        status=row.status,
        variants=attrs.get("contextVariants"),
        version_history=[VersionEntry.model_validate(e) for e in attrs.get("versionHistory") or []],
        extra_attributes={k: v for k, v in attrs.items() if k not in _OWNED_ATTRS},
        updated_at=row.updated_at,
    )


def override_attributes(override: Override) -> dict[str, Any]:
    attrs: dict[str, Any] = dict(override.extra_attributes)
    attrs["promptTier"] = int(override.tier)
    attrs["promptSource"] = override.source.value
    if override.overrides_block_id and not override.is_custom:
        attrs["overridesBlockId"] = override.overrides_block_id
    if override.variants is not None:
        attrs["contextVariants"] = dict(override.variants)
    attrs["versionHistory"] = [
        e.model_dump(mode="json", by_alias=True) for e in override.version_history
    ]
    return attrs


def _row_values(override: Override) -> dict[str, Any]:
    return {
        "slug": override.slug,
        "entry_type": override.entry_type,
        "title": override.title,
        "description": override.description,
        "content": override.content,
        "tier": int(override.tier),
        "categories": list(override.categories),
        "version": override.version,
        "status": override.status,
        "attributes": override_attributes(override),
    }


# ---------- store ----------

class OverrideStore:
    def __init__(self, db: AsyncSession, library_id: Optional[str] = None):
        self.db = db
        self.library_id = library_id or settings.PROMPT_LIBRARY_ID

    def _select(self, *, active_only: bool = True):
        q = select(PromptBlockRow).where(PromptBlockRow.library_id == self.library_id)
        if active_only:
            q = q.where(PromptBlockRow.status == BlockStatus.active.value)
        return q

    @staticmethod
    def _slug_matches(slugs: list[str]):
        # legacy rows without a slug are addressed by their id
        return or_(
            PromptBlockRow.slug.in_(slugs),
            and_(PromptBlockRow.slug.is_(None), PromptBlockRow.id.in_(slugs)),
        )

    async def get(self, slug: str) -> Optional[Override]:
        row = (await self.db.execute(self._select().where(self._slug_matches([slug])))).scalars().first()
        return row_to_override(row) if row else None

    async def get_by_id(self, override_id: str) -> Optional[Override]:
        row = (
            await self.db.execute(self._select().where(PromptBlockRow.id == override_id))
        ).scalars().first()
        return row_to_override(row) if row else None

    async def list_active(self, slugs: Optional[Iterable[str]] = None) -> list[Override]:
        q = self._select()
        if slugs is not None:
            wanted = list(dict.fromkeys(slugs))
            if not wanted:
                return []
            q = q.where(self._slug_matches(wanted))
        rows = (await self.db.execute(q.order_by(PromptBlockRow.slug, PromptBlockRow.id))).scalars().all()
        return [row_to_override(r) for r in rows]

    async def exists(self, slug: str) -> bool:
        """True if any row, in any status, already uses ``slug``."""
        q = (
            select(PromptBlockRow.id)
            .where(or_(PromptBlockRow.slug == slug, PromptBlockRow.id == slug))
            .limit(1)
        )
        return (await self.db.execute(q)).scalar_one_or_none() is not None

    async def add(self, override: Override) -> Override:
        row = PromptBlockRow(id=override.id, library_id=self.library_id, **_row_values(override))
        self.db.add(row)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.warning("Insert of prompt %s lost a race with another writer", override.slug)
            raise Conflict(override.slug)
        await self.db.refresh(row)
        return row_to_override(row)

    async def save(self, override: Override, expected_version: int) -> Override:
        result = await self.db.execute(
            update(PromptBlockRow)
            .where(PromptBlockRow.id == override.id, PromptBlockRow.version == expected_version)
            .values(**_row_values(override), updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await self.db.rollback()
            logger.warning(
                "Version conflict on prompt %s: expected v%s", override.slug, expected_version
            )
            raise Conflict(override.slug, expected_version)
        await self.db.commit()
        row = await self.db.get(PromptBlockRow, override.id, populate_existing=True)
        return row_to_override(row)

    async def delete(self, override: Override) -> None:
        result = await self.db.execute(
            delete(PromptBlockRow)
            .where(PromptBlockRow.id == override.id, PromptBlockRow.version == override.version)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await self.db.rollback()
            raise Conflict(override.slug, override.version)
        await self.db.commit()
