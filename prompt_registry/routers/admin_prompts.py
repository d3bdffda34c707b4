from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..catalog.catalog import BlockCatalog, default_catalog
from ..database import get_db
from ..schemas import (
    AssembledPrompt,
    BlockDefinition,
    BuildCompositionInput,
    CreatePromptInput,
    ImportPromptsInput,
    ManagedPrompt,
    ResolveBlocksInput,
    RollbackInput,
    UpdatePromptInput,
    VariantUpdateInput,
    VersionEntry,
)
from ..services.registry import PromptRegistry
from ..services.store import OverrideStore

router = APIRouter(prefix="/api/admin/prompts", tags=["admin", "prompts"])


def get_catalog() -> BlockCatalog:
    return default_catalog()


async def get_registry(
    db: AsyncSession = Depends(get_db),
    catalog: BlockCatalog = Depends(get_catalog),
) -> PromptRegistry:
    return PromptRegistry(catalog, OverrideStore(db))


# ---------- collection ----------

@router.get("", response_model=List[ManagedPrompt])
async def admin_prompts_list(registry: PromptRegistry = Depends(get_registry)):
    return await registry.list_all()


@router.get("/export")
async def admin_prompts_export(registry: PromptRegistry = Depends(get_registry)):
    return JSONResponse(await registry.export())


@router.post("/import")
async def admin_prompts_import(
    payload: ImportPromptsInput,
    registry: PromptRegistry = Depends(get_registry),
):
    if not payload.prompts:
        raise HTTPException(400, "No prompts provided")
    return await registry.import_prompts(payload)


@router.post("", response_model=ManagedPrompt, status_code=201)
async def admin_prompts_create(
    payload: CreatePromptInput,
    registry: PromptRegistry = Depends(get_registry),
):
    return await registry.create(payload)


@router.get("/by-id/{prompt_id}", response_model=ManagedPrompt)
async def admin_prompts_get_by_id(prompt_id: str, registry: PromptRegistry = Depends(get_registry)):
    prompt = await registry.get_by_id(prompt_id)
    if not prompt:
        raise HTTPException(404, f"Prompt not found: {prompt_id}")
    return prompt


@router.post("/resolve", response_model=List[BlockDefinition])
async def admin_prompts_resolve_many(
    payload: ResolveBlocksInput,
    registry: PromptRegistry = Depends(get_registry),
):
    return await registry.resolve_blocks(payload.block_ids)


@router.get("/library-context/{library_id}")
async def admin_prompts_library_context(library_id: str, registry: PromptRegistry = Depends(get_registry)):
    return {"library_id": library_id, "content": await registry.resolve_library_context(library_id)}


@router.post("/compositions/{composition_id}/build", response_model=AssembledPrompt)
async def admin_prompts_build_composition(
    composition_id: str,
    payload: Optional[BuildCompositionInput] = None,
    registry: PromptRegistry = Depends(get_registry),
):
    payload = payload or BuildCompositionInput()
    return await registry.build_composition(
        composition_id,
        library_id=payload.library_id,
        additional_context=payload.additional_context,
    )


# ---------- single prompt ----------

@router.get("/{slug}", response_model=ManagedPrompt)
async def admin_prompts_get(slug: str, registry: PromptRegistry = Depends(get_registry)):
    prompt = await registry.get_by_slug(slug)
    if not prompt:
        raise HTTPException(404, f"Prompt not found: {slug}")
    return prompt


@router.put("/{slug}", response_model=ManagedPrompt)
async def admin_prompts_update(
    slug: str,
    payload: UpdatePromptInput,
    registry: PromptRegistry = Depends(get_registry),
):
    return await registry.update(slug, payload)


@router.put("/{slug}/variants/{context}", response_model=ManagedPrompt)
async def admin_prompts_update_variant(
    slug: str,
    context: str,
    payload: VariantUpdateInput,
    registry: PromptRegistry = Depends(get_registry),
):
    return await registry.update_variant(
        slug, context, payload.content, payload.commit_message, payload.user_id
    )


@router.delete("/{slug}")
async def admin_prompts_delete(
    slug: str,
    action: Literal["delete", "reset"] = Query("delete"),
    registry: PromptRegistry = Depends(get_registry),
):
    if action == "reset":
        # destroys the override's whole version history
        restored = await registry.reset_to_default(slug)
        return {
            "ok": True,
            "message": "Prompt reset to default; version history discarded",
            "slug": slug,
            "prompt": restored.model_dump(mode="json") if restored else None,
        }
    await registry.delete(slug)
    return {"ok": True, "message": "Prompt deleted", "slug": slug}


@router.get("/{slug}/history", response_model=List[VersionEntry])
async def admin_prompts_history(slug: str, registry: PromptRegistry = Depends(get_registry)):
    history = await registry.get_version_history(slug)
    # newest first for display
    return list(reversed(history))


@router.post("/{slug}/rollback", response_model=ManagedPrompt)
async def admin_prompts_rollback(
    slug: str,
    payload: RollbackInput,
    registry: PromptRegistry = Depends(get_registry),
):
    return await registry.rollback(slug, payload.version, payload.user_id)


@router.get("/{slug}/resolved")
async def admin_prompts_resolved(
    slug: str,
    context: Optional[str] = None,
    registry: PromptRegistry = Depends(get_registry),
):
    if context:
        content = await registry.resolve_block_variant(slug, context)
        if content is None:
            raise HTTPException(404, f"Block not found: {slug}")
        return {"id": slug, "context": context, "content": content}
    block = await registry.resolve_block(slug)
    if not block:
        raise HTTPException(404, f"Block not found: {slug}")
    return block
