import logging

from prompt_registry.schemas import BlockTier, Override, PromptSource, UpdatePromptInput


def _override(slug, content, **kw):
    kw.setdefault("source", PromptSource.V2_CORE)
    return Override(
        id=kw.pop("id", f"row-{slug}"),
        slug=slug,
        title=kw.pop("title", slug.title()),
        content=content,
        overrides_block_id=slug,
        **kw,
    )


async def test_catalog_default_when_no_override(registry, catalog):
    block = await registry.resolve_block("role_intro")
    assert block == catalog.get_block("role_intro")


async def test_override_wins_over_catalog(registry, store):
    store.seed(_override("role_intro", "You are a specialist.", tier=BlockTier.CAUTION, version=2))
    block = await registry.resolve_block("role_intro")
    assert block.id == "role_intro"
    assert block.content == "You are a specialist."
    assert block.tier == BlockTier.CAUTION


async def test_unknown_block_resolves_to_none(registry):
    assert await registry.resolve_block("ghost") is None


async def test_archived_override_is_ignored(registry, store):
    store.seed(_override("role_intro", "archived text", status="ARCHIVED"))
    block = await registry.resolve_block("role_intro")
    assert block.content == "You are an assistant."


async def test_resolve_many_keeps_order_and_skips_unknown(registry, store, caplog):
    store.seed(_override("safety", "Custom safety."))
    with caplog.at_level(logging.WARNING):
        blocks = await registry.resolve_blocks(["format", "ghost", "safety", "role_intro"])

    assert [b.id for b in blocks] == ["format", "safety", "role_intro"]
    assert blocks[1].content == "Custom safety."
    assert "Block not found: ghost" in caplog.text


async def test_resolve_many_reads_store_once(registry, store):
    await registry.resolve_blocks(["format", "safety", "role_intro"])
    assert len(store.list_calls) == 1
    assert store.get_calls == []


async def test_resolve_many_matches_single_resolution(registry, store):
    store.seed(_override("format", "Answer in plain text."))
    ids = ["role_intro", "format", "safety"]
    batched = await registry.resolve_blocks(ids)
    single = [await registry.resolve_block(i) for i in ids]
    assert batched == single


async def test_variant_resolution(registry, store):
    store.seed(_override("role_intro", "Base.", variants={"chat": "Chat flavour."}))
    assert await registry.resolve_block_variant("role_intro", "chat") == "Chat flavour."
    assert await registry.resolve_block_variant("role_intro", "rfp") == "Base."
    # no override: catalog content, unknown: None
    assert await registry.resolve_block_variant("safety", "chat") == "Never invent facts.\nCite sources."
    assert await registry.resolve_block_variant("ghost", "chat") is None


async def test_list_all_merges_catalog_libraries_and_custom(registry, store):
    store.seed(_override("format", "Answer in plain text.", version=3))
    store.seed(_override("library-context-it", "Custom IT rules.", source=PromptSource.LIBRARY_CONTEXT))
    store.seed(_override("my-custom", "Custom body.", source=PromptSource.CUSTOM))

    entries = {e.slug: e for e in await registry.list_all()}
    assert len(entries) == 4 + 3 + 1

    role = entries["role_intro"]
    assert role.id == "v2-role_intro"
    assert role.source == PromptSource.V2_CORE
    assert role.version == 1
    assert not role.has_override
    assert role.contexts == ["answer", "broken", "json_task"]

    fmt = entries["format"]
    assert fmt.has_override
    assert fmt.version == 3
    assert fmt.content == "Answer in plain text."
    assert fmt.id == "row-format"

    it = entries["library-context-it"]
    assert it.source == PromptSource.LIBRARY_CONTEXT
    assert it.content == "Custom IT rules."
    assert it.has_override

    hr = entries["library-context-hr"]
    assert hr.content == ""
    assert hr.tier == BlockTier.CAUTION
    assert hr.categories == ["library-context", "hr"]
    assert hr.name == "Library Context: Hr"

    custom = entries["my-custom"]
    assert custom.source == PromptSource.CUSTOM
    assert custom.has_override


async def test_list_all_reflects_current_override(registry):
    await registry.update(
        "format", UpdatePromptInput(content="Bullets only.", commit_message="shorter")
    )
    entry = next(e for e in await registry.list_all() if e.slug == "format")
    resolved = await registry.resolve_block("format")
    assert entry.content == resolved.content == "Bullets only."
    assert entry.version == 2


async def test_get_by_slug_and_id(registry, store):
    store.seed(_override("my-custom", "Custom body.", id="abc-123", source=PromptSource.CUSTOM))

    assert (await registry.get_by_slug("my-custom")).id == "abc-123"
    assert (await registry.get_by_slug("nope")) is None
    assert (await registry.get_by_id("abc-123")).slug == "my-custom"
    assert (await registry.get_by_id("v2-safety")).slug == "safety"
    assert (await registry.get_by_id("library-context-gtm")).content == "GTM library rules."
    assert (await registry.get_by_id("missing")) is None
