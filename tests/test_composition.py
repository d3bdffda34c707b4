import logging

import pytest

from prompt_registry.errors import NotFound
from prompt_registry.schemas import Composition, UpdatePromptInput
from prompt_registry.services.composition import estimate_tokens


async def test_sections_follow_composition_order(registry):
    built = await registry.build_composition("answer")

    assert built.composition_id == "answer"
    assert built.blocks_used == ["role_intro", "safety", "format"]
    assert built.missing_block_ids == []
    assert built.output_format == "markdown"
    assert built.text == (
        "## Role\n\nYou are an assistant.\n\n"
        "## Safety\n\nNever invent facts.\nCite sources.\n\n"
        "## Format\n\nAnswer in markdown."
    )
    assert built.estimated_tokens == estimate_tokens(built.text)


async def test_overrides_flow_into_assembly(registry):
    await registry.update(
        "role_intro", UpdatePromptInput(name="Persona", content="You are a specialist.", commit_message="m")
    )
    built = await registry.build_composition("answer")
    assert built.text.startswith("## Persona\n\nYou are a specialist.")


async def test_missing_blocks_are_reported_not_raised(registry, caplog):
    with caplog.at_level(logging.WARNING):
        built = await registry.build_composition("broken")

    assert built.missing_block_ids == ["ghost", "phantom"]
    assert built.blocks_used == ["role_intro", "safety"]
    assert "ghost" not in built.text
    assert "broken" in caplog.text


async def test_missing_ids_reported_once(registry):
    comp = Composition(id="dupes", name="Dupes", block_ids=("ghost", "role_intro", "ghost"))
    built = await registry.build_composition(comp)
    assert built.missing_block_ids == ["ghost"]


async def test_blank_blocks_skipped_and_schema_appended(registry):
    built = await registry.build_composition("json_task")

    assert built.blocks_used == ["role_intro", "blank"]
    assert "## Blank" not in built.text
    assert built.text.endswith(
        '## Expected Output Schema\n\n```json\n{"answer": "string"}\n```'
    )


async def test_library_and_additional_context(registry):
    built = await registry.build_composition(
        "answer", library_id="it", additional_context="Customer is a bank."
    )
    sections = built.text.split("\n\n## ")
    assert sections[-2] == "Library Context\n\nIT library rules."
    assert sections[-1] == "Additional Context\n\nCustomer is a bank."


async def test_empty_library_context_adds_nothing(registry):
    built = await registry.build_composition("answer", library_id="hr")
    assert "Library Context" not in built.text


async def test_library_context_override_is_used(registry):
    await registry.update(
        "library-context-gtm", UpdatePromptInput(content="Pipeline first.", commit_message="m")
    )
    built = await registry.build_composition("answer", library_id="gtm")
    assert built.text.endswith("## Library Context\n\nPipeline first.")


async def test_unknown_composition_fails_fast(registry):
    with pytest.raises(NotFound):
        await registry.build_composition("nope")


def test_token_estimate_rounds_up():
    assert estimate_tokens("") == 0
    assert estimate_tokens("abcde") == 2
