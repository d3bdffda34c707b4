"""Pytest configuration and fixtures."""

import os

# Settings are read at import time; point the app at sqlite before anything imports it.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timezone

import pytest

from prompt_registry.catalog.catalog import BlockCatalog
from prompt_registry.schemas import BlockDefinition, BlockTier, Composition
from prompt_registry.services.registry import PromptRegistry
from tests.fakes.fake_store import FakeOverrideStore

FIXED_NOW = datetime(2026, 3, 14, 12, 0, tzinfo=timezone.utc)


def make_catalog() -> BlockCatalog:
    """Small synthetic catalog; block text here is arbitrary."""
    return BlockCatalog(
        blocks=[
            BlockDefinition(
                id="role_intro", name="Role", description="Who the model is",
                tier=BlockTier.OPEN, content="You are an assistant.",
            ),
            BlockDefinition(
                id="safety", name="Safety", description="Hard rules",
                tier=BlockTier.LOCKED, content="Never invent facts.\nCite sources.",
            ),
            BlockDefinition(
                id="format", name="Format", description="Output shape",
                tier=BlockTier.CAUTION, content="Answer in markdown.",
            ),
            BlockDefinition(
                id="blank", name="Blank", description="Intentionally empty",
                tier=BlockTier.OPEN, content="   \n ",
            ),
        ],
        compositions=[
            Composition(
                id="answer", name="Answer", category="chat_rfp", output_format="markdown",
                block_ids=("role_intro", "safety", "format"),
            ),
            Composition(
                id="broken", name="Broken", category="utility", output_format="text",
                block_ids=("role_intro", "ghost", "safety", "phantom"),
            ),
            Composition(
                id="json_task", name="JSON Task", category="skills", output_format="json",
                block_ids=("role_intro", "blank"),
                output_schema='{"answer": "string"}',
            ),
        ],
        library_contexts={"it": "IT library rules.", "gtm": "GTM library rules."},
        library_ids=["it", "gtm", "hr"],
    )


@pytest.fixture
def catalog() -> BlockCatalog:
    return make_catalog()


@pytest.fixture
def store() -> FakeOverrideStore:
    return FakeOverrideStore()


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def registry(catalog, store, clock) -> PromptRegistry:
    return PromptRegistry(catalog, store, clock=clock)
