from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# =========================
# CATALOG SCHEMAS
# =========================
class BlockTier(int, enum.Enum):
    """Editability tier. Lower tier = higher risk to change."""

    LOCKED = 1
    CAUTION = 2
    OPEN = 3

    @property
    def label(self) -> str:
        return _TIER_LABELS[self][0]

    @property
    def description(self) -> str:
        return _TIER_LABELS[self][1]


_TIER_LABELS = {
    BlockTier.LOCKED: ("Locked", "Core system functionality - changes may break features"),
    BlockTier.CAUTION: ("Caution", "Important for accuracy - customize carefully"),
    BlockTier.OPEN: ("Open", "Safe to customize - style and personalization"),
}


class PromptSource(str, enum.Enum):
    V2_CORE = "v2-core"
    LEGACY = "legacy"
    CHAT_LIBRARY = "chat-library"
    LIBRARY_CONTEXT = "library-context"
    CUSTOM = "custom"


PromptType = Literal["system-block", "chat-prompt", "library-context", "preset"]
OutputFormat = Literal["json", "markdown", "text"]


class BlockDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    tier: BlockTier = BlockTier.OPEN
    content: str


class Composition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    category: str = "utility"
    output_format: OutputFormat = "text"
    # assembly order
    block_ids: Tuple[str, ...]
    output_schema: Optional[str] = None
    libraries: Optional[Tuple[str, ...]] = None


# =========================
# PERSISTED SCHEMAS
# =========================
class VersionEntry(BaseModel):
    """Full snapshot of a block after one content-changing operation.

    Stored inside ``attributes.versionHistory`` using the camelCase aliases.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    version: int
    content: str
    variants_snapshot: Optional[Dict[str, str]] = Field(default=None, alias="contextVariantsSnapshot")
    commit_message: str = Field(alias="commitMessage")
    changed_by: str = Field(alias="changedBy")
    changed_at: datetime = Field(alias="changedAt")
    diff: Optional[str] = None


class Override(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    slug: str
    title: str
    description: str = ""
    content: str
    tier: BlockTier = BlockTier.OPEN
    source: PromptSource
    overrides_block_id: Optional[str] = None
    entry_type: PromptType = "system-block"
    categories: List[str] = Field(default_factory=list)
    version: int = 1
    status: str = "ACTIVE"
    variants: Optional[Dict[str, str]] = None
    version_history: List[VersionEntry] = Field(default_factory=list)
    # attribute keys this service does not own (e.g. presetConfig); written back untouched
    extra_attributes: Dict[str, Any] = Field(default_factory=dict)
    updated_at: Optional[datetime] = None

    @property
    def is_custom(self) -> bool:
        return self.source == PromptSource.CUSTOM


# =========================
# DERIVED VIEWS
# =========================
class ManagedPrompt(BaseModel):
    """Catalog entry merged with its persisted override, as the admin UI lists it."""

    id: str
    slug: str
    name: str
    description: str = ""
    content: str
    tier: BlockTier
    source: PromptSource
    type: PromptType = "system-block"
    variants: Optional[Dict[str, str]] = None
    contexts: Optional[List[str]] = None
    has_override: bool = False
    version: int = 1
    updated_at: Optional[datetime] = None
    categories: List[str] = Field(default_factory=list)


class AssembledPrompt(BaseModel):
    composition_id: str
    text: str
    resolved_blocks: List[BlockDefinition]
    missing_block_ids: List[str] = Field(default_factory=list)
    blocks_used: List[str] = Field(default_factory=list)
    output_format: OutputFormat = "text"
    estimated_tokens: int = 0


# =========================
# INPUT SCHEMAS
# =========================
class CreatePromptInput(BaseModel):
    slug: str
    name: str
    description: Optional[str] = None
    content: str
    tier: BlockTier = BlockTier.OPEN
    type: PromptType = "system-block"
    variants: Optional[Dict[str, str]] = None
    categories: Optional[List[str]] = None
    commit_message: str = ""
    user_id: Optional[str] = None


class UpdatePromptInput(BaseModel):
    content: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    variants: Optional[Dict[str, str]] = None
    categories: Optional[List[str]] = None
    commit_message: str = ""
    user_id: Optional[str] = None


class VariantUpdateInput(BaseModel):
    content: str
    commit_message: str = ""
    user_id: Optional[str] = None


class RollbackInput(BaseModel):
    version: int
    user_id: Optional[str] = None


class ResolveBlocksInput(BaseModel):
    block_ids: List[str]


class BuildCompositionInput(BaseModel):
    library_id: Optional[str] = None
    additional_context: Optional[str] = None


class ImportPromptItem(BaseModel):
    """One entry of an export file; keys this service does not read are ignored."""

    slug: str
    name: str
    description: Optional[str] = None
    content: str
    tier: BlockTier = BlockTier.OPEN
    type: PromptType = "system-block"
    variants: Optional[Dict[str, str]] = None
    categories: Optional[List[str]] = None


class ImportPromptsInput(BaseModel):
    prompts: List[ImportPromptItem] = Field(default_factory=list)
    commit_message: str = "Imported from export"
    user_id: Optional[str] = None
