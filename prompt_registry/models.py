from sqlalchemy import (
    Column, Integer, String, Text, DateTime, func, Index, JSON
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.mutable import MutableDict, MutableList
import enum
import uuid

from .database import Base


def json_type():
    """JSONB on Postgres, plain JSON anywhere else (sqlite in tests).

    Each column needs its own instance: ``as_mutable`` keys its listeners
    on the type object.
    """
    return JSON().with_variant(JSONB(), "postgresql")


class BlockStatus(str, enum.Enum):
    active = "ACTIVE"
    archived = "ARCHIVED"


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------
# PROMPT BLOCK ROWS
# ---------------------------
class PromptBlockRow(Base):
    """One persisted block: either an override of a catalog block or a custom block.

    Registry-specific state (tier, source, variants, history) lives in
    ``attributes`` so the row shape stays shared with the other libraries.
    """

    __tablename__ = "prompt_block"

    id = Column(String(36), primary_key=True, default=_new_id)
    # NULL only on legacy rows; readers fall back to ``id``
    slug = Column(String(128), unique=True, nullable=True)
    library_id = Column(String(32), nullable=False, default="prompts", index=True)
    entry_type = Column(String(32), nullable=False, default="system-block")

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    content = Column(Text, nullable=False, default="")
    tier = Column(Integer, nullable=False, default=3)                      # 1 locked | 2 caution | 3 open
    categories = Column(MutableList.as_mutable(json_type()), nullable=False, default=list)

    version = Column(Integer, nullable=False, default=1)                   # bumped by every content change
    status = Column(String(16), nullable=False, default=BlockStatus.active.value)
    # promptTier, promptSource, overridesBlockId, contextVariants, versionHistory
    attributes = Column(MutableDict.as_mutable(json_type()), nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())

    __table_args__ = (
        Index("ix_prompt_block_library_status", "library_id", "status"),
    )

    def __repr__(self):
        return f"<PromptBlockRow {self.slug or self.id} v{self.version}>"
