"""create prompt_block

Revision ID: 1f3c9a2b7d10
Revises:
Create Date: 2026-10-18 09:12:41.207311
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "1f3c9a2b7d10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "prompt_block",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("slug", sa.String(length=128), nullable=True),
        sa.Column("library_id", sa.String(length=32), nullable=False, server_default="prompts"),
        sa.Column("entry_type", sa.String(length=32), nullable=False, server_default="system-block"),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column("tier", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("categories", postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="ACTIVE"),
        sa.Column("attributes", postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.text("now()")),
        sa.UniqueConstraint("slug", name="uq_prompt_block_slug"),
    )
    op.create_index("ix_prompt_block_library_id", "prompt_block", ["library_id"])
    op.create_index("ix_prompt_block_library_status", "prompt_block", ["library_id", "status"])


def downgrade() -> None:
    op.drop_index("ix_prompt_block_library_status", table_name="prompt_block")
    op.drop_index("ix_prompt_block_library_id", table_name="prompt_block")
    op.drop_table("prompt_block")
