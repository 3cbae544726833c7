"""add draft_actions log

Revision ID: 002
Revises: 001
Create Date: 2026-10-17

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "draft_actions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("draft_id", sa.String(length=36), nullable=False),
        sa.Column("step", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column(
            "player_slot",
            sa.Enum("player1", "player2", name="playerslot").with_variant(
                postgresql.ENUM("player1", "player2", name="playerslot", create_type=False), "postgresql"
            ),
            nullable=False,
        ),
        sa.Column("action_type", sa.Enum("ban", "pick", name="actiontype"), nullable=False),
        sa.Column(
            "phase",
            sa.Enum("preban", "ban", "pick", "complete", name="draftphase").with_variant(
                postgresql.ENUM("preban", "ban", "pick", "complete", name="draftphase", create_type=False), "postgresql"
            ),
            nullable=False,
        ),
        sa.Column("character_id", sa.String(length=100), nullable=False),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["draft_id"], ["drafts.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("draft_id", "step", name="uq_draft_actions_draft_step"),
    )
    op.create_index(op.f("ix_draft_actions_id"), "draft_actions", ["id"], unique=False)
    op.create_index(op.f("ix_draft_actions_draft_id"), "draft_actions", ["draft_id"], unique=False)
    op.create_index(op.f("ix_draft_actions_user_id"), "draft_actions", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_draft_actions_user_id"), table_name="draft_actions")
    op.drop_index(op.f("ix_draft_actions_draft_id"), table_name="draft_actions")
    op.drop_index(op.f("ix_draft_actions_id"), table_name="draft_actions")
    op.drop_table("draft_actions")

    op.execute("DROP TYPE IF EXISTS actiontype")
