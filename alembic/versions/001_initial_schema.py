"""initial schema: users and drafts

Revision ID: 001
Revises:
Create Date: 2026-10-17

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=True)

    op.create_table(
        "drafts",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("invite_code", sa.String(length=16), nullable=False),
        sa.Column(
            "phase",
            sa.Enum("preban", "ban", "pick", "complete", name="draftphase"),
            nullable=False,
        ),
        sa.Column("turn", sa.Enum("player1", "player2", name="playerslot"), nullable=False),
        sa.Column("player1_id", sa.Integer(), nullable=False),
        sa.Column("player1_name", sa.String(length=100), nullable=False),
        sa.Column("player1_bans", sa.JSON(), nullable=False),
        sa.Column("player1_picks", sa.JSON(), nullable=False),
        sa.Column("player2_id", sa.Integer(), nullable=True),
        sa.Column("player2_name", sa.String(length=100), nullable=False),
        sa.Column("player2_bans", sa.JSON(), nullable=False),
        sa.Column("player2_picks", sa.JSON(), nullable=False),
        sa.Column("prebans", sa.JSON(), nullable=False),
        sa.Column("current_pick", sa.Integer(), nullable=False),
        sa.Column("max_picks", sa.Integer(), nullable=False),
        sa.Column("max_bans", sa.Integer(), nullable=False),
        sa.Column("max_prebans", sa.Integer(), nullable=False),
        sa.Column("character_pool", sa.JSON(), nullable=True),
        sa.Column("completed", sa.Boolean(), nullable=False),
        sa.Column(
            "winner",
            sa.Enum("player1", "player2", name="playerslot").with_variant(
                postgresql.ENUM("player1", "player2", name="playerslot", create_type=False), "postgresql"
            ),
            nullable=True,
        ),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["player1_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["player2_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_drafts_invite_code"), "drafts", ["invite_code"], unique=True)
    op.create_index(op.f("ix_drafts_player1_id"), "drafts", ["player1_id"], unique=False)
    op.create_index(op.f("ix_drafts_player2_id"), "drafts", ["player2_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_drafts_player2_id"), table_name="drafts")
    op.drop_index(op.f("ix_drafts_player1_id"), table_name="drafts")
    op.drop_index(op.f("ix_drafts_invite_code"), table_name="drafts")
    op.drop_table("drafts")

    op.drop_index(op.f("ix_users_username"), table_name="users")
    op.drop_index(op.f("ix_users_id"), table_name="users")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")

    op.execute("DROP TYPE IF EXISTS draftphase")
    op.execute("DROP TYPE IF EXISTS playerslot")
