"""add per-player deck pools to drafts

Revision ID: 003
Revises: 002
Create Date: 2026-10-17

"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "003"
down_revision = "002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column("drafts", sa.Column("player1_pool", sa.JSON(), nullable=True))
    op.add_column("drafts", sa.Column("player2_pool", sa.JSON(), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table("drafts") as batch_op:
        batch_op.drop_column("player2_pool")
        batch_op.drop_column("player1_pool")
