"""thr claim status

Revision ID: 7d41c9a2f615
Revises: 3a7c1d2e9b40
Create Date: 2026-10-19 16:04:09.532771

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '7d41c9a2f615'
down_revision: Union[str, Sequence[str], None] = '3a7c1d2e9b40'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column(
        "participants",
        sa.Column("thr_claim_status", sa.String(12), nullable=False, server_default="unclaimed"),
    )
    op.add_column(
        "redemptions",
        sa.Column("system_created", sa.Boolean(), nullable=False, server_default=sa.false()),
    )

    op.create_table(
        "thr_claim_status_history",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("participant_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(12), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("updated_by", sa.Integer(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
    )
    op.create_index(
        "ix_thr_claim_status_history_participant_id", "thr_claim_status_history", ["participant_id"]
    )


def downgrade() -> None:
    op.drop_table("thr_claim_status_history")
    op.drop_column("redemptions", "system_created")
    op.drop_column("participants", "thr_claim_status")
