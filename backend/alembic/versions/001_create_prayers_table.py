"""Create prayers table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `prayers` table shared by every visitor of the memorial page.
How:   SERIAL-style integer key, timestamp filled in by the database.

Databases that already hold a `prayers` table with the same columns can be
marked as migrated with `alembic stamp 001`.

Rollback: downgrade() drops the table (all prayers are lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "prayers",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        # NULL = anonymous
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # Listing is always ORDER BY timestamp DESC
    op.create_index(
        "idx_prayers_timestamp",
        "prayers",
        [sa.text("timestamp DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_prayers_timestamp", table_name="prayers")
    op.drop_table("prayers")
