"""create favorite table.

Revision ID: 4c1f0a7b9e21
Revises:
Create Date: 2026-10-17 09:12:40.318204
"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op
from mediafeed.db.types.timezone_aware_datetime import (
    SQLITE_DATETIME_NOW,
    TimezoneAwareDatetime,
)

# revision identifiers, used by Alembic.
revision: str = "4c1f0a7b9e21"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "favorite",
        sa.Column("item_id", sa.String(), primary_key=True, nullable=False),
        sa.Column(
            "added_at",
            TimezoneAwareDatetime(),
            nullable=False,
            server_default=sa.text(f"({SQLITE_DATETIME_NOW})"),
        ),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("favorite")
