"""add_user_profile_fields

Revision ID: 7c4e2a9b5d31
Revises: 3f9c1a7d2b10
Create Date: 2026-10-19 14:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '7c4e2a9b5d31'
down_revision: Union[str, Sequence[str], None] = '3f9c1a7d2b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # All nullable: existing users start with an incomplete profile
    op.add_column("users", sa.Column("address", sa.String(255), nullable=True))
    op.add_column("users", sa.Column("city", sa.String(100), nullable=True))
    op.add_column("users", sa.Column("country", sa.String(100), nullable=True))
    op.add_column("users", sa.Column("date_of_birth", sa.Date(), nullable=True))


def downgrade() -> None:
    op.drop_column("users", "date_of_birth")
    op.drop_column("users", "country")
    op.drop_column("users", "city")
    op.drop_column("users", "address")
