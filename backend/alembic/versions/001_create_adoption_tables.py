"""Create users, breeds, pets and applications tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema for the adoption backend.
How:   Integer identity keys; applications reference users and pets with
       ON DELETE CASCADE; status columns are small integers.

Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("phone_number", sa.String(30), nullable=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password", sa.String(255), nullable=False, comment="bcrypt hash, never the plain password"),
        _timestamp("created_at"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "dog_breeds",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=False, unique=True),
    )
    op.create_table(
        "cat_breeds",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=False, unique=True),
    )

    op.create_table(
        "pets",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("species", sa.String(50), nullable=False),
        # Points into dog_breeds or cat_breeds depending on species, so no FK
        sa.Column("breed_id", sa.Integer(), nullable=True),
        sa.Column("gender", sa.String(20), nullable=True),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(512), nullable=True),
        sa.Column(
            "status",
            sa.SmallInteger(),
            nullable=False,
            server_default=sa.text("1"),
            comment="0 unlisted, 1 available, 2 reserved",
        ),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("idx_pets_species_status", "pets", ["species", "status"])

    op.create_table(
        "applications",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("pet_id", sa.Integer(), sa.ForeignKey("pets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("adoption_reason", sa.Text(), nullable=False),
        sa.Column("living_situation", sa.Text(), nullable=False),
        sa.Column("experience", sa.Text(), nullable=False),
        sa.Column("household_members", sa.Text(), nullable=False),
        sa.Column("work_schedule", sa.Text(), nullable=False),
        sa.Column("pet_types_cared_for", sa.Text(), nullable=True),
        sa.Column("travel_frequency", sa.Text(), nullable=True),
        sa.Column("time_commitment", sa.Text(), nullable=True),
        sa.Column("outdoor_space", sa.Text(), nullable=True),
        sa.Column("pet_allergies", sa.Text(), nullable=True),
        sa.Column("pet_training", sa.Text(), nullable=True),
        sa.Column(
            "status",
            sa.SmallInteger(),
            nullable=False,
            server_default=sa.text("0"),
            comment="0 pending, 1 approved, -1 rejected",
        ),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint("status IN (-1, 0, 1)", name="ck_applications_status"),
    )
    op.create_index("idx_applications_pet_id", "applications", ["pet_id"])
    op.create_index("idx_applications_user_id", "applications", ["user_id"])


def downgrade() -> None:
    op.drop_index("idx_applications_user_id", table_name="applications")
    op.drop_index("idx_applications_pet_id", table_name="applications")
    op.drop_table("applications")
    op.drop_index("idx_pets_species_status", table_name="pets")
    op.drop_table("pets")
    op.drop_table("cat_breeds")
    op.drop_table("dog_breeds")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
