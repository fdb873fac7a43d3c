"""create_attendance_records

Revision ID: 3f1c2a7b9d40
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

import sqlalchemy as sa
import sqlalchemy_utils
from alembic import op

# revision identifiers, used by Alembic.
revision = "3f1c2a7b9d40"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "attendance_records",
        sa.Column("uuid", sqlalchemy_utils.UUIDType(binary=False), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("attending", sa.Boolean(), nullable=False),
        sa.Column("phone_number", sa.String(length=50), nullable=True),
        sa.Column("meal_preferences", sa.JSON(), nullable=False),
        sa.Column("family_count", sa.Integer(), nullable=False),
        sa.Column("family_members", sa.JSON(), nullable=False),
        sa.Column("confirmation_code", sa.String(length=4), nullable=True),
        sa.Column("credential", sa.Text(), nullable=True),
        sa.Column("attended", sa.Boolean(), nullable=False),
        sa.Column("attended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.CheckConstraint(
            "NOT attended OR attending",
            name="ck_attendance_records_attended_requires_attending",
        ),
        sa.CheckConstraint(
            "(attended AND attended_at IS NOT NULL) OR (NOT attended AND attended_at IS NULL)",
            name="ck_attendance_records_attended_at_matches_attended",
        ),
        sa.CheckConstraint(
            "family_count >= 1",
            name="ck_attendance_records_family_count_positive",
        ),
        sa.PrimaryKeyConstraint("uuid", name="pk_attendance_records"),
    )

    op.create_index("ix_attendance_records_full_name", "attendance_records", ["full_name"])
    op.create_index("ix_attendance_records_phone_number", "attendance_records", ["phone_number"])
    # Uniqueness only among attending guests
    op.create_index(
        "uq_attendance_records_attending_phone_number",
        "attendance_records",
        ["phone_number"],
        unique=True,
        postgresql_where=sa.text("attending"),
        sqlite_where=sa.text("attending"),
    )
    op.create_index(
        "uq_attendance_records_attending_confirmation_code",
        "attendance_records",
        ["confirmation_code"],
        unique=True,
        postgresql_where=sa.text("attending"),
        sqlite_where=sa.text("attending"),
    )


def downgrade() -> None:
    op.drop_index("uq_attendance_records_attending_confirmation_code", table_name="attendance_records")
    op.drop_index("uq_attendance_records_attending_phone_number", table_name="attendance_records")
    op.drop_index("ix_attendance_records_phone_number", table_name="attendance_records")
    op.drop_index("ix_attendance_records_full_name", table_name="attendance_records")
    op.drop_table("attendance_records")
