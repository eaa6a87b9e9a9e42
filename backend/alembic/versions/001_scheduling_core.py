# backend/alembic/versions/001_scheduling_core.py
"""Scheduling core: users, barbershops, professionals, catalog, appointments

Revision ID: 001_scheduling_core
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_scheduling_core"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

STATUS_CHECK = "status IN ('PENDING', 'CONFIRMED', 'COMPLETED', 'CANCELLED', 'NO_SHOW')"


def _create_extension_prefer_extensions_schema(extension_name: str) -> None:
    """Create extension in the ``extensions`` schema when the database has one."""

    bind = op.get_bind()
    if bind is None or bind.dialect.name != "postgresql":
        return

    op.execute(
        f"""
        DO $$
        BEGIN
            IF NOT EXISTS (SELECT 1 FROM pg_extension WHERE extname = '{extension_name}') THEN
                IF EXISTS (SELECT 1 FROM pg_namespace WHERE nspname = 'extensions') THEN
                    EXECUTE 'CREATE EXTENSION IF NOT EXISTS {extension_name} WITH SCHEMA extensions';
                ELSE
                    EXECUTE 'CREATE EXTENSION IF NOT EXISTS {extension_name}';
                END IF;
            END IF;
        END
        $$;
        """
    )


def upgrade() -> None:
    bind = op.get_bind()
    is_postgres = bind is not None and bind.dialect.name == "postgresql"

    op.create_table(
        "users",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("full_name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="CLIENTE"),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("role IN ('CLIENTE', 'BARBER', 'ADMIN')", name="ck_users_role"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_phone", "users", ["phone"], unique=True)

    op.create_table(
        "barbershops",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "professionals",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("user_id", sa.String(26), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("barbershop_id", sa.String(26), sa.ForeignKey("barbershops.id"), nullable=False),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_master", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", name="uq_professionals_user_id"),
    )
    op.create_index("ix_professionals_barbershop_id", "professionals", ["barbershop_id"])

    op.create_table(
        "services",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("barbershop_id", sa.String(26), sa.ForeignKey("barbershops.id"), nullable=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("duration_min", sa.Integer(), nullable=False),
        sa.Column("price_cents", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("duration_min > 0", name="ck_services_duration_positive"),
        sa.CheckConstraint("price_cents >= 0", name="ck_services_price_non_negative"),
    )
    op.create_index("ix_services_barbershop_id", "services", ["barbershop_id"])

    op.create_table(
        "professional_services",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column(
            "professional_id", sa.String(26), sa.ForeignKey("professionals.id"), nullable=False
        ),
        sa.Column("service_id", sa.String(26), sa.ForeignKey("services.id"), nullable=False),
        sa.Column("custom_duration_min", sa.Integer(), nullable=True),
        sa.Column("custom_price_cents", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("professional_id", "service_id", name="uq_professional_services_pair"),
        sa.CheckConstraint(
            "custom_duration_min IS NULL OR custom_duration_min > 0",
            name="ck_professional_services_duration_positive",
        ),
        sa.CheckConstraint(
            "custom_price_cents IS NULL OR custom_price_cents >= 0",
            name="ck_professional_services_price_non_negative",
        ),
    )
    op.create_index(
        "ix_professional_services_professional_id", "professional_services", ["professional_id"]
    )
    op.create_index("ix_professional_services_service_id", "professional_services", ["service_id"])

    op.create_table(
        "appointments",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("client_id", sa.String(26), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "professional_id", sa.String(26), sa.ForeignKey("professionals.id"), nullable=False
        ),
        sa.Column("service_id", sa.String(26), sa.ForeignKey("services.id"), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("total_price_cents", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(STATUS_CHECK, name="ck_appointments_status"),
        sa.CheckConstraint("end_time > start_time", name="ck_appointments_time_order"),
        sa.CheckConstraint("total_price_cents >= 0", name="ck_appointments_price_non_negative"),
    )
    op.create_index("ix_appointments_client_id", "appointments", ["client_id"])
    op.create_index(
        "ix_appointments_professional_start", "appointments", ["professional_id", "start_time"]
    )

    if is_postgres:
        _create_extension_prefer_extensions_schema("btree_gist")
        op.execute(
            """
            ALTER TABLE appointments
              ADD CONSTRAINT appointments_no_overlap_per_professional
              EXCLUDE USING gist (
                professional_id WITH =,
                tstzrange(start_time, end_time, '[)') WITH &&
              )
              WHERE (status NOT IN ('CANCELLED', 'NO_SHOW'))
            """
        )


def downgrade() -> None:
    bind = op.get_bind()
    if bind is not None and bind.dialect.name == "postgresql":
        op.execute(
            "ALTER TABLE appointments DROP CONSTRAINT IF EXISTS "
            "appointments_no_overlap_per_professional"
        )

    op.drop_index("ix_appointments_professional_start", table_name="appointments")
    op.drop_index("ix_appointments_client_id", table_name="appointments")
    op.drop_table("appointments")
    op.drop_index("ix_professional_services_service_id", table_name="professional_services")
    op.drop_index("ix_professional_services_professional_id", table_name="professional_services")
    op.drop_table("professional_services")
    op.drop_index("ix_services_barbershop_id", table_name="services")
    op.drop_table("services")
    op.drop_index("ix_professionals_barbershop_id", table_name="professionals")
    op.drop_table("professionals")
    op.drop_table("barbershops")
    op.drop_index("ix_users_phone", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
