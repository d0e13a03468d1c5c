from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy import inspect
from sqlalchemy.dialects import postgresql

revision = "0001_create_catering_schema"
down_revision = None
branch_labels = None
depends_on = None


def _has_index(inspector, table_name: str, index_name: str) -> bool:
    return any(idx["name"] == index_name for idx in inspector.get_indexes(table_name))


def upgrade() -> None:
    bind = op.get_bind()
    inspector = inspect(bind)
    json_type = sa.JSON() if bind.dialect.name == "sqlite" else postgresql.JSONB(astext_type=sa.Text())

    if "menu_items" not in inspector.get_table_names():
        op.create_table(
            "menu_items",
            sa.Column("id", sa.String(length=100), primary_key=True),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("description", sa.Text(), nullable=False, server_default=""),
            sa.Column("price_cents", sa.Integer(), nullable=False),
            sa.Column("category", sa.String(length=50), nullable=False, server_default="meals"),
            sa.Column("serves", sa.Integer(), nullable=True),
            sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        )

    inspector = inspect(bind)
    if "promo_codes" not in inspector.get_table_names():
        op.create_table(
            "promo_codes",
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column("code", sa.String(length=64), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("discount_percent", sa.Integer(), nullable=False),
            sa.Column("max_uses", sa.Integer(), nullable=True),
            sa.Column("current_uses", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("valid_from", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.Column("valid_until", sa.DateTime(timezone=True), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.CheckConstraint("discount_percent BETWEEN 1 AND 100", name="ck_promo_codes_discount_percent"),
        )
        op.create_index("ix_promo_codes_code", "promo_codes", ["code"], unique=True)

    inspector = inspect(bind)
    if "orders" not in inspector.get_table_names():
        op.create_table(
            "orders",
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column("customer_name", sa.String(length=100), nullable=False),
            sa.Column("customer_email", sa.String(length=320), nullable=False),
            sa.Column("address", sa.Text(), nullable=False),
            sa.Column("food_selection", json_type, nullable=False),
            sa.Column("date_needed", sa.String(length=10), nullable=False),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("status", sa.String(length=32), nullable=False, server_default="pending"),
            sa.Column("admin_reason", sa.Text(), nullable=True),
            sa.Column("approval_message", sa.Text(), nullable=True),
            sa.Column("total_price_cents", sa.Integer(), nullable=True),
            sa.Column("original_price_cents", sa.Integer(), nullable=True),
            sa.Column(
                "promo_code_id",
                sa.String(length=36),
                sa.ForeignKey("promo_codes.id", ondelete="SET NULL"),
                nullable=True,
            ),
            sa.Column("discount_percent", sa.Integer(), nullable=True),
            sa.Column("payment_reference_id", sa.String(length=255), nullable=True),
            sa.Column("payment_url", sa.Text(), nullable=True),
            sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("time_confirmed_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("invoice_sent_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        )

    inspector = inspect(bind)
    if not _has_index(inspector, "orders", "ix_orders_customer_email"):
        op.create_index("ix_orders_customer_email", "orders", ["customer_email"], unique=False)
    if not _has_index(inspector, "orders", "ix_orders_status_created_at"):
        op.create_index("ix_orders_status_created_at", "orders", ["status", "created_at"], unique=False)


def downgrade() -> None:
    bind = op.get_bind()
    inspector = inspect(bind)
    tables = inspector.get_table_names()

    if "orders" in tables:
        op.drop_index("ix_orders_status_created_at", table_name="orders")
        op.drop_index("ix_orders_customer_email", table_name="orders")
        op.drop_table("orders")
    if "promo_codes" in tables:
        op.drop_index("ix_promo_codes_code", table_name="promo_codes")
        op.drop_table("promo_codes")
    if "menu_items" in tables:
        op.drop_table("menu_items")
