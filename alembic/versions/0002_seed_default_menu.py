from __future__ import annotations

from datetime import datetime, timezone

import sqlalchemy as sa
from alembic import op

from catering.services.menu import DEFAULT_MENU_ITEMS

revision = "0002_seed_default_menu"
down_revision = "0001_create_catering_schema"
branch_labels = None
depends_on = None

menu_items = sa.table(
    "menu_items",
    sa.column("id", sa.String),
    sa.column("name", sa.String),
    sa.column("description", sa.Text),
    sa.column("price_cents", sa.Integer),
    sa.column("category", sa.String),
    sa.column("serves", sa.Integer),
    sa.column("display_order", sa.Integer),
    sa.column("is_available", sa.Boolean),
    sa.column("created_at", sa.DateTime(timezone=True)),
    sa.column("updated_at", sa.DateTime(timezone=True)),
)


def upgrade() -> None:
    bind = op.get_bind()
    existing = {row[0] for row in bind.execute(sa.select(menu_items.c.id))}
    now = datetime.now(timezone.utc)
    rows = [
        {**item, "is_available": True, "created_at": now, "updated_at": now}
        for item in DEFAULT_MENU_ITEMS
        if item["id"] not in existing
    ]
    if rows:
        op.bulk_insert(menu_items, rows)


def downgrade() -> None:
    ids = [item["id"] for item in DEFAULT_MENU_ITEMS]
    op.execute(menu_items.delete().where(menu_items.c.id.in_(ids)))
