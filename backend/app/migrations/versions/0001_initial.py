"""Initial schema for the portfolio valuation service."""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


transaction_side = sa.Enum("BUY", "SELL", name="transaction_side")


def upgrade() -> None:
    op.create_table(
        "transaction",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("symbol", sa.String(length=20), nullable=False),
        sa.Column("side", transaction_side, nullable=False),
        sa.Column("quantity", sa.Numeric(18, 6), nullable=False),
        sa.Column("price", sa.Numeric(18, 6), nullable=False),
        sa.Column("price_currency", sa.String(length=3), nullable=False, server_default="USD"),
        sa.Column("fee", sa.Numeric(18, 6), nullable=True),
        sa.Column("fee_currency", sa.String(length=3), nullable=True),
        sa.Column("note", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_transaction_user_date", "transaction", ["user_id", "date"])
    op.create_index("ix_transaction_symbol", "transaction", ["symbol"])

    op.create_table(
        "watchlist_item",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("symbol", sa.String(length=20), nullable=False),
        sa.Column("display_symbol", sa.String(length=32), nullable=True),
        sa.Column("description", sa.String(length=255), nullable=True),
        sa.Column("type", sa.String(length=32), nullable=True),
        sa.Column("currency", sa.String(length=3), nullable=True),
        sa.Column("starred", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "symbol", name="uq_watchlist_item_user_symbol"),
    )
    op.create_index("ix_watchlist_item_symbol", "watchlist_item", ["symbol"])

    op.create_table(
        "daily_bar",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("symbol", sa.String(length=20), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("open", sa.Numeric(18, 6), nullable=True),
        sa.Column("high", sa.Numeric(18, 6), nullable=True),
        sa.Column("low", sa.Numeric(18, 6), nullable=True),
        sa.Column("close", sa.Numeric(18, 6), nullable=False),
        sa.Column("volume", sa.Numeric(20, 2), nullable=True),
        sa.UniqueConstraint("symbol", "date", name="uq_daily_bar_symbol_date"),
    )
    op.create_index("ix_daily_bar_symbol_date", "daily_bar", ["symbol", "date"])

    op.create_table(
        "fx_rate",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("base", sa.String(length=3), nullable=False),
        sa.Column("quote", sa.String(length=3), nullable=False),
        sa.Column("rate", sa.Numeric(18, 8), nullable=False),
        sa.Column("fetched_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("base", "quote", name="uq_fx_rate_pair"),
    )


def downgrade() -> None:
    op.drop_table("fx_rate")
    op.drop_index("ix_daily_bar_symbol_date", table_name="daily_bar")
    op.drop_table("daily_bar")
    op.drop_index("ix_watchlist_item_symbol", table_name="watchlist_item")
    op.drop_table("watchlist_item")
    op.drop_index("ix_transaction_symbol", table_name="transaction")
    op.drop_index("ix_transaction_user_date", table_name="transaction")
    op.drop_table("transaction")
    transaction_side.drop(op.get_bind(), checkfirst=True)
