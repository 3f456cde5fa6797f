"""Initial schema — cards, invoices and per-supplier card counters.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-19
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    op.create_table(
        "cards",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("supplier_card_number", sa.Integer()),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("farmer_name", sa.String(255), nullable=False),
        sa.Column("supplier_name", sa.String(255), server_default=""),
        sa.Column("vehicle_number", sa.String(50), nullable=False),
        sa.Column("gross_weight", sa.Float(), nullable=False),
        sa.Column("discount_percentage", sa.Float(), server_default="0"),
        sa.Column("discount_amount", sa.Float(), server_default="0"),
        sa.Column("net_weight", sa.Float(), nullable=False),
        sa.Column("is_done", sa.Boolean(), server_default="false"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_cards_supplier_card_number", "cards", ["supplier_card_number"])
    op.create_index("ix_cards_date", "cards", ["date"])
    op.create_index("ix_cards_supplier_name", "cards", ["supplier_name"])

    op.create_table(
        "invoices",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("farmer_name", sa.String(255), nullable=False),
        sa.Column("cards", sa.JSON(), server_default="[]"),
        # Inputs
        sa.Column("contract_price", sa.Float(), server_default="0"),
        sa.Column("free_price", sa.Float(), server_default="0"),
        sa.Column("contract_quantity_per_bag", sa.Float(), server_default="0"),
        sa.Column("seed_bags", sa.Float(), server_default="0"),
        sa.Column("seed_bag_price", sa.Float(), server_default="0"),
        sa.Column("additional_seed_kilos", sa.Float(), server_default="0"),
        sa.Column("additional_deductions", sa.Float(), server_default="0"),
        # Derived
        sa.Column("total_contract_quantity", sa.Float(), server_default="0"),
        sa.Column("free_quantity", sa.Float(), server_default="0"),
        sa.Column("contract_amount", sa.Float(), server_default="0"),
        sa.Column("free_amount", sa.Float(), server_default="0"),
        sa.Column("seed_rights", sa.Float(), server_default="0"),
        sa.Column("total_amount", sa.Float(), server_default="0"),
        sa.Column("net_amount", sa.Float(), server_default="0"),
        sa.Column("final_amount", sa.Float(), server_default="0"),
        # Payment
        sa.Column("is_paid", sa.Boolean(), server_default="false"),
        sa.Column("remaining_amount", sa.Float(), server_default="0"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_invoices_date", "invoices", ["date"])
    op.create_index("ix_invoices_is_paid", "invoices", ["is_paid"])

    op.create_table(
        "supplier_counters",
        sa.Column("supplier_name", sa.String(255), primary_key=True),
        sa.Column("card_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("supplier_counters")
    op.drop_index("ix_invoices_is_paid", table_name="invoices")
    op.drop_index("ix_invoices_date", table_name="invoices")
    op.drop_table("invoices")
    op.drop_index("ix_cards_supplier_name", table_name="cards")
    op.drop_index("ix_cards_date", table_name="cards")
    op.drop_index("ix_cards_supplier_card_number", table_name="cards")
    op.drop_table("cards")
