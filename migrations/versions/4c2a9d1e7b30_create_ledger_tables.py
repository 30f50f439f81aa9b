"""Create users, profiles, entities, products and transactions tables

Revision ID: 4c2a9d1e7b30
Revises:
Create Date: 2025-11-02 00:00:00.000000

"""

from alembic import op
import sqlalchemy as sa


revision = "4c2a9d1e7b30"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=150), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True, unique=True),
        sa.Column("phone", sa.String(length=32), nullable=True, unique=True),
        sa.Column("provider_subject", sa.String(length=255), nullable=True, unique=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("(CURRENT_TIMESTAMP)")),
    )

    op.create_table(
        "profiles",
        sa.Column("id", sa.String(length=36), sa.ForeignKey("users.id"), primary_key=True),
        sa.Column("company_name", sa.String(length=200), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("(CURRENT_TIMESTAMP)")),
    )

    op.create_table(
        "entities",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("(CURRENT_TIMESTAMP)")),
        sa.UniqueConstraint("user_id", "name", "type", name="uq_entity_user_name_type"),
        sa.CheckConstraint("type IN ('customer', 'vendor')", name="ck_entity_type"),
    )
    op.create_index("ix_entities_user_id", "entities", ["user_id"], unique=False)

    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("(CURRENT_TIMESTAMP)")),
        sa.UniqueConstraint("user_id", "name", name="uq_product_user_name"),
    )
    op.create_index("ix_products_user_id", "products", ["user_id"], unique=False)

    # entity_id / product_id deliberately carry no FK: history survives catalog deletes
    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("value", sa.Float(), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("(CURRENT_TIMESTAMP)")),
        sa.CheckConstraint("value > 0", name="ck_transaction_value_positive"),
        sa.CheckConstraint("type IN ('sale', 'purchase')", name="ck_transaction_type"),
    )
    op.create_index("ix_transactions_user_date", "transactions", ["user_id", "date"], unique=False)
    op.create_index("ix_transactions_entity_id", "transactions", ["entity_id"], unique=False)
    op.create_index("ix_transactions_product_id", "transactions", ["product_id"], unique=False)


def downgrade():
    op.drop_index("ix_transactions_product_id", table_name="transactions")
    op.drop_index("ix_transactions_entity_id", table_name="transactions")
    op.drop_index("ix_transactions_user_date", table_name="transactions")
    op.drop_table("transactions")
    op.drop_index("ix_products_user_id", table_name="products")
    op.drop_table("products")
    op.drop_index("ix_entities_user_id", table_name="entities")
    op.drop_table("entities")
    op.drop_table("profiles")
    op.drop_table("users")
