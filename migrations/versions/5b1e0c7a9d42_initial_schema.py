"""initial schema

Revision ID: 5b1e0c7a9d42
Revises:
Create Date: 2026-10-17 09:12:40.311522

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5b1e0c7a9d42"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

role = sa.Enum("USER", "VIP", "ADMIN", name="Role")
ingredient_types = sa.Enum(
    "BREAD", "CHEESE", "MEAT", "SALAD", "TOMATO", "ONION", "SAUCE", "SPECIAL",
    name="IngredientTypes",
)
order_status = sa.Enum("INQUEUE", "BEINGMADE", "DONE", name="OrderStatus")
config_type = sa.Enum("STRING", "NUMBER", "BOOLEAN", "PASSWORD", "VIPOTPS", name="ConfigType")
bruteforce_actions = sa.Enum("ADMINPROMOTE", "VIPPROMOTE", name="BruteforceActions")


def upgrade() -> None:
    """Create users, ingredients, orders, config and the bruteforce log."""
    op.create_table(
        "User",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("role", role, nullable=False),
        sa.Column("createdAt", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "Ingredient",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("type", ingredient_types, nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False),
        sa.Column("createdAt", sa.DateTime(timezone=True), nullable=False),
        sa.Column("modifiedAt", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "Order",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("userId", sa.String(length=36), nullable=False),
        sa.Column("status", order_status, nullable=False),
        sa.Column("createdAt", sa.DateTime(timezone=True), nullable=False),
        sa.Column("modifiedAt", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["userId"], ["User.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_Order_userId"), "Order", ["userId"], unique=False)
    op.create_table(
        "IngredientOnOrder",
        sa.Column("orderId", sa.String(length=36), nullable=False),
        sa.Column("ingredientId", sa.String(length=36), nullable=False),
        sa.Column("ingredientNumber", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["ingredientId"], ["Ingredient.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["orderId"], ["Order.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("orderId", "ingredientId"),
    )
    op.create_table(
        "Config",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("key", sa.String(length=64), nullable=False),
        sa.Column("type", config_type, nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("createdAt", sa.DateTime(timezone=True), nullable=False),
        sa.Column("modifiedAt", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("key"),
    )
    op.create_table(
        "VipOtp",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("code", sa.String(length=6), nullable=False),
        sa.Column("createdAt", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code"),
    )
    op.create_table(
        "Bruteforce",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("action", bruteforce_actions, nullable=False),
        sa.Column("userId", sa.String(length=36), nullable=True),
        sa.Column("ip", sa.Text(), nullable=False),
        sa.Column("createdAt", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["userId"], ["User.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_Bruteforce_createdAt"), "Bruteforce", ["createdAt"], unique=False)
    op.create_index("ix_bruteforce_user_action", "Bruteforce", ["userId", "action", "createdAt"])
    op.create_index("ix_bruteforce_ip_action", "Bruteforce", ["ip", "action", "createdAt"])


def downgrade() -> None:
    """Drop every table created by this revision."""
    op.drop_index("ix_bruteforce_ip_action", table_name="Bruteforce")
    op.drop_index("ix_bruteforce_user_action", table_name="Bruteforce")
    op.drop_index(op.f("ix_Bruteforce_createdAt"), table_name="Bruteforce")
    op.drop_table("Bruteforce")
    op.drop_table("VipOtp")
    op.drop_table("Config")
    op.drop_table("IngredientOnOrder")
    op.drop_index(op.f("ix_Order_userId"), table_name="Order")
    op.drop_table("Order")
    op.drop_table("Ingredient")
    op.drop_table("User")

    bind = op.get_bind()
    for enum in (bruteforce_actions, config_type, order_status, ingredient_types, role):
        enum.drop(bind, checkfirst=True)
