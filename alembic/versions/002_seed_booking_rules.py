"""Seed default booking rules.

Revision ID: 002_seed_booking_rules
Revises: 001_initial
Create Date: 2026-10-19

Seeds the category limits for every meal type. Admins replace them later
through the booking rules endpoint.
"""

import uuid
from typing import Sequence

from alembic import op
from sqlalchemy import Boolean, Integer, String, column, table
from sqlalchemy.dialects.postgresql import UUID

# revision identifiers
revision: str = "002_seed_booking_rules"
down_revision: str = "001_initial"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# (meal_type, category, min, max)
BOOKING_RULES = [
    # ===== BREAKFAST =====
    ("BREAKFAST", "APPETIZER", 1, 2),
    ("BREAKFAST", "DESSERT", 0, 2),
    ("BREAKFAST", "BEVERAGE", 1, 3),
    # ===== LUNCH =====
    ("LUNCH", "APPETIZER", 0, 1),
    ("LUNCH", "FIRST_COURSE", 1, 1),
    ("LUNCH", "SECOND_COURSE", 0, 1),
    ("LUNCH", "SIDE_DISH", 0, 2),
    ("LUNCH", "DESSERT", 0, 1),
    ("LUNCH", "BEVERAGE", 1, 2),
    # ===== DINNER =====
    ("DINNER", "APPETIZER", 0, 1),
    ("DINNER", "FIRST_COURSE", 0, 1),
    ("DINNER", "SECOND_COURSE", 1, 1),
    ("DINNER", "SIDE_DISH", 1, 2),
    ("DINNER", "DESSERT", 0, 1),
    ("DINNER", "BEVERAGE", 1, 2),
    # ===== SNACK =====
    ("SNACK", "APPETIZER", 0, 2),
    ("SNACK", "DESSERT", 0, 1),
    ("SNACK", "BEVERAGE", 0, 2),
    ("SNACK", "EXTRA", 0, 2),
]


def upgrade() -> None:
    """Insert default booking rules."""
    rules_table = table(
        "booking_rules",
        column("id", UUID(as_uuid=True)),
        column("meal_type", String),
        column("category", String),
        column("min_quantity", Integer),
        column("max_quantity", Integer),
        column("is_active", Boolean),
    )

    op.bulk_insert(
        rules_table,
        [
            {
                "id": uuid.uuid4(),
                "meal_type": meal_type,
                "category": category,
                "min_quantity": low,
                "max_quantity": high,
                "is_active": True,
            }
            for meal_type, category, low, high in BOOKING_RULES
        ],
    )


def downgrade() -> None:
    """Remove default booking rules."""
    rules_table = table("booking_rules", column("meal_type", String))
    meal_types = sorted({r[0] for r in BOOKING_RULES})

    op.execute(rules_table.delete().where(rules_table.c.meal_type.in_(meal_types)))
