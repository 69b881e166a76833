"""Booking rule configuration backed by the database.

The rule table changes rarely, so it is read once and kept in memory until an
admin update invalidates it.
"""

import logging
from collections.abc import Mapping

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.domain.booking_rules import (
    DEFAULT_RULE_TABLE,
    BookingRule,
    CategoryLimit,
    RuleTable,
)
from app.domain.enums import MealType, RecipeCategory
from app.models.booking import BookingRule as BookingRuleRow

logger = logging.getLogger(__name__)


def build_rule_table(rows: list[BookingRuleRow]) -> dict[MealType, BookingRule]:
    """Group active rule rows into one BookingRule per meal type."""
    grouped: dict[MealType, dict[RecipeCategory, CategoryLimit]] = {}
    for row in rows:
        if not row.is_active:
            continue
        limits = grouped.setdefault(MealType(row.meal_type), {})
        limits[RecipeCategory(row.category)] = CategoryLimit(
            min=row.min_quantity, max=row.max_quantity
        )
    return {
        meal_type: BookingRule(meal_type=meal_type, limits=limits)
        for meal_type, limits in grouped.items()
    }


class BookingRuleService:
    """Loads and caches the per-meal-type rule table."""

    def __init__(self, cache_enabled: bool = True) -> None:
        self.cache_enabled = cache_enabled
        self._table: dict[MealType, BookingRule] | None = None
        self._generation = 0

    def invalidate(self) -> None:
        self._table = None
        self._generation += 1

    async def get_rule_table(self, db: AsyncSession) -> RuleTable:
        """Return the active rule table, loading it on first use."""
        if self.cache_enabled and self._table is not None:
            return self._table

        # A reload that overlaps an invalidate() must not cache what it read.
        generation = self._generation
        result = await db.execute(
            select(BookingRuleRow).where(BookingRuleRow.is_active.is_(True))
        )
        table = build_rule_table(list(result.scalars().all()))
        logger.info(
            "Loaded booking rules for %s",
            ", ".join(sorted(m.value for m in table)) or "no meal types",
        )

        if self.cache_enabled and generation == self._generation:
            self._table = table
        return table

    async def replace_rules(
        self,
        db: AsyncSession,
        meal_type: MealType,
        limits: Mapping[RecipeCategory, CategoryLimit],
    ) -> BookingRule:
        """Replace every rule of a meal type and drop the cached table."""
        await db.execute(delete(BookingRuleRow).where(BookingRuleRow.meal_type == meal_type.value))
        for category, limit in limits.items():
            db.add(
                BookingRuleRow(
                    meal_type=meal_type.value,
                    category=category.value,
                    min_quantity=limit.min,
                    max_quantity=limit.max,
                    is_active=True,
                )
            )
        await db.commit()
        self.invalidate()
        logger.info("Replaced booking rules for %s (%d categories)", meal_type.value, len(limits))
        return BookingRule(meal_type=meal_type, limits=limits)


async def seed_default_rules(db: AsyncSession, table: RuleTable = DEFAULT_RULE_TABLE) -> int:
    """Insert the default rules if no rule exists yet. Returns rows added."""
    existing = await db.execute(select(func.count()).select_from(BookingRuleRow))
    if existing.scalar():
        return 0

    count = 0
    for meal_type, rule in table.items():
        for category in rule.categories:
            limit = rule.limits[category]
            db.add(
                BookingRuleRow(
                    meal_type=meal_type.value,
                    category=category.value,
                    min_quantity=limit.min,
                    max_quantity=limit.max,
                    is_active=True,
                )
            )
            count += 1
    await db.flush()
    return count


booking_rule_service = BookingRuleService(cache_enabled=settings.rule_cache_enabled)
