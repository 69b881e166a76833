"""Booking rules: course composition and price checks for a candidate order.

Each meal type has one rule set mapping a recipe category to the number of
items of that category an order may contain. A category missing from the
rule set is not permitted for that meal type.

An order that breaks the rules is a normal negative result, never an
exception. Only a missing rule set (a configuration defect) or malformed
input raises.

Prices are integers in the smallest currency unit (cents).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from app.domain.enums import MealType, RecipeCategory


class RuleNotFoundError(LookupError):
    """No booking rule set is configured for a meal type."""

    def __init__(self, meal_type: Any) -> None:
        self.meal_type = meal_type
        value = meal_type.value if isinstance(meal_type, MealType) else meal_type
        super().__init__(f"No booking rules configured for meal type '{value}'")


@dataclass(frozen=True)
class CategoryLimit:
    """Allowed total quantity for one category. ``max=None`` is unbounded."""

    min: int = 0
    max: int | None = None

    def __post_init__(self) -> None:
        if self.min < 0:
            raise ValueError("min must be >= 0")
        if self.max is not None and self.max < self.min:
            raise ValueError("max must be >= min")


@dataclass(frozen=True)
class BookingRule:
    """The active rule set for a meal type."""

    meal_type: MealType
    limits: Mapping[RecipeCategory, CategoryLimit]

    def __post_init__(self) -> None:
        # Read-only view so a rule set cannot change while an order is checked
        object.__setattr__(self, "limits", MappingProxyType(dict(self.limits)))

    def limit_for(self, category: RecipeCategory) -> CategoryLimit | None:
        return self.limits.get(category)

    @property
    def categories(self) -> list[RecipeCategory]:
        """Ruled categories in declaration order of RecipeCategory."""
        return [c for c in RecipeCategory if c in self.limits]


RuleTable = Mapping[MealType, BookingRule]


@dataclass(frozen=True)
class OrderItem:
    """A candidate order line as submitted by the client."""

    recipe_id: str
    recipe_category: RecipeCategory
    quantity: int
    unit_price: int
    recipe_name: str | None = None

    @property
    def subtotal(self) -> int:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class RuleViolation:
    """One reason an order was rejected."""

    category: RecipeCategory | None
    message: str
    current: int
    min: int | None = None
    max: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value if self.category else None,
            "message": self.message,
            "min": self.min,
            "max": self.max,
            "current": self.current,
        }


@dataclass(frozen=True)
class ItemValidationResult:
    """Outcome of validate_booking_items."""

    violations: list[RuleViolation] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.violations

    @property
    def errors(self) -> list[str]:
        return [v.message for v in self.violations]


def _rule(meal_type: MealType, limits: dict[RecipeCategory, tuple[int, int | None]]) -> BookingRule:
    return BookingRule(
        meal_type=meal_type,
        limits={cat: CategoryLimit(lo, hi) for cat, (lo, hi) in limits.items()},
    )


DEFAULT_RULE_TABLE: RuleTable = MappingProxyType(
    {
        MealType.BREAKFAST: _rule(
            MealType.BREAKFAST,
            {
                RecipeCategory.APPETIZER: (1, 2),
                RecipeCategory.DESSERT: (0, 2),
                RecipeCategory.BEVERAGE: (1, 3),
            },
        ),
        MealType.LUNCH: _rule(
            MealType.LUNCH,
            {
                RecipeCategory.APPETIZER: (0, 1),
                RecipeCategory.FIRST_COURSE: (1, 1),
                RecipeCategory.SECOND_COURSE: (0, 1),
                RecipeCategory.SIDE_DISH: (0, 2),
                RecipeCategory.DESSERT: (0, 1),
                RecipeCategory.BEVERAGE: (1, 2),
            },
        ),
        MealType.DINNER: _rule(
            MealType.DINNER,
            {
                RecipeCategory.APPETIZER: (0, 1),
                RecipeCategory.FIRST_COURSE: (0, 1),
                RecipeCategory.SECOND_COURSE: (1, 1),
                RecipeCategory.SIDE_DISH: (1, 2),
                RecipeCategory.DESSERT: (0, 1),
                RecipeCategory.BEVERAGE: (1, 2),
            },
        ),
        MealType.SNACK: _rule(
            MealType.SNACK,
            {
                RecipeCategory.APPETIZER: (0, 2),
                RecipeCategory.DESSERT: (0, 1),
                RecipeCategory.BEVERAGE: (0, 2),
                RecipeCategory.EXTRA: (0, 2),
            },
        ),
    }
)


def get_booking_rules(
    meal_type: MealType | str,
    rule_table: RuleTable = DEFAULT_RULE_TABLE,
) -> BookingRule:
    """Return the rule set for a meal type.

    Raises:
        RuleNotFoundError: If the meal type is unknown or has no rule set.
    """
    try:
        meal_type = MealType(meal_type)
    except ValueError:
        raise RuleNotFoundError(meal_type) from None

    rule = rule_table.get(meal_type)
    if rule is None:
        raise RuleNotFoundError(meal_type)
    return rule


def _coerce_item(item: OrderItem | Mapping[str, Any]) -> OrderItem:
    if isinstance(item, OrderItem):
        return item
    if isinstance(item, Mapping):
        return OrderItem(
            recipe_id=item["recipe_id"],
            recipe_category=RecipeCategory(item["recipe_category"]),
            quantity=item["quantity"],
            unit_price=item["unit_price"],
            recipe_name=item.get("recipe_name"),
        )
    raise TypeError(f"Order item must be an OrderItem or a mapping, got {type(item).__name__}")


def coerce_items(items: Iterable[OrderItem | Mapping[str, Any]]) -> list[OrderItem]:
    """Normalize submitted items, raising on malformed input."""
    if isinstance(items, (str, bytes, Mapping)) or not isinstance(items, Iterable):
        raise TypeError("Order items must be a list")
    return [_coerce_item(item) for item in items]


def category_totals(items: Iterable[OrderItem]) -> dict[RecipeCategory, int]:
    """Total ordered quantity per category."""
    totals: dict[RecipeCategory, int] = {}
    for item in items:
        totals[item.recipe_category] = totals.get(item.recipe_category, 0) + item.quantity
    return totals


def validate_booking_items(
    meal_type: MealType | str,
    items: Iterable[OrderItem | Mapping[str, Any]],
    rule_table: RuleTable = DEFAULT_RULE_TABLE,
) -> ItemValidationResult:
    """Check an order's course composition against its meal type's rules.

    Every violation is collected so the caller can report all of them at
    once.

    Args:
        meal_type: Meal type the order is for
        items: Candidate order items
        rule_table: Rule sets keyed by meal type

    Returns:
        ItemValidationResult: ``valid`` is True iff there are no violations

    Raises:
        RuleNotFoundError: If the meal type has no rule set
        TypeError, KeyError, ValueError: If the items are malformed
    """
    rule = get_booking_rules(meal_type, rule_table)
    order = coerce_items(items)
    violations: list[RuleViolation] = []

    if not order:
        violations.append(
            RuleViolation(category=None, message="At least one item is required", current=0)
        )

    totals = category_totals(order)

    for category in rule.categories:
        limit = rule.limits[category]
        count = totals.get(category, 0)
        if count < limit.min:
            violations.append(
                RuleViolation(
                    category=category,
                    message=f"{category.value}: at least {limit.min} required, {count} selected",
                    current=count,
                    min=limit.min,
                )
            )
        if limit.max is not None and count > limit.max:
            violations.append(
                RuleViolation(
                    category=category,
                    message=f"{category.value}: at most {limit.max} allowed, {count} selected",
                    current=count,
                    max=limit.max,
                )
            )

    for category in RecipeCategory:
        if category in totals and rule.limit_for(category) is None:
            violations.append(
                RuleViolation(
                    category=category,
                    message=(
                        f"{category.value}: category not permitted for "
                        f"{rule.meal_type.value}"
                    ),
                    current=totals[category],
                    max=0,
                )
            )

    return ItemValidationResult(violations=violations)


def calculate_total_price(items: Iterable[OrderItem | Mapping[str, Any]]) -> int:
    """Sum of quantity * unit price over all items, in cents."""
    return sum(item.subtotal for item in coerce_items(items))


def validate_total_price(
    items: Iterable[OrderItem | Mapping[str, Any]],
    declared_total: int,
) -> bool:
    """Check the declared total equals the item sum exactly.

    No tolerance is applied: a one-cent difference is a mismatch.
    """
    return calculate_total_price(items) == declared_total
