from types import MappingProxyType

import pytest

from app.domain.booking_rules import (
    DEFAULT_RULE_TABLE,
    BookingRule,
    CategoryLimit,
    OrderItem,
    RuleNotFoundError,
    calculate_total_price,
    get_booking_rules,
    validate_booking_items,
    validate_total_price,
)
from app.domain.enums import MealType, RecipeCategory

LUNCH_TABLE = MappingProxyType(
    {
        MealType.LUNCH: BookingRule(
            meal_type=MealType.LUNCH,
            limits={
                RecipeCategory.FIRST_COURSE: CategoryLimit(min=1, max=1),
                RecipeCategory.DESSERT: CategoryLimit(min=0, max=1),
            },
        )
    }
)


def item(category: RecipeCategory, price: int, quantity: int = 1, recipe_id: str = "r1") -> OrderItem:
    return OrderItem(
        recipe_id=recipe_id,
        recipe_category=category,
        quantity=quantity,
        unit_price=price,
    )


def test_lunch_order_with_first_course_and_dessert_is_valid():
    items = [item(RecipeCategory.FIRST_COURSE, 800), item(RecipeCategory.DESSERT, 400, recipe_id="r2")]

    result = validate_booking_items(MealType.LUNCH, items, LUNCH_TABLE)

    assert result.valid
    assert result.errors == []
    assert validate_total_price(items, 1200) is True


def test_price_off_by_one_cent_is_a_mismatch():
    items = [item(RecipeCategory.FIRST_COURSE, 800), item(RecipeCategory.DESSERT, 400, recipe_id="r2")]

    assert validate_total_price(items, 1199) is False
    assert validate_total_price(items, 1201) is False


def test_two_first_courses_exceed_the_maximum():
    items = [
        item(RecipeCategory.FIRST_COURSE, 800),
        item(RecipeCategory.FIRST_COURSE, 750, recipe_id="r2"),
    ]

    result = validate_booking_items(MealType.LUNCH, items, LUNCH_TABLE)

    assert not result.valid
    assert len(result.violations) == 1
    violation = result.violations[0]
    assert violation.category == RecipeCategory.FIRST_COURSE
    assert violation.current == 2
    assert violation.max == 1
    assert "FIRST_COURSE" in result.errors[0]


def test_quantity_counts_toward_category_total():
    result = validate_booking_items(
        MealType.LUNCH, [item(RecipeCategory.FIRST_COURSE, 800, quantity=2)], LUNCH_TABLE
    )

    assert not result.valid
    assert result.violations[0].current == 2


def test_missing_required_category_is_reported():
    result = validate_booking_items(MealType.LUNCH, [item(RecipeCategory.DESSERT, 400)], LUNCH_TABLE)

    assert not result.valid
    assert result.errors == ["FIRST_COURSE: at least 1 required, 0 selected"]


def test_category_outside_the_rule_is_not_permitted():
    items = [item(RecipeCategory.FIRST_COURSE, 800), item(RecipeCategory.EXTRA, 150, recipe_id="r2")]

    result = validate_booking_items(MealType.LUNCH, items, LUNCH_TABLE)

    assert not result.valid
    assert result.errors == ["EXTRA: category not permitted for LUNCH"]
    assert result.violations[0].max == 0


def test_all_violations_are_collected():
    items = [
        item(RecipeCategory.DESSERT, 400, quantity=2),
        item(RecipeCategory.BEVERAGE, 200, recipe_id="r2"),
    ]

    result = validate_booking_items(MealType.LUNCH, items, LUNCH_TABLE)

    categories = [v.category for v in result.violations]
    assert categories == [
        RecipeCategory.FIRST_COURSE,
        RecipeCategory.DESSERT,
        RecipeCategory.BEVERAGE,
    ]


def test_empty_order_is_invalid():
    snack_only_optional = MappingProxyType(
        {
            MealType.SNACK: BookingRule(
                meal_type=MealType.SNACK,
                limits={RecipeCategory.EXTRA: CategoryLimit(min=0, max=2)},
            )
        }
    )

    result = validate_booking_items(MealType.SNACK, [], snack_only_optional)

    assert not result.valid
    assert result.errors == ["At least one item is required"]
    assert result.violations[0].category is None


def test_unbounded_maximum():
    table = MappingProxyType(
        {
            MealType.SNACK: BookingRule(
                meal_type=MealType.SNACK,
                limits={RecipeCategory.BEVERAGE: CategoryLimit(min=1)},
            )
        }
    )

    result = validate_booking_items(
        MealType.SNACK, [item(RecipeCategory.BEVERAGE, 100, quantity=40)], table
    )

    assert result.valid


def test_validation_is_idempotent():
    items = [item(RecipeCategory.FIRST_COURSE, 800, quantity=3)]

    first = validate_booking_items(MealType.LUNCH, items, LUNCH_TABLE)
    second = validate_booking_items(MealType.LUNCH, items, LUNCH_TABLE)

    assert first == second


def test_mapping_items_are_accepted():
    items = [
        {"recipe_id": "r1", "recipe_category": "FIRST_COURSE", "quantity": 1, "unit_price": 800},
        {"recipe_id": "r2", "recipe_category": "DESSERT", "quantity": 1, "unit_price": 400},
    ]

    assert validate_booking_items("LUNCH", items, LUNCH_TABLE).valid
    assert calculate_total_price(items) == 1200


@pytest.mark.parametrize("items", ["FIRST_COURSE", {"recipe_id": "r1"}, 42, [42]])
def test_malformed_items_raise_type_error(items):
    with pytest.raises(TypeError):
        validate_booking_items(MealType.LUNCH, items, LUNCH_TABLE)


def test_unknown_item_category_raises():
    with pytest.raises(ValueError):
        validate_booking_items(
            MealType.LUNCH,
            [{"recipe_id": "r1", "recipe_category": "SOUP", "quantity": 1, "unit_price": 500}],
            LUNCH_TABLE,
        )


def test_unconfigured_meal_type_raises():
    with pytest.raises(RuleNotFoundError) as exc_info:
        get_booking_rules(MealType.DINNER, LUNCH_TABLE)

    assert exc_info.value.meal_type == MealType.DINNER


def test_unknown_meal_type_raises():
    with pytest.raises(RuleNotFoundError):
        get_booking_rules("BRUNCH")


def test_default_table_covers_every_meal_type():
    for meal_type in MealType:
        rule = get_booking_rules(meal_type)
        assert rule.meal_type == meal_type
        assert rule.categories


def test_default_lunch_rules():
    rule = DEFAULT_RULE_TABLE[MealType.LUNCH]

    assert rule.limit_for(RecipeCategory.FIRST_COURSE) == CategoryLimit(min=1, max=1)
    assert rule.limit_for(RecipeCategory.BEVERAGE) == CategoryLimit(min=1, max=2)
    assert rule.limit_for(RecipeCategory.EXTRA) is None


def test_rule_limits_are_read_only():
    rule = DEFAULT_RULE_TABLE[MealType.LUNCH]

    with pytest.raises(TypeError):
        rule.limits[RecipeCategory.EXTRA] = CategoryLimit()  # type: ignore[index]


@pytest.mark.parametrize("low,high", [(-1, None), (2, 1)])
def test_invalid_category_limit(low, high):
    with pytest.raises(ValueError):
        CategoryLimit(min=low, max=high)


def test_total_price_sums_subtotals():
    items = [item(RecipeCategory.BEVERAGE, 250, quantity=3), item(RecipeCategory.DESSERT, 400)]

    assert calculate_total_price(items) == 1150
    assert calculate_total_price([]) == 0
