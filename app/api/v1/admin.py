"""Admin endpoints."""

from fastapi import APIRouter

from app.api.deps import DbSession, KitchenStaff
from app.domain.booking_rules import CategoryLimit
from app.domain.enums import MealType
from app.schemas.booking import BookingRulesResponse, BookingRulesUpdate, CategoryRule
from app.services.audit_service import audit_service
from app.services.booking_rule_service import booking_rule_service

router = APIRouter()


# ============ BOOKING RULES ============


@router.put("/booking-rules/{meal_type}", response_model=BookingRulesResponse)
async def replace_booking_rules(
    meal_type: MealType,
    update: BookingRulesUpdate,
    admin: KitchenStaff,
    db: DbSession,
) -> BookingRulesResponse:
    """Replace the category limits of a meal type.

    Categories left out of the new set become forbidden for that meal.
    """
    limits = {r.category: CategoryLimit(min=r.min, max=r.max) for r in update.rules}

    # Written in the same transaction as the rule rows
    await audit_service.log(
        db,
        user_id=admin.id,
        action="booking_rules.updated",
        entity="BookingRule",
        entity_id=meal_type.value,
        changes={
            "rules": [
                {"category": c.value, "min": lim.min, "max": lim.max}
                for c, lim in limits.items()
            ]
        },
    )
    rule = await booking_rule_service.replace_rules(db, meal_type, limits)

    return BookingRulesResponse(
        meal_type=meal_type,
        rules=[
            CategoryRule(
                category=category,
                min=rule.limits[category].min,
                max=rule.limits[category].max,
            )
            for category in rule.categories
        ],
    )
