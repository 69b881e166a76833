from datetime import date, timedelta

from app.core.security import create_access_token
from app.models.booking import Menu
from app.models.user import User

SERVICE_DATE = date.today() + timedelta(days=3)


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token({"sub": str(user.id), "email": user.email, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


def lunch_payload(menu: Menu, **overrides) -> dict:
    """A valid default-rules lunch: one first course and one beverage."""
    payload = {
        "menu_id": str(menu.id),
        "service_date": menu.service_date.isoformat(),
        "meal_type": "LUNCH",
        "items": [
            {
                "recipe_id": "pasta-1",
                "recipe_name": "Pasta al pomodoro",
                "recipe_category": "FIRST_COURSE",
                "quantity": 1,
                "unit_price": 800,
            },
            {
                "recipe_id": "water-1",
                "recipe_name": "Still water",
                "recipe_category": "BEVERAGE",
                "quantity": 1,
                "unit_price": 200,
            },
        ],
        "total_price": 1000,
        "payment_method": "BADGE",
    }
    payload.update(overrides)
    return payload
