#!/usr/bin/env python3
"""Create or update a user with a properly hashed password.

Usage:
    python scripts/create_user.py --email chef@example.com --password Chef@123 --role KITCHEN_ADMIN
"""

import asyncio

from sqlalchemy import select

from app.core.security import get_password_hash
from app.database import get_db_context
from app.domain.enums import UserRole
from app.models.user import User


async def create_user(
    email: str,
    password: str,
    role: UserRole = UserRole.SUPER_ADMIN,
    first_name: str | None = None,
    last_name: str | None = None,
) -> None:
    """Create the user, or reset password and role if the email exists."""
    async with get_db_context() as session:
        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if user:
            user.password_hash = get_password_hash(password)
            user.role = role.value
            user.is_active = True
            print(f"Updated existing user: {email}")
        else:
            session.add(
                User(
                    email=email,
                    password_hash=get_password_hash(password),
                    role=role.value,
                    first_name=first_name,
                    last_name=last_name,
                    is_active=True,
                )
            )
            print(f"Created user: {email}")

        print(f"Role: {role.value}")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Create a MealDesk user")
    parser.add_argument("--email", required=True, help="User email")
    parser.add_argument("--password", required=True, help="User password")
    parser.add_argument(
        "--role",
        default=UserRole.SUPER_ADMIN.value,
        choices=[r.value for r in UserRole],
        help="User role",
    )
    parser.add_argument("--first-name", default=None, help="First name")
    parser.add_argument("--last-name", default=None, help="Last name")

    args = parser.parse_args()

    asyncio.run(
        create_user(
            email=args.email,
            password=args.password,
            role=UserRole(args.role),
            first_name=args.first_name,
            last_name=args.last_name,
        )
    )
